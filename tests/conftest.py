"""
pytest configuration for fcgi_cli tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import io
import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from fcgi_cli.logging.context import clear_log_context  # noqa: E402
from fcgi_cli.transport.base import TransportResponse  # noqa: E402


class FakeTransport:
    """Transport double that records the request and returns a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else TransportResponse()
        self.error = error
        self.params = None
        self.body = None
        self.calls = 0

    async def send(self, params, body):
        self.calls += 1
        self.params = dict(params)
        self.body = body.read()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def streams():
    """Binary stand-ins for the process's stdin/stdout/stderr."""
    return {
        "stdin": io.BytesIO(),
        "stdout": io.BytesIO(),
        "stderr": io.BytesIO(),
    }


@pytest.fixture(autouse=True)
def reset_log_context():
    """Keep log context from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()
