"""
Tests for execute(), the end-to-end request flow.

The transport is replaced by FakeTransport (see conftest.py), so these tests
cover everything from the raw environment to the bytes written out.
"""

import pytest

from fcgi_cli.client import execute
from fcgi_cli.config import ClientConfig
from fcgi_cli.errors.exceptions import (
    MalformedHeadersError,
    TransportError,
    UpstreamError,
)
from fcgi_cli.logging.context import get_log_context
from fcgi_cli.request.options import RequestOptions
from fcgi_cli.transport.base import TransportResponse


def make_options(**overrides):
    values = {"address": "127.0.0.1:9000"}
    values.update(overrides)
    return RequestOptions(**values)


async def run(options, transport, streams, environ=None, config=None):
    return await execute(
        options,
        transport,
        environ=environ or {},
        stdin=streams["stdin"],
        stdout=streams["stdout"],
        stderr=streams["stderr"],
        config=config,
    )


class TestExecute:
    """Test one complete invocation."""

    @pytest.mark.asyncio
    async def test_html_body_written(self, fake_transport, streams):
        transport = fake_transport(
            TransportResponse(stdout=b"Content-Type: text/html\r\n\r\n<html/>")
        )

        await run(make_options(url="http://example.com/"), transport, streams)

        assert streams["stdout"].getvalue() == b"<html/>"
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_error_status_with_fail(self, fake_transport, streams):
        transport = fake_transport(
            TransportResponse(stdout=b"Status: 500 Error\r\n\r\nfail")
        )

        with pytest.raises(UpstreamError) as exc_info:
            await run(make_options(fail_on_status=True), transport, streams)

        assert exc_info.value.status == 500
        assert streams["stdout"].getvalue() == b""

    @pytest.mark.asyncio
    async def test_configured_threshold(self, fake_transport, streams):
        transport = fake_transport(
            TransportResponse(stdout=b"Status: 404 Not Found\r\n\r\nmissing")
        )
        config = ClientConfig(fail_status_threshold=500)

        await run(make_options(fail_on_status=True), transport, streams, config=config)

        assert streams["stdout"].getvalue() == b"missing"

    @pytest.mark.asyncio
    async def test_params_from_environment_and_url(self, fake_transport, streams):
        transport = fake_transport(TransportResponse(stdout=b"A: b\r\n\r\n"))
        environ = {
            "HTTP_USER_AGENT": "curl/8.0",
            "PATH": "/usr/bin",
            "SCRIPT_NAME": "/index.php",
        }
        options = make_options(
            url="https://example.com/index.php/users?page=2",
            document_root="/srv/www",
        )

        await run(options, transport, streams, environ=environ)

        params = transport.params
        assert params["HTTP_USER_AGENT"] == "curl/8.0"
        assert "PATH" not in params
        assert params["SCRIPT_FILENAME"] == "/srv/www/index.php"
        assert params["PATH_INFO"] == "/users"
        assert params["QUERY_STRING"] == "page=2"
        assert params["HTTPS"] == "on"

    @pytest.mark.asyncio
    async def test_literal_body_sent(self, fake_transport, streams):
        transport = fake_transport(TransportResponse(stdout=b"A: b\r\n\r\n"))
        options = make_options(request_method="POST", data="name=x")

        await run(options, transport, streams)

        assert transport.body == b"name=x"
        assert transport.params["CONTENT_LENGTH"] == "6"

    @pytest.mark.asyncio
    async def test_stdin_body_for_post(self, fake_transport, streams):
        streams["stdin"].write(b"from stdin")
        streams["stdin"].seek(0)
        transport = fake_transport(TransportResponse(stdout=b"A: b\r\n\r\n"))

        await run(make_options(request_method="PUT"), transport, streams)

        assert transport.body == b"from stdin"

    @pytest.mark.asyncio
    async def test_get_does_not_read_stdin(self, fake_transport, streams):
        streams["stdin"].write(b"unused")
        streams["stdin"].seek(0)
        transport = fake_transport(TransportResponse(stdout=b"A: b\r\n\r\n"))

        await run(make_options(), transport, streams)

        assert transport.body == b""
        assert streams["stdin"].tell() == 0

    @pytest.mark.asyncio
    async def test_stderr_forwarded(self, fake_transport, streams):
        transport = fake_transport(
            TransportResponse(stdout=b"A: b\r\n\r\nok", stderr=b"PHP Warning\n")
        )

        await run(make_options(), transport, streams)

        assert streams["stderr"].getvalue() == b"PHP Warning\n"
        assert streams["stdout"].getvalue() == b"ok"

    @pytest.mark.asyncio
    async def test_malformed_response(self, fake_transport, streams):
        transport = fake_transport(TransportResponse(stdout=b"just text"))

        with pytest.raises(MalformedHeadersError):
            await run(make_options(), transport, streams)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, fake_transport, streams):
        transport = fake_transport(error=TransportError("Connection refused"))

        with pytest.raises(TransportError):
            await run(make_options(), transport, streams)

        assert streams["stdout"].getvalue() == b""

    @pytest.mark.asyncio
    async def test_returns_response(self, fake_transport, streams):
        response = TransportResponse(stdout=b"A: b\r\n\r\n", app_status=7)
        transport = fake_transport(response)

        result = await run(make_options(), transport, streams)

        assert result is response

    @pytest.mark.asyncio
    async def test_sets_log_context(self, fake_transport, streams):
        transport = fake_transport(TransportResponse(stdout=b"A: b\r\n\r\n"))

        await run(make_options(request_method="HEAD"), transport, streams)

        context = get_log_context()
        assert context["address"] == "127.0.0.1:9000"
        assert context["request_method"] == "HEAD"
