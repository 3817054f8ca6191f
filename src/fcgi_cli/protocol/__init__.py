"""
CGI response protocol module.

Provides:
- parse_headers(): split a response into header mapping and body
- extract_status(): read the Status pseudo-header
"""

from fcgi_cli.protocol.headers import HeaderMap, ParseOutcome, parse_headers
from fcgi_cli.protocol.status import (
    DEFAULT_FAIL_THRESHOLD,
    DEFAULT_STATUS,
    extract_status,
    is_failure_status,
)

__all__ = [
    "HeaderMap",
    "ParseOutcome",
    "parse_headers",
    "extract_status",
    "is_failure_status",
    "DEFAULT_STATUS",
    "DEFAULT_FAIL_THRESHOLD",
]
