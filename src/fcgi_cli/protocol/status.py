"""Status pseudo-header handling."""

import re

from fcgi_cli.errors.exceptions import InvalidStatusValueError
from fcgi_cli.protocol.headers import HeaderMap

STATUS_HEADER = "status"
DEFAULT_STATUS = 200
DEFAULT_FAIL_THRESHOLD = 400
MAX_STATUS = 0xFFFF

# ASCII whitespace only; header values are Latin-1 and may contain U+00A0
_ASCII_WHITESPACE = " \t\n\x0c\r"
_ASCII_WHITESPACE_RUN = re.compile(r"[ \t\n\x0c\r]+")
_DIGITS = frozenset("0123456789")


def extract_status(headers: HeaderMap) -> int:
    """
    Read the response status from the Status pseudo-header.

    Args:
        headers: Parsed header mapping (lowercase names)

    Returns:
        Status code; 200 when the application sent no Status header

    Raises:
        InvalidStatusValueError: If the first word of the value is not an
            unsigned 16-bit integer

    Example:
        >>> extract_status({"status": "404 Not Found"})
        404
    """
    value = headers.get(STATUS_HEADER)
    if value is None:
        return DEFAULT_STATUS

    words = _ASCII_WHITESPACE_RUN.split(value.strip(_ASCII_WHITESPACE))
    code = words[0]
    digits = code[1:] if code.startswith("+") else code
    if not digits or not set(digits) <= _DIGITS:
        raise InvalidStatusValueError(value)

    status = int(digits)
    if status > MAX_STATUS:
        raise InvalidStatusValueError(value)
    return status


def is_failure_status(status: int, threshold: int = DEFAULT_FAIL_THRESHOLD) -> bool:
    """Whether a status counts as failed for --fail (inclusive threshold)."""
    return status >= threshold


__all__ = [
    "STATUS_HEADER",
    "DEFAULT_STATUS",
    "DEFAULT_FAIL_THRESHOLD",
    "extract_status",
    "is_failure_status",
]
