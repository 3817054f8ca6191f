"""
CGI response header block parser.

Splits the raw STDOUT payload of a FastCGI responder into a header mapping
and the body that follows the blank line. The grammar is the CGI/1.1
generic-field grammar, applied to bytes:

    header-block  = 1*generic-field line-ending
    generic-field = token ":" *(SP | HT) field-content line-ending
    field-content = *(token | separator | quoted-string)

Each rule below is a small function over a byte cursor. A rule takes the
buffer and a start offset and returns the offset just past what it matched,
or None when it does not match. Values are captured as raw spans, so quotes
and separators inside a value are kept exactly as sent.

Header names and values are decoded as ISO-8859-1. Every byte maps to one
code point, so decoding cannot fail; the only failure mode is a grammar
mismatch.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fcgi_cli.errors.exceptions import MalformedHeadersError

HeaderMap = Dict[str, str]

# Bytes that terminate a token (in addition to control bytes)
TOKEN_DELIMITERS = frozenset(b'()<>@,;:\\"/[]?={} ')

# Single-byte separators allowed inside field content
SEPARATORS = frozenset(b'()<>@,;:\\"/[]?={} \t')

_HT = 0x09
_LF = 0x0A
_CR = 0x0D
_SP = 0x20
_QUOTE = 0x22
_COLON = 0x3A
_DEL = 0x7F


@dataclass(frozen=True)
class ParseOutcome:
    """
    Result of splitting a response into header block and body.

    Attributes:
        headers: Header names (lowercase) mapped to their raw values
        body: Bytes following the blank line that ends the header block
        header_length: Length of the header block, blank line included
    """

    headers: HeaderMap = field(default_factory=dict)
    body: bytes = b""
    header_length: int = 0


def _is_control(byte: int) -> bool:
    return byte < 0x20 or byte == _DEL


def _token(data: bytes, pos: int) -> Optional[int]:
    end = pos
    size = len(data)
    while end < size:
        byte = data[end]
        if byte in TOKEN_DELIMITERS or _is_control(byte):
            break
        end += 1
    return end if end > pos else None


def _separator(data: bytes, pos: int) -> Optional[int]:
    if pos < len(data) and data[pos] in SEPARATORS:
        return pos + 1
    return None


def _quoted_string(data: bytes, pos: int) -> Optional[int]:
    size = len(data)
    if pos >= size or data[pos] != _QUOTE:
        return None
    end = pos + 1
    while end < size:
        byte = data[end]
        if byte == _QUOTE or (byte != _HT and _is_control(byte)):
            break
        end += 1
    if end < size and data[end] == _QUOTE:
        return end + 1
    return None


_FIELD_CONTENT_PARTS = (_token, _separator, _quoted_string)


def _field_content(data: bytes, pos: int) -> int:
    # Zero repetitions is a valid (empty) value, so this never fails.
    while True:
        for part in _FIELD_CONTENT_PARTS:
            end = part(data, pos)
            if end is not None:
                break
        else:
            return pos
        pos = end


def _horizontal_space(data: bytes, pos: int) -> int:
    size = len(data)
    while pos < size and data[pos] in (_SP, _HT):
        pos += 1
    return pos


def _line_ending(data: bytes, pos: int) -> Optional[int]:
    if pos < len(data) and data[pos] == _LF:
        return pos + 1
    if pos + 1 < len(data) and data[pos] == _CR and data[pos + 1] == _LF:
        return pos + 2
    return None


def _generic_field(data: bytes, pos: int) -> Optional[Tuple[int, bytes, bytes]]:
    name_end = _token(data, pos)
    if name_end is None:
        return None
    if name_end >= len(data) or data[name_end] != _COLON:
        return None

    value_start = _horizontal_space(data, name_end + 1)
    value_end = _field_content(data, value_start)

    end = _line_ending(data, value_end)
    if end is None:
        return None
    return end, data[pos:name_end], data[value_start:value_end]


def latin1_to_str(raw: bytes) -> str:
    """Decode bytes one-to-one into code points U+0000..U+00FF."""
    return raw.decode("latin-1")


def parse_headers(buffer: bytes) -> ParseOutcome:
    """
    Parse the header block at the start of a CGI response.

    Args:
        buffer: Complete STDOUT payload received from the application

    Returns:
        ParseOutcome with the header mapping and the remaining body

    Raises:
        MalformedHeadersError: If no header field is found, a field does not
            follow the grammar, or the blank line ending the block is missing

    Example:
        >>> outcome = parse_headers(b"Content-Type: text/html\\r\\n\\r\\n<html/>")
        >>> outcome.headers
        {'content-type': 'text/html'}
        >>> outcome.body
        b'<html/>'
    """
    data = bytes(buffer)
    headers: HeaderMap = {}
    pos = 0

    while True:
        parsed = _generic_field(data, pos)
        if parsed is None:
            break
        pos, name, value = parsed
        # bytes.lower() only folds ASCII letters, leaving 0x80-0xFF untouched
        headers[latin1_to_str(name.lower())] = latin1_to_str(value)

    if not headers:
        raise MalformedHeadersError(
            "Malformed response headers: no header field found", offset=pos
        )

    end = _line_ending(data, pos)
    if end is None:
        raise MalformedHeadersError(
            f"Malformed response headers at byte {pos}", offset=pos
        )

    return ParseOutcome(headers=headers, body=data[end:], header_length=end)


__all__ = [
    "HeaderMap",
    "ParseOutcome",
    "parse_headers",
    "latin1_to_str",
    "SEPARATORS",
    "TOKEN_DELIMITERS",
]
