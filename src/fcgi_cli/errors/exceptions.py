"""
Exception types and error classification for fcgi_cli.

Provides:
- ErrorCategory enum for reporting decisions
- Typed exception hierarchy for client errors
- Classification utilities for stray exceptions
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error types.

    Every failure is fatal for the invocation; the category only decides how
    the error is described and logged.

    Categories:
        PROTOCOL: The application's response did not follow the CGI grammar
                  (malformed header block, unreadable status)
        UPSTREAM: The application answered with a failing status
        USAGE: Invalid options or configuration supplied by the user
        TRANSPORT: Connecting to or talking with the FastCGI server failed
        IO: Local file or stream output failed
        UNKNOWN: Unclassified errors
    """

    PROTOCOL = "protocol"
    UPSTREAM = "upstream"
    USAGE = "usage"
    TRANSPORT = "transport"
    IO = "io"
    UNKNOWN = "unknown"


class FcgiCliError(Exception):
    """
    Base exception for all fcgi_cli errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Response Protocol Errors
# =============================================================================


class ProtocolError(FcgiCliError):
    """Base class for errors in the application's response."""

    category = ErrorCategory.PROTOCOL


class MalformedHeadersError(ProtocolError):
    """Response header block does not conform to the CGI header grammar."""

    def __init__(
        self,
        message: str = "Malformed response headers",
        offset: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        context = {"offset": offset} if offset is not None else None
        super().__init__(message, cause, context)
        self.offset = offset


class InvalidStatusValueError(ProtocolError):
    """The Status pseudo-header does not start with an unsigned integer."""

    def __init__(self, value: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Invalid Status header value: {value!r}", cause, {"status_value": value}
        )
        self.value = value


# =============================================================================
# Upstream Errors
# =============================================================================


class UpstreamError(FcgiCliError):
    """Application responded with a status at or above the failure threshold."""

    category = ErrorCategory.UPSTREAM

    def __init__(self, status: int, cause: Optional[Exception] = None):
        super().__init__(
            f"Upstream returned error status {status}", cause, {"http_status": status}
        )
        self.status = status


# =============================================================================
# Usage Errors
# =============================================================================


class UsageError(FcgiCliError):
    """Base class for invalid user input."""

    category = ErrorCategory.USAGE


class ConfigurationError(UsageError):
    """Invalid options or configuration."""

    pass


class EmptyRemoteNameError(UsageError):
    """The URL path has no segment to use as output file name."""

    def __init__(self, url: str):
        super().__init__(
            f"Remote file name has no length: {url}", context={"url": url}
        )
        self.url = url


# =============================================================================
# Transport / IO Errors
# =============================================================================


class TransportError(FcgiCliError):
    """Connecting to or exchanging records with the FastCGI server failed."""

    category = ErrorCategory.TRANSPORT


class OutputError(FcgiCliError):
    """Writing response bytes to a file or stream failed."""

    category = ErrorCategory.IO


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_exception(exc: Exception) -> ErrorCategory:
    """
    Classify an exception into error category.

    Args:
        exc: Exception to classify

    Returns:
        Appropriate ErrorCategory
    """
    # Already classified
    if isinstance(exc, FcgiCliError):
        return exc.category

    # Socket level failures (refused, reset, unreachable, ...)
    if isinstance(exc, (ConnectionError, EOFError)):
        return ErrorCategory.TRANSPORT

    exc_str = str(exc).lower()
    connection_markers = (
        "connection refused",
        "connection reset",
        "no route to host",
        "network unreachable",
        "name or service not known",
        "broken pipe",
    )
    if any(m in exc_str for m in connection_markers):
        return ErrorCategory.TRANSPORT

    if isinstance(exc, OSError):
        return ErrorCategory.IO

    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    default_class: type = FcgiCliError,
    context: Optional[dict] = None,
) -> FcgiCliError:
    """
    Wrap a generic exception in appropriate FcgiCliError subclass.

    Args:
        exc: Exception to wrap
        default_class: Class to use if can't classify
        context: Additional context to include

    Returns:
        Appropriate FcgiCliError subclass instance
    """
    if isinstance(exc, FcgiCliError):
        if context:
            exc.context.update(context)
        return exc

    category = classify_exception(exc)

    if category == ErrorCategory.TRANSPORT:
        return TransportError("FastCGI exchange failed", cause=exc, context=context)

    if category == ErrorCategory.IO:
        return OutputError("Writing output failed", cause=exc, context=context)

    # Default wrapper
    return default_class(str(exc), cause=exc, context=context)
