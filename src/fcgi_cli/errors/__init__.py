"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- FcgiCliError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from fcgi_cli.errors.exceptions import (
    # Enums
    ErrorCategory,
    # Base classes
    FcgiCliError,
    ProtocolError,
    UsageError,
    # Protocol errors
    MalformedHeadersError,
    InvalidStatusValueError,
    # Upstream errors
    UpstreamError,
    # Usage errors
    ConfigurationError,
    EmptyRemoteNameError,
    # Transport / IO errors
    TransportError,
    OutputError,
    # Classification utilities
    classify_exception,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "FcgiCliError",
    "ProtocolError",
    "UsageError",
    # Protocol errors
    "MalformedHeadersError",
    "InvalidStatusValueError",
    # Upstream errors
    "UpstreamError",
    # Usage errors
    "ConfigurationError",
    "EmptyRemoteNameError",
    # Transport / IO errors
    "TransportError",
    "OutputError",
    # Classification utilities
    "classify_exception",
    "wrap_exception",
]
