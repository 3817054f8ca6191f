"""Log context propagated through context variables."""

from contextvars import ContextVar
from typing import Dict, Optional

_invocation_id: ContextVar[Optional[str]] = ContextVar("invocation_id", default=None)
_address: ContextVar[Optional[str]] = ContextVar("address", default=None)
_request_method: ContextVar[Optional[str]] = ContextVar("request_method", default=None)


def set_log_context(
    invocation_id: Optional[str] = None,
    address: Optional[str] = None,
    request_method: Optional[str] = None,
) -> None:
    """Set context fields; arguments left as None are not changed."""
    if invocation_id is not None:
        _invocation_id.set(invocation_id)
    if address is not None:
        _address.set(address)
    if request_method is not None:
        _request_method.set(request_method)


def get_log_context() -> Dict[str, Optional[str]]:
    return {
        "invocation_id": _invocation_id.get(),
        "address": _address.get(),
        "request_method": _request_method.get(),
    }


def clear_log_context() -> None:
    _invocation_id.set(None)
    _address.set(None)
    _request_method.set(None)
