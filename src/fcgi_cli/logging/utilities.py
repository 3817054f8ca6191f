"""Helpers for attaching structured fields to log records."""

import logging
from typing import Any

from fcgi_cli.errors.exceptions import FcgiCliError

# Longest error text copied into a record's error_message field
MAX_ERROR_MESSAGE = 500


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log msg with keyword arguments as record attributes.

    Only names listed in JSONFormatter.EXTRA_FIELDS end up in JSON output.

    Example:
        log_with_context(
            logger, logging.DEBUG, "Output written",
            destination="out.html",
            bytes_written=1024,
        )
    """
    logger.log(level, msg, extra=kwargs)


def log_exception(
    logger: logging.Logger,
    exc: Exception,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log a failure with its category and (shortened) message.

    Args:
        logger: Logger instance
        exc: Exception being reported
        msg: What was being attempted
        level: Log level (default: ERROR)
        include_traceback: Attach exc as exc_info (default: True)
        **kwargs: Extra record fields; an explicit error_category wins
    """
    if isinstance(exc, FcgiCliError):
        kwargs.setdefault("error_category", exc.category.value)

    text = str(exc)
    if len(text) > MAX_ERROR_MESSAGE:
        text = text[:MAX_ERROR_MESSAGE] + "..."
    kwargs["error_message"] = text

    logger.log(
        level,
        msg,
        exc_info=exc if include_traceback else None,
        extra=kwargs,
    )
