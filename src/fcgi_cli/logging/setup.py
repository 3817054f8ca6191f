"""Logging setup and configuration."""

import logging
import os
import secrets
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

from fcgi_cli.logging.context import set_log_context
from fcgi_cli.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_CONSOLE_LEVEL = logging.WARNING
DEFAULT_FILE_LEVEL = logging.DEBUG

LOG_FILE_PREFIX = "fcgi_cli"

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "asyncio",
]


def get_log_file_path(log_dir: Path, instance_id: Optional[str] = None) -> Path:
    """
    Build log file path with a date subfolder.

    Structure: {log_dir}/{YYYY-MM-DD}/fcgi_cli_{YYYYMMDD}[_instance].log

    Args:
        log_dir: Base log directory
        instance_id: Unique instance identifier (e.g., process ID) so that
            concurrent invocations do not share a file

    Returns:
        Full path to log file
    """
    date_folder = datetime.now().strftime("%Y-%m-%d")
    date_str = datetime.now().strftime("%Y%m%d")

    base_name = f"{LOG_FILE_PREFIX}_{date_str}"
    if instance_id:
        filename = f"{base_name}_{instance_id}.log"
    else:
        filename = f"{base_name}.log"

    return log_dir / date_folder / filename


def setup_logging(
    name: str = "fcgi_cli",
    log_dir: Optional[Path] = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
    invocation_id: Optional[str] = None,
    use_instance_id: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure logging with a console handler and an optional rotating file.

    The console handler writes to stderr: stdout carries the response body.
    File logging is only enabled when log_dir is given:
        logs/2025-01-15/fcgi_cli_20250115_p12345.log

    Args:
        name: Logger name
        log_dir: Directory for log files (None disables file logging)
        json_format: Use JSON format for file logs (default: True)
        console_level: Console handler level (default: WARNING)
        file_level: File handler level (default: DEBUG)
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep
        suppress_noisy: Quiet down library loggers
        invocation_id: Identifier attached to every record of this run
        use_instance_id: Append process ID to the log filename
        stream: Console stream (default: sys.stderr)

    Returns:
        Configured logger instance
    """
    if invocation_id:
        set_log_context(invocation_id=invocation_id)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ConsoleFormatter())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter

    # Remove existing handlers to avoid duplicates on re-init
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        instance_id = f"p{os.getpid()}" if use_instance_id else None
        log_file = get_log_file_path(log_dir, instance_id=instance_id)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if json_format:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(f"Logging initialized: file={log_file}, json={json_format}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Use this instead of logging.getLogger() to ensure consistent naming.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def generate_invocation_id() -> str:
    """
    Generate unique invocation identifier.

    Format: r-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.

    Returns:
        Unique invocation ID string
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"r-{ts}-{suffix}"
