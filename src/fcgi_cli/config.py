"""fcgi-cli configuration from environment variables."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fcgi_cli.errors.exceptions import ConfigurationError
from fcgi_cli.protocol.status import DEFAULT_FAIL_THRESHOLD

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class ClientConfig:
    """Ambient settings that do not describe the request itself.

    Load from environment using ClientConfig.from_env(). Command line flags
    override these values in the entry point.
    """

    # Logging
    log_level: str = "WARNING"
    log_dir: Optional[Path] = None
    json_logs: bool = True

    # Status at or above which --fail aborts
    fail_status_threshold: int = DEFAULT_FAIL_THRESHOLD

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables.

        Optional environment variables (with defaults):
            FCGI_CLI_LOG_LEVEL: WARNING (default)
            FCGI_CLI_LOG_DIR: unset (default, no log file)
            FCGI_CLI_JSON_LOGS: true (default)
            FCGI_CLI_FAIL_STATUS: 400 (default)

        Raises:
            ConfigurationError: If a variable has an invalid value
        """
        log_level = os.getenv("FCGI_CLI_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"FCGI_CLI_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level}"
            )

        log_dir_str = os.getenv("FCGI_CLI_LOG_DIR", "")
        json_logs = os.getenv("FCGI_CLI_JSON_LOGS", "true").lower() in ("true", "1", "yes")

        threshold_str = os.getenv("FCGI_CLI_FAIL_STATUS", str(DEFAULT_FAIL_THRESHOLD))
        try:
            threshold = int(threshold_str)
        except ValueError:
            raise ConfigurationError(
                f"FCGI_CLI_FAIL_STATUS must be an integer, got {threshold_str!r}"
            )

        return cls(
            log_level=log_level,
            log_dir=Path(log_dir_str) if log_dir_str else None,
            json_logs=json_logs,
            fail_status_threshold=threshold,
        )

    @property
    def console_level(self) -> int:
        return getattr(logging, self.log_level)


__all__ = ["ClientConfig", "LOG_LEVELS"]
