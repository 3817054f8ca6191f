"""Tests for ClientConfig.from_env()."""

import logging
from pathlib import Path

import pytest

from fcgi_cli.config import ClientConfig
from fcgi_cli.errors.exceptions import ConfigurationError

ENV_VARS = (
    "FCGI_CLI_LOG_LEVEL",
    "FCGI_CLI_LOG_DIR",
    "FCGI_CLI_JSON_LOGS",
    "FCGI_CLI_FAIL_STATUS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestClientConfigFromEnv:
    def test_defaults(self):
        config = ClientConfig.from_env()

        assert config.log_level == "WARNING"
        assert config.log_dir is None
        assert config.json_logs is True
        assert config.fail_status_threshold == 400
        assert config.console_level == logging.WARNING

    def test_all_variables(self, monkeypatch):
        monkeypatch.setenv("FCGI_CLI_LOG_LEVEL", "debug")
        monkeypatch.setenv("FCGI_CLI_LOG_DIR", "/var/log/fcgi")
        monkeypatch.setenv("FCGI_CLI_JSON_LOGS", "false")
        monkeypatch.setenv("FCGI_CLI_FAIL_STATUS", "500")

        config = ClientConfig.from_env()

        assert config.log_level == "DEBUG"
        assert config.console_level == logging.DEBUG
        assert config.log_dir == Path("/var/log/fcgi")
        assert config.json_logs is False
        assert config.fail_status_threshold == 500

    @pytest.mark.parametrize("value", ["1", "yes", "TRUE"])
    def test_json_logs_truthy(self, monkeypatch, value):
        monkeypatch.setenv("FCGI_CLI_JSON_LOGS", value)

        assert ClientConfig.from_env().json_logs is True

    def test_empty_log_dir_disables_file_logging(self, monkeypatch):
        monkeypatch.setenv("FCGI_CLI_LOG_DIR", "")

        assert ClientConfig.from_env().log_dir is None

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("FCGI_CLI_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError, match="FCGI_CLI_LOG_LEVEL"):
            ClientConfig.from_env()

    def test_invalid_fail_status(self, monkeypatch):
        monkeypatch.setenv("FCGI_CLI_FAIL_STATUS", "four hundred")

        with pytest.raises(ConfigurationError, match="FCGI_CLI_FAIL_STATUS"):
            ClientConfig.from_env()
