"""Tests for environment whitelisting."""

import pytest

from fcgi_cli.request.environment import (
    CGI_META_VARS,
    is_whitelisted,
    snapshot_environment,
)
from fcgi_cli.request.options import RequestOptions

ENVIRON = {
    "PATH": "/usr/bin",
    "HOME": "/root",
    "HTTP_USER_AGENT": "curl/8.0",
    "HTTP_COOKIE": "a=b",
    "QUERY_STRING": "x=1",
    "REQUEST_METHOD": "POST",
    "CONTENT_LENGTH": "12",
}


def make_options(**overrides):
    values = {"address": "127.0.0.1:9000"}
    values.update(overrides)
    return RequestOptions(**values)


class TestIsWhitelisted:
    """Test the per-variable decision."""

    @pytest.mark.parametrize("name", sorted(CGI_META_VARS))
    def test_cgi_meta_vars_by_default(self, name):
        assert is_whitelisted(name, make_options()) is True

    def test_protocol_vars_by_default(self):
        assert is_whitelisted("HTTP_ACCEPT", make_options()) is True

    def test_prefix_is_case_sensitive(self):
        assert is_whitelisted("http_accept", make_options()) is False

    def test_other_vars_excluded_by_default(self):
        assert is_whitelisted("PATH", make_options()) is False

    def test_pass_env_adds_variable(self):
        assert is_whitelisted("PATH", make_options(pass_env=["PATH"])) is True

    def test_no_env_excludes_defaults(self):
        options = make_options(env_clear=True)

        assert is_whitelisted("QUERY_STRING", options) is False
        assert is_whitelisted("HTTP_ACCEPT", options) is False

    def test_no_env_keeps_pass_env(self):
        options = make_options(env_clear=True, pass_env=["HTTP_ACCEPT"])

        assert is_whitelisted("HTTP_ACCEPT", options) is True

    def test_full_env_passes_everything(self):
        assert is_whitelisted("ANYTHING", make_options(env_full=True)) is True


class TestSnapshotEnvironment:
    """Test the environment snapshot."""

    def test_default_whitelist(self):
        snapshot = snapshot_environment(ENVIRON, make_options())

        assert snapshot == {
            "HTTP_USER_AGENT": "curl/8.0",
            "HTTP_COOKIE": "a=b",
            "QUERY_STRING": "x=1",
            "REQUEST_METHOD": "POST",
            "CONTENT_LENGTH": "12",
        }

    def test_no_env(self):
        snapshot = snapshot_environment(
            ENVIRON, make_options(env_clear=True, pass_env=["HOME"])
        )

        assert snapshot == {"HOME": "/root"}

    def test_full_env(self):
        snapshot = snapshot_environment(ENVIRON, make_options(env_full=True))

        assert snapshot == ENVIRON
        assert snapshot is not ENVIRON

    def test_pass_env_missing_variable(self):
        """Naming a variable that is not set adds nothing."""
        snapshot = snapshot_environment(
            {}, make_options(env_clear=True, pass_env=["NOT_SET"])
        )

        assert snapshot == {}
