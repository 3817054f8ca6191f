"""Tests for target URL decomposition."""

import pytest

from fcgi_cli.errors.exceptions import ConfigurationError
from fcgi_cli.request.url import TargetUrl, encode_host, is_ip_literal


class TestTargetUrlParse:
    """Test parsing and normalization."""

    def test_full_url(self):
        target = TargetUrl.parse("https://Example.COM:8443/app/show?id=5#top")

        assert target.scheme == "https"
        assert target.host == "example.com"
        assert target.path == "/app/show"
        assert target.query == "id=5"

    def test_empty_path_becomes_root(self):
        assert TargetUrl.parse("http://example.com").path == "/"

    def test_dot_segments_removed(self):
        target = TargetUrl.parse("http://example.com/a/./b/../c")

        assert target.path == "/a/c"

    def test_trailing_dot_dot_keeps_directory(self):
        assert TargetUrl.parse("http://example.com/a/b/..").path == "/a/"

    def test_dot_dot_above_root(self):
        assert TargetUrl.parse("http://example.com/../x").path == "/x"

    def test_no_query(self):
        assert TargetUrl.parse("http://example.com/p").query is None

    def test_empty_query(self):
        """A bare "?" is an empty query, not a missing one."""
        assert TargetUrl.parse("http://example.com/p?").query == ""

    def test_question_mark_in_fragment_is_not_query(self):
        assert TargetUrl.parse("http://example.com/p#frag?x").query is None

    def test_non_special_scheme_path_kept(self):
        target = TargetUrl.parse("mailto:someone@example.com")

        assert target.scheme == "mailto"
        assert target.host is None
        assert target.path == "someone@example.com"

    def test_file_url_without_host(self):
        target = TargetUrl.parse("file:///var/www/index.php")

        assert target.host is None
        assert target.path == "/var/www/index.php"

    @pytest.mark.parametrize(
        "url",
        ["/relative/path", "example.com/index.php", "http:///nohost", "http://[::1/"],
    )
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigurationError):
            TargetUrl.parse(url)


class TestTargetUrlEncoding:
    """Test percent-encoding and host conversion."""

    def test_non_ascii_path_encoded(self):
        target = TargetUrl.parse("http://example.com/caf\u00e9 x")

        assert target.path == "/caf%C3%A9%20x"

    def test_query_spaces_encoded(self):
        assert TargetUrl.parse("http://example.com/?q=a b").query == "q=a%20b"

    def test_existing_escapes_kept(self):
        target = TargetUrl.parse("http://example.com/a%20b?x=%2F")

        assert target.path == "/a%20b"
        assert target.query == "x=%2F"

    def test_path_reserved_characters(self):
        target = TargetUrl.parse("http://example.com/a\"b<c>{d}`e")

        assert target.path == "/a%22b%3Cc%3E%7Bd%7D%60e"

    def test_sub_delims_left_alone(self):
        target = TargetUrl.parse("http://example.com/a;b=c,d@e!$f?k=v&l=(m)")

        assert target.path == "/a;b=c,d@e!$f"
        assert target.query == "k=v&l=(m)"

    def test_apostrophe_encoded_in_special_query(self):
        assert TargetUrl.parse("http://example.com/?n=o'k").query == "n=o%27k"

    def test_apostrophe_kept_in_other_query(self):
        assert TargetUrl.parse("foo://host/?n=o'k").query == "n=o'k"

    def test_opaque_path_only_non_ascii_encoded(self):
        target = TargetUrl.parse("mailto:J\u00f6rg <j@example.com>")

        assert target.path == "J%C3%B6rg <j@example.com>"

    def test_idn_host_converted(self):
        target = TargetUrl.parse("http://B\u00fccher.example/")

        assert target.host == "xn--bcher-kva.example"
        assert target.domain == "xn--bcher-kva.example"

    def test_invalid_idn_host(self):
        with pytest.raises(ConfigurationError):
            TargetUrl.parse("http://\u2615-\u0661.example/")


class TestTargetUrlParts:
    """Test derived URL parts."""

    def test_domain_for_name(self):
        assert TargetUrl.parse("http://example.com/").domain == "example.com"

    def test_domain_none_for_ipv4(self):
        assert TargetUrl.parse("http://127.0.0.1:8080/").domain is None

    def test_domain_none_for_ipv6(self):
        assert TargetUrl.parse("http://[::1]/").domain is None

    def test_domain_none_without_host(self):
        assert TargetUrl.parse("file:///tmp/x").domain is None

    def test_request_uri_with_query(self):
        target = TargetUrl.parse("http://example.com/app/show?id=5")

        assert target.request_uri == "/app/show?id=5"

    def test_request_uri_without_query(self):
        assert TargetUrl.parse("http://example.com/app").request_uri == "/app"

    def test_last_path_segment(self):
        target = TargetUrl.parse("http://example.com/files/report.csv?x=1")

        assert target.last_path_segment() == "report.csv"

    def test_last_path_segment_skips_trailing_slash(self):
        target = TargetUrl.parse("http://example.com/files/")

        assert target.last_path_segment() == "files"

    def test_last_path_segment_root(self):
        assert TargetUrl.parse("http://example.com/").last_path_segment() is None


class TestIsIpLiteral:
    @pytest.mark.parametrize("host", ["10.0.0.1", "::1", "fe80::1"])
    def test_addresses(self, host):
        assert is_ip_literal(host) is True

    @pytest.mark.parametrize("host", ["example.com", "localhost", ""])
    def test_names(self, host):
        assert is_ip_literal(host) is False


class TestEncodeHost:
    def test_ascii_unchanged(self):
        assert encode_host("my_host.local") == "my_host.local"

    def test_unicode_to_punycode(self):
        assert encode_host("münchen.de") == "xn--mnchen-3ya.de"
