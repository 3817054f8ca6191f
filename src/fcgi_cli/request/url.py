"""
Target URL decomposition.

The URL given on the command line is never fetched; its parts only describe
the simulated request to the FastCGI application. This module validates the
URL at the boundary and exposes the pieces the parameter deriver needs, in
the serialized form a browser would send:

- paths of hierarchical schemes (http, https, ...) get "/" for an empty path
  and lose "." / ".." segments
- path and query are percent-encoded (UTF-8); existing escapes are kept
- non-ASCII host names are converted to punycode (UTS #46)
"""

import ipaddress
from dataclasses import dataclass
from typing import List, Optional, Set
from urllib.parse import quote, urlsplit

import idna

from fcgi_cli.errors.exceptions import ConfigurationError

# Schemes with an authority and a hierarchical path
SPECIAL_SCHEMES: Set[str] = {"http", "https", "ws", "wss", "ftp", "file"}

# Printable ASCII left alone by each component's percent-encode set.
# quote() always keeps letters, digits and "_.-~".
PATH_SAFE = "/%:@!$&'()*+,;=[]|^\\"
QUERY_SAFE = "/%:@!$&'()*+,;=?[]|^`{}\\"
SPECIAL_QUERY_SAFE = QUERY_SAFE.replace("'", "")
# Opaque paths (mailto:, data:, ...) only escape controls and non-ASCII
OPAQUE_SAFE = "".join(chr(c) for c in range(0x20, 0x7F))


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")[1:]
    output: List[str] = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            if output:
                output.pop()
            continue
        output.append(segment)

    result = "/" + "/".join(output)
    # "/a/b/.." and "/a/." denote directories
    if segments and segments[-1] in (".", "..") and not result.endswith("/"):
        result += "/"
    return result


def encode_host(host: str) -> str:
    """
    Convert a host name to its ASCII form.

    Raises:
        ConfigurationError: If a non-ASCII host is not a valid IDN
    """
    if host.isascii():
        return host
    try:
        return idna.encode(host, uts46=True).decode("ascii")
    except idna.IDNAError as e:
        raise ConfigurationError(f"Invalid host name: {host}", cause=e)


def is_ip_literal(host: str) -> bool:
    """Whether host is an IPv4 or IPv6 address rather than a domain name."""
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class TargetUrl:
    """
    Parsed target URL.

    Attributes:
        raw: URL as given
        scheme: Lowercase scheme (e.g. "https")
        host: Lowercase ASCII host name or address, None when the URL has no host
        path: Normalized, percent-encoded path (may be empty for
            non-hierarchical schemes)
        query: Percent-encoded query without "?", None when the URL has no "?"
    """

    raw: str
    scheme: str
    host: Optional[str]
    path: str
    query: Optional[str]

    @classmethod
    def parse(cls, url: str) -> "TargetUrl":
        """
        Parse and validate an absolute URL.

        Raises:
            ConfigurationError: If the URL is malformed or has no scheme
        """
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise ConfigurationError(f"Invalid URL: {url}", cause=e)

        if not parts.scheme:
            raise ConfigurationError(f"Invalid URL (no scheme): {url}")

        scheme = parts.scheme.lower()
        special = scheme in SPECIAL_SCHEMES
        path = parts.path
        if special:
            if not parts.netloc and scheme != "file":
                raise ConfigurationError(f"Invalid URL (no host): {url}")
            path = _remove_dot_segments(path) if path else "/"

        if special or parts.netloc:
            path = quote(path, safe=PATH_SAFE)
        else:
            path = quote(path, safe=OPAQUE_SAFE)

        # urlsplit reports an empty query both for "/p" and "/p?"
        before_fragment = url.split("#", 1)[0]
        query = None
        if "?" in before_fragment:
            query = quote(
                parts.query, safe=SPECIAL_QUERY_SAFE if special else QUERY_SAFE
            )

        host = parts.hostname or None
        if host is not None:
            host = encode_host(host)

        return cls(
            raw=url,
            scheme=scheme,
            host=host,
            path=path,
            query=query,
        )

    @property
    def domain(self) -> Optional[str]:
        """Host name when it is a domain, None for IP literals or no host."""
        if self.host and not is_ip_literal(self.host):
            return self.host
        return None

    @property
    def request_uri(self) -> str:
        """Path plus query, as it would appear in an HTTP request line."""
        if self.query is not None:
            return f"{self.path}?{self.query}"
        return self.path

    def last_path_segment(self) -> Optional[str]:
        """Last non-empty segment of the path, None when there is none."""
        for segment in reversed(self.path.split("/")):
            if segment:
                return segment
        return None


__all__ = ["TargetUrl", "SPECIAL_SCHEMES", "encode_host", "is_ip_literal"]
