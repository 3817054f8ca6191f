"""
Environment whitelisting.

When fcgi-cli runs as a CGI program it receives the request description in
CGI meta-variables. Those are forwarded to the FastCGI server as parameters.
The whitelist decision is made once, here, and the resulting snapshot is
passed on explicitly; nothing downstream reads os.environ.
"""

from typing import Dict, FrozenSet, Mapping

from fcgi_cli.request.options import RequestOptions

EnvironmentSnapshot = Dict[str, str]

# CGI/1.1 meta-variables (RFC 3875, section 4.1)
CGI_META_VARS: FrozenSet[str] = frozenset(
    {
        "AUTH_TYPE",
        "CONTENT_LENGTH",
        "CONTENT_TYPE",
        "GATEWAY_INTERFACE",
        "PATH_INFO",
        "PATH_TRANSLATED",
        "QUERY_STRING",
        "REMOTE_ADDR",
        "REMOTE_HOST",
        "REMOTE_IDENT",
        "REMOTE_USER",
        "REQUEST_METHOD",
        "SCRIPT_NAME",
        "SERVER_NAME",
        "SERVER_PORT",
        "SERVER_PROTOCOL",
        "SERVER_SOFTWARE",
    }
)

# Protocol-specific meta-variables
PROTOCOL_VAR_PREFIX = "HTTP_"


def is_whitelisted(name: str, options: RequestOptions) -> bool:
    """
    Decide whether an environment variable is forwarded.

    Rules, first match wins:
        1. --full-env forwards everything
        2. Unless --no-env, CGI meta-variables and HTTP_* variables
        3. Variables named with --pass-env

    Args:
        name: Environment variable name
        options: Request options

    Returns:
        True if the variable becomes a FastCGI parameter
    """
    if options.env_full:
        return True

    if not options.env_clear:
        if name.startswith(PROTOCOL_VAR_PREFIX) or name in CGI_META_VARS:
            return True

    return name in options.pass_env


def snapshot_environment(
    environ: Mapping[str, str], options: RequestOptions
) -> EnvironmentSnapshot:
    """Copy the whitelisted part of environ."""
    return {
        name: value
        for name, value in environ.items()
        if is_whitelisted(name, options)
    }


__all__ = [
    "CGI_META_VARS",
    "EnvironmentSnapshot",
    "is_whitelisted",
    "snapshot_environment",
]
