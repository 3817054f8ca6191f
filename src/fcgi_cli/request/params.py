"""
FastCGI parameter derivation.

Builds the parameter set sent in FCGI_PARAMS records. Whitelisted
environment variables form the baseline; the request method, script name,
document root and URL then add or override CGI meta-variables.
"""

import logging
from typing import Dict, Mapping, Optional

from fcgi_cli.request.options import RequestOptions

logger = logging.getLogger(__name__)

ParameterSet = Dict[str, str]


def resolve_script_name(params: ParameterSet, options: RequestOptions) -> str:
    """
    Determine SCRIPT_NAME.

    An explicit --script wins and is written to params. Otherwise the value
    forwarded from the environment (if any) is used as is.
    """
    if options.script_name is not None:
        params["SCRIPT_NAME"] = options.script_name
        return options.script_name
    return params.get("SCRIPT_NAME", "")


def derive_params(
    environment: Mapping[str, str], options: RequestOptions
) -> ParameterSet:
    """
    Build the FastCGI parameter set for a request.

    Args:
        environment: Whitelisted environment snapshot
        options: Request options

    Returns:
        Parameter names mapped to values

    Example:
        >>> options = RequestOptions(
        ...     address="127.0.0.1:9000",
        ...     url="https://example.com/app/show?id=5",
        ...     script_name="/app",
        ...     document_root="/srv/www",
        ... )
        >>> params = derive_params({}, options)
        >>> params["PATH_INFO"], params["PATH_TRANSLATED"]
        ('/show', '/srv/www/show')
    """
    params: ParameterSet = dict(environment)

    params["REQUEST_METHOD"] = options.request_method

    script_name = resolve_script_name(params, options)
    root: Optional[str] = options.document_root

    if script_name and root is not None:
        params["SCRIPT_FILENAME"] = root + script_name

    target = options.target_url()
    if target is not None:
        path = target.path
        path_info = path[len(script_name):] if path.startswith(script_name) else path

        if path_info:
            params["PATH_INFO"] = path_info
            if root is not None:
                params["PATH_TRANSLATED"] = root + path_info

        if target.domain is not None:
            params["HTTP_HOST"] = target.domain

        if target.query is not None:
            params["QUERY_STRING"] = target.query
        params["REQUEST_URI"] = target.request_uri

        if target.scheme == "https":
            params["HTTPS"] = "on"

    if options.data is not None and "CONTENT_LENGTH" not in params:
        params["CONTENT_LENGTH"] = str(len(options.data.encode("utf-8")))

    logger.debug(
        "Derived FastCGI parameters",
        extra={"param_count": len(params), "script_name": script_name},
    )
    return params


__all__ = ["ParameterSet", "derive_params", "resolve_script_name"]
