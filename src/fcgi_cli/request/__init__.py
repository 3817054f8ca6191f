"""
Request module.

Turns command line options and the process environment into what is sent
to the FastCGI server:
    - RequestOptions: validated options
    - snapshot_environment(): whitelisted environment variables
    - derive_params(): FastCGI parameter set
    - open_body_source(): FCGI_STDIN content
"""

from fcgi_cli.request.body import open_body_source
from fcgi_cli.request.environment import (
    CGI_META_VARS,
    EnvironmentSnapshot,
    is_whitelisted,
    snapshot_environment,
)
from fcgi_cli.request.options import RequestOptions
from fcgi_cli.request.params import ParameterSet, derive_params
from fcgi_cli.request.url import TargetUrl

__all__ = [
    "RequestOptions",
    "TargetUrl",
    "CGI_META_VARS",
    "EnvironmentSnapshot",
    "is_whitelisted",
    "snapshot_environment",
    "ParameterSet",
    "derive_params",
    "open_body_source",
]
