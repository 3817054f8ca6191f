"""
Single-request FastCGI client.

execute() runs one invocation end to end:
1. Whitelist the environment (once, here at the boundary)
2. Derive the FastCGI parameters
3. Pick the request body source
4. Send the request through the transport
5. Route the response streams to their destinations

Any failure is raised to the caller; nothing is retried.
"""

import logging
import sys
from typing import BinaryIO, Mapping, Optional

from fcgi_cli.config import ClientConfig
from fcgi_cli.logging.context import set_log_context
from fcgi_cli.logging.utilities import log_with_context
from fcgi_cli.request.body import open_body_source
from fcgi_cli.request.environment import snapshot_environment
from fcgi_cli.request.options import RequestOptions
from fcgi_cli.request.params import derive_params
from fcgi_cli.response.router import ResponseRouter
from fcgi_cli.transport.base import Transport, TransportResponse

logger = logging.getLogger(__name__)


async def execute(
    options: RequestOptions,
    transport: Transport,
    environ: Mapping[str, str],
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    stderr: Optional[BinaryIO] = None,
    config: Optional[ClientConfig] = None,
) -> TransportResponse:
    """
    Send one request and write out the response.

    Args:
        options: Request options
        transport: Transport used to reach the FastCGI server
        environ: Process environment (filtered here, not read elsewhere)
        stdin: Request body source for non-GET requests (default: sys.stdin)
        stdout: Stream for output without a file (default: sys.stdout)
        stderr: Stream for diagnostics without a file (default: sys.stderr)
        config: Ambient configuration (default: ClientConfig())

    Returns:
        The TransportResponse that was routed

    Raises:
        FcgiCliError: On any failure (see fcgi_cli.errors)
    """
    config = config or ClientConfig()
    set_log_context(address=options.address, request_method=options.request_method)

    environment = snapshot_environment(environ, options)
    params = derive_params(environment, options)
    log_with_context(
        logger,
        logging.INFO,
        "Sending request",
        url=options.url,
        param_count=len(params),
    )

    body = open_body_source(options, stdin if stdin is not None else sys.stdin.buffer)
    response = await transport.send(params, body)

    router = ResponseRouter(
        options,
        stdout=stdout,
        stderr=stderr,
        fail_threshold=config.fail_status_threshold,
    )
    await router.route(response)
    return response


__all__ = ["execute"]
