"""
Response routing.

Decides which byte ranges of the application's response go to which
destination:

- FCGI_STDOUT is the CGI response. Its header block is parsed only when
  something needs it (--fail, a header dump, or stripping the headers from
  the output). With --include and nothing else, the bytes are passed through
  untouched, even if the headers would not parse.
- FCGI_STDERR is diagnostic output. It is never parsed and is written even
  when routing FCGI_STDOUT failed.
"""

import logging
import sys
from typing import BinaryIO, Optional

from fcgi_cli.errors.exceptions import OutputError, UpstreamError
from fcgi_cli.logging.utilities import log_exception, log_with_context
from fcgi_cli.protocol.headers import parse_headers
from fcgi_cli.protocol.status import (
    DEFAULT_FAIL_THRESHOLD,
    extract_status,
    is_failure_status,
)
from fcgi_cli.request.options import RequestOptions
from fcgi_cli.response.sinks import write_output
from fcgi_cli.transport.base import TransportResponse

logger = logging.getLogger(__name__)


class ResponseRouter:
    """
    Writes a TransportResponse to the destinations chosen in RequestOptions.

    Usage:
        router = ResponseRouter(options)
        await router.route(response)

    Ordering:
        Nothing is written for FCGI_STDOUT until the output file name is
        known, the headers parsed and the status checked. The header dump is
        written before the body, so it stays on disk if writing the body
        fails afterwards.
    """

    def __init__(
        self,
        options: RequestOptions,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        fail_threshold: int = DEFAULT_FAIL_THRESHOLD,
    ):
        """
        Initialize ResponseRouter.

        Args:
            options: Request options
            stdout: Binary stream for output without a file (default: sys.stdout)
            stderr: Binary stream for diagnostics without a file (default: sys.stderr)
            fail_threshold: Lowest status that fails under --fail
        """
        self.options = options
        self._stdout = stdout
        self._stderr = stderr
        self.fail_threshold = fail_threshold

    @property
    def stdout(self) -> BinaryIO:
        return self._stdout if self._stdout is not None else sys.stdout.buffer

    @property
    def stderr(self) -> BinaryIO:
        return self._stderr if self._stderr is not None else sys.stderr.buffer

    async def route(self, response: TransportResponse) -> None:
        """
        Write both response streams.

        Raises:
            EmptyRemoteNameError: If --remote-name finds no file name in the URL
            MalformedHeadersError: If the headers are needed but do not parse
            InvalidStatusValueError: If --fail is set and Status is unreadable
            UpstreamError: If --fail is set and the status fails the threshold
            OutputError: If a destination cannot be written
        """
        try:
            if response.stdout is not None:
                await self.route_output(response.stdout)
        except Exception:
            # The stdout failure is what gets reported
            if response.stderr is not None:
                try:
                    await self.write_diagnostics(response.stderr)
                except OutputError as e:
                    log_exception(
                        logger,
                        e,
                        "Could not write FastCGI stderr",
                        level=logging.WARNING,
                        include_traceback=False,
                    )
            raise

        if response.stderr is not None:
            await self.write_diagnostics(response.stderr)

    async def write_diagnostics(self, data: bytes) -> None:
        """Write FCGI_STDERR to --stderr or the stderr stream."""
        await write_output(data, self.options.stderr_path(), self.stderr, "stderr")

    async def route_output(self, data: bytes) -> None:
        """Write the CGI response, or the parts of it the options ask for."""
        options = self.options
        output_path = options.output_path()

        if not options.needs_header_parsing:
            await write_output(data, output_path, self.stdout, "stdout")
            return

        outcome = parse_headers(data)

        if options.fail_on_status:
            status = extract_status(outcome.headers)
            if is_failure_status(status, self.fail_threshold):
                log_with_context(
                    logger,
                    logging.INFO,
                    "Upstream status fails threshold",
                    http_status=status,
                )
                raise UpstreamError(status)

        dump_path = options.dump_header_path()
        if dump_path is not None:
            header_block = data[: outcome.header_length]
            await write_output(header_block, dump_path, self.stdout, "stdout")

        output = data if options.include_headers else outcome.body
        await write_output(output, output_path, self.stdout, "stdout")


__all__ = ["ResponseRouter"]
