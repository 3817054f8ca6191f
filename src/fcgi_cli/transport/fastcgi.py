"""
FastCGI responder transport.

Performs a single request/response exchange with a FastCGI application over
a TCP or Unix domain stream socket. Record encoding and decoding is done by
flup; this module only decides which records to send and collects the
STDOUT/STDERR streams from the reply.

Exchange:
    1. FCGI_BEGIN_REQUEST (responder role, connection closed afterwards)
    2. FCGI_PARAMS stream, terminated by an empty record
    3. FCGI_STDIN stream, terminated by an empty record
    4. FCGI_STDOUT / FCGI_STDERR records until FCGI_END_REQUEST

Socket I/O is blocking and runs in a worker thread so the caller's event
loop stays responsive.
"""

import asyncio
import logging
import socket
import struct
from typing import BinaryIO, Iterator, List, Mapping, Optional, Tuple, Union

from flup.server.fcgi_base import (
    FCGI_BEGIN_REQUEST,
    FCGI_BeginRequestBody,
    FCGI_END_REQUEST,
    FCGI_EndRequestBody,
    FCGI_PARAMS,
    FCGI_REQUEST_COMPLETE,
    FCGI_RESPONDER,
    FCGI_STDERR,
    FCGI_STDIN,
    FCGI_STDOUT,
    Record,
    encode_pair,
)

from fcgi_cli.errors.exceptions import ConfigurationError, TransportError
from fcgi_cli.logging.utilities import log_with_context
from fcgi_cli.transport.base import TransportResponse

logger = logging.getLogger(__name__)

# Content length is a 16-bit field in the record header
MAX_CONTENT_LENGTH = 0xFFFF

# Only one request per connection, so a fixed id is enough
REQUEST_ID = 1

PROTOCOL_STATUS_NAMES = {
    0: "request complete",
    1: "cannot multiplex connection",
    2: "overloaded",
    3: "unknown role",
}

SocketAddress = Union[Tuple[str, int], str]


def parse_address(address: str) -> SocketAddress:
    """
    Interpret a server address.

    An address without "/" that contains ":" is HOST:PORT (IPv6 hosts in
    brackets); anything else is the path of a Unix domain socket.

    Returns:
        (host, port) tuple for TCP, or the socket path

    Raises:
        ConfigurationError: If the port is not a number in range
    """
    if "/" in address or ":" not in address:
        return address

    host, _, port_str = address.rpartition(":")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_str)
    except ValueError:
        raise ConfigurationError(f"Invalid port in address: {address}")
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range in address: {address}")
    return host, port


def encode_params(params: Mapping[str, str]) -> bytes:
    """Encode parameters as a FastCGI name-value pair stream."""
    return b"".join(
        encode_pair(
            name.encode("utf-8", "surrogateescape"),
            value.encode("utf-8", "surrogateescape"),
        )
        for name, value in params.items()
    )


def _chunks(data: bytes) -> Iterator[bytes]:
    for start in range(0, len(data), MAX_CONTENT_LENGTH):
        yield data[start:start + MAX_CONTENT_LENGTH]


def _write_record(sock: socket.socket, record_type: int, content: bytes) -> None:
    record = Record(record_type, REQUEST_ID)
    record.contentData = content
    record.contentLength = len(content)
    record.write(sock)


def exchange(
    sock: socket.socket, params: Mapping[str, str], body: BinaryIO
) -> TransportResponse:
    """
    Run one responder request over a connected socket.

    Args:
        sock: Connected stream socket
        params: FastCGI parameters
        body: Request body source, read until EOF

    Returns:
        TransportResponse with the collected streams

    Raises:
        TransportError: If the server rejects the request or closes the
            connection before FCGI_END_REQUEST
    """
    begin = struct.pack(FCGI_BeginRequestBody, FCGI_RESPONDER, 0)
    _write_record(sock, FCGI_BEGIN_REQUEST, begin)

    for chunk in _chunks(encode_params(params)):
        _write_record(sock, FCGI_PARAMS, chunk)
    _write_record(sock, FCGI_PARAMS, b"")

    sent = 0
    while True:
        chunk = body.read(MAX_CONTENT_LENGTH)
        if not chunk:
            break
        _write_record(sock, FCGI_STDIN, chunk)
        sent += len(chunk)
    _write_record(sock, FCGI_STDIN, b"")
    logger.debug("Request sent", extra={"param_count": len(params), "body_bytes": sent})

    stdout: Optional[List[bytes]] = None
    stderr: Optional[List[bytes]] = None

    while True:
        record = Record()
        try:
            record.read(sock)
        except EOFError:
            raise TransportError("Connection closed before end of request")

        if record.requestId != REQUEST_ID:
            logger.debug(
                "Ignoring record for other request",
                extra={"record_type": record.type, "request_id": record.requestId},
            )
            continue

        if record.type == FCGI_STDOUT:
            stdout = stdout if stdout is not None else []
            stdout.append(record.contentData)
        elif record.type == FCGI_STDERR:
            stderr = stderr if stderr is not None else []
            stderr.append(record.contentData)
        elif record.type == FCGI_END_REQUEST:
            app_status, protocol_status = struct.unpack(
                FCGI_EndRequestBody, record.contentData
            )
            if protocol_status != FCGI_REQUEST_COMPLETE:
                reason = PROTOCOL_STATUS_NAMES.get(protocol_status, str(protocol_status))
                raise TransportError(
                    f"FastCGI server rejected request: {reason}",
                    context={"protocol_status": protocol_status},
                )
            break
        else:
            logger.debug("Ignoring record", extra={"record_type": record.type})

    return TransportResponse(
        stdout=b"".join(stdout) if stdout is not None else None,
        stderr=b"".join(stderr) if stderr is not None else None,
        app_status=app_status,
    )


class FastCGITransport:
    """
    Transport that talks to a FastCGI server at a socket address.

    Usage:
        transport = FastCGITransport("127.0.0.1:9000")
        response = await transport.send(params, io.BytesIO(b""))
        if response.stdout is not None:
            ...
    """

    def __init__(self, address: str):
        """
        Initialize FastCGITransport.

        Args:
            address: HOST:PORT or path of a Unix domain socket

        Raises:
            ConfigurationError: If the address has an invalid port
        """
        self.address = address
        self._socket_address = parse_address(address)

    def _connect(self) -> socket.socket:
        if isinstance(self._socket_address, tuple):
            return socket.create_connection(self._socket_address)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(self._socket_address)
        except OSError:
            sock.close()
            raise
        return sock

    def _send_blocking(
        self, params: Mapping[str, str], body: BinaryIO
    ) -> TransportResponse:
        with self._connect() as sock:
            return exchange(sock, params, body)

    async def send(
        self, params: Mapping[str, str], body: BinaryIO
    ) -> TransportResponse:
        """
        Send the request and wait for the complete response.

        Raises:
            TransportError: On connection or protocol failure
        """
        log_with_context(
            logger, logging.INFO, "Connecting to FastCGI server", address=self.address
        )
        try:
            response = await asyncio.to_thread(self._send_blocking, params, body)
        except OSError as e:
            raise TransportError(
                f"Cannot talk to FastCGI server at {self.address}",
                cause=e,
                context={"address": self.address},
            )

        log_with_context(
            logger,
            logging.INFO,
            "Response received",
            address=self.address,
            stdout_bytes=len(response.stdout) if response.stdout is not None else None,
            stderr_bytes=len(response.stderr) if response.stderr is not None else None,
            app_status=response.app_status,
        )
        return response


__all__ = ["FastCGITransport", "exchange", "encode_params", "parse_address"]
