"""Transport interface between the client core and a FastCGI server."""

from dataclasses import dataclass
from typing import BinaryIO, Mapping, Optional, Protocol


@dataclass
class TransportResponse:
    """
    Streams received from the application for one request.

    Attributes:
        stdout: Concatenated FCGI_STDOUT content, None if none was received
        stderr: Concatenated FCGI_STDERR content, None if none was received
        app_status: Application exit status from FCGI_END_REQUEST
    """

    stdout: Optional[bytes] = None
    stderr: Optional[bytes] = None
    app_status: int = 0


class Transport(Protocol):
    """Sends one request and collects the response streams."""

    async def send(
        self, params: Mapping[str, str], body: BinaryIO
    ) -> TransportResponse:
        ...


__all__ = ["Transport", "TransportResponse"]
