"""
Output destinations.

Every destination is either a named file (created or truncated) or one of
the process's standard streams. Files are written with aiofiles inside an
async context manager, so the handle is closed on every exit path.
"""

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO, Optional

import aiofiles

from fcgi_cli.errors.exceptions import OutputError
from fcgi_cli.logging.utilities import log_with_context

logger = logging.getLogger(__name__)


def _write_stream(stream: BinaryIO, data: bytes) -> None:
    stream.write(data)
    stream.flush()


async def write_output(
    data: bytes,
    path: Optional[Path],
    stream: BinaryIO,
    stream_name: str = "stream",
) -> int:
    """
    Write bytes to a file, or to a standard stream when no path is given.

    Args:
        data: Bytes to write
        path: Destination file, None to use stream
        stream: Binary standard stream used when path is None
        stream_name: Name of the stream for log messages

    Returns:
        Number of bytes written

    Raises:
        OutputError: If the file cannot be opened or written
    """
    destination = str(path) if path is not None else stream_name
    try:
        if path is None:
            await asyncio.to_thread(_write_stream, stream, data)
        else:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
    except OSError as e:
        raise OutputError(
            f"Cannot write output to {destination}",
            cause=e,
            context={"destination": destination},
        )

    log_with_context(
        logger,
        logging.DEBUG,
        "Output written",
        destination=destination,
        bytes_written=len(data),
    )
    return len(data)


__all__ = ["write_output"]
