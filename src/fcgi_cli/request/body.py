"""Request body source selection."""

import io
from typing import BinaryIO

from fcgi_cli.request.options import RequestOptions


def open_body_source(options: RequestOptions, stdin: BinaryIO) -> BinaryIO:
    """
    Choose where FCGI_STDIN content comes from.

    Args:
        options: Request options
        stdin: Binary standard input of the process

    Returns:
        The literal --data bytes; stdin for methods other than GET; or an
        empty stream for a GET without --data
    """
    if options.data is not None:
        return io.BytesIO(options.data.encode("utf-8"))
    if options.request_method != "GET":
        return stdin
    return io.BytesIO(b"")


__all__ = ["open_body_source"]
