"""
Transport module.

Provides the narrow interface the client core talks to:
    send(params, body) -> TransportResponse(stdout, stderr)

The socket implementation lives in fcgi_cli.transport.fastcgi and is
imported by the entry point when a real connection is needed.
"""

from fcgi_cli.transport.base import Transport, TransportResponse

__all__ = ["Transport", "TransportResponse"]
