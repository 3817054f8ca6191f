"""
Response module.

Provides:
- ResponseRouter: route FCGI_STDOUT/FCGI_STDERR to files or streams
- write_output(): write bytes to a file or standard stream
"""

from fcgi_cli.response.router import ResponseRouter
from fcgi_cli.response.sinks import write_output

__all__ = ["ResponseRouter", "write_output"]
