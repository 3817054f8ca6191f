"""
fcgi_cli - send a single request to a FastCGI server.

Usable as a command line tool ("curl for FastCGI") and as a CGI-to-FastCGI
bridge: CGI meta-variables in the environment are forwarded as FastCGI
parameters.
"""

__version__ = "0.3.0"
