"""
Logging module for fcgi_cli.

Import directly from sub-modules:
    from fcgi_cli.logging.setup import get_logger, setup_logging
    from fcgi_cli.logging.utilities import log_with_context, log_exception
    from fcgi_cli.logging.context import set_log_context
"""
