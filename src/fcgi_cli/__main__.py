"""
Entry point for fcgi-cli.

Usage:
    # GET a page from PHP-FPM over TCP
    fcgi-cli 127.0.0.1:9000 http://localhost/index.php --root /srv/www --script /index.php

    # POST a literal body over a Unix socket, keep the response headers
    fcgi-cli /run/php/php-fpm.sock http://localhost/api.php -X POST --data 'a=1' -i

    # Save the body under the URL's file name, fail on an error status
    fcgi-cli 127.0.0.1:9000 http://localhost/report.csv -O -f --output-dir out

CGI bridge:
    When run as a CGI program, the CGI meta-variables and HTTP_* variables
    of the environment are forwarded as FastCGI parameters. Use --no-env,
    -E/--full-env and -e/--pass-env to change which variables are passed.

Exit status:
    0 on success, 1 when the request failed (one line on stderr), 2 for
    invalid arguments.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from fcgi_cli import __version__
from fcgi_cli.client import execute
from fcgi_cli.config import ClientConfig
from fcgi_cli.errors.exceptions import ConfigurationError, FcgiCliError, wrap_exception
from fcgi_cli.logging.setup import generate_invocation_id, get_logger, setup_logging
from fcgi_cli.logging.utilities import log_exception
from fcgi_cli.request.options import RequestOptions

PROG = "fcgi-cli"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Send request to FastCGI server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
CLI tool to interact with a FastCGI server directly. Also deployable as a
CGI-to-FastCGI bridge.

Examples:
    fcgi-cli 127.0.0.1:9000 http://localhost/index.php --root /srv/www --script /index.php
    fcgi-cli /run/php/php-fpm.sock http://localhost/api.php -X POST --data 'a=1' -i
        """,
    )

    parser.add_argument(
        "address",
        help="Address of FastCGI server: HOST:PORT or a PATH to a unix socket",
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=None,
        help="URL to be accessed; its scheme, host name and path are passed "
        "on to the FastCGI server as appropriate",
    )

    request = parser.add_argument_group("request")
    request.add_argument(
        "--data",
        default=None,
        help="Send given string as request body",
    )
    request.add_argument(
        "--root",
        metavar="PATH",
        default=None,
        help="Set the document root (valid absolute path at the server, no trailing slash)",
    )
    request.add_argument(
        "--script",
        metavar="SCRIPT_NAME",
        default=None,
        help="Set the SCRIPT_NAME",
    )
    request.add_argument(
        "-X",
        "--request",
        metavar="METHOD",
        default="GET",
        help="Set FastCGI parameter REQUEST_METHOD (default: GET)",
    )

    env = parser.add_argument_group("environment")
    env.add_argument(
        "-e",
        "--pass-env",
        metavar="VAR",
        action="append",
        default=[],
        help="Send environment variable VAR as FastCGI parameter",
    )
    env_mode = env.add_mutually_exclusive_group()
    env_mode.add_argument(
        "--no-env",
        action="store_true",
        help="Pass only explicitly whitelisted environment variables",
    )
    env_mode.add_argument(
        "-E",
        "--full-env",
        action="store_true",
        help="Pass all environment variables unmodified (default is to pass "
        "only CGI meta-variables and protocol variables)",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--output-dir",
        metavar="DIR",
        type=Path,
        default=None,
        help="Write output files to DIR",
    )
    output_name = output.add_mutually_exclusive_group()
    output_name.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        type=Path,
        default=None,
        help="Send output to specified file",
    )
    output_name.add_argument(
        "-O",
        "--remote-name",
        action="store_true",
        help="Use the final segment of the URL path as output filename",
    )
    output.add_argument(
        "--stderr",
        metavar="FILE",
        type=Path,
        default=None,
        help="Send output received on the FastCGI STDERR stream to specified "
        "file; locally generated errors still go to stderr",
    )
    output.add_argument(
        "-i",
        "--include",
        action="store_true",
        help="Include the response headers in the output",
    )
    output.add_argument(
        "-D",
        "--dump-header",
        metavar="FILE",
        type=Path,
        default=None,
        help="Write the response headers to FILE",
    )
    output.add_argument(
        "-f",
        "--fail",
        action="store_true",
        help="Fail without output when the response Status is 400 or above",
    )

    logs = parser.add_argument_group("logging")
    logs.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)",
    )
    logs.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write logs below DIR (default: from FCGI_CLI_LOG_DIR, else off)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def console_level_for(verbose: int, config: ClientConfig) -> int:
    """Console log level: -v flags win over FCGI_CLI_LOG_LEVEL."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return config.console_level


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    global logger
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ClientConfig.from_env()
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        return EXIT_FAILURE

    if args.log_dir is not None:
        config.log_dir = args.log_dir

    setup_logging(
        name="fcgi_cli",
        log_dir=config.log_dir,
        json_format=config.json_logs,
        console_level=console_level_for(args.verbose, config),
        invocation_id=generate_invocation_id(),
    )

    # Re-get logger after setup to use new handlers
    logger = get_logger(__name__)

    try:
        options = RequestOptions.from_args(args)
    except ConfigurationError as e:
        parser.error(e.message)

    # Imported here so that option errors are reported without touching sockets
    from fcgi_cli.transport.fastcgi import FastCGITransport

    try:
        transport = FastCGITransport(options.address)
        asyncio.run(
            execute(options, transport, environ=os.environ, config=config)
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, aborting")
        return EXIT_INTERRUPTED
    except FcgiCliError as e:
        log_exception(logger, e, "Request failed", level=logging.DEBUG)
        print(e, file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        error = wrap_exception(e)
        log_exception(logger, error, "Unexpected failure", level=logging.DEBUG)
        print(error, file=sys.stderr)
        return EXIT_FAILURE

    logger.debug("Request completed")
    return EXIT_SUCCESS


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
