"""Argument parsing for the registry server CLI."""

import argparse
from typing import List, Optional


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="esm-registry",
        description="Serve single-file ES modules as npm-installable packages",
        add_help=True,
    )

    parser.add_argument("-d", "--data-path",
                        dest="DATA_PATH",
                        help="Module store root (overrides DATA_PATH)",
                        action="store",
                        type=str)
    parser.add_argument("--cache-path",
                        dest="CACHE_PATH",
                        help="Archive cache directory (overrides CACHE_PATH)",
                        action="store",
                        type=str)
    parser.add_argument("--host",
                        dest="HOST",
                        help="Address to bind (default: 127.0.0.1)",
                        action="store",
                        type=str)
    parser.add_argument("-p", "--port",
                        dest="PORT",
                        help="Port to listen on (default: 8080)",
                        action="store",
                        type=int)
    parser.add_argument("--scheme",
                        dest="SCHEME",
                        help="URL scheme for tarball links when no X-Forwarded-Proto is sent",
                        action="store",
                        type=str.lower,
                        choices=["http", "https"])
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    parser.add_argument("--debug",
                        dest="DEBUG",
                        help="Enable debug logging (same as DEBUG=1)",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser


def parse_args(argv: Optional[List[str]] = None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
