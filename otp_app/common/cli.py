"""
Command-line Helpers

Shared argument parsing and logging setup for the runner scripts.
"""

import argparse
import logging
import sys

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_HANDSHAKE = 2

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser that exits with status 1 on usage errors.

    Status 2 is reserved for handshake mismatches.
    """

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def port_number(value: str) -> int:
    """argparse type for TCP ports"""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}")
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"Port number must be between 1 and 65535, got {port}")
    return port


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid positive integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def add_logging_argument(parser: argparse.ArgumentParser, default: str = "WARNING"):
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=default,
        help=f"Logging verbosity (default: {default})"
    )


def configure_logging(level: str):
    """Send log records to stderr so stdout carries only program output"""
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        stream=sys.stderr
    )
