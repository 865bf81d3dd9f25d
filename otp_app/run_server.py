"""
OTP Server Runner

Starts an encryption or decryption server on the given port.

Usage:
    python -m otp_app.run_server [--service {enc,dec}] [--host HOST]
                                 [--isolation {process,thread}] [--timeout SECONDS]
                                 [--backlog N] [--chunk-size N] [--log-level LEVEL] port

Example:
    enc_server 57171 &
    dec_server 57172 &
"""

import logging
import signal
import sys
from typing import List, Optional

from otp_app.common.cli import (
    EXIT_FAILURE, EXIT_SUCCESS, ArgumentParser, add_logging_argument,
    configure_logging, port_number, positive_float, positive_int,
)
from otp_app.common.config import DEFAULT_BACKLOG, DEFAULT_CHUNK_SIZE, ProtocolConfig
from otp_app.otp_protocol.protocol import Service
from otp_app.otp_protocol.server import ISOLATION_MODES, serve


def signal_handler(sig, frame):
    """Handle SIGINT/SIGTERM by unwinding through main()'s cleanup"""
    raise KeyboardInterrupt()


def build_parser(service: Optional[Service] = None) -> ArgumentParser:
    parser = ArgumentParser(description="One-time pad server")
    parser.add_argument("port", type=port_number, help="Port to listen on")
    if service is None:
        parser.add_argument(
            "--service",
            choices=[s.tag for s in Service],
            default=Service.ENCRYPT.tag,
            help="Service to provide (enc or dec)"
        )
    parser.add_argument("--host", default="", help="Address to bind (default: all interfaces)")
    parser.add_argument(
        "--isolation",
        choices=sorted(ISOLATION_MODES),
        default="process",
        help="Worker per connection: forked process or thread"
    )
    parser.add_argument("--timeout", type=positive_float, default=None,
                        help="Seconds a connection may stall before it is dropped")
    parser.add_argument("--backlog", type=positive_int, default=DEFAULT_BACKLOG,
                        help="Pending connection queue length")
    parser.add_argument("--chunk-size", type=positive_int, default=DEFAULT_CHUNK_SIZE,
                        help="Largest single socket write in bytes")
    add_logging_argument(parser, default="INFO")
    return parser


def main(argv: Optional[List[str]] = None, service: Optional[Service] = None) -> int:
    """
    Main entry point for the OTP server.

    Args:
        argv: Command-line arguments, defaults to sys.argv[1:]
        service: Fixed service; when None it comes from --service

    Returns:
        Process exit status
    """
    parser = build_parser(service)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if service is None:
        service = Service.from_tag(args.service)

    try:
        config = ProtocolConfig(
            chunk_size=args.chunk_size,
            backlog=args.backlog,
            io_timeout=args.timeout,
            host=args.host,
        )
    except ValueError as e:
        parser.error(str(e))

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        serve(args.port, service, config, args.isolation)
    except KeyboardInterrupt:
        logging.info("Server shutdown complete")
    except OSError as e:
        logging.error(f"Unable to serve on port {args.port}: {e}")
        return EXIT_FAILURE
    return EXIT_SUCCESS


def enc_server() -> int:
    return main(service=Service.ENCRYPT)


def dec_server() -> int:
    return main(service=Service.DECRYPT)


if __name__ == "__main__":
    sys.exit(main())
