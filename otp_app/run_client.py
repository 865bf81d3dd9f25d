"""
OTP Client Runner

Reads a text file and a key file, sends both to an OTP server and prints
the result on stdout.

Usage:
    python -m otp_app.run_client [--service {enc,dec}] [--host HOST]
                                 [--timeout SECONDS] [--log-level LEVEL]
                                 textfile keyfile port

Exit status: 0 on success, 1 on bad input or connection failure,
2 when the server provides the other service.
"""

import logging
import sys
from typing import List, Optional

from otp_app.common.cli import (
    EXIT_FAILURE, EXIT_HANDSHAKE, EXIT_SUCCESS, ArgumentParser,
    add_logging_argument, configure_logging, port_number, positive_float,
)
from otp_app.common.config import ProtocolConfig
from otp_app.common.textfile import read_text_file
from otp_app.otp_protocol.client import OTPClient
from otp_app.otp_protocol.protocol import HandshakeError, Service, TransportError


def build_parser(service: Optional[Service] = None) -> ArgumentParser:
    parser = ArgumentParser(description="One-time pad client")
    parser.add_argument("textfile", help="File holding the text to transform")
    parser.add_argument("keyfile", help="File holding the key")
    parser.add_argument("port", type=port_number, help="Server port")
    if service is None:
        parser.add_argument(
            "--service",
            choices=[s.tag for s in Service],
            default=Service.ENCRYPT.tag,
            help="Service to request (enc or dec)"
        )
    parser.add_argument("--host", default="localhost", help="Server host")
    parser.add_argument("--timeout", type=positive_float, default=None,
                        help="Seconds to wait on the server before giving up")
    add_logging_argument(parser)
    return parser


def main(argv: Optional[List[str]] = None, service: Optional[Service] = None) -> int:
    """Main entry point for the OTP client; returns the exit status."""
    args = build_parser(service).parse_args(argv)
    configure_logging(args.log_level)

    if service is None:
        service = Service.from_tag(args.service)

    try:
        text = read_text_file(args.textfile)
        key = read_text_file(args.keyfile)
    except (OSError, ValueError) as e:
        logging.error(f"Client error: {e}")
        return EXIT_FAILURE

    client = OTPClient(args.host, args.port, service, ProtocolConfig(io_timeout=args.timeout))
    try:
        result = client.request(text, key)
    except HandshakeError as e:
        logging.error(f"Client error: {e} on port {args.port}")
        return EXIT_HANDSHAKE
    except (TransportError, ValueError) as e:
        logging.error(f"Client error: {e}")
        return EXIT_FAILURE

    print(result)
    return EXIT_SUCCESS


def enc_client() -> int:
    return main(service=Service.ENCRYPT)


def dec_client() -> int:
    return main(service=Service.DECRYPT)


if __name__ == "__main__":
    sys.exit(main())
