"""
Key Generator Runner

Prints a random key of the requested length followed by a newline.

Usage:
    keygen keylength > mykey
"""

import sys
from typing import List, Optional

from otp_app.common.cli import EXIT_SUCCESS, ArgumentParser, positive_int
from otp_app.common.keygen import generate_key


def main(argv: Optional[List[str]] = None) -> int:
    parser = ArgumentParser(description="Generate a one-time pad key")
    parser.add_argument("keylength", type=positive_int, help="Number of key symbols")
    args = parser.parse_args(argv)

    sys.stdout.write(generate_key(args.keylength) + "\n")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
