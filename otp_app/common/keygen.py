"""
Key Generator

Produces pads of uniformly random alphabet symbols.
"""

import secrets

from .cipher import ALPHABET


def generate_key(length: int) -> str:
    """
    Generate a random key.

    Args:
        length: Number of symbols, must be positive

    Returns:
        A string of length symbols drawn uniformly from the alphabet

    Raises:
        ValueError: If length is not a positive integer
    """
    if not isinstance(length, int) or isinstance(length, bool) or length <= 0:
        raise ValueError(f"Key length must be a positive integer, got {length!r}")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
