"""
One-Time Pad Cipher

Modular shift cipher over the 27-symbol alphabet (A-Z plus space).

Each symbol is mapped to a rank (A=0 ... Z=25, space=26). Encryption adds the
key rank to the text rank modulo 27, decryption subtracts it. Decrypting with
the same key at the same position always recovers the original text.
"""

from enum import Enum

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ "
ALPHABET_SIZE = len(ALPHABET)

_RANKS = {ch: i for i, ch in enumerate(ALPHABET)}


class AlphabetError(ValueError):
    """Raised when a character outside the alphabet is found."""

    def __init__(self, source: str, char: str, position: int):
        self.source = source
        self.char = char
        self.position = position
        super().__init__(
            f"Invalid character found in {source}: {char!r}, {ord(char)} "
            f"(position {position})"
        )


class KeyTooShortError(ValueError):
    """Raised when the key has fewer symbols than the text it pads."""

    def __init__(self, text_length: int, key_length: int):
        self.text_length = text_length
        self.key_length = key_length
        super().__init__(
            f"Key shorter than text ({key_length} < {text_length})"
        )


class Direction(Enum):
    """Which way the pad is applied"""
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


def rank(symbol: str) -> int:
    """Return the rank (0-26) of an alphabet symbol."""
    if len(symbol) != 1:
        raise ValueError(f"Expected a single character, got {symbol!r}")
    try:
        return _RANKS[symbol]
    except KeyError:
        raise AlphabetError("input", symbol, 0) from None


def symbol(value: int) -> str:
    """Return the alphabet symbol for a rank (0-26)."""
    if not 0 <= value < ALPHABET_SIZE:
        raise ValueError(f"Rank out of range: {value}")
    return ALPHABET[value]


def validate_text(text: str, source: str = "text") -> str:
    """
    Check that every character of text belongs to the alphabet.

    Args:
        text: The string to check
        source: Name used in the error message (file path, "key", ...)

    Returns:
        The unchanged text, so the call can be chained

    Raises:
        AlphabetError: On the first character outside the alphabet
    """
    for position, ch in enumerate(text):
        if ch not in _RANKS:
            raise AlphabetError(source, ch, position)
    return text


def check_key_length(text: str, key: str) -> None:
    """Raise KeyTooShortError unless the key covers the whole text."""
    if len(key) < len(text):
        raise KeyTooShortError(len(text), len(key))


def transform(text: str, key: str, direction: Direction) -> str:
    """
    Apply the pad to text.

    Args:
        text: Symbols to encrypt or decrypt
        key: Pad symbols, at least as long as text (extra symbols are ignored)
        direction: Direction.ENCRYPT or Direction.DECRYPT

    Returns:
        A string of the same length as text, drawn from the alphabet

    Raises:
        KeyTooShortError: If key is shorter than text
        AlphabetError: If text or the used part of key has a foreign character
    """
    check_key_length(text, key)
    validate_text(text, "text")
    key = validate_text(key[:len(text)], "key")

    if direction is Direction.ENCRYPT:
        ranks = ((_RANKS[t] + _RANKS[k]) % ALPHABET_SIZE for t, k in zip(text, key))
    else:
        ranks = ((_RANKS[t] - _RANKS[k] + ALPHABET_SIZE) % ALPHABET_SIZE
                 for t, k in zip(text, key))
    return "".join(ALPHABET[r] for r in ranks)


def encrypt(text: str, key: str) -> str:
    return transform(text, key, Direction.ENCRYPT)


def decrypt(text: str, key: str) -> str:
    return transform(text, key, Direction.DECRYPT)
