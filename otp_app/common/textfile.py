"""
Text File Reader

Loads plaintext, ciphertext and key files for the client. Files hold
alphabet symbols only, optionally followed by a single trailing newline.
"""

import logging

from .cipher import validate_text


def read_text_file(path: str) -> str:
    """
    Read a pad file and return its symbols.

    Args:
        path: Path of the file to read

    Returns:
        The file contents without the trailing newline

    Raises:
        OSError: If the file cannot be opened
        AlphabetError: If a byte outside the alphabet is found
    """
    with open(path, 'rb') as f:
        data = f.read()

    if data.endswith(b'\r\n'):
        data = data[:-2]
    elif data.endswith(b'\n'):
        data = data[:-1]

    # latin-1 maps every byte to the code point of the same value
    text = validate_text(data.decode('latin-1'), f"file {path}")
    logging.debug(f"Read {len(text)} symbols from {path}")
    return text
