"""
OTP Client Implementation

One-shot client: validate the text and key, connect, handshake, send the
text and the key, read back the result and close.
"""

import logging
import socket
from typing import Optional

from ..common.cipher import check_key_length, validate_text
from ..common.config import ProtocolConfig
from . import protocol
from .protocol import Role, Service, TransportError


class OTPClient:
    """Client for an enc or dec OTP server"""

    def __init__(self, host: str = 'localhost', port: int = 0,
                 service: Service = Service.ENCRYPT,
                 config: Optional[ProtocolConfig] = None):
        self.host = host
        self.port = port
        self.service = service
        self.config = config or ProtocolConfig()
        self.sock = None
        logging.debug(f"Initialized {service.tag} client for {host}:{port}")

    def connect(self):
        """
        Open the connection to the server.

        Raises:
            TransportError: If the host cannot be resolved or reached
        """
        try:
            self.sock = socket.create_connection(
                (self.host, self.port), timeout=self.config.io_timeout
            )
        except OSError as e:
            raise TransportError(f"Unable to connect to {self.host}:{self.port}: {e}") from e
        logging.debug(f"Connected to {self.host}:{self.port}")

    def disconnect(self):
        """Close the connection"""
        if self.sock is not None:
            self.sock.close()
            self.sock = None

    def request(self, text: str, key: str) -> str:
        """
        Send text and key to the server and return the transformed text.

        Both inputs are checked before any network I/O takes place.

        Args:
            text: Alphabet symbols to encrypt or decrypt
            key: Pad, at least as long as text

        Returns:
            The server's result

        Raises:
            AlphabetError: If text or key has a character outside the alphabet
            KeyTooShortError: If key is shorter than text
            HandshakeError: If the server implements the other service
            TransportError: If the connection fails
        """
        validate_text(text, "text")
        validate_text(key, "key")
        check_key_length(text, key)

        chunk_size = self.config.chunk_size
        self.connect()
        try:
            protocol.handshake(self.sock, Role.CLIENT, self.service)
            protocol.send_message(self.sock, text.encode('ascii'), chunk_size)
            protocol.send_message(self.sock, key.encode('ascii'), chunk_size)
            result = protocol.receive_message(self.sock, chunk_size).decode('latin-1')
        finally:
            self.disconnect()

        logging.debug(f"Received {len(result)} symbols from server")
        return validate_text(result, "server response")


def request(host: str, port: int, text: str, key: str,
            service: Service = Service.ENCRYPT,
            config: Optional[ProtocolConfig] = None) -> str:
    """Run a single request against the server at host:port."""
    return OTPClient(host, port, service, config).request(text, key)
