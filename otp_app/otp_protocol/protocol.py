"""
OTP Wire Protocol

Defines the framing and handshake used between OTP clients and servers.

Protocol Structure:
1. Handshake:
   [tag:4]  - 3-character service tag ("enc" or "dec") null-padded to 4 bytes
   The client sends its tag first, the server answers with its own. Both
   sides compare and close the connection on mismatch.

2. Message Format:
   [length:4][payload:length]
   - length: Payload length (4 bytes, unsigned int, network byte order)
   - payload: Alphabet bytes, written in chunks of at most chunk_size bytes

3. Exchange (one per connection):
   client -> server: text message, key message
   server -> client: result message
"""

from enum import Enum
import logging
import socket
import struct

from ..common.cipher import Direction
from ..common.config import DEFAULT_CHUNK_SIZE

LENGTH_PREFIX = struct.Struct('!I')
MAX_MESSAGE_SIZE = 2 ** 32 - 1
TAG_SIZE = 4


class TransportError(Exception):
    """Raised when a send or receive on the connection fails."""
    pass


class HandshakeError(Exception):
    """Raised when the peer announces a different service tag."""

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Peer is not an {expected} peer (received tag {received!r})")


class Service(Enum):
    """Service tags exchanged during the handshake"""
    ENCRYPT = "enc"
    DECRYPT = "dec"

    @property
    def tag(self) -> str:
        return self.value

    @property
    def wire_tag(self) -> bytes:
        return self.value.encode('ascii').ljust(TAG_SIZE, b'\0')

    @property
    def direction(self) -> Direction:
        return Direction.ENCRYPT if self is Service.ENCRYPT else Direction.DECRYPT

    @classmethod
    def from_tag(cls, tag: str) -> "Service":
        try:
            return cls(tag)
        except ValueError:
            raise ValueError(f"Unknown service tag: {tag!r}") from None


class Role(Enum):
    SERVER = "server"
    CLIENT = "client"


def send_exact(sock: socket.socket, data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
    """
    Write all of data, at most chunk_size bytes per send() call.

    A short write is not an error: the remainder is sent on the next call.

    Raises:
        TransportError: If the socket reports an error or times out
    """
    view = memoryview(data)
    sent = 0
    while sent < len(view):
        try:
            count = sock.send(view[sent:sent + chunk_size])
        except OSError as e:
            raise TransportError(f"Unable to write to socket: {e}") from e
        if count == 0:
            raise TransportError("Unable to write to socket: connection broken")
        sent += count


def receive_exact(sock: socket.socket, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Read exactly length bytes, at most chunk_size - 1 bytes per recv() call.

    Raises:
        TransportError: If the peer closes early, or the socket reports an
            error or times out
    """
    buffer = bytearray(length)
    view = memoryview(buffer)
    received = 0
    while received < length:
        size = min(length - received, chunk_size - 1)
        try:
            count = sock.recv_into(view[received:], size)
        except OSError as e:
            raise TransportError(f"Unable to read from socket: {e}") from e
        if count == 0:
            raise TransportError(
                f"Connection closed while reading ({received}/{length} bytes)"
            )
        received += count
    return bytes(buffer)


def send_message(sock: socket.socket, data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
    """
    Send one length-prefixed message.

    Args:
        sock: Connected stream socket
        data: Payload bytes (may be empty)
        chunk_size: Largest single write

    Raises:
        ValueError: If data does not fit the 4-byte length prefix
        TransportError: If the connection fails
    """
    if len(data) > MAX_MESSAGE_SIZE:
        raise ValueError(f"Message too large: {len(data)} bytes (max {MAX_MESSAGE_SIZE})")
    logging.debug(f"Sending message of {len(data)} bytes")
    send_exact(sock, LENGTH_PREFIX.pack(len(data)), chunk_size)
    send_exact(sock, data, chunk_size)


def receive_message(sock: socket.socket, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Receive one length-prefixed message.

    The length prefix is read first; the payload is then accumulated until
    exactly that many bytes have arrived. A zero-length message yields b''.

    Returns:
        The payload bytes

    Raises:
        TransportError: If the connection closes or fails mid-message
    """
    (length,) = LENGTH_PREFIX.unpack(receive_exact(sock, LENGTH_PREFIX.size, chunk_size))
    logging.debug(f"Receiving message of {length} bytes")
    return receive_exact(sock, length, chunk_size)


def handshake(sock: socket.socket, role: Role, service: Service) -> None:
    """
    Exchange service tags with the peer.

    The server reads the client's tag before answering with its own; the
    client sends first. Either side closes the socket if the tags differ.

    Args:
        sock: Freshly connected or accepted socket
        role: Role.SERVER or Role.CLIENT
        service: The service this side implements

    Raises:
        HandshakeError: If the peer's tag differs (socket is closed)
        TransportError: If the exchange itself fails
    """
    if role is Role.SERVER:
        peer_tag = receive_exact(sock, TAG_SIZE)
        send_exact(sock, service.wire_tag)
    else:
        send_exact(sock, service.wire_tag)
        peer_tag = receive_exact(sock, TAG_SIZE)

    received = peer_tag.split(b'\0', 1)[0].decode('latin-1')
    if received != service.tag:
        sock.close()
        raise HandshakeError(service.tag, received)
    logging.debug(f"Handshake complete as {role.value} for service {service.tag}")
