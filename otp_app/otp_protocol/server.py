"""
OTP Server Implementation

Serves one-shot encryption or decryption requests over TCP. Every accepted
connection is handed to its own worker (a forked process by default, or a
thread), which runs:

    handshake -> receive text -> receive key -> transform -> send result -> close

A failure inside a worker ends only that connection; the listener keeps
accepting.
"""

from enum import Enum
import logging
import socketserver
import sys
from typing import Optional, Tuple

from ..common.cipher import transform
from ..common.config import ProtocolConfig
from . import protocol
from .protocol import HandshakeError, Role, Service, TransportError


class ConnectionState(Enum):
    """Per-connection protocol states"""
    ACCEPTED = "accepted"
    HANDSHAKING = "handshaking"
    RECEIVING_TEXT = "receiving_text"
    RECEIVING_KEY = "receiving_key"
    TRANSFORMING = "transforming"
    SENDING_RESULT = "sending_result"
    CLOSED = "closed"


class OTPRequestHandler(socketserver.BaseRequestHandler):
    """Handler running the protocol for a single client connection"""

    def setup(self):
        """Pick up the service and settings of the owning server"""
        self.service: Service = self.server.service
        self.config: ProtocolConfig = self.server.config
        self.state = ConnectionState.ACCEPTED
        if self.config.io_timeout is not None:
            self.request.settimeout(self.config.io_timeout)

    def set_state(self, state: ConnectionState):
        logging.debug(f"{self.client_address}: {self.state.value} -> {state.value}")
        self.state = state

    def handle(self):
        """Handle one connection from accept to close."""
        logging.info(f"New {self.service.tag} connection from {self.client_address}")
        try:
            self.exchange()
        except HandshakeError as e:
            logging.warning(f"Rejected {self.client_address}: {e}")
        except TransportError as e:
            logging.error(f"Transport error with {self.client_address} "
                          f"while {self.state.value}: {e}")
        except ValueError as e:
            logging.error(f"Invalid input from {self.client_address}: {e}")
        finally:
            self.set_state(ConnectionState.CLOSED)
        logging.info(f"Connection closed from {self.client_address}")

    def exchange(self):
        """Run the handshake and the single text/key/result exchange."""
        sock = self.request
        chunk_size = self.config.chunk_size

        self.set_state(ConnectionState.HANDSHAKING)
        protocol.handshake(sock, Role.SERVER, self.service)

        self.set_state(ConnectionState.RECEIVING_TEXT)
        text = protocol.receive_message(sock, chunk_size).decode('latin-1')

        self.set_state(ConnectionState.RECEIVING_KEY)
        key = protocol.receive_message(sock, chunk_size).decode('latin-1')

        self.set_state(ConnectionState.TRANSFORMING)
        result = transform(text, key, self.service.direction)

        self.set_state(ConnectionState.SENDING_RESULT)
        protocol.send_message(sock, result.encode('ascii'), chunk_size)
        logging.debug(f"Sent {len(result)} symbols to {self.client_address}")


class OTPTCPServer(socketserver.TCPServer):
    """TCP server bound to one service (encryption or decryption)."""
    allow_reuse_address = True

    def __init__(self, server_address: Tuple[str, int], service: Service,
                 config: Optional[ProtocolConfig] = None,
                 RequestHandlerClass=OTPRequestHandler):
        self.service = service
        self.config = config or ProtocolConfig()
        # listen() backlog
        self.request_queue_size = self.config.backlog
        super().__init__(server_address, RequestHandlerClass)

    def get_request(self):
        try:
            return super().get_request()
        except OSError as e:
            # socketserver drops the failed accept and keeps serving
            logging.error(f"Unable to accept connection: {e}")
            raise

    def handle_error(self, request, client_address):
        logging.error(f"Unexpected error handling {client_address}", exc_info=True)


class ForkingOTPServer(socketserver.ForkingMixIn, OTPTCPServer):
    """Process-per-connection server (POSIX only)."""
    # bounded by the OS process limit only
    max_children = sys.maxsize

    def finish_request(self, request, client_address):
        # Runs in the forked worker, which never accepts on the listener
        self.socket.close()
        super().finish_request(request, client_address)


class ThreadedOTPServer(socketserver.ThreadingMixIn, OTPTCPServer):
    """Thread-per-connection server."""
    daemon_threads = True


ISOLATION_MODES = {
    "process": ForkingOTPServer,
    "thread": ThreadedOTPServer,
}


def create_server(port: int, service: Service,
                  config: Optional[ProtocolConfig] = None,
                  isolation: str = "process") -> OTPTCPServer:
    """
    Bind and listen on port.

    Args:
        port: TCP port (0 picks a free one)
        service: Service.ENCRYPT or Service.DECRYPT
        config: Protocol settings, defaults to ProtocolConfig()
        isolation: "process" (fork per connection) or "thread"

    Returns:
        The listening server, ready for serve_forever()

    Raises:
        ValueError: If isolation is unknown
        OSError: If the socket cannot be bound or listened on
    """
    try:
        server_class = ISOLATION_MODES[isolation]
    except KeyError:
        raise ValueError(f"Unknown isolation mode: {isolation}") from None
    config = config or ProtocolConfig()
    return server_class((config.host, port), service, config)


def serve(port: int, service: Service, config: Optional[ProtocolConfig] = None,
          isolation: str = "process"):
    """Listen on port and serve connections until shut down."""
    server = create_server(port, service, config, isolation)
    host, bound_port = server.server_address[:2]
    logging.info(f"{service.tag} server ({isolation} workers) listening on {host}:{bound_port}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
