"""
Protocol Configuration

Defaults shared by the server and client runners. Command-line flags
override these values.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_BACKLOG = 5


@dataclass
class ProtocolConfig:
    """
    Tunable settings for one server or client.

    Attributes:
        chunk_size: Largest single write; reads are bounded by chunk_size - 1
        backlog: Pending connections the listening socket may queue
        io_timeout: Seconds a send/recv may block, None blocks forever
        host: Address to bind (server) or connect to (client)
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    backlog: int = DEFAULT_BACKLOG
    io_timeout: Optional[float] = None
    host: str = ""

    def __post_init__(self):
        if self.chunk_size < 2:
            raise ValueError(f"chunk_size must be at least 2, got {self.chunk_size}")
        if self.backlog < 1:
            raise ValueError(f"backlog must be positive, got {self.backlog}")
        if self.io_timeout is not None and self.io_timeout <= 0:
            raise ValueError(f"io_timeout must be positive, got {self.io_timeout}")
