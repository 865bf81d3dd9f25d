"""One-time pad client/server over TCP."""

__version__ = "1.0.0"
