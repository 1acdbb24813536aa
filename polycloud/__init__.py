"""An X25519 key agreement demonstration and a line-based TCP chat server."""

__version__ = "0.1.0"