"""A small persistent key-value server with Redis-like commands, an append-only log and snapshots."""

__version__ = "0.1.0"