"""Helpers for Raft implementations: timeouts, backoff, notification queues and msgpack encoding."""

__version__ = "0.1.0"
__all__ = ["util"]