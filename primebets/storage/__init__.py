"""Persistence: SQLite key-value store and record models."""

from primebets.storage.store import KeyValueStore

__all__ = ["KeyValueStore"]
