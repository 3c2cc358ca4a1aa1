"""Storage module."""

from .storage import InMemoryStateStore, IStateStore, SqliteStateStore

__all__ = ["IStateStore", "InMemoryStateStore", "SqliteStateStore"]
