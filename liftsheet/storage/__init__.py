"""Local persistence for liftsheet.

Provides:
- A durable key-value store (SQLite)
- The per-date snapshot cache
- The pending-change queue replayed on reconnect
"""

from .cache import LocalCache
from .kv_store import KeyValueStore, SQLiteKeyValueStore
from .queue import DrainResult, PendingChangeQueue

__all__ = [
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "LocalCache",
    "PendingChangeQueue",
    "DrainResult",
]
