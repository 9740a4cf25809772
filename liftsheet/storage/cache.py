"""Last-known-good workout snapshot per date key."""

import json
import logging

from ..models import WorkoutRecord
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "workout:"


class LocalCache:
    """Durable snapshot cache keyed by canonical date.

    Entries are overwritten on every successful read or write and never
    expire on their own.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get(self, date_key: str) -> WorkoutRecord | None:
        raw = self._store.get(CACHE_PREFIX + date_key)
        if raw is None:
            return None
        try:
            return WorkoutRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable cache entry for {date_key}: {e}")
            return None

    def set(self, date_key: str, record: WorkoutRecord) -> None:
        self._store.set(CACHE_PREFIX + date_key, json.dumps(record.to_dict()))
        logger.debug(f"Cached snapshot for {date_key}")

    def dates(self) -> list[str]:
        """Date keys that have a cached snapshot."""
        return [key[len(CACHE_PREFIX):] for key in self._store.keys(CACHE_PREFIX)]
