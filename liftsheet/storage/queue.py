"""Durable FIFO of workout writes made while offline."""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable

from ..models import PendingChange, WorkoutRecord
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

QUEUE_KEY = "sync_queue"


@dataclass
class DrainResult:
    """Outcome of a queue drain."""

    applied: int = 0
    remaining: int = 0
    error: Exception | None = None

    @property
    def completed(self) -> bool:
        return self.error is None and self.remaining == 0


class PendingChangeQueue:
    """Ordered list of PendingChange entries persisted as one JSON document.

    Entries are never reordered, merged or deduplicated: two offline edits
    to the same date are two entries, replayed in the order they were made.
    """

    def __init__(self, store: KeyValueStore, key: str = QUEUE_KEY):
        self._store = store
        self._key = key

    def _load(self) -> list[PendingChange]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        return [PendingChange.from_dict(item) for item in json.loads(raw)]

    def _save(self, changes: list[PendingChange]) -> None:
        self._store.set(self._key, json.dumps([c.to_dict() for c in changes]))

    def enqueue(self, date_key: str, record: WorkoutRecord) -> PendingChange:
        """Append a change to the end of the queue."""
        change = PendingChange(
            id=str(uuid.uuid4()),
            date=date_key,
            payload=record,
            enqueued_at=datetime.now(),
        )
        changes = self._load()
        changes.append(change)
        self._save(changes)

        logger.info(
            f"Queued change {change.id} for {date_key} ({len(changes)} pending)",
            extra={"date_key": date_key, "change_id": change.id},
        )
        return change

    def pending(self) -> list[PendingChange]:
        """All queued changes, oldest first."""
        return self._load()

    def peek(self) -> PendingChange | None:
        changes = self._load()
        return changes[0] if changes else None

    def has_pending(self, date_key: str) -> bool:
        return any(c.date == date_key for c in self._load())

    def latest_for(self, date_key: str) -> PendingChange | None:
        """Most recently queued change for a date."""
        for change in reversed(self._load()):
            if change.date == date_key:
                return change
        return None

    def __len__(self) -> int:
        return len(self._load())

    def _remove_head(self, change_id: str) -> None:
        changes = self._load()
        if not changes or changes[0].id != change_id:
            raise RuntimeError(f"Queue head changed while applying {change_id}")
        self._save(changes[1:])

    async def drain(
        self, apply: Callable[[PendingChange], Awaitable[None]]
    ) -> DrainResult:
        """Apply queued changes strictly in order.

        Each entry is removed only after ``apply`` returns. The first failure
        stops the drain and leaves that entry and everything after it in
        place for the next attempt. Entries enqueued while draining are
        picked up by the same drain.

        Args:
            apply: Coroutine function pushing one change to the remote.

        Returns:
            DrainResult with counts and the error that stopped the drain.
        """
        result = DrainResult()

        while (change := self.peek()) is not None:
            try:
                await apply(change)
            except Exception as e:
                result.error = e
                result.remaining = len(self)
                logger.warning(
                    f"Drain stopped at {change.id} for {change.date}: {e} "
                    f"({result.remaining} pending)",
                    extra={"date_key": change.date, "change_id": change.id},
                )
                return result

            self._remove_head(change.id)
            result.applied += 1

        self.clear()
        logger.info(f"Drain complete, applied {result.applied} changes")
        return result

    def clear(self) -> None:
        """Drop every entry. Only for use after a fully successful drain."""
        self._store.remove(self._key)
