"""Connectivity-aware read/write policy over the cache, queue and sheet.

The coordinator is the only component that knows whether the device is
online. Connectivity changes arrive as explicit events from the host
(``on_connectivity_lost`` / ``on_connectivity_restored``); nothing is read
from ambient globals.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from ..auth import StoredTokenProvider, TokenProvider
from ..config import Config
from ..dates import key_of
from ..errors import AuthError, LiftsheetError, OfflineUnavailable, RemoteError
from ..models import PendingChange, WorkoutRecord
from ..sheets import SaveSummary, SheetsGateway
from ..storage import DrainResult, LocalCache, PendingChangeQueue, SQLiteKeyValueStore

logger = logging.getLogger(__name__)


class SyncState(Enum):
    """Connectivity state of the coordinator."""

    ONLINE = "online"
    OFFLINE = "offline"
    SYNCING = "syncing"  # Reconnected, replaying queued changes


@dataclass
class SaveResult:
    """Result of a save call."""

    date: str
    queued: bool
    summary: SaveSummary | None = None


class SyncCoordinator:
    """Offline-first access to workout records.

    Reads:
    - OFFLINE: cache only; a miss raises OfflineUnavailable.
    - ONLINE/SYNCING: remote first, refreshing the cache; on failure the
      cached snapshot is returned, and the error is raised only on a miss.
      A rejected token served from cache still sets ``auth_required``.

    Writes:
    - ONLINE with nothing queued for the date: written straight to the
      sheet, then cached.
    - Otherwise: queued and cached immediately so the device sees its own
      edit. Queued changes are replayed in order on reconnect.

    Writes to the same date are serialized; different dates are independent.
    Only one drain runs at a time.
    """

    def __init__(
        self,
        cache: LocalCache,
        queue: PendingChangeQueue,
        gateway: SheetsGateway,
        online: bool = True,
        append_missing: bool = False,
        store: SQLiteKeyValueStore | None = None,
    ):
        """Initialize the coordinator.

        Args:
            cache: Snapshot cache.
            queue: Pending-change queue.
            gateway: Remote sheet gateway.
            online: Initial connectivity.
            append_missing: Append rows for entries not yet in the sheet.
            store: Store to close along with the coordinator, if owned.
        """
        self.cache = cache
        self.queue = queue
        self.gateway = gateway
        self.append_missing = append_missing
        self._store = store
        self._state = SyncState.ONLINE if online else SyncState.OFFLINE
        self._date_locks: dict[str, asyncio.Lock] = {}
        self._drain_lock = asyncio.Lock()
        self._generation = 0  # Bumped on every connectivity event
        self._last_drain: DrainResult | None = None
        self._auth_error: AuthError | None = None
        self._selected: str | None = None
        self._selection_seq = 0
        self.current: WorkoutRecord | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def selected_date(self) -> str | None:
        return self._selected

    @property
    def auth_required(self) -> bool:
        """True once the token was missing or rejected, until a remote call succeeds."""
        return self._auth_error is not None

    def _note_remote(self, error: Exception | None) -> None:
        if isinstance(error, AuthError):
            if self._auth_error is None:
                logger.warning(f"Re-authentication required: {error}")
            self._auth_error = error
        elif error is None:
            self._auth_error = None

    def _set_state(self, state: SyncState) -> None:
        if state != self._state:
            logger.info(
                f"Sync state {self._state.value} -> {state.value}",
                extra={"state": state.value},
            )
            self._state = state

    def _lock_for(self, date_key: str) -> asyncio.Lock:
        return self._date_locks.setdefault(date_key, asyncio.Lock())

    # Connectivity events

    async def on_connectivity_lost(self) -> None:
        """Host reports the network went away."""
        self._generation += 1
        self._set_state(SyncState.OFFLINE)

    async def on_connectivity_restored(self) -> DrainResult | None:
        """Host reports the network is back; replay queued changes.

        Returns:
            The DrainResult, or None if the coordinator was not offline.

        Raises:
            AuthError: The drain stopped because the token is missing or
                rejected. Remaining changes stay queued.
        """
        if self._state != SyncState.OFFLINE:
            logger.debug(f"Connectivity restored while {self._state.value}, ignoring")
            return None

        self._generation += 1
        self._set_state(SyncState.SYNCING)
        return await self._drain(self._generation)

    async def _apply_change(self, change: PendingChange) -> None:
        async with self._lock_for(change.date):
            await self.gateway.save_workout(change.payload, append_missing=self.append_missing)

    async def _drain(self, generation: int | None = None) -> DrainResult:
        """Replay the queue under the drain lock.

        Only the drain started by the latest reconnect (``generation``)
        may move SYNCING to ONLINE or OFFLINE. Drains superseded by a later
        lost/restored pair, and flushes started while ONLINE, leave the
        state alone.
        """
        async with self._drain_lock:
            result = await self.queue.drain(self._apply_change)
            self._last_drain = result
            if result.applied or result.error is not None:
                self._note_remote(result.error)

            if generation == self._generation and self._state == SyncState.SYNCING:
                self._set_state(
                    SyncState.ONLINE if result.completed else SyncState.OFFLINE
                )
            elif generation is not None:
                logger.debug(f"Drain {generation} superseded, leaving state {self._state.value}")

            if isinstance(result.error, AuthError):
                raise result.error
            return result

    # Reads

    async def get(self, date_key: str) -> WorkoutRecord:
        """Read the record for a canonical date key.

        Raises:
            OfflineUnavailable: Offline and nothing cached.
            AuthError, RemoteError: Online read failed and nothing cached.
        """
        if self._state == SyncState.OFFLINE:
            cached = self.cache.get(date_key)
            if cached is None:
                raise OfflineUnavailable(date_key)
            logger.debug(f"Serving {date_key} from cache (offline)")
            return cached

        try:
            record = await self.gateway.load_workout(date_key)
        except (AuthError, RemoteError) as e:
            self._note_remote(e)
            cached = self.cache.get(date_key)
            if cached is None:
                raise
            logger.warning(f"Remote read for {date_key} failed, using cache: {e}")
            return cached
        self._note_remote(None)

        # The sheet does not reflect queued edits yet
        pending = self.queue.latest_for(date_key)
        if pending is not None:
            logger.debug(f"{date_key} has queued changes, serving newest local edit")
            return pending.payload

        self.cache.set(date_key, record)
        return record

    async def select_date(self, calendar_date: date | str) -> WorkoutRecord | None:
        """Make a date the current selection and load it.

        Selecting another date before this read finishes does not cancel
        it, but its result is discarded instead of replacing ``current``.

        Returns:
            The loaded record, or None if the selection moved on.
        """
        date_key = key_of(calendar_date)
        self._selection_seq += 1
        ticket = self._selection_seq
        self._selected = date_key

        try:
            record = await self.get(date_key)
        except LiftsheetError as e:
            if ticket != self._selection_seq:
                logger.debug(f"Discarding stale error for {date_key}: {e}")
                return None
            raise

        if ticket != self._selection_seq:
            logger.debug(f"Discarding stale result for {date_key}")
            return None

        self.current = record
        return record

    # Writes

    async def save(self, record: WorkoutRecord) -> SaveResult:
        """Persist a record according to the current connectivity state.

        Every write either reaches the sheet or is durably queued.

        Raises:
            AuthError: No usable token. The write has been queued.
        """
        date_key = record.date

        async with self._lock_for(date_key):
            if self._state == SyncState.ONLINE and not self.queue.has_pending(date_key):
                try:
                    summary = await self.gateway.save_workout(
                        record, append_missing=self.append_missing
                    )
                except (AuthError, RemoteError) as e:
                    self._note_remote(e)
                    self._defer(record)
                    if isinstance(e, AuthError):
                        raise
                    logger.warning(f"Write for {date_key} failed, queued for retry: {e}")
                    return SaveResult(date=date_key, queued=True)

                self._note_remote(None)
                self.cache.set(date_key, record)
                return SaveResult(date=date_key, queued=False, summary=summary)

            self._defer(record)
            state = self._state

        if state == SyncState.ONLINE:
            # Earlier changes for this date are still queued; replay in order
            await self._drain()
        return SaveResult(date=date_key, queued=True)

    def _defer(self, record: WorkoutRecord) -> PendingChange:
        change = self.queue.enqueue(record.date, record)
        self.cache.set(record.date, record)
        return change

    # Status

    def get_sync_status(self) -> dict[str, Any]:
        """Current state, queue depth and last drain outcome."""
        last = self._last_drain
        return {
            "state": self._state.value,
            "pending_changes": len(self.queue),
            "selected_date": self._selected,
            "cached_dates": len(self.cache.dates()),
            "auth_required": self.auth_required,
            "last_drain": (
                {
                    "applied": last.applied,
                    "remaining": last.remaining,
                    "error": str(last.error) if last.error else None,
                }
                if last
                else None
            ),
        }

    async def close(self) -> None:
        """Release the HTTP client and any owned store."""
        await self.gateway.close()
        if self._store is not None:
            self._store.close()


def create_coordinator(
    config: Config, token_provider: TokenProvider | None = None
) -> SyncCoordinator:
    """Build a coordinator and its collaborators from configuration.

    Args:
        config: Loaded configuration.
        token_provider: Token source; defaults to the token kept in the
            local store by the sign-in flow.

    Returns:
        A ready SyncCoordinator owning its local store.
    """
    store = SQLiteKeyValueStore(config.storage.db_path)
    store.connect()

    gateway = SheetsGateway(
        spreadsheet_id=config.sheets.spreadsheet_id,
        token_provider=token_provider or StoredTokenProvider(store),
        base_url=config.sheets.base_url,
        session_sheet=config.sheets.session_sheet,
        cardio_sheet=config.sheets.cardio_sheet,
        value_input_option=config.sheets.value_input_option,
        timeout=config.sheets.timeout_seconds,
    )

    return SyncCoordinator(
        cache=LocalCache(store),
        queue=PendingChangeQueue(store),
        gateway=gateway,
        online=config.sync.start_online,
        append_missing=config.sync.append_missing_rows,
        store=store,
    )
