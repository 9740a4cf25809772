"""Offline-first synchronization between the local device and the sheet.

The SyncCoordinator picks read/write policy from the connectivity state
and replays queued changes in order when the device reconnects.
"""

from .coordinator import SaveResult, SyncCoordinator, SyncState, create_coordinator

__all__ = ["SaveResult", "SyncCoordinator", "SyncState", "create_coordinator"]
