"""Ephemeris caches: single-body, all-planets snapshot, and their storage."""

from .records import CacheBackend, CacheRecord, CacheState, SnapshotResult
from .slots import SlotState, SlotTable
from .store import (
    SnapshotStore,
    LocalOnlyStore,
    LocalWithSharedMirrorStore,
    create_store,
)
from .body_cache import BodyEphemerisCache
from .snapshot_cache import SnapshotCache, SnapshotMode

__all__ = [
    "CacheBackend",
    "CacheRecord",
    "CacheState",
    "SnapshotResult",
    "SlotState",
    "SlotTable",
    "SnapshotStore",
    "LocalOnlyStore",
    "LocalWithSharedMirrorStore",
    "create_store",
    "BodyEphemerisCache",
    "SnapshotCache",
    "SnapshotMode",
]
