"""
Per-key cache slots.

Each key moves between three states:

    IDLE      nothing cached, nothing in flight
    FETCHING  one shared refresh task is in flight (a record may also exist)
    CACHED    a record exists and nothing is in flight

Callers that find a slot FETCHING join the existing task instead of starting
another one, so there is at most one upstream refresh per key.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, TypeVar

from .records import CacheRecord

T = TypeVar("T")
R = TypeVar("R")


class SlotState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    CACHED = "cached"


class CacheSlot(Generic[T]):
    """The record and in-flight task for one cache key."""

    def __init__(self) -> None:
        self.record: Optional[CacheRecord[T]] = None
        self.pending: Optional[asyncio.Task] = None

    @property
    def state(self) -> SlotState:
        if self.pending is not None:
            return SlotState.FETCHING
        if self.record is not None:
            return SlotState.CACHED
        return SlotState.IDLE


class SlotTable(Generic[T]):
    """Cache slots keyed by body id or snapshot mode."""

    def __init__(self) -> None:
        self._slots: Dict[Hashable, CacheSlot[T]] = {}

    def slot(self, key: Hashable) -> CacheSlot[T]:
        if key not in self._slots:
            self._slots[key] = CacheSlot()
        return self._slots[key]

    def state(self, key: Hashable) -> SlotState:
        return self.slot(key).state

    def record(self, key: Hashable) -> Optional[CacheRecord[T]]:
        return self.slot(key).record

    def replace(self, key: Hashable, record: CacheRecord[T]) -> None:
        """Supersede the key's record in one step."""
        self.slot(key).record = record

    def pending(self, key: Hashable) -> Optional[asyncio.Task]:
        return self.slot(key).pending

    def in_flight(self, key: Hashable) -> bool:
        return self.state(key) is SlotState.FETCHING

    def join_or_start(
        self, key: Hashable, factory: Callable[[], Awaitable[R]]
    ) -> "asyncio.Task[R]":
        """Return the key's in-flight task, starting one from factory if idle.

        The slot is cleared from inside the task, before its result is
        delivered, so waiters that wake up on it never see a stale pending
        handle.
        """
        slot = self.slot(key)
        if slot.pending is not None:
            return slot.pending

        async def run() -> R:
            try:
                return await factory()
            finally:
                if slot.pending is asyncio.current_task():
                    slot.pending = None

        def clear(done: asyncio.Task) -> None:
            # Covers a task cancelled before its body ever ran
            if slot.pending is done:
                slot.pending = None

        task = asyncio.ensure_future(run())
        slot.pending = task
        task.add_done_callback(clear)
        return task
