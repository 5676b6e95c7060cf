"""
Stale-while-revalidate cache for the all-planets snapshot.

A snapshot record is served as HIT while younger than the TTL, as STALE for a
further stale window (kicking off one background refresh), and is refreshed
synchronously after that. If a refresh fails outright, the newest previous
record is served FROZEN instead of an error.
"""

import asyncio
import time
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Set, Tuple

from ..catalog import PLANETS, BodyDescriptor
from ..config import CacheSettings
from ..ephemeris import (
    DEFAULT_REFERENCE_FRAME,
    DEFAULT_VELOCITY_UNIT,
    Snapshot,
    StateVector,
)
from ..errors import SnapshotUnavailableError
from ..horizons.fetcher import StateVectorFetcher
from ..logging import get_logger
from ..metrics import (
    record_body_fallback,
    record_cache_hit,
    record_cache_miss,
    record_frozen,
    record_horizons_latency,
)
from ..space_time import iso_from_ms, now_ms
from .presentation import decorate_snapshot, freeze_snapshot
from .records import CacheRecord, CacheState, SnapshotResult
from .slots import SlotTable
from .store import SnapshotStore

logger = get_logger(__name__)

FetchOutcome = Tuple[BodyDescriptor, Optional[StateVector], Optional[Exception]]


class SnapshotMode(Enum):
    STATE_VECTORS = "state-vectors"
    FULL = "full"

    @property
    def cache_key(self) -> str:
        return _CACHE_KEYS[self]

    @property
    def include_observer(self) -> bool:
        return self is SnapshotMode.FULL


_CACHE_KEYS = {
    SnapshotMode.STATE_VECTORS: "ephemeris:planets:v1",
    SnapshotMode.FULL: "ephemeris:planets:full:v1",
}


class SnapshotCache:
    """
    Snapshot cache over a SnapshotStore.

    Records live in the store; this class only tracks the refresh in flight
    for each mode, plus background tasks.

    Args:
        settings: Cache tunables
        fetcher: Source of state vectors
        store: Where records are kept
        planets: Bodies included in every snapshot, in output order
        clock: Epoch-millisecond clock
    """

    def __init__(
        self,
        settings: CacheSettings,
        fetcher: StateVectorFetcher,
        store: SnapshotStore,
        planets: Sequence[BodyDescriptor] = PLANETS,
        clock: Callable[[], float] = now_ms,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.store = store
        self.planets = tuple(planets)
        self._clock = clock
        self._inflight: SlotTable[Snapshot] = SlotTable()
        self._background: Set[asyncio.Task] = set()
        self._prewarm_task: Optional[asyncio.Task] = None

    def pending(self, mode: SnapshotMode = SnapshotMode.STATE_VECTORS) -> Optional[asyncio.Task]:
        return self._inflight.pending(mode)

    def in_flight(self, mode: SnapshotMode = SnapshotMode.STATE_VECTORS) -> bool:
        return self._inflight.in_flight(mode)

    async def get(
        self,
        force_refresh: bool = False,
        correlation_id: Optional[str] = None,
        mode: SnapshotMode = SnapshotMode.STATE_VECTORS,
    ) -> SnapshotResult:
        """Return the snapshot for mode, refreshing it as its age requires.

        Raises:
            SnapshotUnavailableError: If every body failed and nothing was
                cached before
            Exception: Any other refresh failure with nothing to fall back to
        """
        if self.settings.caching_enabled and not force_refresh:
            record = await self.store.read(mode.cache_key)
            if record is not None:
                now = self._clock()
                age = record.age_ms(now)
                backend = self.store.backend
                if record.is_fresh(now):
                    record_cache_hit(backend.value, "fresh", age)
                    return self._result(record, CacheState.HIT, now, correlation_id)
                if record.is_stale_usable(now):
                    record_cache_hit(backend.value, "stale", age)
                    self._revalidate(mode)
                    return self._result(record, CacheState.STALE, now, correlation_id)

        reason = "manual-refresh" if force_refresh else "miss"
        try:
            record = await self.refresh_snapshot(reason, correlation_id, mode)
        except Exception as e:
            return await self._freeze(mode, e, correlation_id)

        payload = decorate_snapshot(
            record.payload.to_dict(),
            CacheState.MISS,
            self.store.backend,
            0,
            self.settings.ttl_ms,
            self._clock(),
            correlation_id,
        )
        return SnapshotResult(payload, CacheState.MISS, self.store.backend, 0)

    def _result(
        self,
        record: CacheRecord[Snapshot],
        state: CacheState,
        now: float,
        correlation_id: Optional[str],
    ) -> SnapshotResult:
        age = record.age_ms(now)
        backend = self.store.backend
        payload = decorate_snapshot(
            record.payload.to_dict(),
            state,
            backend,
            age,
            self.settings.ttl_ms,
            now,
            correlation_id,
        )
        return SnapshotResult(payload, state, backend, age)

    async def _freeze(
        self, mode: SnapshotMode, error: Exception, correlation_id: Optional[str]
    ) -> SnapshotResult:
        key = mode.cache_key
        previous = self.store.read_local(key)
        if previous is None:
            previous = await self.store.read(key)
        if previous is None:
            logger.error(f"Snapshot refresh ({mode.value}) failed with nothing cached: {error}")
            raise error

        now = self._clock()
        age = previous.age_ms(now)
        backend = self.store.backend
        logger.warning(
            f"Serving frozen {mode.value} snapshot from {age:.0f}ms ago: {error}"
        )
        record_frozen("snapshot")
        payload = freeze_snapshot(
            previous.payload.to_dict(),
            backend,
            age,
            self.settings.ttl_ms,
            now,
            str(error),
            correlation_id,
        )
        return SnapshotResult(payload, CacheState.FROZEN, backend, age)

    async def refresh_snapshot(
        self,
        reason: str = "manual-refresh",
        correlation_id: Optional[str] = None,
        mode: SnapshotMode = SnapshotMode.STATE_VECTORS,
    ) -> CacheRecord[Snapshot]:
        """Refresh the snapshot for mode, joining a refresh already in flight."""
        task = self._inflight.join_or_start(
            mode, lambda: self._refresh(reason, correlation_id, mode)
        )
        return await asyncio.shield(task)

    def _revalidate(self, mode: SnapshotMode) -> None:
        if self._inflight.in_flight(mode):
            return
        task = self._inflight.join_or_start(
            mode, lambda: self._refresh("stale-revalidate", None, mode)
        )
        self._track(task, "stale-revalidate")

    def _track(self, task: asyncio.Task, reason: str) -> None:
        self._background.add(task)

        def done(finished: asyncio.Task) -> None:
            self._background.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.warning(f"Background snapshot refresh ({reason}) failed: {error}")

        task.add_done_callback(done)

    async def _refresh(
        self, reason: str, correlation_id: Optional[str], mode: SnapshotMode
    ) -> CacheRecord[Snapshot]:
        key = mode.cache_key
        previous_record = self.store.read_local(key)
        if previous_record is None:
            previous_record = await self.store.read(key)
        previous = previous_record.payload if previous_record is not None else None

        snapshot = await self.build_snapshot(mode, previous, correlation_id)
        now = self._clock()
        snapshot = replace(snapshot, generated_at=iso_from_ms(now))
        record = CacheRecord.create(
            snapshot, now, self.settings.ttl_ms, self.settings.stale_ms
        )
        await self.store.write(key, record)

        record_cache_miss(self.store.backend.value, f"{reason}:{mode.value}")
        logger.info(
            f"Refreshed {mode.value} snapshot ({reason}): {len(snapshot.bodies)} bodies "
            f"in {snapshot.response_time_ms:.0f}ms"
            + (" (partial)" if snapshot.partial else "")
        )
        return record

    async def build_snapshot(
        self,
        mode: SnapshotMode = SnapshotMode.STATE_VECTORS,
        previous: Optional[Snapshot] = None,
        correlation_id: Optional[str] = None,
    ) -> Snapshot:
        """Fetch every planet and assemble a snapshot.

        Bodies that fail are replaced by their entry in previous when there is
        one, and listed as missing otherwise.

        Raises:
            SnapshotUnavailableError: If every body failed
        """
        semaphore = asyncio.Semaphore(self.settings.fanout_concurrency)

        async def fetch_one(body: BodyDescriptor) -> FetchOutcome:
            async with semaphore:
                try:
                    vector = await self.fetcher.fetch(
                        body,
                        include_observer=mode.include_observer,
                        correlation_id=correlation_id,
                    )
                except Exception as e:
                    return body, None, e
            return body, vector, None

        started = time.perf_counter()
        outcomes = await asyncio.gather(*(fetch_one(body) for body in self.planets))
        latency_ms = round((time.perf_counter() - started) * 1000, 1)
        record_horizons_latency(latency_ms)

        if all(vector is None for _, vector, _ in outcomes):
            # Fallback vectors only patch holes in a refresh that got fresh data
            raise SnapshotUnavailableError("No Horizons data available")

        reference_frame = previous.reference_frame if previous else DEFAULT_REFERENCE_FRAME
        velocity_unit = previous.velocity_unit if previous else DEFAULT_VELOCITY_UNIT
        bodies: List[StateVector] = []
        fallback: List[str] = []
        missing: List[str] = []

        for body, vector, error in outcomes:
            if vector is not None:
                reference_frame = vector.reference_frame or reference_frame
                velocity_unit = vector.velocity_unit or velocity_unit
                bodies.append(vector)
                continue

            prior = previous.body(body.display_name) if previous else None
            if prior is not None:
                logger.warning(
                    f"Reusing cached {body.display_name} after fetch failure "
                    f"(request {correlation_id}): {error}"
                )
                fallback.append(body.display_name)
                bodies.append(prior)
                record_body_fallback("fallback")
            else:
                logger.warning(
                    f"No data for {body.display_name} "
                    f"(request {correlation_id}): {error}"
                )
                missing.append(body.display_name)
                record_body_fallback("missing")

        timestamps = [vector.timestamp for vector in bodies if vector.timestamp]
        if timestamps:
            timestamp = timestamps[0]
        elif previous is not None:
            timestamp = previous.timestamp
        else:
            timestamp = iso_from_ms(self._clock())

        return Snapshot(
            timestamp=timestamp,
            bodies=tuple(bodies),
            reference_frame=reference_frame,
            velocity_unit=velocity_unit,
            response_time_ms=latency_ms,
            fallback_bodies=tuple(fallback),
            missing_bodies=tuple(missing),
        )

    def start_prewarm(self) -> Optional[asyncio.Task]:
        """Start the periodic state-vectors refresh, if enabled.

        Must be called from a running event loop. Calling it twice is a no-op.
        """
        if not self.settings.prewarm_enabled:
            logger.debug("Snapshot prewarm disabled")
            return None
        if self._prewarm_task is None or self._prewarm_task.done():
            self._prewarm_task = asyncio.ensure_future(self._prewarm_loop())
        return self._prewarm_task

    async def _prewarm_loop(self) -> None:
        interval_s = self.settings.prewarm_interval_ms / 1000.0
        mode = SnapshotMode.STATE_VECTORS
        while True:
            if not self._inflight.in_flight(mode):
                task = self._inflight.join_or_start(
                    mode, lambda: self._refresh("background-prewarm", None, mode)
                )
                self._track(task, "background-prewarm")
                # wait() leaves the refresh running if this loop is cancelled
                await asyncio.wait({task})
            await asyncio.sleep(interval_s)

    async def stop_prewarm(self) -> None:
        """Cancel the prewarm loop and wait for background refreshes to settle."""
        task, self._prewarm_task = self._prewarm_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
