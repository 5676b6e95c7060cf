"""Per-body ephemeris cache with request coalescing and frozen fallback."""

import asyncio
import time
from typing import Any, Callable, Dict, Optional

from ..catalog import BodyDescriptor, get_body
from ..config import CacheSettings
from ..ephemeris import BodyEphemeris
from ..horizons.fetcher import StateVectorFetcher
from ..logging import get_logger
from ..metrics import record_frozen
from ..space_time import now_ms
from .presentation import decorate_body
from .records import CacheRecord, CacheState
from .slots import SlotState, SlotTable

logger = get_logger(__name__)


class BodyEphemerisCache:
    """
    Caches single-body ephemerides in process memory.

    Args:
        settings: Cache tunables; body_ttl_ms governs freshness
        fetcher: Source of state vectors
        clock: Epoch-millisecond clock
    """

    def __init__(
        self,
        settings: CacheSettings,
        fetcher: StateVectorFetcher,
        clock: Callable[[], float] = now_ms,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self._clock = clock
        self._slots: SlotTable[Dict[str, Any]] = SlotTable()

    def in_flight(self, body_id: str) -> bool:
        return self._slots.in_flight(body_id)

    async def get(
        self,
        body_id: str,
        force_refresh: bool = False,
        correlation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the body's decorated payload.

        Raises:
            UnknownBodyError: If body_id is not in the catalog
            Exception: Whatever the fetcher raised, when no previous record exists
        """
        body = get_body(body_id)
        now = self._clock()
        record = self._slots.record(body.id)
        if (
            record is not None
            and not force_refresh
            and self.settings.body_caching_enabled
            and record.is_fresh(now)
        ):
            return decorate_body(
                record.payload,
                CacheState.HIT,
                record.age_ms(now),
                record.expires_at - now,
                correlation_id,
            )

        state = self._slots.state(body.id)
        if state is SlotState.FETCHING:
            logger.debug(f"Joining in-flight fetch of {body.id}")
        else:
            logger.debug(f"Fetching {body.id} (slot {state.value})")
        task = self._slots.join_or_start(
            body.id, lambda: self._refresh(body, correlation_id)
        )
        try:
            # A cancelled caller must not cancel the fetch other callers share
            payload = await asyncio.shield(task)
        except Exception as e:
            previous = self._slots.record(body.id)
            if previous is None:
                logger.warning(f"Fetching {body.id} failed with nothing cached: {e}")
                raise
            now = self._clock()
            logger.warning(
                f"Serving frozen {body.id} from {previous.age_ms(now):.0f}ms ago: {e}"
            )
            record_frozen("body")
            return decorate_body(
                previous.payload,
                CacheState.FROZEN,
                previous.age_ms(now),
                0,
                correlation_id,
                freeze_reason=str(e),
            )

        return decorate_body(
            payload, CacheState.MISS, 0, self.settings.body_ttl_ms, correlation_id
        )

    async def _refresh(
        self, body: BodyDescriptor, correlation_id: Optional[str]
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        vector = await self.fetcher.fetch(
            body, include_observer=True, correlation_id=correlation_id
        )
        latency_ms = (time.perf_counter() - started) * 1000
        payload = BodyEphemeris(
            id=body.id,
            vector=vector,
            response_time_ms=round(latency_ms, 1),
            request_id=correlation_id,
        ).to_dict()
        self._slots.replace(
            body.id,
            CacheRecord.create(payload, self._clock(), self.settings.body_ttl_ms),
        )
        logger.info(f"Refreshed {body.id} in {latency_ms:.0f}ms")
        return payload
