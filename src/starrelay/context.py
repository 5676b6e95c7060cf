"""Process-wide cache state, built once at startup."""

from typing import Callable, Optional

from .cache import BodyEphemerisCache, SnapshotCache, SnapshotStore, create_store
from .config import CacheSettings
from .horizons import HorizonsClient, HorizonsStateVectorFetcher, StateVectorFetcher
from .logging import get_logger
from .space_time import now_ms

logger = get_logger(__name__)


class EphemerisContext:
    """
    Owns the store, both caches and the fetcher they share.

    Request handlers get one of these instead of reaching for module globals.
    """

    def __init__(
        self,
        settings: CacheSettings,
        fetcher: StateVectorFetcher,
        store: SnapshotStore,
        clock: Callable[[], float] = now_ms,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.store = store
        self.snapshots = SnapshotCache(settings, fetcher, store, clock=clock)
        self.bodies = BodyEphemerisCache(settings, fetcher, clock=clock)

    @classmethod
    def create(
        cls,
        settings: Optional[CacheSettings] = None,
        fetcher: Optional[StateVectorFetcher] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "EphemerisContext":
        """Build a context from settings, reading the environment if none are given."""
        settings = settings or CacheSettings.from_env()
        clock = clock or now_ms
        if fetcher is None:
            fetcher = HorizonsStateVectorFetcher(
                HorizonsClient(settings.horizons_url, settings.request_timeout_s)
            )
        return cls(settings, fetcher, create_store(settings, clock), clock)

    async def start(self) -> None:
        await self.store.connect()
        self.snapshots.start_prewarm()
        logger.info(
            f"Ephemeris caches ready (backend={self.store.backend.value}, "
            f"ttl={self.settings.ttl_ms}ms, stale={self.settings.stale_ms}ms, "
            f"body_ttl={self.settings.body_ttl_ms}ms)"
        )

    async def close(self) -> None:
        await self.snapshots.stop_prewarm()
        await self.fetcher.close()
        await self.store.close()
