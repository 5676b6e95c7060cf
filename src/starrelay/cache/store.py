"""
Snapshot storage backends.

Process memory is always written and is the fallback for every read. When a
Redis URL is configured, records are mirrored there so that several processes
can share one refresh; Redis being down never fails a request.
"""

import json
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..config import CacheSettings
from ..ephemeris import Snapshot
from ..logging import get_logger
from ..space_time import now_ms
from .records import CacheBackend, CacheRecord

logger = get_logger(__name__)

SnapshotRecord = CacheRecord[Snapshot]


def encode_record(record: SnapshotRecord) -> str:
    return json.dumps(record.to_dict(Snapshot.to_dict), separators=(",", ":"))


def decode_record(raw) -> SnapshotRecord:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return CacheRecord.from_dict(json.loads(raw), Snapshot.from_dict)


class SnapshotStore(ABC):
    """Where snapshot records live between requests."""

    def __init__(self) -> None:
        self._memory: Dict[str, SnapshotRecord] = {}

    @property
    @abstractmethod
    def backend(self) -> CacheBackend:
        """Backend that reads and writes currently go to."""
        pass

    def read_local(self, key: str) -> Optional[SnapshotRecord]:
        """Read the process-local copy only; never suspends."""
        return self._memory.get(key)

    @abstractmethod
    async def read(self, key: str) -> Optional[SnapshotRecord]:
        pass

    @abstractmethod
    async def write(self, key: str, record: SnapshotRecord) -> None:
        """Store a record locally, and in the shared store when there is one."""
        pass

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None


class LocalOnlyStore(SnapshotStore):
    """Process memory only; the single-process deployment."""

    @property
    def backend(self) -> CacheBackend:
        return CacheBackend.MEMORY

    async def read(self, key: str) -> Optional[SnapshotRecord]:
        return self._memory.get(key)

    async def write(self, key: str, record: SnapshotRecord) -> None:
        self._memory[key] = record


class LocalWithSharedMirrorStore(SnapshotStore):
    """Process memory mirrored to Redis.

    Args:
        client: A redis.asyncio client (or anything with async get/set/ping)
        retry_interval_ms: Minimum delay between reachability probes once
            Redis has been found unreachable
        clock: Epoch-millisecond clock
    """

    def __init__(
        self,
        client,
        retry_interval_ms: float = 30_000,
        clock: Callable[[], float] = now_ms,
    ) -> None:
        super().__init__()
        self.client = client
        self.retry_interval_ms = retry_interval_ms
        self._clock = clock
        self._reachable: Optional[bool] = None
        self._last_probe: Optional[float] = None

    @property
    def backend(self) -> CacheBackend:
        return CacheBackend.REDIS if self._reachable else CacheBackend.MEMORY

    async def connect(self) -> None:
        self._last_probe = self._clock()
        try:
            await self.client.ping()
        except Exception as e:
            if self._reachable is not False:
                logger.warning(f"Redis unreachable, serving from memory: {e}")
            self._reachable = False
            return
        if not self._reachable:
            logger.info("Redis connected")
        self._reachable = True

    async def _available(self) -> bool:
        if self._reachable:
            return True
        if (
            self._last_probe is None
            or self._clock() - self._last_probe >= self.retry_interval_ms
        ):
            await self.connect()
        return bool(self._reachable)

    def _mark_unreachable(self, error: Exception) -> None:
        if isinstance(error, (RedisConnectionError, RedisTimeoutError, OSError)):
            self._reachable = False
            self._last_probe = self._clock()

    async def read(self, key: str) -> Optional[SnapshotRecord]:
        if await self._available():
            try:
                raw = await self.client.get(key)
                if raw:
                    record = decode_record(raw)
                    self._memory[key] = record
                    return record
            except Exception as e:
                logger.warning(f"Redis read of {key} failed: {e}")
                self._mark_unreachable(e)
        return self._memory.get(key)

    async def write(self, key: str, record: SnapshotRecord) -> None:
        self._memory[key] = record
        if not await self._available():
            return

        # Keep the shared copy through the stale window
        expiry_ms = int(record.retention_ms)
        if expiry_ms <= 0:
            logger.debug(f"Not mirroring {key}: record has no retention window")
            return
        try:
            await self.client.set(key, encode_record(record), px=expiry_ms)
        except Exception as e:
            logger.warning(f"Redis write of {key} failed: {e}")
            self._mark_unreachable(e)

    async def close(self) -> None:
        try:
            await self.client.aclose()
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}")


def create_store(
    settings: CacheSettings, clock: Callable[[], float] = now_ms
) -> SnapshotStore:
    """Pick the store strategy from configuration: Redis URL set or not."""
    if not settings.redis_url:
        return LocalOnlyStore()

    import redis.asyncio as redis

    client = redis.from_url(settings.redis_url)
    return LocalWithSharedMirrorStore(
        client, retry_interval_ms=settings.redis_retry_interval_ms, clock=clock
    )
