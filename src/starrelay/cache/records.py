from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, TypeVar

T = TypeVar("T")


class CacheState(Enum):
    HIT = "HIT"
    MISS = "MISS"
    STALE = "STALE"
    FROZEN = "FROZEN"


class CacheBackend(Enum):
    MEMORY = "memory"
    REDIS = "redis"


@dataclass(frozen=True)
class CacheRecord(Generic[T]):
    """
    A cached payload and its freshness window, in epoch milliseconds.

    A record is fresh until expires_at, usable-but-stale until stale_until,
    and only good for frozen fallback after that. Records are never mutated;
    a refresh replaces the whole record.
    """

    payload: T
    cached_at: float
    expires_at: float
    stale_until: float

    def __post_init__(self) -> None:
        if not (self.cached_at <= self.expires_at <= self.stale_until):
            raise ValueError(
                "CacheRecord requires cached_at <= expires_at <= stale_until, got "
                f"{self.cached_at}, {self.expires_at}, {self.stale_until}"
            )

    @classmethod
    def create(
        cls, payload: T, now: float, ttl_ms: float, stale_ms: float = 0
    ) -> "CacheRecord[T]":
        return cls(
            payload=payload,
            cached_at=now,
            expires_at=now + ttl_ms,
            stale_until=now + ttl_ms + stale_ms,
        )

    def age_ms(self, now: float) -> float:
        return max(0.0, now - self.cached_at)

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at

    def is_stale_usable(self, now: float) -> bool:
        return self.expires_at <= now < self.stale_until

    @property
    def retention_ms(self) -> float:
        """How long the record stays usable at all (TTL plus stale window)."""
        return self.stale_until - self.cached_at

    def to_dict(self, encode: Callable[[T], Any]) -> Dict[str, Any]:
        return {
            "payload": encode(self.payload),
            "cachedAt": self.cached_at,
            "expiresAt": self.expires_at,
            "staleUntil": self.stale_until,
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], decode: Callable[[Any], T]
    ) -> "CacheRecord[T]":
        return cls(
            payload=decode(data["payload"]),
            cached_at=float(data["cachedAt"]),
            expires_at=float(data["expiresAt"]),
            stale_until=float(data["staleUntil"]),
        )


@dataclass(frozen=True)
class SnapshotResult:
    """A decorated snapshot payload and the cache facts behind it."""

    payload: Dict[str, Any]
    cache_state: CacheState
    cache_backend: CacheBackend
    cache_age_ms: float
