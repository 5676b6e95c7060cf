"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

HORIZONS_URL = "https://ssd.jpl.nasa.gov/api/horizons.api"

DEFAULT_CACHE_TTL_MS = 120_000
DEFAULT_BODY_CACHE_TTL_MS = 60_000
MIN_PREWARM_INTERVAL_MS = 30_000
DEFAULT_REDIS_RETRY_INTERVAL_MS = 30_000


def default_stale_ms(ttl_ms: int) -> int:
    """Half of the TTL."""
    return ttl_ms // 2


def default_prewarm_interval_ms(ttl_ms: int) -> int:
    """80% of the TTL with a 30s floor, or 0 (disabled) when caching is off."""
    if ttl_ms <= 0:
        return 0
    return max(MIN_PREWARM_INTERVAL_MS, int(ttl_ms * 0.8))


def _read_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(float(raw))
    except (ValueError, OverflowError):
        raise ConfigurationError(f"{name} must be a number of milliseconds, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


@dataclass
class CacheSettings:
    """Tunables for the ephemeris caches and the Horizons fetcher.

    All durations are in milliseconds. A TTL of 0 disables caching: every
    request refreshes synchronously, but previous records are still kept so
    that a failing refresh can fall back to a frozen copy.
    """

    ttl_ms: int = DEFAULT_CACHE_TTL_MS
    stale_ms: Optional[int] = None
    prewarm_interval_ms: Optional[int] = None
    body_ttl_ms: int = DEFAULT_BODY_CACHE_TTL_MS
    redis_url: Optional[str] = None
    redis_retry_interval_ms: int = DEFAULT_REDIS_RETRY_INTERVAL_MS
    horizons_url: str = HORIZONS_URL
    request_timeout_s: float = 30.0
    fanout_concurrency: int = 1

    def __post_init__(self) -> None:
        if self.ttl_ms < 0 or self.body_ttl_ms < 0:
            raise ConfigurationError("Cache TTLs must not be negative")
        if self.stale_ms is None:
            self.stale_ms = default_stale_ms(self.ttl_ms)
        if self.prewarm_interval_ms is None:
            self.prewarm_interval_ms = default_prewarm_interval_ms(self.ttl_ms)
        if self.stale_ms < 0 or self.prewarm_interval_ms < 0:
            raise ConfigurationError("Cache windows must not be negative")
        if self.fanout_concurrency < 1:
            raise ConfigurationError("Fan-out concurrency must be at least 1")
        if self.request_timeout_s <= 0:
            raise ConfigurationError("Request timeout must be positive")

    @property
    def caching_enabled(self) -> bool:
        return self.ttl_ms > 0

    @property
    def body_caching_enabled(self) -> bool:
        return self.body_ttl_ms > 0

    @property
    def prewarm_enabled(self) -> bool:
        return self.caching_enabled and self.prewarm_interval_ms > 0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CacheSettings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from. Defaults to os.environ.

        Returns:
            CacheSettings with defaults filled in for unset variables

        Raises:
            ConfigurationError: If a variable is not a non-negative number
        """
        if env is None:
            env = os.environ

        ttl_ms = _read_int(env, "CACHE_TTL_MS")
        body_ttl_ms = _read_int(env, "BODY_CACHE_TTL_MS")
        if body_ttl_ms is None:
            body_ttl_ms = ttl_ms if ttl_ms is not None else DEFAULT_BODY_CACHE_TTL_MS
        if ttl_ms is None:
            ttl_ms = DEFAULT_CACHE_TTL_MS

        retry_ms = _read_int(env, "REDIS_RETRY_INTERVAL_MS")
        concurrency = _read_int(env, "HORIZONS_FANOUT_CONCURRENCY")

        timeout_raw = env.get("HORIZONS_TIMEOUT_S")
        try:
            timeout_s = float(timeout_raw) if timeout_raw else 30.0
        except ValueError:
            raise ConfigurationError(
                f"HORIZONS_TIMEOUT_S must be a number of seconds, got {timeout_raw!r}"
            )
        if not 0 < timeout_s < float("inf"):
            raise ConfigurationError(
                f"HORIZONS_TIMEOUT_S must be a positive number of seconds, got {timeout_raw!r}"
            )

        return cls(
            ttl_ms=ttl_ms,
            stale_ms=_read_int(env, "CACHE_STALE_MS"),
            prewarm_interval_ms=_read_int(env, "CACHE_WARM_INTERVAL_MS"),
            body_ttl_ms=body_ttl_ms,
            redis_url=env.get("REDIS_URL") or None,
            redis_retry_interval_ms=(
                retry_ms if retry_ms is not None else DEFAULT_REDIS_RETRY_INTERVAL_MS
            ),
            horizons_url=env.get("HORIZONS_URL") or HORIZONS_URL,
            request_timeout_s=timeout_s,
            fanout_concurrency=concurrency if concurrency else 1,
        )
