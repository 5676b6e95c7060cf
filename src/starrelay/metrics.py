"""Prometheus metrics for the ephemeris caches."""

from typing import Final, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)

CACHE_HITS: Final = Counter(
    "starrelay_cache_hits_total",
    "Snapshot requests served from cache",
    ["backend", "freshness"],
)
CACHE_MISSES: Final = Counter(
    "starrelay_cache_misses_total",
    "Snapshot refreshes, by trigger",
    ["backend", "reason"],
)
FROZEN_RESPONSES: Final = Counter(
    "starrelay_frozen_responses_total",
    "Responses served from a frozen record after a failed refresh",
    ["cache"],
)
BODY_FALLBACKS: Final = Counter(
    "starrelay_body_fallbacks_total",
    "Bodies that failed during a snapshot refresh",
    ["outcome"],
)
CACHE_AGE: Final = Histogram(
    "starrelay_cache_age_seconds",
    "Age of cached snapshots when served",
    buckets=(1, 5, 15, 30, 60, 120, 180, 300, 600),
)
HORIZONS_LATENCY: Final = Histogram(
    "starrelay_horizons_fanout_seconds",
    "Wall time of one snapshot fan-out to Horizons",
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 40, 80),
)


def record_cache_hit(backend: str, freshness: str, age_ms: float) -> None:
    CACHE_HITS.labels(backend=backend, freshness=freshness).inc()
    CACHE_AGE.observe(age_ms / 1000.0)


def record_cache_miss(backend: str, reason: str) -> None:
    CACHE_MISSES.labels(backend=backend, reason=reason).inc()


def record_frozen(cache: str) -> None:
    FROZEN_RESPONSES.labels(cache=cache).inc()


def record_body_fallback(outcome: str) -> None:
    BODY_FALLBACKS.labels(outcome=outcome).inc()


def record_horizons_latency(latency_ms: float) -> None:
    HORIZONS_LATENCY.observe(latency_ms / 1000.0)


def export() -> Tuple[bytes, str]:
    """Current metrics in the Prometheus text format, with its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
