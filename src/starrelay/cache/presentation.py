"""
Cache metadata attached to outgoing payloads.

Everything here is a pure function of a payload dict and cache facts. Inputs
are never modified; each function returns a new top-level dict with a new
metadata dict.
"""

from typing import Any, Dict, Optional

from ..space_time import iso_from_ms
from .records import CacheBackend, CacheState, SnapshotResult

Payload = Dict[str, Any]


def _with_metadata(payload: Payload, **updates: Any) -> Payload:
    metadata = dict(payload.get("metadata") or {})
    metadata.update(updates)
    decorated = dict(payload)
    decorated["metadata"] = metadata
    return decorated


def decorate_snapshot(
    payload: Payload,
    cache_state: CacheState,
    backend: CacheBackend,
    cache_age_ms: float,
    ttl_ms: float,
    now: float,
    correlation_id: Optional[str] = None,
) -> Payload:
    """Annotate a snapshot payload with its cache status.

    Args:
        payload: Snapshot payload as produced by Snapshot.to_dict()
        cache_state: HIT, MISS, STALE or FROZEN
        backend: Backend the payload was served from
        cache_age_ms: Age of the underlying record
        ttl_ms: Configured snapshot TTL
        now: Current epoch milliseconds, used to back-compute generatedAt
        correlation_id: Request id of the caller

    Returns:
        A decorated copy of payload
    """
    base = payload.get("metadata") or {}
    return _with_metadata(
        payload,
        cacheStatus=cache_state.value,
        cacheBackend=backend.value,
        cacheAgeMs=cache_age_ms,
        cacheExpiresInMs=max(0, ttl_ms - cache_age_ms),
        cacheStale=cache_state == CacheState.STALE,
        requestId=correlation_id if correlation_id is not None else base.get("requestId"),
        generatedAt=base.get("generatedAt") or iso_from_ms(now - cache_age_ms),
    )


def freeze_snapshot(
    payload: Payload,
    backend: CacheBackend,
    cache_age_ms: float,
    ttl_ms: float,
    now: float,
    reason: str,
    correlation_id: Optional[str] = None,
) -> Payload:
    """Annotate a snapshot served past its staleness allowance after a failed refresh."""
    decorated = decorate_snapshot(
        payload, CacheState.FROZEN, backend, cache_age_ms, ttl_ms, now, correlation_id
    )
    return _with_metadata(
        decorated,
        cacheStale=True,
        cacheExpiresInMs=0,
        frozenSnapshot=True,
        freezeReason=reason,
        requestId=correlation_id,
    )


def decorate_body(
    payload: Payload,
    cache_state: CacheState,
    cache_age_ms: float,
    cache_expires_in_ms: float,
    correlation_id: Optional[str] = None,
    freeze_reason: Optional[str] = None,
) -> Payload:
    """Annotate a single-body payload with its cache status."""
    base = payload.get("metadata") or {}
    updates: Dict[str, Any] = {
        "cacheStatus": cache_state.value,
        "cacheBackend": CacheBackend.MEMORY.value,
        "cacheAgeMs": cache_age_ms,
        "cacheExpiresInMs": max(0, cache_expires_in_ms),
        "requestId": correlation_id if correlation_id is not None else base.get("requestId"),
    }
    if freeze_reason is not None:
        updates["cacheExpiresInMs"] = 0
        updates["frozenSnapshot"] = True
        updates["freezeReason"] = freeze_reason
    return _with_metadata(payload, **updates)


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _latency_header(metadata: Dict[str, Any], headers: Dict[str, str]) -> None:
    latency = metadata.get("responseTimeMs")
    if latency is not None:
        headers["X-Horizons-Latency"] = str(int(round(latency)))


def snapshot_headers(
    result: SnapshotResult, ttl_ms: float, request_id: Optional[str] = None
) -> Dict[str, str]:
    """HTTP response headers mirroring a snapshot's cache metadata."""
    metadata = result.payload.get("metadata") or {}
    headers = {
        "X-Horizons-Cache": result.cache_state.value,
        "X-Horizons-Cache-Backend": result.cache_backend.value,
        "X-Horizons-Cache-Age": str(int(result.cache_age_ms)),
        "X-Horizons-TTL": str(int(ttl_ms)),
        "X-Horizons-Cache-Stale": _flag(
            result.cache_state in (CacheState.STALE, CacheState.FROZEN)
        ),
        "X-Horizons-Frozen": _flag(bool(metadata.get("frozenSnapshot"))),
    }
    _latency_header(metadata, headers)
    rid = metadata.get("requestId") or request_id
    if rid:
        headers["X-Request-Id"] = rid
    return headers


def body_headers(payload: Payload, request_id: Optional[str] = None) -> Dict[str, str]:
    """HTTP response headers mirroring a single-body payload's cache metadata."""
    metadata = payload.get("metadata") or {}
    status = metadata.get("cacheStatus")
    headers = {
        "X-Horizons-Cache-Backend": metadata.get("cacheBackend", CacheBackend.MEMORY.value),
        "X-Horizons-Cache-Stale": _flag(status == CacheState.FROZEN.value),
        "X-Horizons-Frozen": _flag(bool(metadata.get("frozenSnapshot"))),
    }
    if status:
        headers["X-Horizons-Cache"] = status
    if metadata.get("cacheAgeMs") is not None:
        headers["X-Horizons-Cache-Age"] = str(int(metadata["cacheAgeMs"]))
    if metadata.get("cacheExpiresInMs") is not None:
        headers["X-Horizons-TTL"] = str(int(metadata["cacheExpiresInMs"]))
    _latency_header(metadata, headers)
    rid = metadata.get("requestId") or request_id
    if rid:
        headers["X-Request-Id"] = rid
    return headers
