import copy

from starrelay.cache import CacheBackend, CacheState, SnapshotResult
from starrelay.cache.presentation import (
    body_headers,
    decorate_body,
    decorate_snapshot,
    freeze_snapshot,
    snapshot_headers,
)

NOW = 1_742_414_400_000.0

BASE = {
    "timestamp": "2025-03-19T20:00:00.000Z",
    "metadata": {"source": "NASA-JPL-Horizons", "responseTimeMs": 812.4, "partial": False},
    "bodies": [{"name": "Mars", "x_au": 1.0}],
}


def test_decorate_hit():
    payload = decorate_snapshot(
        BASE, CacheState.HIT, CacheBackend.MEMORY, 30_000, 120_000, NOW, "req-1"
    )
    metadata = payload["metadata"]
    assert metadata["cacheStatus"] == "HIT"
    assert metadata["cacheBackend"] == "memory"
    assert metadata["cacheAgeMs"] == 30_000
    assert metadata["cacheExpiresInMs"] == 90_000
    assert metadata["cacheStale"] is False
    assert metadata["requestId"] == "req-1"
    # Back-computed from the age when the payload has none
    assert metadata["generatedAt"] == "2025-03-19T19:59:30.000Z"
    assert payload["bodies"] == BASE["bodies"]


def test_decorate_does_not_mutate_input():
    before = copy.deepcopy(BASE)
    decorate_snapshot(BASE, CacheState.STALE, CacheBackend.REDIS, 150_000, 120_000, NOW)
    freeze_snapshot(BASE, CacheBackend.REDIS, 400_000, 120_000, NOW, "boom")
    assert BASE == before


def test_decorate_stale():
    payload = decorate_snapshot(
        BASE, CacheState.STALE, CacheBackend.REDIS, 150_000, 120_000, NOW
    )
    metadata = payload["metadata"]
    assert metadata["cacheStale"] is True
    assert metadata["cacheExpiresInMs"] == 0
    assert metadata["cacheBackend"] == "redis"


def test_existing_generated_at_is_kept():
    base = copy.deepcopy(BASE)
    base["metadata"]["generatedAt"] = "2025-03-19T19:00:00.000Z"
    payload = decorate_snapshot(base, CacheState.HIT, CacheBackend.MEMORY, 10, 100, NOW)
    assert payload["metadata"]["generatedAt"] == "2025-03-19T19:00:00.000Z"


def test_freeze():
    payload = freeze_snapshot(
        BASE, CacheBackend.MEMORY, 400_000, 120_000, NOW, "No Horizons data available", "req-2"
    )
    metadata = payload["metadata"]
    assert metadata["cacheStatus"] == "FROZEN"
    assert metadata["cacheStale"] is True
    assert metadata["cacheExpiresInMs"] == 0
    assert metadata["frozenSnapshot"] is True
    assert metadata["freezeReason"] == "No Horizons data available"
    assert metadata["requestId"] == "req-2"


def test_decorate_body():
    base = {"id": "moon", "x_au": 1.0, "metadata": {"requestId": "first"}}
    hit = decorate_body(base, CacheState.HIT, 1000, 59_000, "second")
    assert hit["metadata"]["cacheStatus"] == "HIT"
    assert hit["metadata"]["cacheBackend"] == "memory"
    assert hit["metadata"]["requestId"] == "second"
    assert "frozenSnapshot" not in hit["metadata"]

    frozen = decorate_body(base, CacheState.FROZEN, 90_000, 0, freeze_reason="timeout")
    assert frozen["metadata"]["frozenSnapshot"] is True
    assert frozen["metadata"]["cacheExpiresInMs"] == 0
    assert frozen["metadata"]["requestId"] == "first"
    assert base["metadata"] == {"requestId": "first"}


def test_snapshot_headers():
    payload = freeze_snapshot(BASE, CacheBackend.REDIS, 400_000, 120_000, NOW, "boom", "req-3")
    result = SnapshotResult(payload, CacheState.FROZEN, CacheBackend.REDIS, 400_000)
    headers = snapshot_headers(result, 120_000)
    assert headers == {
        "X-Horizons-Cache": "FROZEN",
        "X-Horizons-Cache-Backend": "redis",
        "X-Horizons-Cache-Age": "400000",
        "X-Horizons-TTL": "120000",
        "X-Horizons-Cache-Stale": "1",
        "X-Horizons-Frozen": "1",
        "X-Horizons-Latency": "812",
        "X-Request-Id": "req-3",
    }


def test_snapshot_headers_hit_without_request_id():
    payload = decorate_snapshot(BASE, CacheState.HIT, CacheBackend.MEMORY, 5, 120_000, NOW)
    result = SnapshotResult(payload, CacheState.HIT, CacheBackend.MEMORY, 5)
    headers = snapshot_headers(result, 120_000)
    assert headers["X-Horizons-Cache-Stale"] == "0"
    assert headers["X-Horizons-Frozen"] == "0"
    assert "X-Request-Id" not in headers
    assert snapshot_headers(result, 120_000, "fallback-id")["X-Request-Id"] == "fallback-id"


def test_body_headers():
    payload = decorate_body(
        {"id": "io", "metadata": {"responseTimeMs": 99.6}}, CacheState.MISS, 0, 60_000, "req-4"
    )
    headers = body_headers(payload)
    assert headers["X-Horizons-Cache"] == "MISS"
    assert headers["X-Horizons-Cache-Age"] == "0"
    assert headers["X-Horizons-TTL"] == "60000"
    assert headers["X-Horizons-Frozen"] == "0"
    assert headers["X-Horizons-Latency"] == "100"
    assert headers["X-Request-Id"] == "req-4"
