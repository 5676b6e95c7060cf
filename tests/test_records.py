import pytest

from starrelay.cache import CacheRecord


def test_create_windows():
    record = CacheRecord.create("payload", now=1000, ttl_ms=120_000, stale_ms=60_000)
    assert record.expires_at == 121_000
    assert record.stale_until == 181_000
    assert record.retention_ms == 180_000


def test_freshness_boundaries():
    record = CacheRecord.create("payload", now=0, ttl_ms=100, stale_ms=50)
    assert record.is_fresh(99)
    assert not record.is_fresh(100)
    assert record.is_stale_usable(100)
    assert record.is_stale_usable(149)
    assert not record.is_stale_usable(150)
    assert record.age_ms(150) == 150


def test_zero_ttl_is_never_fresh():
    record = CacheRecord.create("payload", now=500, ttl_ms=0)
    assert not record.is_fresh(500)
    assert not record.is_stale_usable(500)
    assert record.retention_ms == 0


def test_ordering_is_enforced():
    with pytest.raises(ValueError):
        CacheRecord("payload", cached_at=10, expires_at=5, stale_until=20)


def test_dict_form():
    record = CacheRecord.create({"a": 1}, now=0, ttl_ms=10, stale_ms=5)
    data = record.to_dict(dict)
    assert data == {
        "payload": {"a": 1},
        "cachedAt": 0,
        "expiresAt": 10,
        "staleUntil": 15,
    }
    assert CacheRecord.from_dict(data, dict) == record
