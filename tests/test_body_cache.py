"""Tests for the single-body cache."""

import asyncio
import unittest

from fakes import FakeClock, FakeFetcher

from starrelay.cache import BodyEphemerisCache
from starrelay.config import CacheSettings
from starrelay.errors import HorizonsError, UnknownBodyError


class TestBodyEphemerisCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.fetcher = FakeFetcher()
        self.settings = CacheSettings(body_ttl_ms=60_000, prewarm_interval_ms=0)
        self.cache = BodyEphemerisCache(self.settings, self.fetcher, clock=self.clock)

    async def test_miss_then_hit(self):
        first = await self.cache.get("moon", correlation_id="req-1")
        self.assertEqual(first["id"], "moon")
        self.assertEqual(first["metadata"]["cacheStatus"], "MISS")
        self.assertEqual(first["metadata"]["cacheAgeMs"], 0)
        self.assertEqual(first["metadata"]["cacheExpiresInMs"], 60_000)
        self.assertEqual(first["metadata"]["requestId"], "req-1")
        # Single bodies always come with observer geometry
        self.assertEqual(self.fetcher.calls, [("moon", True, "req-1")])
        self.assertIn("range_au", first)

        self.clock.advance(10_000)
        second = await self.cache.get("moon", correlation_id="req-2")
        self.assertEqual(second["metadata"]["cacheStatus"], "HIT")
        self.assertEqual(second["metadata"]["cacheAgeMs"], 10_000)
        self.assertEqual(second["metadata"]["cacheExpiresInMs"], 50_000)
        self.assertEqual(second["metadata"]["requestId"], "req-2")
        self.assertEqual(len(self.fetcher.calls), 1)

    async def test_expired_record_is_refetched(self):
        await self.cache.get("io")
        self.clock.advance(60_000)
        payload = await self.cache.get("io")
        self.assertEqual(payload["metadata"]["cacheStatus"], "MISS")
        self.assertEqual(self.fetcher.calls_for("io"), 2)

    async def test_force_refresh(self):
        await self.cache.get("io")
        self.fetcher.generation = 2
        payload = await self.cache.get("io", force_refresh=True)
        self.assertEqual(payload["metadata"]["cacheStatus"], "MISS")
        self.assertEqual(payload["x_au"], 2.0)

    async def test_unknown_body(self):
        with self.assertRaises(UnknownBodyError):
            await self.cache.get("vulcan")
        self.assertEqual(self.fetcher.calls, [])

    async def test_concurrent_callers_share_one_fetch(self):
        self.fetcher.gate = asyncio.Event()
        tasks = [asyncio.ensure_future(self.cache.get("titan")) for _ in range(5)]
        await asyncio.sleep(0)
        self.assertTrue(self.cache.in_flight("titan"))

        self.fetcher.gate.set()
        results = await asyncio.gather(*tasks)
        self.assertEqual(self.fetcher.calls_for("titan"), 1)
        self.assertTrue(all(r["metadata"]["cacheStatus"] == "MISS" for r in results))
        self.assertFalse(self.cache.in_flight("titan"))

    async def test_concurrent_forced_refreshes_share_one_fetch(self):
        await self.cache.get("io")
        self.fetcher.generation = 2
        self.fetcher.gate = asyncio.Event()
        tasks = [
            asyncio.ensure_future(self.cache.get("io", force_refresh=True))
            for _ in range(4)
        ]
        await asyncio.sleep(0)
        self.assertTrue(self.cache.in_flight("io"))

        self.fetcher.gate.set()
        results = await asyncio.gather(*tasks)
        self.assertEqual(self.fetcher.calls_for("io"), 2)
        self.assertTrue(all(r["metadata"]["cacheStatus"] == "MISS" for r in results))
        self.assertEqual([r["x_au"] for r in results], [2.0] * 4)

    async def test_frozen_fallback(self):
        await self.cache.get("europa")
        self.clock.advance(90_000)
        self.fetcher.fail_all = True

        payload = await self.cache.get("europa", correlation_id="req-9")
        metadata = payload["metadata"]
        self.assertEqual(metadata["cacheStatus"], "FROZEN")
        self.assertTrue(metadata["frozenSnapshot"])
        self.assertEqual(metadata["cacheExpiresInMs"], 0)
        self.assertEqual(metadata["cacheAgeMs"], 90_000)
        self.assertEqual(metadata["freezeReason"], "Europa unavailable")
        self.assertEqual(metadata["requestId"], "req-9")

    async def test_failure_without_record_propagates(self):
        self.fetcher.fail_all = True
        with self.assertRaises(HorizonsError):
            await self.cache.get("callisto")
        self.assertFalse(self.cache.in_flight("callisto"))

    async def test_zero_ttl_always_fetches(self):
        cache = BodyEphemerisCache(
            CacheSettings(ttl_ms=0, body_ttl_ms=0), self.fetcher, clock=self.clock
        )
        await cache.get("sun")
        await cache.get("sun")
        self.assertEqual(self.fetcher.calls_for("sun"), 2)

        self.fetcher.fail_all = True
        payload = await cache.get("sun")
        self.assertEqual(payload["metadata"]["cacheStatus"], "FROZEN")


if __name__ == "__main__":
    unittest.main()
