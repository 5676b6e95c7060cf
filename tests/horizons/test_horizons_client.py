"""Tests for HorizonsClient and the threaded fetcher."""

import asyncio
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from starrelay.catalog import get_body
from starrelay.errors import HorizonsError
from starrelay.horizons import HorizonsClient, HorizonsStateVectorFetcher
from starrelay.horizons.request import HorizonsRequest

FIXTURES = Path(__file__).parent.parent / "fixtures" / "horizons"
NOW = datetime(2025, 3, 19, 20, 0, tzinfo=timezone.utc)


def _fixture(name: str) -> str:
    with open(FIXTURES / name, "r") as f:
        return f.read()


class TestHorizonsClient(unittest.TestCase):
    def setUp(self):
        self.vectors = _fixture("mars_vectors.txt")
        self.observer = _fixture("mars_observer.txt")
        self.client = HorizonsClient()

    def test_state_vector_only(self):
        with patch.object(
            HorizonsRequest, "make_request", return_value=self.vectors
        ) as make_request:
            vector = self.client.fetch_state_vector("499", "Mars", now=NOW)

        make_request.assert_called_once()
        self.assertEqual(vector.name, "Mars")
        self.assertAlmostEqual(vector.x_au, -0.8123456789012345)
        self.assertAlmostEqual(vector.vx, -0.01234567890123456)
        self.assertEqual(vector.velocity_unit, "AU/day")
        self.assertEqual(vector.reference_frame, "J2000-ECLIPTIC")
        self.assertEqual(vector.timestamp, "2025-03-19T20:00:00.000Z")
        self.assertFalse(vector.has_observer_geometry)

    def test_with_observer_geometry(self):
        with patch.object(
            HorizonsRequest, "make_request", side_effect=[self.vectors, self.observer]
        ):
            vector = self.client.fetch_state_vector(
                "499", "Mars", include_observer=True, now=NOW
            )

        self.assertTrue(vector.has_observer_geometry)
        self.assertAlmostEqual(vector.range_au, 0.86034521)
        self.assertAlmostEqual(vector.illumination_fraction, 0.9246381)
        self.assertAlmostEqual(vector.x_au, -0.8123456789012345)

    def test_errors_propagate(self):
        with patch.object(
            HorizonsRequest, "make_request", side_effect=HorizonsError("boom")
        ):
            with self.assertRaises(HorizonsError):
                self.client.fetch_state_vector("499", "Mars", now=NOW)

    def test_unparseable_response(self):
        with patch.object(HorizonsRequest, "make_request", return_value="no data"):
            with self.assertRaises(HorizonsError):
                self.client.fetch_state_vector("499", "Mars", now=NOW)


class TestHorizonsStateVectorFetcher(unittest.TestCase):
    def test_fetch_runs_client_in_thread(self):
        vectors = _fixture("mars_vectors.txt")
        fetcher = HorizonsStateVectorFetcher(HorizonsClient())
        with patch.object(HorizonsRequest, "make_request", return_value=vectors):
            vector = asyncio.run(fetcher.fetch(get_body("moon")))
        # The display name comes from the catalog, not from the response
        self.assertEqual(vector.name, "Moon")
        self.assertAlmostEqual(vector.y_au, 1.456789012345678)


if __name__ == "__main__":
    unittest.main()
