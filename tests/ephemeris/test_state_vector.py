"""Tests for the state vector and snapshot payload types."""

import unittest

from starrelay.ephemeris import BodyEphemeris, Snapshot, StateVector


class TestStateVector(unittest.TestCase):
    def setUp(self):
        self.vector = StateVector(
            name="Mars",
            x_au=1.0,
            y_au=2.0,
            z_au=3.0,
            vx=0.1,
            vy=0.2,
            vz=0.3,
            timestamp="2025-03-19T20:00:00.000Z",
        )

    def test_to_dict_omits_absent_fields(self):
        data = self.vector.to_dict()
        self.assertEqual(data["name"], "Mars")
        self.assertEqual(data["velocityUnit"], "AU/day")
        self.assertEqual(data["referenceFrame"], "J2000-ECLIPTIC")
        self.assertNotIn("range_au", data)

    def test_with_observer(self):
        vector = self.vector.with_observer({"range_au": 1.5, "unrelated": 9})
        self.assertTrue(vector.has_observer_geometry)
        self.assertEqual(vector.range_au, 1.5)
        self.assertFalse(self.vector.has_observer_geometry)

    def test_from_dict_keeps_missing_units_unset(self):
        vector = StateVector.from_dict({"name": "Io", "x_au": 1, "y_au": 2, "z_au": 3})
        self.assertIsNone(vector.velocity_unit)
        self.assertIsNone(vector.reference_frame)
        self.assertEqual(StateVector.from_dict(self.vector.to_dict()), self.vector)


class TestSnapshot(unittest.TestCase):
    def test_partial_metadata(self):
        vector = StateVector(name="Venus", x_au=0.7, y_au=0.0, z_au=0.0)
        snapshot = Snapshot(
            timestamp="2025-03-19T20:00:00.000Z",
            bodies=(vector,),
            response_time_ms=812.0,
            fallback_bodies=("Venus",),
            missing_bodies=("Mars",),
        )
        data = snapshot.to_dict()
        metadata = data["metadata"]
        self.assertTrue(metadata["partial"])
        self.assertEqual(metadata["fallbackBodies"], ["Venus"])
        self.assertEqual(metadata["missingBodies"], ["Mars"])
        self.assertEqual(metadata["distanceUnit"], "AU")
        self.assertEqual(metadata["source"], "NASA-JPL-Horizons")
        self.assertEqual(Snapshot.from_dict(data), snapshot)

    def test_complete_snapshot_has_no_fallback_keys(self):
        snapshot = Snapshot(timestamp="t", bodies=())
        metadata = snapshot.to_dict()["metadata"]
        self.assertFalse(metadata["partial"])
        self.assertNotIn("fallbackBodies", metadata)
        self.assertNotIn("responseTimeMs", metadata)

    def test_body_lookup(self):
        vector = StateVector(name="Venus", x_au=0.7, y_au=0.0, z_au=0.0)
        snapshot = Snapshot(timestamp="t", bodies=(vector,))
        self.assertIs(snapshot.body("Venus"), vector)
        self.assertIsNone(snapshot.body("Mars"))


class TestBodyEphemeris(unittest.TestCase):
    def test_to_dict(self):
        vector = StateVector(name="Moon", x_au=1.0, y_au=0.0, z_au=0.0)
        data = BodyEphemeris("moon", vector, response_time_ms=120.5, request_id="r1").to_dict()
        self.assertEqual(data["id"], "moon")
        self.assertNotIn("name", data)
        self.assertEqual(data["x_au"], 1.0)
        self.assertEqual(data["metadata"], {"responseTimeMs": 120.5, "requestId": "r1"})


if __name__ == "__main__":
    unittest.main()
