"""Tests for the starrelay CLI."""

import json
import logging
import unittest
from unittest.mock import patch

from click.testing import CliRunner

from fakes import FakeFetcher

from starrelay.cli import cli
from starrelay.cli.common import log_level_from_flags
from starrelay.config import CacheSettings
from starrelay.context import EphemerisContext


class TestLogLevels(unittest.TestCase):
    def test_flags(self):
        self.assertEqual(log_level_from_flags(False, False, 0), logging.WARNING)
        self.assertEqual(log_level_from_flags(False, False, 1), logging.INFO)
        self.assertEqual(log_level_from_flags(False, False, 2), logging.DEBUG)
        self.assertEqual(log_level_from_flags(False, True, 0), logging.DEBUG)
        self.assertEqual(log_level_from_flags(True, True, 2), logging.ERROR)


class TestCommands(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.fetcher = FakeFetcher()
        settings = CacheSettings(prewarm_interval_ms=0)
        real_create = EphemerisContext.create

        def create(*args, **kwargs):
            return real_create(settings=settings, fetcher=self.fetcher)

        patcher = patch.object(EphemerisContext, "create", side_effect=create)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_snapshot(self):
        result = self.runner.invoke(cli, ["snapshot"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["metadata"]["cacheStatus"], "MISS")
        self.assertNotIn("range_au", payload["bodies"][0])

    def test_full_snapshot(self):
        result = self.runner.invoke(cli, ["--quiet", "snapshot", "--full", "--refresh"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertIn("range_au", payload["bodies"][0])

    def test_snapshot_failure(self):
        self.fetcher.fail_all = True
        result = self.runner.invoke(cli, ["snapshot"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No Horizons data available", result.output)

    def test_body(self):
        result = self.runner.invoke(cli, ["body", "titan"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["id"], "titan")
        self.assertEqual(payload["metadata"]["cacheStatus"], "MISS")

    def test_unknown_body(self):
        result = self.runner.invoke(cli, ["body", "vulcan"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("vulcan", result.output)

    def test_bodies(self):
        result = self.runner.invoke(cli, ["bodies"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("mars", result.output)
        self.assertIn("ganymede", result.output)

    @patch("uvicorn.run")
    def test_serve(self, mock_run):
        result = self.runner.invoke(cli, ["serve", "--port", "8080"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_run.call_args.kwargs["port"], 8080)
        self.assertEqual(mock_run.call_args.kwargs["host"], "127.0.0.1")


if __name__ == "__main__":
    unittest.main()
