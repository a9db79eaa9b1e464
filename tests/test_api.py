from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.main import app

SNAPSHOT = {
    "daily": [
        {"date": "2025-01-01", "passRate": 42.5, "ciLower": 40.0, "ciUpper": 45.0, "runsCount": 100, "passed": 42},
        {"date": "2025-01-03", "passRate": 44.0, "ciLower": 41.0, "ciUpper": 47.0, "runsCount": 100, "passed": 44},
        {"date": "2025-01-02", "passRate": 43.0, "ciLower": 40.5, "ciUpper": 46.0, "runsCount": 100, "passed": 43},
    ],
    "weekly": [
        {"startDate": "2024-12-23", "endDate": "2024-12-29", "dateRange": "Dec 23 - Dec 29", "passRate": 41.0},
        {"startDate": "2024-12-30", "endDate": "2025-01-05", "dateRange": "Dec 30 - Jan 5", "passRate": 43.1},
    ],
    "baseline": 40.0,
}


class ApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        tmp = Path(self._tmp.name)
        self.feed_path = tmp / "feed.xml"
        self.data_path = tmp / "data.json"
        patcher_feed = patch("api.main.FEED_PATH", self.feed_path)
        patcher_data = patch("api.main.DATA_PATH", self.data_path)
        patcher_feed.start()
        patcher_data.start()
        self.addCleanup(patcher_feed.stop)
        self.addCleanup(patcher_data.stop)
        self.addCleanup(self._tmp.cleanup)
        self.client = TestClient(app)

    def test_missing_artifacts_return_404(self) -> None:
        self.assertEqual(404, self.client.get("/v1/feed").status_code)
        self.assertEqual(404, self.client.get("/v1/snapshot/latest").status_code)

    def test_feed_served_as_rss(self) -> None:
        self.feed_path.write_text('<?xml version="1.0"?><rss version="2.0"><channel/></rss>')
        response = self.client.get("/v1/feed")
        self.assertEqual(200, response.status_code)
        self.assertTrue(response.headers["content-type"].startswith("application/rss+xml"))
        self.assertIn("<rss", response.text)

    def test_snapshot_latest_keeps_source_keys(self) -> None:
        self.data_path.write_text(json.dumps(SNAPSHOT))
        payload = self.client.get("/v1/snapshot/latest").json()
        self.assertEqual(40.0, payload["baseline"])
        self.assertEqual(42.5, payload["daily"][0]["passRate"])
        self.assertEqual("2024-12-23", payload["weekly"][0]["startDate"])

    def test_daily_sorted_and_filtered(self) -> None:
        self.data_path.write_text(json.dumps(SNAPSHOT))
        items = self.client.get("/v1/daily").json()["items"]
        self.assertEqual(["2025-01-03", "2025-01-02", "2025-01-01"], [row["date"] for row in items])
        items = self.client.get("/v1/daily", params={"start": "2025-01-02"}).json()["items"]
        self.assertEqual(["2025-01-03", "2025-01-02"], [row["date"] for row in items])

    def test_daily_keeps_undated_rows_unless_filtered(self) -> None:
        payload = dict(SNAPSHOT)
        payload["daily"] = SNAPSHOT["daily"] + [{"date": "last week", "passRate": 41.0}]
        self.data_path.write_text(json.dumps(payload))
        items = self.client.get("/v1/daily").json()["items"]
        self.assertIn("last week", [row["date"] for row in items])
        self.assertEqual(4, len(items))
        items = self.client.get("/v1/daily", params={"end": "2025-01-02"}).json()["items"]
        self.assertEqual(["2025-01-02", "2025-01-01"], [row["date"] for row in items])

    def test_weekly_sorted(self) -> None:
        self.data_path.write_text(json.dumps(SNAPSHOT))
        items = self.client.get("/v1/weekly").json()["items"]
        self.assertEqual(["2024-12-30", "2024-12-23"], [row["startDate"] for row in items])

    def test_methodology(self) -> None:
        payload = self.client.get("/v1/methodology").json()
        self.assertIn("extraction", payload)
        self.assertEqual("n/a", payload["feed_rules"]["missing_value_placeholder"])


if __name__ == "__main__":
    unittest.main()
