from __future__ import annotations

from copy import deepcopy

FEED_VERSION = "v1.1.0"

SOURCE_URL = "https://marginlab.ai/trackers/claude-code/"

CHANNEL_METADATA: dict = {
    "title": "Claude Code Performance Tracker",
    "description": (
        "Daily and weekly performance tracking for Claude Code on SWE-Bench Pro tasks. "
        "Data from MarginLab."
    ),
    "language": "en-us",
    "generator": "claude-perf-tracker",
    "guid_prefix": "claude-code",
    "item_label": "Claude Code",
}

FEED_POLICY: dict = {
    "source_url": SOURCE_URL,
    "user_agent": f"claude-perf-tracker/{FEED_VERSION.lstrip('v')}",
    "fetch_timeout_seconds": 30,
    "max_redirects": 5,
    "feed_path": "feed.xml",
    "data_path": "data.json",
    "publish_time_utc": "12:00:00",
    "missing_value_placeholder": "n/a",
    "rate_places": 2,
    "change_places": 1,
    "ci_places": 1,
}


def feed_policy_payload() -> dict:
    return deepcopy(FEED_POLICY)


def channel_payload() -> dict:
    return deepcopy(CHANNEL_METADATA)
