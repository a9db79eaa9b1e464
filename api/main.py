from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from feed_policy import FEED_POLICY, FEED_VERSION, channel_payload
from models import TrackerSnapshot

FEED_PATH = Path(FEED_POLICY["feed_path"])
DATA_PATH = Path(FEED_POLICY["data_path"])

app = FastAPI(title="Pass Rate Tracker Feed API", version=FEED_VERSION.lstrip("v"))


def _load_json(path: Path, default: dict | list) -> dict | list:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return default


def _load_snapshot() -> TrackerSnapshot:
    payload = _load_json(DATA_PATH, {})
    if not payload or not isinstance(payload, dict):
        raise HTTPException(status_code=404, detail="No snapshot available.")
    try:
        return TrackerSnapshot.model_validate(payload)
    except ValueError as err:
        raise HTTPException(status_code=500, detail=f"Invalid snapshot format: {err}") from err


@app.get("/v1/feed")
def feed() -> Response:
    if not FEED_PATH.exists():
        raise HTTPException(status_code=404, detail="No feed generated yet.")
    return Response(content=FEED_PATH.read_text(encoding="utf-8"), media_type="application/rss+xml")


@app.get("/v1/snapshot/latest")
def snapshot_latest() -> dict:
    return _load_snapshot().model_dump(mode="json", by_alias=True)


@app.get("/v1/daily")
def daily(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
) -> dict:
    snapshot = _load_snapshot()
    items: list[dict] = []
    for row in sorted(snapshot.daily or [], key=lambda entry: entry.date or "", reverse=True):
        if start or end:
            try:
                day = date.fromisoformat((row.date or "")[:10])
            except ValueError:
                continue
            if start and day < start:
                continue
            if end and day > end:
                continue
        items.append(row.model_dump(mode="json", by_alias=True))
    return {"baseline": snapshot.baseline, "items": items}


@app.get("/v1/weekly")
def weekly() -> dict:
    snapshot = _load_snapshot()
    rows = sorted(snapshot.weekly or [], key=lambda entry: entry.start_date or "", reverse=True)
    return {"items": [row.model_dump(mode="json", by_alias=True) for row in rows]}


@app.get("/v1/methodology")
def methodology() -> dict:
    return {
        "summary": "Pass-rate series scraped from JSON literals embedded in the tracker page's inline scripts.",
        "feed_version": FEED_VERSION,
        "source_url": FEED_POLICY["source_url"],
        "channel": channel_payload(),
        "extraction": {
            "daily_shape": "flat objects with date and passRate",
            "weekly_shape": "flat objects with startDate and passRate",
            "selection": "longest array per shape across all script blocks; first wins on a tie",
            "baseline": "first number after a 'baseline ... =' or 'baselinePassRate ... =' cue",
        },
        "feed_rules": {
            "order": ["meta", "daily (newest first)", "weekly (newest first)"],
            "publish_time_utc": FEED_POLICY["publish_time_utc"],
            "change_vs_baseline": "round(passRate, 2) - round(baseline), one decimal, signed",
            "missing_value_placeholder": FEED_POLICY["missing_value_placeholder"],
        },
        "limitations": [
            "Nested arrays or objects inside records break extraction.",
            "Coupled to the tracker page layout; a redesign can empty the feed.",
        ],
    }
