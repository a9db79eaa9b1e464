from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from feed import build_feed
from feed_policy import FEED_POLICY
from models import TrackerSnapshot
from scrapers import FetchError, Snapshot, extract_snapshot, fetch_url


class ExtractionFailure(Exception):
    pass


@dataclass
class RunConfig:
    source_url: str = FEED_POLICY["source_url"]
    feed_path: Path = Path(FEED_POLICY["feed_path"])
    data_path: Path = Path(FEED_POLICY["data_path"])
    timeout: int = FEED_POLICY["fetch_timeout_seconds"]
    max_redirects: int = FEED_POLICY["max_redirects"]
    self_url: str | None = None
    quiet: bool = False


def parse_args(argv: list[str] | None = None) -> RunConfig:
    parser = argparse.ArgumentParser(
        description="Build an RSS feed and JSON snapshot from the pass-rate tracker page."
    )
    parser.add_argument(
        "--source-url",
        default=os.environ.get("TRACKER_SOURCE_URL", FEED_POLICY["source_url"]),
        help="Tracker page to scrape.",
    )
    parser.add_argument(
        "--feed-path",
        type=Path,
        default=Path(os.environ.get("TRACKER_FEED_PATH", FEED_POLICY["feed_path"])),
        help="Where to write the RSS feed.",
    )
    parser.add_argument(
        "--data-path",
        type=Path,
        default=Path(os.environ.get("TRACKER_DATA_PATH", FEED_POLICY["data_path"])),
        help="Where to write the extracted JSON snapshot.",
    )
    parser.add_argument(
        "--self-url",
        default=os.environ.get("TRACKER_SELF_URL"),
        help="Public URL of the feed, advertised as atom:link rel=self.",
    )
    parser.add_argument("--timeout", type=int, default=FEED_POLICY["fetch_timeout_seconds"])
    parser.add_argument("--max-redirects", type=int, default=FEED_POLICY["max_redirects"])
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output.")
    args = parser.parse_args(argv)
    return RunConfig(
        source_url=args.source_url,
        feed_path=args.feed_path,
        data_path=args.data_path,
        timeout=args.timeout,
        max_redirects=args.max_redirects,
        self_url=args.self_url,
        quiet=args.quiet,
    )


def _progress(config: RunConfig, message: str) -> None:
    if not config.quiet:
        print(message)


def build_snapshot(config: RunConfig) -> Snapshot:
    _progress(config, f"Fetching data from {config.source_url}")
    html = fetch_url(config.source_url, timeout=config.timeout, max_redirects=config.max_redirects)
    snapshot = extract_snapshot(html)
    if not snapshot.has_daily:
        raise ExtractionFailure("Could not extract daily data. Page structure may have changed.")
    return snapshot


def validate_snapshot(snapshot: Snapshot) -> dict:
    payload = snapshot.to_payload()
    try:
        TrackerSnapshot.model_validate(payload)
    except ValidationError as err:
        raise ExtractionFailure(f"Extracted data does not match the snapshot schema: {err}") from err
    return payload


def write_outputs(payload: dict, feed_text: str, config: RunConfig) -> None:
    for path in (config.feed_path, config.data_path):
        path.parent.mkdir(parents=True, exist_ok=True)
    config.feed_path.write_text(feed_text, encoding="utf-8")
    _progress(config, f"Written {config.feed_path}")
    config.data_path.write_text(json.dumps(payload, indent=2, allow_nan=False), encoding="utf-8")
    _progress(config, f"Written {config.data_path}")


def run(config: RunConfig, now: datetime | None = None) -> dict:
    snapshot = build_snapshot(config)
    payload = validate_snapshot(snapshot)
    daily_count = len(snapshot.daily or [])
    weekly_count = len(snapshot.weekly or [])
    _progress(config, f"Extracted {daily_count} daily, {weekly_count} weekly entries")

    feed_text = build_feed(
        snapshot,
        source_url=config.source_url,
        now=now or datetime.now(timezone.utc).replace(microsecond=0),
        self_url=config.self_url,
    )
    write_outputs(payload, feed_text, config)
    return {
        "daily": daily_count,
        "weekly": weekly_count,
        "baseline": snapshot.baseline,
        "feed_path": str(config.feed_path),
        "data_path": str(config.data_path),
    }


def main(argv: list[str] | None = None) -> int:
    config = parse_args(argv)
    try:
        summary = run(config)
    except ExtractionFailure as err:
        print(f"ERROR: {err}", file=sys.stderr)
        return 1
    except FetchError as err:
        status = f" (status {err.status})" if err.status is not None else ""
        print(f"ERROR: Fetch failed{status}: {err}", file=sys.stderr)
        return 1
    except OSError as err:
        print(f"ERROR: Could not write output: {err}", file=sys.stderr)
        return 1

    baseline = summary["baseline"]
    _progress(
        config,
        "Summary: "
        f"daily={summary['daily']} weekly={summary['weekly']} "
        f"baseline={baseline if baseline is not None else 'none'}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
