
from __future__ import annotations

import argparse
import json
import platform
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from feed_policy import FEED_POLICY
from scrapers import FetchError, collect_candidates, fetch_url, find_baseline, script_blocks


def classify_error(err: FetchError) -> str:
    text = str(err).lower()
    if "timed out" in text or "timeout" in text:
        return "timeout"
    if "redirect" in text:
        return "redirect"
    if err.status in (401, 403, 429) or "forbidden" in text:
        return "blocked"
    if err.status is not None:
        return "http"
    return "other"


def diagnose(html: str) -> dict:
    candidates = collect_candidates(html)
    daily_lengths = [c.size for c in candidates["daily"]]
    weekly_lengths = [c.size for c in candidates["weekly"]]
    return {
        "script_blocks": len(script_blocks(html)),
        "daily_candidates": daily_lengths,
        "weekly_candidates": weekly_lengths,
        "daily_selected": max(daily_lengths, default=0),
        "weekly_selected": max(weekly_lengths, default=0),
        "baseline": find_baseline(html),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Diagnose extraction against the tracker page.")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text.")
    parser.add_argument("--source-url", default=FEED_POLICY["source_url"])
    args = parser.parse_args()

    started = time.time()
    summary: dict = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": platform.python_version(),
        "source_url": args.source_url,
        "error_class": None,
        "detail": None,
    }
    try:
        html = fetch_url(args.source_url)
        summary["page_bytes"] = len(html.encode("utf-8"))
        summary.update(diagnose(html))
    except FetchError as err:
        summary["error_class"] = classify_error(err)
        summary["detail"] = str(err)
    summary["elapsed_ms"] = int((time.time() - started) * 1000)

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Python: {summary['python_version']}")
        print(f"Source: {summary['source_url']} ({summary['elapsed_ms']} ms)")
        if summary["error_class"]:
            print(f"Fetch failed: class={summary['error_class']} detail={summary['detail']}")
        else:
            print(f"Script blocks: {summary['script_blocks']}")
            print(f"Daily candidates: {summary['daily_candidates']} -> {summary['daily_selected']}")
            print(f"Weekly candidates: {summary['weekly_candidates']} -> {summary['weekly_selected']}")
            print(f"Baseline: {summary['baseline']}")

    return 1 if summary["error_class"] or not summary.get("daily_selected") else 0


if __name__ == "__main__":
    raise SystemExit(main())
