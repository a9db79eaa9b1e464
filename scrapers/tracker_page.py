"""Pass-rate series embedded in the tracker page's inline scripts.

The page ships its chart data as JSON array literals inside ``<script>`` blocks.
Arrays are located with flat-object patterns: any nested ``[``/``]`` inside an
object breaks the match, so nested payloads are never picked up.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass

from .types import DailyRecord, Snapshot, WeeklyRecord

SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>([\s\S]*?)</script>", re.IGNORECASE)
DAILY_ARRAY_RE = re.compile(r'(\[\s*\{[^\[\]]*"date"\s*:[^\[\]]*"passRate"\s*:[^\[\]]*\}\s*\])')
WEEKLY_ARRAY_RE = re.compile(r'(\[\s*\{[^\[\]]*"startDate"\s*:[^\[\]]*"passRate"\s*:[^\[\]]*\}\s*\])')
BASELINE_CUES = (
    re.compile(r"baseline[^=]*=\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"baselinePassRate[^=]*=\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
)


def script_blocks(html: str) -> list[str]:
    return SCRIPT_BLOCK_RE.findall(html)


@dataclass
class Candidate:
    size: int
    records: list


def _reject_constant(token: str) -> float:
    raise ValueError(f"non-standard JSON constant {token}")


def _parse_candidates(text: str, pattern: re.Pattern, key: str, record_cls) -> list[Candidate]:
    found: list[Candidate] = []
    for match in pattern.finditer(text):
        try:
            parsed = json.loads(match.group(1), parse_constant=_reject_constant)
        except ValueError:
            continue
        if not isinstance(parsed, list) or not parsed:
            continue
        first = parsed[0]
        if not isinstance(first, dict) or not first.get(key) or first.get("passRate") is None:
            continue
        # Rows are coerced leniently; selection is by the array's own length.
        records = [record_cls.from_payload(row) for row in parsed if isinstance(row, dict)]
        found.append(Candidate(size=len(parsed), records=records))
    return found


def collect_candidates(html: str) -> dict[str, list[Candidate]]:
    """Return every parseable daily and weekly array, in document order."""
    daily: list[Candidate] = []
    weekly: list[Candidate] = []
    for block in script_blocks(html):
        daily.extend(_parse_candidates(block, DAILY_ARRAY_RE, "date", DailyRecord))
        weekly.extend(_parse_candidates(block, WEEKLY_ARRAY_RE, "startDate", WeeklyRecord))
    return {"daily": daily, "weekly": weekly}


def _pick_longest(candidates: list[Candidate]) -> list | None:
    # Longest wins; on a tie the earliest candidate is kept.
    best: Candidate | None = None
    for candidate in candidates:
        if best is None or candidate.size > best.size:
            best = candidate
    return best.records if best is not None else None


def find_baseline(html: str) -> float | None:
    for cue in BASELINE_CUES:
        match = cue.search(html)
        if not match:
            continue
        try:
            return float(match.group(1))
        except ValueError:
            continue
    return None


def extract_snapshot(html: str) -> Snapshot:
    candidates = collect_candidates(html)
    return Snapshot(
        daily=_pick_longest(candidates["daily"]),
        weekly=_pick_longest(candidates["weekly"]),
        baseline=find_baseline(html),
    )
