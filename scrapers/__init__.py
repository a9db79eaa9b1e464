from .common import FetchError, fetch_url, utc_now_iso
from .tracker_page import collect_candidates, extract_snapshot, find_baseline, script_blocks
from .types import DailyRecord, Snapshot, WeeklyRecord

__all__ = [
    "DailyRecord",
    "FetchError",
    "Snapshot",
    "WeeklyRecord",
    "collect_candidates",
    "extract_snapshot",
    "fetch_url",
    "find_baseline",
    "script_blocks",
    "utc_now_iso",
]
