from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

DAILY_KEYS = ("date", "passRate", "ciLower", "ciUpper", "runsCount", "passed")
WEEKLY_KEYS = ("startDate", "endDate", "dateRange", "passRate", "ciLower", "ciUpper", "runsCount")


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def _to_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _extra(payload: dict, known: tuple[str, ...]) -> dict:
    return {key: value for key, value in payload.items() if key not in known}


@dataclass
class DailyRecord:
    date: str | None
    pass_rate: float | None
    ci_lower: float | None = None
    ci_upper: float | None = None
    runs_count: int | None = None
    passed: int | None = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "DailyRecord":
        return cls(
            date=_to_str(payload.get("date")),
            pass_rate=_to_float(payload.get("passRate")),
            ci_lower=_to_float(payload.get("ciLower")),
            ci_upper=_to_float(payload.get("ciUpper")),
            runs_count=_to_int(payload.get("runsCount")),
            passed=_to_int(payload.get("passed")),
            extra=_extra(payload, DAILY_KEYS),
        )

    def to_payload(self) -> dict:
        return {
            "date": self.date,
            "passRate": self.pass_rate,
            "ciLower": self.ci_lower,
            "ciUpper": self.ci_upper,
            "runsCount": self.runs_count,
            "passed": self.passed,
            **self.extra,
        }


@dataclass
class WeeklyRecord:
    start_date: str | None
    pass_rate: float | None
    end_date: str | None = None
    date_range: str | None = None
    ci_lower: float | None = None
    ci_upper: float | None = None
    runs_count: int | None = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "WeeklyRecord":
        return cls(
            start_date=_to_str(payload.get("startDate")),
            pass_rate=_to_float(payload.get("passRate")),
            end_date=_to_str(payload.get("endDate")),
            date_range=_to_str(payload.get("dateRange")),
            ci_lower=_to_float(payload.get("ciLower")),
            ci_upper=_to_float(payload.get("ciUpper")),
            runs_count=_to_int(payload.get("runsCount")),
            extra=_extra(payload, WEEKLY_KEYS),
        )

    def to_payload(self) -> dict:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "dateRange": self.date_range,
            "passRate": self.pass_rate,
            "ciLower": self.ci_lower,
            "ciUpper": self.ci_upper,
            "runsCount": self.runs_count,
            **self.extra,
        }


@dataclass
class Snapshot:
    daily: list[DailyRecord] | None = None
    weekly: list[WeeklyRecord] | None = None
    baseline: float | None = None

    @property
    def has_daily(self) -> bool:
        return bool(self.daily)

    def to_payload(self) -> dict:
        return {
            "daily": [row.to_payload() for row in self.daily] if self.daily is not None else None,
            "weekly": [row.to_payload() for row in self.weekly] if self.weekly is not None else None,
            "baseline": self.baseline,
        }
