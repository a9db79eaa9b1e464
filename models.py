from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyEntry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, allow_inf_nan=False)

    date: Optional[str] = Field(None, description="Calendar date of the measurement (YYYY-MM-DD)")
    pass_rate: Optional[float] = Field(None, alias="passRate")
    ci_lower: Optional[float] = Field(None, alias="ciLower")
    ci_upper: Optional[float] = Field(None, alias="ciUpper")
    runs_count: Optional[int] = Field(None, alias="runsCount")
    passed: Optional[int] = None


class WeeklyEntry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, allow_inf_nan=False)

    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    date_range: Optional[str] = Field(None, alias="dateRange")
    pass_rate: Optional[float] = Field(None, alias="passRate")
    ci_lower: Optional[float] = Field(None, alias="ciLower")
    ci_upper: Optional[float] = Field(None, alias="ciUpper")
    runs_count: Optional[int] = Field(None, alias="runsCount")


class TrackerSnapshot(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    daily: Optional[List[DailyEntry]] = None
    weekly: Optional[List[WeeklyEntry]] = None
    baseline: Optional[float] = None
