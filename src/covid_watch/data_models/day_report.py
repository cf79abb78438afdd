"""Reporter output models.

`DayReport` is what the chronological walk emits for one calendar day;
`ReporterState` is the value threaded from one day to the next.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List

from pydantic import BaseModel, Field


class PreviousValues(BaseModel):
    """Last-seen values for one display name."""

    cases: int = 0
    active: int = 0
    percentage: float = 0.0


class ReportLine(BaseModel):
    rank: int
    display_name: str

    cases: int
    active: int
    percentage: float

    new_cases: int          # cases minus previous buffer cases
    active_delta: int       # may be negative
    percentage_delta: float


class DayReport(BaseModel):
    day: date
    day_key: str
    lines: List[ReportLine] = Field(default_factory=list)


class ReporterState(BaseModel):
    """Rolling state of the walk: ranking order and previous-day buffer."""

    order: List[str] = Field(default_factory=list)
    previous: Dict[str, PreviousValues] = Field(default_factory=dict)
