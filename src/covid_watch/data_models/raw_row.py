"""One normalized row of a daily report CSV."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RawRow(BaseModel):
    """A daily report row after header aliases have been resolved.

    Counters are None when the cell was empty or not a non-negative
    integer; the accumulator treats None as zero.
    """

    province: Optional[str] = None
    country: str
    updated: str = ""
    cases: Optional[int] = Field(default=None, ge=0)
    deaths: Optional[int] = Field(default=None, ge=0)
    recovered: Optional[int] = Field(default=None, ge=0)
