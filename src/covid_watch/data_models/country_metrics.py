"""Per-country metrics for one report day.

`CountryMetrics` holds the cumulative counters for a country (or a
watchlist display name, or a synthetic region) and the two derived fields.
`DayDataset` is the country-keyed mapping built from one daily report file.
"""
from __future__ import annotations

import math
from typing import Dict

from pydantic import BaseModel


class CountryMetrics(BaseModel):
    """Cumulative counters for one country on one day.

    `active` and `percentage` are derived and recomputed on every `add`:

    - active = cases - (deaths + recovered), floored at zero
    - percentage = active share of cases, in percent, two decimals;
      exactly 0.0 when there are no cases
    """

    cases: int = 0
    deaths: int = 0
    recovered: int = 0
    active: int = 0
    percentage: float = 0.0

    def add(self, cases: int, deaths: int, recovered: int) -> None:
        self.cases += cases
        self.deaths += deaths
        self.recovered += recovered
        self._recompute()

    def merged(self, other: "CountryMetrics") -> "CountryMetrics":
        """Return a new entry summing both operands' counters."""
        out = self.model_copy()
        out.add(other.cases, other.deaths, other.recovered)
        return out

    def _recompute(self) -> None:
        self.active = max(self.cases - (self.deaths + self.recovered), 0)
        if self.cases == 0:
            self.percentage = 0.0
        else:
            self.percentage = round_half_up(self.active / self.cases * 10000) / 100


def round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves going up.

    Compares the fractional part directly; `floor(value + 0.5)` would round
    values just below .5 up once the addition itself rounds.
    """
    whole = math.floor(value)
    return whole + 1 if value - whole >= 0.5 else whole


DayDataset = Dict[str, CountryMetrics]
