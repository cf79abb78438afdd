"""Watchlist models.

A watchlist maps source country names (as they appear in the daily
reports) to display names. Several source names may share a display name;
their metrics are summed when they appear on the same day.
"""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class WatchlistEntry(BaseModel):
    source_name: str
    display_name: str


class Watchlist(BaseModel):
    entries: List[WatchlistEntry] = Field(default_factory=list)

    @property
    def mapping(self) -> Dict[str, str]:
        """Source name -> display name; `load_watchlist` rejects conflicting repeats."""
        return {e.source_name: e.display_name for e in self.entries}

    @property
    def display_names(self) -> List[str]:
        """Unique display names in first-seen order."""
        seen: List[str] = []
        for e in self.entries:
            if e.display_name not in seen:
                seen.append(e.display_name)
        return seen

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> "Watchlist":
        return cls(
            entries=[WatchlistEntry(source_name=k, display_name=v) for k, v in mapping.items()]
        )
