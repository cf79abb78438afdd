"""Pipeline settings.

Defaults live here; `build_settings()` applies `COVID_WATCH_*` environment
overrides and then any explicit overrides passed by the caller (the CLI).
"""
from __future__ import annotations

import os
from datetime import date, datetime
from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, Field, ValidationError

from covid_watch.errors import ConfigError


# First day present in the daily report series
REPORT_EPOCH = date(2020, 1, 22)
DAY_KEY_FORMAT = "%m-%d-%Y"

REGION_NAME = "Europe"
EUROPEAN_COUNTRIES: Tuple[str, ...] = (
    "Italy", "France", "Spain", "Germany", "Switzerland", "United Kingdom",
    "Netherlands", "Norway", "Belgium", "Austria", "Sweden", "Denmark",
    "Czechia", "Portugal", "Greece", "Finland", "Ireland", "Slovenia",
    "Estonia", "Iceland", "Poland", "Romania", "Luxembourg", "Slovakia",
    "Armenia", "Serbia", "Bulgaria", "Croatia", "Latvia", "Albania",
    "Hungary", "Belarus", "Cyprus", "Georgia", "Bosnia and Herzegovina",
    "Malta", "North Macedonia",
)

ENV_PREFIX = "COVID_WATCH_"


class PipelineSettings(BaseModel):
    data_dir: Path = Path("data/csse_covid_19_daily_reports")
    watchlist_path: Path = Path("settings_data/watchlist.csv")
    output_path: Path = Path("out/timeline.json")

    epoch: date = REPORT_EPOCH
    region_name: str = REGION_NAME
    region_members: List[str] = Field(default_factory=lambda: list(EUROPEAN_COUNTRIES))

    # False: skip files whose name is not a MM-DD-YYYY date, with a warning
    strict_day_keys: bool = True
    # False: step over missing days until the last day in the timeline
    stop_at_first_gap: bool = True


def _read_env() -> dict:
    overrides = {}
    for field in ("data_dir", "watchlist_path", "output_path", "epoch",
                  "strict_day_keys", "stop_at_first_gap"):
        raw = os.getenv(ENV_PREFIX + field.upper())
        if raw is None or raw.strip() == "":
            continue
        overrides[field] = raw.strip()
    if "epoch" in overrides:
        overrides["epoch"] = parse_epoch(overrides["epoch"])
    return overrides


def parse_epoch(value: str) -> date:
    """Accept either ISO (`2020-01-22`) or day-key (`01-22-2020`) dates."""
    for fmt in ("%Y-%m-%d", DAY_KEY_FORMAT):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ConfigError(f"Could not parse epoch date {value!r}; use YYYY-MM-DD or MM-DD-YYYY")


def build_settings(**overrides) -> PipelineSettings:
    """Validate settings from environment plus explicit overrides.

    Overrides with value None are ignored so CLI options can be passed
    through unconditionally.
    """
    values = _read_env()
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        settings = PipelineSettings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline settings: {exc}") from exc
    if settings.region_name in settings.region_members:
        raise ConfigError(f"Region {settings.region_name!r} cannot be one of its own members")
    return settings
