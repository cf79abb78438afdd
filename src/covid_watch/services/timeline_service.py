"""Timeline building and export.

A timeline maps each report day key (`MM-DD-YYYY`, taken from the file
name) to that day's watchlist-filtered dataset.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence, Set

from covid_watch.config import DAY_KEY_FORMAT, EUROPEAN_COUNTRIES, REGION_NAME
from covid_watch.data_models.country_metrics import DayDataset
from covid_watch.data_models.watchlist import Watchlist
from covid_watch.errors import DayKeyError, LoadError
from covid_watch.services.daily_report_ingestion_service import load_day
from covid_watch.services.watchlist_service import filter_watchlist


logger = logging.getLogger(__name__)

Timeline = Dict[str, DayDataset]


def discover_daily_report_files(data_dir: Path | str) -> List[Path]:
    """List `.csv` files directly under `data_dir`, in directory order."""
    folder = Path(data_dir)
    if not folder.is_dir():
        raise FileNotFoundError(f"Daily report directory not found: {folder}")
    files = [p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".csv"]
    logger.info("Found %d daily report files in %s", len(files), folder)
    return files


def parse_day_key(file_path: Path | str) -> date:
    """Return the report date encoded in a file's base name."""
    stem = Path(file_path).stem
    try:
        day = datetime.strptime(stem, DAY_KEY_FORMAT).date()
    except ValueError as exc:
        raise DayKeyError(f"File name {Path(file_path).name!r} is not a MM-DD-YYYY date") from exc
    # strptime also accepts unpadded names such as 1-22-2020
    if stem != format_day_key(day):
        raise DayKeyError(f"File name {Path(file_path).name!r} is not a zero-padded MM-DD-YYYY date")
    return day


def format_day_key(day: date) -> str:
    return day.strftime(DAY_KEY_FORMAT)


def build_timeline(
    files: Iterable[Path | str],
    watchlist: Mapping[str, str] | Watchlist,
    region_name: str = REGION_NAME,
    region_members: Sequence[str] = EUROPEAN_COUNTRIES,
    strict_day_keys: bool = True,
) -> Timeline:
    """Load, filter and key every daily report file by its date.

    Days whose filtered dataset is empty are left out. A file that fails to
    load is skipped with a warning. A file name that is not a date is fatal
    unless `strict_day_keys` is False, in which case it is skipped too.
    Only the first file seen for a given day is used; later ones are
    skipped with a warning.
    """
    timeline: Timeline = {}
    seen_keys: Set[str] = set()
    skipped = 0
    for file_path in files:
        path = Path(file_path)
        try:
            day = parse_day_key(path)
        except DayKeyError:
            if strict_day_keys:
                raise
            logger.warning("Skipping %s: name is not a MM-DD-YYYY date", path.name)
            skipped += 1
            continue

        key = format_day_key(day)
        if key in seen_keys:
            logger.warning("Skipping %s: another file already provided %s", path.name, key)
            skipped += 1
            continue
        seen_keys.add(key)

        try:
            dataset = load_day(path, region_name=region_name, region_members=region_members)
        except LoadError as exc:
            logger.warning("Skipping %s: %s", path.name, exc)
            skipped += 1
            continue

        watched = filter_watchlist(dataset, watchlist)
        if not watched:
            logger.warning("Dropping %s: no watchlist country present", path.name)
            skipped += 1
            continue

        timeline[key] = watched

    logger.info("Timeline holds %d days (%d files skipped or dropped)", len(timeline), skipped)
    return timeline


def timeline_to_dict(timeline: Timeline) -> Dict[str, Dict[str, dict]]:
    """Plain-dict view of the timeline with days in calendar order."""
    ordered = sorted(timeline, key=lambda k: datetime.strptime(k, DAY_KEY_FORMAT))
    return {
        key: {name: metrics.model_dump() for name, metrics in timeline[key].items()}
        for key in ordered
    }


def timeline_to_json(timeline: Timeline) -> str:
    return json.dumps(timeline_to_dict(timeline), indent=2)


def write_timeline_json(timeline: Timeline, output_path: Path | str) -> Path:
    """Write the timeline snapshot, creating parent directories."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(timeline_to_json(timeline), encoding="utf-8")
    logger.info("Wrote %d days to %s", len(timeline), path)
    return path
