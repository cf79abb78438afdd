"""Watchlist loading and filtering.

The watchlist CSV has a header row and two columns: the country name as it
appears in the daily reports and the name to report it under.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping

import pandas as pd

from covid_watch.data_models.country_metrics import DayDataset
from covid_watch.data_models.watchlist import Watchlist, WatchlistEntry
from covid_watch.errors import ConfigError


logger = logging.getLogger(__name__)


def load_watchlist(csv_path: Path | str) -> Watchlist:
    """Load the watchlist CSV into a `Watchlist`.

    Blank lines are ignored, values are stripped and repeated identical
    entries are collapsed. A source name listed with two different targets,
    or any other defect, is a ConfigError.
    """
    path = Path(csv_path)
    if not path.exists():
        raise ConfigError(f"Watchlist file not found: {path}")

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True,
                         encoding="utf-8-sig")
    except pd.errors.EmptyDataError as exc:
        raise ConfigError(f"Watchlist file is empty: {path}") from exc
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
        raise ConfigError(f"Could not read watchlist {path}: {exc}") from exc

    if len(df.columns) < 2:
        raise ConfigError(f"Watchlist {path} needs two columns (name, target), got {list(df.columns)}")

    entries: List[WatchlistEntry] = []
    targets: Dict[str, str] = {}
    for line_no, (name, target) in enumerate(df.iloc[:, :2].itertuples(index=False), start=2):
        name = str(name).strip()
        target = str(target).strip()
        if not name and not target:
            continue
        if not name or not target:
            raise ConfigError(f"Watchlist {path} line {line_no}: both name and target are required")
        if targets.get(name, target) != target:
            raise ConfigError(
                f"Watchlist {path} line {line_no}: {name!r} already maps to {targets[name]!r}, not {target!r}"
            )
        if name in targets:
            continue
        targets[name] = target
        entries.append(WatchlistEntry(source_name=name, display_name=target))

    if not entries:
        raise ConfigError(f"Watchlist {path} has no entries")

    watchlist = Watchlist(entries=entries)
    logger.info("Loaded watchlist with %d entries (%d display names) from %s",
                len(entries), len(watchlist.display_names), path)
    return watchlist


def filter_watchlist(dataset: DayDataset, watchlist: Mapping[str, str] | Watchlist) -> DayDataset:
    """Copy the watched entries of `dataset`, keyed by display name.

    When several source names share a display name and more than one of
    them is present, their counters are summed. The input is not modified.
    """
    mapping: Mapping[str, str] = watchlist.mapping if isinstance(watchlist, Watchlist) else watchlist

    out: DayDataset = {}
    for source_name, display_name in mapping.items():
        metrics = dataset.get(source_name)
        if metrics is None:
            continue
        existing = out.get(display_name)
        out[display_name] = metrics.model_copy() if existing is None else existing.merged(metrics)
    return out

