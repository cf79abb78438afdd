"""Daily report ingestion.

Reads one daily report CSV, resolves the historical column-name variants
once per file, and folds every row into a country-keyed `DayDataset`.
The region rollup is appended after all rows are consumed.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from covid_watch.config import EUROPEAN_COUNTRIES, REGION_NAME
from covid_watch.data_models.country_metrics import DayDataset
from covid_watch.data_models.raw_row import RawRow
from covid_watch.errors import LoadError, ParseError
from covid_watch.services.country_aggregation_service import accumulate, aggregate_region


logger = logging.getLogger(__name__)


# Accepted header names per logical field, in lookup order
COLUMN_ALIASES: Dict[str, Sequence[str]] = {
    "province": ("Province_State", "Province/State"),
    "country": ("Country_Region", "Country/Region"),
    "updated": ("Last_Update", "Last Update"),
    "cases": ("Confirmed",),
    "deaths": ("Deaths",),
    "recovered": ("Recovered",),
}
REQUIRED_FIELDS = ("country", "updated")
COUNTER_FIELDS = ("cases", "deaths", "recovered")

_UINT_RE = re.compile(r"^\+?\d+$")


def parse_counter(value: object) -> Optional[int]:
    """Parse a counter cell; anything but a non-negative integer is None."""
    if value is None:
        return None
    s = str(value).strip()
    if not _UINT_RE.match(s):
        return None
    return int(s)


def resolve_columns(columns: Sequence[str]) -> Dict[str, Optional[str]]:
    """Map each logical field to the first matching header, or None.

    Raises ParseError when a required field has no matching header.
    """
    present = {str(c).strip(): str(c) for c in columns}
    resolved: Dict[str, Optional[str]] = {}
    for field, aliases in COLUMN_ALIASES.items():
        resolved[field] = next((present[a] for a in aliases if a in present), None)

    missing = [f for f in REQUIRED_FIELDS if resolved[f] is None]
    if missing:
        wanted = ", ".join("/".join(COLUMN_ALIASES[f]) for f in missing)
        raise ParseError(f"Missing required column(s): {wanted}")
    return resolved


def _read_frame(csv_path: Path) -> pd.DataFrame:
    # Everything as text; counters are parsed per cell so bad values
    # become absent instead of poisoning the column dtype.
    try:
        return pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as exc:
        raise ParseError(f"No header found in {csv_path}") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise ParseError(f"Malformed CSV {csv_path}: {exc}") from exc


def normalize_rows(df: pd.DataFrame) -> Iterator[RawRow]:
    """Yield a `RawRow` per data row of a daily report frame.

    Rows with a blank country/region cell are skipped with a warning; only a
    missing country/region column fails the frame.
    """
    columns = resolve_columns(list(df.columns))

    def cell(row: dict, field: str) -> Optional[str]:
        col = columns[field]
        if col is None:
            return None
        value = row.get(col)
        # short rows come back as NaN
        return value if isinstance(value, str) else None

    for line_no, row in enumerate(df.to_dict(orient="records"), start=2):
        country = (cell(row, "country") or "").strip()
        if not country:
            logger.warning("Row %d: empty country/region value, row skipped", line_no)
            continue
        province = (cell(row, "province") or "").strip() or None
        yield RawRow(
            province=province,
            country=country,
            updated=(cell(row, "updated") or "").strip(),
            cases=parse_counter(cell(row, "cases")),
            deaths=parse_counter(cell(row, "deaths")),
            recovered=parse_counter(cell(row, "recovered")),
        )


def load_day(
    csv_path: Path | str,
    region_name: str = REGION_NAME,
    region_members: Sequence[str] = EUROPEAN_COUNTRIES,
) -> DayDataset:
    """Load one daily report file into a `DayDataset`.

    Rows for the same country (one per province/state) are merged. The
    region entry is computed once, after every row has been accumulated.

    Raises
    ------
    LoadError
        If the file cannot be opened or lacks a required column.
    """
    path = Path(csv_path)
    try:
        df = _read_frame(path)
        rows: List[RawRow] = list(normalize_rows(df))
    except ParseError as exc:
        raise LoadError(f"Could not parse daily report {path}: {exc}") from exc
    except OSError as exc:
        raise LoadError(f"Could not open daily report {path}: {exc}") from exc

    dataset: DayDataset = {}
    for r in rows:
        accumulate(dataset, r.country, r.cases or 0, r.deaths or 0, r.recovered or 0)
    n_countries = len(dataset)

    aggregate_region(dataset, region_name, region_members)
    logger.info("Loaded %d rows (%d countries) from %s", len(rows), n_countries, path.name)
    return dataset
