"""Country accumulation and regional rollup."""
from __future__ import annotations

import logging
from typing import Sequence

from covid_watch.data_models.country_metrics import CountryMetrics, DayDataset


logger = logging.getLogger(__name__)


def accumulate(dataset: DayDataset, country: str, cases: int, deaths: int, recovered: int) -> CountryMetrics:
    """Add one row's counters to `country`, creating a zeroed entry on first sight.

    Mutates `dataset` in place and returns the updated entry.
    """
    metrics = dataset.get(country)
    if metrics is None:
        metrics = CountryMetrics()
        dataset[country] = metrics
    metrics.add(cases, deaths, recovered)
    return metrics


def aggregate_region(dataset: DayDataset, region_name: str, member_countries: Sequence[str]) -> CountryMetrics:
    """Sum the member countries present in `dataset` into a region entry.

    Members absent from the day are skipped. The result is stored under
    `region_name`, replacing any existing entry with that key.

    Raises
    ------
    ValueError
        If `region_name` is itself listed as a member.
    """
    if region_name in member_countries:
        raise ValueError(f"Region {region_name!r} cannot be one of its own members")

    region = CountryMetrics()
    missing = []
    for country in member_countries:
        metrics = dataset.get(country)
        if metrics is None:
            missing.append(country)
            continue
        region.add(metrics.cases, metrics.deaths, metrics.recovered)

    if missing:
        logger.debug("%s rollup: %d of %d members absent (%s)",
                     region_name, len(missing), len(member_countries), ", ".join(missing))

    dataset[region_name] = region
    return region
