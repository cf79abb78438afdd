"""Chronological report over a timeline.

The walk starts at a fixed epoch and steps one calendar day at a time. Each
step is a pure function of (day dataset, previous state) returning the
day's report and the next state, so deltas never depend on ambient state.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import List, Mapping, Sequence, Tuple

from covid_watch.config import DAY_KEY_FORMAT, REPORT_EPOCH
from covid_watch.data_models.country_metrics import DayDataset
from covid_watch.data_models.day_report import DayReport, PreviousValues, ReportLine, ReporterState


logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def rank_display_names(order: Sequence[str], dataset: DayDataset) -> List[str]:
    """Sort by cases descending; absent names count as 0; ties keep `order`."""
    def cases(name: str) -> int:
        metrics = dataset.get(name)
        return metrics.cases if metrics is not None else 0

    return sorted(order, key=cases, reverse=True)


def report_day(
    day: date,
    dataset: DayDataset,
    state: ReporterState,
) -> Tuple[DayReport, ReporterState]:
    """Build one day's report and the state to carry into the next day.

    Names absent from `dataset` produce no line and keep their previous
    buffer values, so a later delta is taken against the last day they
    were seen.
    """
    ranked = rank_display_names(state.order, dataset)
    previous = dict(state.previous)
    lines: List[ReportLine] = []

    for name in ranked:
        metrics = dataset.get(name)
        if metrics is None:
            continue
        prev = previous.get(name, PreviousValues())
        lines.append(
            ReportLine(
                rank=len(lines) + 1,
                display_name=name,
                cases=metrics.cases,
                active=metrics.active,
                percentage=metrics.percentage,
                new_cases=metrics.cases - prev.cases,
                active_delta=metrics.active - prev.active,
                percentage_delta=round(metrics.percentage - prev.percentage, 2),
            )
        )
        previous[name] = PreviousValues(
            cases=metrics.cases, active=metrics.active, percentage=metrics.percentage
        )

    report = DayReport(day=day, day_key=day.strftime(DAY_KEY_FORMAT), lines=lines)
    return report, ReporterState(order=ranked, previous=previous)


def walk_timeline(
    timeline: Mapping[str, DayDataset],
    display_names: Sequence[str],
    epoch: date = REPORT_EPOCH,
    stop_at_first_gap: bool = True,
) -> List[DayReport]:
    """Report every day from `epoch` onwards, one calendar day per step.

    By default the walk ends at the first day missing from the timeline,
    even if later days exist. With `stop_at_first_gap=False` missing days
    are stepped over until the latest day in the timeline.
    """
    reports: List[DayReport] = []
    if not timeline:
        return reports

    last_day = max(datetime.strptime(k, DAY_KEY_FORMAT).date() for k in timeline)
    state = ReporterState(order=list(display_names))
    cursor = epoch

    while cursor <= last_day:
        key = cursor.strftime(DAY_KEY_FORMAT)
        dataset = timeline.get(key)
        if dataset is None:
            if stop_at_first_gap:
                logger.info("No data for %s; report stops after %d days", key, len(reports))
                break
            logger.debug("No data for %s; skipping", key)
            cursor += ONE_DAY
            continue

        report, state = report_day(cursor, dataset, state)
        reports.append(report)
        cursor += ONE_DAY

    return reports


def _signed(value: float, fmt: str) -> str:
    return ("+" if value >= 0 else "") + format(value, fmt)


def render_day_report(report: DayReport) -> str:
    """Human-readable block for one day."""
    out = [f"=== {report.day_key} ==="]
    if not report.lines:
        out.append("  (no watched entries)")
    width = max((len(line.display_name) for line in report.lines), default=0)
    for line in report.lines:
        out.append(
            f"{line.rank:>3}. {line.display_name:<{width}}"
            f"  cases {line.cases:>10,} ({_signed(line.new_cases, ',')})"
            f"  active {line.active:>10,} ({_signed(line.active_delta, ',')})"
            f"  {line.percentage:6.2f}% ({_signed(line.percentage_delta, '.2f')})"
        )
    return "\n".join(out)
