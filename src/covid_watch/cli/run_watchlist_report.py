"""Command-line entrypoint for the watchlist report.

Loads the watchlist, builds the timeline from a directory of daily report
CSVs, writes the JSON snapshot and prints the chronological report.

Example:

    covid-watch --data-dir data/csse_covid_19_daily_reports \
        --watchlist settings_data/watchlist.csv --output out/timeline.json
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from covid_watch.config import build_settings, parse_epoch
from covid_watch.errors import ConfigError, DayKeyError
from covid_watch.services.chronological_report_service import render_day_report, walk_timeline
from covid_watch.services.timeline_service import (
    build_timeline,
    discover_daily_report_files,
    write_timeline_json,
)
from covid_watch.services.watchlist_service import load_watchlist

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)


@app.command()
def run_report(
    data_dir: Optional[Path] = typer.Option(None, help="Directory of MM-DD-YYYY.csv daily reports."),
    watchlist: Optional[Path] = typer.Option(None, help="Two-column watchlist CSV (name, target)."),
    output: Optional[Path] = typer.Option(None, help="Where to write the timeline JSON."),
    epoch: Optional[str] = typer.Option(None, help="First report day (YYYY-MM-DD or MM-DD-YYYY)."),
    skip_gaps: bool = typer.Option(False, "--skip-gaps", help="Step over missing days instead of stopping."),
    lenient_day_keys: bool = typer.Option(
        False, "--lenient-day-keys", help="Skip files not named MM-DD-YYYY instead of failing."
    ),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    print("COVID-19 situation for watched countries")
    try:
        settings = build_settings(
            data_dir=data_dir,
            watchlist_path=watchlist,
            output_path=output,
            epoch=parse_epoch(epoch) if epoch else None,
            stop_at_first_gap=False if skip_gaps else None,
            strict_day_keys=False if lenient_day_keys else None,
        )
        wl = load_watchlist(settings.watchlist_path)
    except ConfigError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)

    try:
        files = discover_daily_report_files(settings.data_dir)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)

    try:
        timeline = build_timeline(
            files,
            wl,
            region_name=settings.region_name,
            region_members=settings.region_members,
            strict_day_keys=settings.strict_day_keys,
        )
    except DayKeyError as exc:
        logger.error("%s (use --lenient-day-keys to skip such files)", exc)
        raise typer.Exit(code=1)
    print(f"{len(timeline)} days worth of data gathered")
    write_timeline_json(timeline, settings.output_path)

    reports = walk_timeline(
        timeline,
        wl.display_names,
        epoch=settings.epoch,
        stop_at_first_gap=settings.stop_at_first_gap,
    )
    for report in reports:
        print(render_day_report(report))
        print()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
