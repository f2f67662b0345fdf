# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Freelance FinSight.

This module wires together the main building blocks of Freelance FinSight:

- application configuration (data paths, report options, logging),
- snapshot and fixed costs loading,
- reporting range selection,
- the reporting engine (one pass over the snapshot),
- view helpers (tabular rendering and exports).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (``freelance_finsight_config.toml`` by
   default, optional) using ``load_app_config()``.

2) Configure logging: ``--log-level``, else ``[logging].level``, else the
   ``FREELANCE_FINSIGHT_LOG_LEVEL`` environment variable, else WARNING.

3) Read the snapshot (``--snapshot`` or ``[data].snapshot``) and append
   the fixed costs of the optional ``[data].fixed_costs_csv`` file.

4) Determine the reporting range:

   - ``--period all|week|month|year`` (anchored on ``--anchor``),
   - else ``--from`` / ``--to`` (either side optional),
   - else ``[report].default_period``.

5) Compute every report with ``compute_reports()``.

6) Render the selected scope as text tables, CSV files or JSON.


Scopes
------

``summary``, ``breakdown``, ``details``, ``monthly``, ``fixed-costs``,
``projections`` or ``all`` (default).


Exit status
-----------

0 on success, 2 when the configuration, the snapshot or the arguments
cannot be used (the error is printed on stderr).


Examples
--------

    freelance-finsight --snapshot data/snapshot.json --period year
    freelance-finsight --from 2024-01-01 --to 2024-03-31 --scope monthly
    freelance-finsight --scope details --format csv --output-dir out/
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DEFAULT_CONFIG_FILE, AppConfig, load_app_config
from .io import read_fixed_costs_csv, read_snapshot
from .logging_setup import resolve_level, setup_logging
from .periods import PERIOD_CHOICES, determine_range_from_args
from .reports import FinancialReports, compute_reports
from .views import (
    breakdown_to_dataframe,
    fixed_costs_to_dataframe,
    monthly_to_dataframe,
    projections_to_dataframe,
    summary_to_dataframe,
    task_details_to_dataframe,
)

logger = logging.getLogger(__name__)

SCOPES = ("summary", "breakdown", "details", "monthly", "fixed-costs", "projections")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="freelance-finsight",
        description=(
            "Freelance FinSight - Financial reporting engine for freelance "
            "dashboards. Reads a dashboard snapshot and renders revenue, "
            "costs, profit, per-client and per-month reports."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of freelance_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )
    ap.add_argument(
        "--snapshot",
        dest="snapshot_path",
        help="Path to the JSON snapshot. Overrides [data].snapshot.",
    )

    # Range selection
    ap.add_argument(
        "--period",
        choices=list(PERIOD_CHOICES),
        help="Predefined reporting period. Overrides --from/--to.",
    )
    ap.add_argument(
        "--anchor",
        help=(
            "Reference day (YYYY-MM-DD) used as 'today' for presets and for "
            "running fixed costs. Defaults to today."
        ),
    )
    ap.add_argument("--from", dest="from_date", help="Custom range start (YYYY-MM-DD).")
    ap.add_argument("--to", dest="to_date", help="Custom range end (YYYY-MM-DD).")

    # Output
    ap.add_argument(
        "--scope",
        choices=[*SCOPES, "all"],
        default="all",
        help="Select which report(s) to render.",
    )
    ap.add_argument(
        "--format",
        dest="output_format",
        choices=["table", "csv", "json"],
        default="table",
        help=(
            "'table' prints text tables, 'csv' writes one CSV file per report, "
            "'json' prints the reports as a JSON document."
        ),
    )
    ap.add_argument(
        "--output-dir",
        dest="output_dir",
        help="Directory for CSV files. If omitted, 'data/output' is used.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return ap


def _load_config(config_path: Optional[str]) -> AppConfig:
    """Explicit config paths must exist; the default file is optional."""
    if config_path:
        return load_app_config(config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return AppConfig()


def _build_tables(
    reports: FinancialReports, scopes: list[str], decimals: int
) -> dict[str, pd.DataFrame]:
    builders = {
        "summary": lambda: summary_to_dataframe(
            reports.summary, reports.additional, decimals
        ),
        "breakdown": lambda: breakdown_to_dataframe(reports.revenue_breakdown, decimals),
        "details": lambda: task_details_to_dataframe(reports.task_details, decimals),
        "monthly": lambda: monthly_to_dataframe(reports.monthly, decimals),
        "fixed-costs": lambda: fixed_costs_to_dataframe(reports.fixed_costs, decimals),
        "projections": lambda: projections_to_dataframe(
            reports.additional_task_details, decimals
        ),
    }
    return {scope: builders[scope]() for scope in scopes}


_TITLES = {
    "summary": "Financial summary",
    "breakdown": "Revenue by client",
    "details": "Task details",
    "monthly": "Monthly financials",
    "fixed-costs": "Fixed costs",
    "projections": "Future and lost revenue",
}


def _render_tables(tables: dict[str, pd.DataFrame], currency: str) -> None:
    for scope, df in tables.items():
        print()
        print(f"=== {_TITLES[scope]} ({currency}) ===")
        if df.empty:
            print("(no data)")
        else:
            print(df.to_string(index=False))


def _write_csv(tables: dict[str, pd.DataFrame], output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    for scope, df in tables.items():
        path = output_dir / f"{scope.replace('-', '_')}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def _render_json(tables: dict[str, pd.DataFrame], reports: FinancialReports) -> None:
    date_range = reports.date_range
    doc = {
        "range": {
            "label": date_range.label,
            "start": date_range.start.isoformat() if date_range.start else None,
            "end": date_range.end.isoformat() if date_range.end else None,
        },
        "reports": {
            scope: json.loads(df.to_json(orient="records")) for scope, df in tables.items()
        },
    }
    print(json.dumps(doc, indent=2))


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the Freelance FinSight CLI.

    Parses command-line arguments, loads the configuration and the
    snapshot, determines the reporting range, computes every report and
    renders the selected scope. Returns the process exit status.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"freelance_finsight version {__version__}")
        return 0

    try:
        # 1) Configuration and logging
        config = _load_config(args.config_path)
        setup_logging(resolve_level(args.log_level, config.log_level))

        # 2) Snapshot (+ optional fixed costs CSV)
        snapshot_path = Path(args.snapshot_path) if args.snapshot_path else config.data.snapshot
        if snapshot_path is None:
            parser.error("No snapshot configured. Provide --snapshot or set [data].snapshot.")

        snapshot = read_snapshot(snapshot_path)
        if config.data.fixed_costs_csv is not None:
            extra = read_fixed_costs_csv(config.data.fixed_costs_csv)
            snapshot = replace(snapshot, fixed_costs=snapshot.fixed_costs + extra)
            logger.info("Loaded %d fixed cost(s) from %s", len(extra), config.data.fixed_costs_csv)

        # 3) Reporting range
        date_range = determine_range_from_args(args, config.report.default_period)
        as_of = date.fromisoformat(args.anchor) if args.anchor else None
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    logger.info(
        "Snapshot %s: %d task(s), %d quote(s); range: %s",
        snapshot_path,
        len(snapshot.tasks),
        len(snapshot.quotes),
        date_range.label,
    )

    # 4) Compute every report in one pass
    reports = compute_reports(snapshot, date_range, as_of=as_of)

    # 5) Render
    scopes = list(SCOPES) if args.scope == "all" else [args.scope]
    tables = _build_tables(reports, scopes, config.report.decimals)

    if args.output_format == "json":
        _render_json(tables, reports)
    elif args.output_format == "csv":
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        _write_csv(tables, output_dir)
    else:
        print(f"Applied range: {date_range.label}")
        _render_tables(tables, config.report.currency)

    return 0


if __name__ == "__main__":
    sys.exit(main())
