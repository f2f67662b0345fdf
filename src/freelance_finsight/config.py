# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Freelance FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- resolving data paths relative to that file,
- exposing typed dataclasses used by the CLI.
"""

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .periods import PERIOD_CHOICES

DEFAULT_CONFIG_FILE = "freelance_finsight_config.toml"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class DataConfig:
    """Where the dashboard data is read from."""

    snapshot: Optional[Path] = None
    fixed_costs_csv: Optional[Path] = None


@dataclass(frozen=True)
class ReportConfig:
    """Display options for rendered reports."""

    currency: str = "USD"
    decimals: int = 0
    default_period: str = "month"


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Freelance FinSight.

    This aggregates:
    - the data sources (JSON snapshot, optional fixed costs CSV),
    - report display options (currency, decimals, default period),
    - the logging level used by the CLI (None when not configured).
    """

    data: DataConfig = field(default_factory=DataConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    log_level: Optional[str] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _resolve_optional(base_dir: Path, rel: Any) -> Optional[Path]:
    if not rel:
        return None
    return (base_dir / str(rel)).resolve()


def _parse_log_level(raw: Any) -> Optional[str]:
    if raw is None or raw == "":
        return None
    name = str(raw).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"Invalid value for 'logging.level': {raw!r}.")
    return name


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Freelance FinSight configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [data]
        ``snapshot``: path to the JSON export of the dashboard data.
        ``fixed_costs_csv``: optional CSV of additional fixed costs.

    [report]
        ``currency``, ``decimals`` (rounding of rendered amounts) and
        ``default_period`` (all, week, month or year) used when no period
        is given on the command line.

    [logging]
        ``level``: logging level name (DEBUG, INFO, WARNING, ...).

    All sections and keys are optional. File paths are resolved relative
    to the directory of the TOML file itself.

    Parameters
    ----------
    config_path :
        Path to the TOML configuration file. Defaults to
        ``freelance_finsight_config.toml`` in the current directory.

    Returns
    -------
    AppConfig

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the file cannot be parsed or holds invalid values.
    """
    config_file = Path(config_path or DEFAULT_CONFIG_FILE).resolve()
    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Data sources
    data_section = _section(raw, "data")
    data = DataConfig(
        snapshot=_resolve_optional(base_dir, data_section.get("snapshot")),
        fixed_costs_csv=_resolve_optional(base_dir, data_section.get("fixed_costs_csv")),
    )

    # 2) Report options
    report_section = _section(raw, "report")
    try:
        decimals = int(report_section.get("decimals", 0))
    except (TypeError, ValueError):
        decimals = 0

    default_period = str(report_section.get("default_period", "month"))
    if default_period not in PERIOD_CHOICES:
        raise ValueError(
            f"Invalid value for 'report.default_period': {default_period!r}. "
            f"Expected one of: {', '.join(PERIOD_CHOICES)}."
        )

    report = ReportConfig(
        currency=str(report_section.get("currency") or "USD"),
        decimals=max(decimals, 0),
        default_period=default_period,
    )

    # 3) Logging
    logging_section = _section(raw, "logging")
    log_level = _parse_log_level(logging_section.get("level"))

    return AppConfig(data=data, report=report, log_level=log_level)
