# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Freelance FinSight.

This module reads the dashboard data from disk and turns it into the
immutable records consumed by the engine.

Snapshot (JSON)
---------------
The JSON export of the dashboard, a single object with the collections

    tasks, quotes, collaboratorQuotes, clients, collaborators, fixedCosts

using the camelCase keys stored by the application. Missing collections
are treated as empty; malformed records are coerced leniently (see
``models.snapshot_from_dict``).

Fixed costs (CSV)
-----------------
An optional CSV of additional fixed costs (column names are
case-insensitive):

    id, name, amount, frequency, start_date[, end_date, is_active]

- ``amount``:     non-negative number, in the currency of the dashboard,
- ``frequency``:  once, weekly, monthly or yearly,
- ``start_date``: YYYY-MM-DD (required for the cost to ever apply),
- ``end_date``:   YYYY-MM-DD or empty for running costs,
- ``is_active``:  true/false, defaults to true.

If the CSV structure does not match, a clear ValueError is raised.
"""

import json
import os
from typing import Any, Union

import pandas as pd

from .models import FIXED_COST_FREQUENCIES, FixedCost, Snapshot, snapshot_from_dict
from .periods import to_date

PathLike = Union[str, "os.PathLike[str]"]

_REQUIRED_FIXED_COST_COLUMNS = {"id", "name", "amount", "frequency", "start_date"}


def read_snapshot(path: PathLike) -> Snapshot:
    """
    Read a dashboard snapshot from a JSON file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not valid JSON or its root is not an object.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in snapshot file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid snapshot root type in {path}, expected an object.")

    return snapshot_from_dict(data)


def _cell(value: Any) -> Any:
    """Turn pandas missing values (NaN, NaT) into None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _is_active(value: Any) -> bool:
    value = _cell(value)
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return bool(value)


def read_fixed_costs_csv(path: PathLike) -> tuple[FixedCost, ...]:
    """
    Read fixed costs from a CSV file.

    Returns
    -------
    tuple[FixedCost, ...]
        One FixedCost per row, in file order.

    Raises
    ------
    ValueError
        If required columns are missing or amounts, frequencies or dates
        cannot be parsed.
    """
    df = pd.read_csv(path, dtype=str)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [c.lower().strip() for c in df.columns]
    cols = set(df.columns)

    missing = _REQUIRED_FIXED_COST_COLUMNS - cols
    if missing:
        raise ValueError(
            "Invalid fixed costs structure. Missing column(s): "
            f"{', '.join(sorted(missing))}. Expected: "
            "id, name, amount, frequency, start_date[, end_date, is_active]."
        )

    d = df.copy()
    d["amount"] = pd.to_numeric(d["amount"], errors="coerce")
    if d["amount"].isna().any():
        raise ValueError("Invalid numeric values in 'amount' column.")
    if (d["amount"] < 0).any():
        raise ValueError("Negative values in 'amount' column.")

    d["frequency"] = d["frequency"].astype(str).str.strip().str.lower()
    unknown = sorted(set(d["frequency"]) - set(FIXED_COST_FREQUENCIES))
    if unknown:
        raise ValueError(f"Invalid values in 'frequency' column: {', '.join(unknown)}.")

    # Parse dates strictly: invalid dates should fail loudly
    for col in ("start_date", "end_date"):
        if col not in d.columns:
            d[col] = pd.NaT
            continue
        try:
            d[col] = pd.to_datetime(d[col], errors="raise")
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid values in '{col}' column.") from exc

    costs = []
    for row in d.to_dict(orient="records"):
        costs.append(
            FixedCost(
                id=str(row["id"]),
                name=str(_cell(row["name"]) or ""),
                amount=float(row["amount"]),
                frequency=row["frequency"],
                start_date=to_date(_cell(row["start_date"])),
                end_date=to_date(_cell(row["end_date"])),
                is_active=_is_active(row.get("is_active")),
            )
        )
    return tuple(costs)
