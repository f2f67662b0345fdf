# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Freelance FinSight.

This module turns the report dataclasses produced by the engine into
pandas DataFrames ready for display (``DataFrame.to_string``) or CSV/JSON
export. Every helper:

- returns the same columns in the same order, even for empty reports,
- rounds amounts to the requested number of decimals,
- never changes the row order chosen by the engine.

The computation itself is performed by ``engine``, ``projections`` and
``reports``; nothing here changes a figure other than rounding it.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

import pandas as pd

from .engine import (
    DetailItem,
    FinancialSummary,
    FixedCostDetails,
    MonthlyFinancials,
    RevenueBreakdownItem,
    TaskDetails,
)
from .projections import AdditionalFinancials, AdditionalTaskDetails

SUMMARY_COLUMNS = ["metric", "amount"]
BREAKDOWN_COLUMNS = ["name", "value"]
DETAIL_COLUMNS = ["type", "id", "name", "client_name", "collaborator_name", "amount"]
MONTHLY_COLUMNS = ["month_year", "revenue", "costs", "profit"]
FIXED_COST_COLUMNS = ["id", "name", "frequency", "amount"]


def _frame(rows: list[dict[str, object]], columns: Sequence[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame(rows)[list(columns)]


def summary_to_dataframe(
    summary: FinancialSummary,
    additional: Optional[AdditionalFinancials] = None,
    decimals: int = 0,
) -> pd.DataFrame:
    """One row per summary figure, optionally followed by the projections."""
    figures = [
        ("revenue", summary.revenue),
        ("collaborator_costs", summary.collaborator_costs),
        ("fixed_costs", summary.fixed_costs),
        ("costs", summary.costs),
        ("profit", summary.profit),
    ]
    if additional is not None:
        figures.append(("future_revenue", additional.future_revenue))
        figures.append(("lost_revenue", additional.lost_revenue))

    rows = [{"metric": k, "amount": round(v, decimals)} for k, v in figures]
    return _frame(rows, SUMMARY_COLUMNS)


def breakdown_to_dataframe(
    items: Iterable[RevenueBreakdownItem], decimals: int = 0
) -> pd.DataFrame:
    rows = [{"name": i.name, "value": round(i.value, decimals)} for i in items]
    return _frame(rows, BREAKDOWN_COLUMNS)


def _detail_rows(items: Iterable[DetailItem], decimals: int) -> list[dict[str, object]]:
    return [
        {
            "type": i.type,
            "id": i.id,
            "name": i.name,
            "client_name": i.client_name,
            "collaborator_name": i.collaborator_name or "",
            "amount": round(i.amount, decimals),
        }
        for i in items
    ]


def task_details_to_dataframe(details: TaskDetails, decimals: int = 0) -> pd.DataFrame:
    """Revenue lines first, then collaborator cost lines."""
    rows = _detail_rows(details.revenue_items, decimals)
    rows += _detail_rows(details.cost_items, decimals)
    return _frame(rows, DETAIL_COLUMNS)


def projections_to_dataframe(
    details: AdditionalTaskDetails, decimals: int = 0
) -> pd.DataFrame:
    """Future revenue lines first, then lost revenue lines."""
    rows = _detail_rows(details.future_revenue_items, decimals)
    rows += _detail_rows(details.lost_revenue_items, decimals)
    return _frame(rows, DETAIL_COLUMNS)


def monthly_to_dataframe(
    months: Iterable[MonthlyFinancials], decimals: int = 0
) -> pd.DataFrame:
    rows = [
        {
            "month_year": m.month_year,
            "revenue": round(m.revenue, decimals),
            "costs": round(m.costs, decimals),
            "profit": round(m.profit, decimals),
        }
        for m in months
    ]
    return _frame(rows, MONTHLY_COLUMNS)


def fixed_costs_to_dataframe(details: FixedCostDetails, decimals: int = 0) -> pd.DataFrame:
    rows = [
        {
            "id": i.id,
            "name": i.name,
            "frequency": i.frequency,
            "amount": round(i.amount, decimals),
        }
        for i in details.fixed_cost_items
    ]
    return _frame(rows, FIXED_COST_COLUMNS)
