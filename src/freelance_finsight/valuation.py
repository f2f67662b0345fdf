# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Quote valuation.

Single source of truth for the monetary value of quote items and quotes.
Every report (summary, breakdown, details, monthly, projections) goes
through these helpers, so a quote is always worth the same amount in
every view.

Value column
------------
The monetary value of an item lives in the "value column", by convention
the column whose id is ``unitPrice``. When that column carries a row
formula, the item's value is the formula evaluated against the other
number columns of the row; otherwise it is the item's ``unit_price``.
A quote whose column list has no value column is worth 0.

Column aggregates
-----------------
:func:`column_aggregates` reproduces the footer line of the quote table
(sum / average / min / max / custom formula per number column).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Union

from .formula import evaluate_row_formula
from .models import (
    DEFAULT_COLUMNS,
    VALUE_COLUMN_ID,
    CollaboratorQuote,
    Column,
    Item,
    Quote,
    to_number,
)

AnyQuote = Union[Quote, CollaboratorQuote]


@dataclass(frozen=True)
class ColumnAggregate:
    """Footer aggregate of one number column of a quote."""

    column_id: str
    name: str
    kind: str
    value: float


def effective_columns(quote: AnyQuote) -> tuple[Column, ...]:
    """Columns used to value ``quote`` (default layout when never customised)."""
    return DEFAULT_COLUMNS if quote.columns is None else quote.columns


def find_column(columns: Sequence[Column], column_id: str) -> Optional[Column]:
    for col in columns:
        if col.id == column_id:
            return col
    return None


def raw_cell_value(item: Item, column: Column) -> float:
    """Stored numeric value of ``item`` for ``column`` (formulas ignored)."""
    if column.id == VALUE_COLUMN_ID:
        return float(item.unit_price or 0.0)
    return to_number(item.custom_fields.get(column.id)) or 0.0


def row_values(item: Item, columns: Sequence[Column], exclude: str) -> dict[str, float]:
    """Numeric values of every number column of a row except ``exclude``."""
    return {
        col.id: raw_cell_value(item, col)
        for col in columns
        if col.type == "number" and col.id != exclude
    }


def cell_value(item: Item, column: Column, columns: Sequence[Column]) -> float:
    """Value of ``item`` for ``column``, honouring the column's row formula."""
    if column.row_formula:
        return evaluate_row_formula(
            column.row_formula, row_values(item, columns, exclude=column.id)
        )
    return raw_cell_value(item, column)


def item_value(
    item: Item,
    columns: Sequence[Column],
    value_column_id: str = VALUE_COLUMN_ID,
) -> float:
    """Monetary value of a single item, 0.0 if there is no value column."""
    value_column = find_column(columns, value_column_id)
    if value_column is None:
        return 0.0
    return cell_value(item, value_column, columns)


def computed_total(quote: AnyQuote, value_column_id: str = VALUE_COLUMN_ID) -> float:
    """Grand total of a quote: sum of item values across all sections."""
    columns = effective_columns(quote)
    if find_column(columns, value_column_id) is None:
        return 0.0

    total = 0.0
    for section in quote.sections:
        for item in section.items:
            total += item_value(item, columns, value_column_id)
    return total


def quote_total(quote: Quote, value_column_id: str = VALUE_COLUMN_ID) -> float:
    """Grand total of a client quote (pure function of its content)."""
    return computed_total(quote, value_column_id)


def collaborator_quote_total(
    cq: CollaboratorQuote,
    value_column_id: str = VALUE_COLUMN_ID,
) -> float:
    """Total of a collaborator quote, falling back to its stored total.

    Collaborator quotes are often filled with non-monetary columns only,
    in which case the computed total is 0 and the stored total is used.
    """
    total = computed_total(cq, value_column_id)
    if total == 0.0 and cq.total:
        return float(cq.total)
    return total


def column_aggregates(quote: AnyQuote) -> list[ColumnAggregate]:
    """Footer aggregates for every number column with a calculation.

    - sum / average / min / max run over the per-item values of the column
      (formula-aware); empty columns aggregate to 0.0,
    - custom evaluates the calculation formula with every referenced
      column id replaced by that column's sum; failures give 0.0.
    """
    columns = effective_columns(quote)
    items = [item for section in quote.sections for item in section.items]

    values_by_column: dict[str, list[float]] = {
        col.id: [cell_value(item, col, columns) for item in items]
        for col in columns
        if col.type == "number"
    }

    results: list[ColumnAggregate] = []
    for col in columns:
        if col.type != "number" or col.calculation is None:
            continue
        kind = col.calculation.type
        if kind == "none":
            continue

        vals = values_by_column[col.id]
        if kind == "sum":
            value = sum(vals)
        elif kind == "average":
            value = sum(vals) / len(vals) if vals else 0.0
        elif kind == "min":
            value = min(vals) if vals else 0.0
        elif kind == "max":
            value = max(vals) if vals else 0.0
        elif kind == "custom":
            sums = {cid: sum(v) for cid, v in values_by_column.items()}
            value = evaluate_row_formula(col.calculation.formula, sums)
        else:
            continue

        results.append(
            ColumnAggregate(column_id=col.id, name=col.name, kind=kind, value=value)
        )
    return results

