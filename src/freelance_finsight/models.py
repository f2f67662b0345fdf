# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Record types for Freelance FinSight.

The dashboard stores its data as loosely-shaped JSON documents (camelCase
keys, optional fields, numbers sometimes stored as strings). This module
defines the immutable records the engine works on and the lenient
converters that turn those raw documents into records.

Records
-------
- Task, CollaboratorLink
- Quote, CollaboratorQuote, Section, Item, Column, ColumnCalculation
- Payment
- FixedCost
- Client, Collaborator
- Snapshot: one full, read-only copy of all of the above.

Conversion rules
----------------
- records without an ``id`` are dropped,
- unparsable numbers become 0.0 (required amounts) or None (optional ones),
- dates are parsed with :func:`freelance_finsight.periods.to_date`;
  unparsable dates become None and are therefore excluded from every range,
- unknown status strings are kept as-is (they simply never match).
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .periods import to_date

TASK_STATUSES: tuple[str, ...] = ("todo", "inprogress", "done", "onhold", "archived")
FIXED_COST_FREQUENCIES: tuple[str, ...] = ("once", "weekly", "monthly", "yearly")
CALCULATION_TYPES: tuple[str, ...] = ("none", "sum", "average", "min", "max", "custom")

VALUE_COLUMN_ID = "unitPrice"


@dataclass(frozen=True)
class ColumnCalculation:
    """Footer aggregation of a quote column (sum, average, min, max, custom)."""

    type: str = "none"
    formula: Optional[str] = None


@dataclass(frozen=True)
class Column:
    """Definition of a quote column.

    Attributes:
        id: Column identifier, referenced by row formulas.
        name: Display name.
        type: 'text', 'number' or 'date'.
        calculation: Optional footer aggregation.
        row_formula: Optional per-row arithmetic expression referencing
            sibling column ids.
    """

    id: str
    name: str = ""
    type: str = "text"
    calculation: Optional[ColumnCalculation] = None
    row_formula: Optional[str] = None


DEFAULT_COLUMNS: tuple[Column, ...] = (
    Column(id="description", name="Description", type="text"),
    Column(
        id=VALUE_COLUMN_ID,
        name="Unit Price",
        type="number",
        calculation=ColumnCalculation(type="sum"),
    ),
)


@dataclass(frozen=True)
class Item:
    id: str
    description: str = ""
    unit_price: float = 0.0
    custom_fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Section:
    id: str
    name: str = ""
    items: tuple[Item, ...] = ()


@dataclass(frozen=True)
class Payment:
    """One payment milestone of a quote.

    ``amount_type`` is 'fixed' (use ``amount``) or 'percent' (use
    ``percent`` of the quote total).
    """

    id: str = ""
    status: str = ""
    amount_type: str = "fixed"
    amount: Optional[float] = None
    percent: Optional[float] = None
    date: Optional[date] = None


@dataclass(frozen=True)
class Quote:
    """Client-facing quote owned by a task.

    ``columns=None`` means the column layout was never customised and the
    default layout applies. ``payments=None`` and an empty tuple both mean
    "no payments list".
    """

    id: str
    sections: tuple[Section, ...] = ()
    columns: Optional[tuple[Column, ...]] = None
    payments: Optional[tuple[Payment, ...]] = None
    paid_date: Optional[date] = None
    amount_paid: Optional[float] = None
    status: Optional[str] = None
    total: Optional[float] = None


@dataclass(frozen=True)
class CollaboratorQuote:
    """Quote describing what a collaborator is paid for a task.

    Its own payment records, if any, are deliberately not modelled: the
    payout is dated from the client-facing quote.
    """

    id: str
    collaborator_id: Optional[str] = None
    sections: tuple[Section, ...] = ()
    columns: Optional[tuple[Column, ...]] = None
    amount_paid: Optional[float] = None
    total: Optional[float] = None


@dataclass(frozen=True)
class CollaboratorLink:
    collaborator_id: Optional[str]
    collaborator_quote_id: Optional[str]


@dataclass(frozen=True)
class Task:
    id: str
    name: str = ""
    status: str = "todo"
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    end_date: Optional[date] = None
    client_id: Optional[str] = None
    quote_id: Optional[str] = None
    collaborator_links: tuple[CollaboratorLink, ...] = ()
    deleted_at: Optional[str] = None

    @property
    def is_reportable(self) -> bool:
        """Archived and soft-deleted tasks never reach any report."""
        return self.status != "archived" and not self.deleted_at


@dataclass(frozen=True)
class FixedCost:
    id: str
    name: str = ""
    amount: float = 0.0
    frequency: str = "monthly"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class Client:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Collaborator:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Snapshot:
    """Full, read-only copy of the dashboard data used for one report run."""

    tasks: tuple[Task, ...] = ()
    quotes: tuple[Quote, ...] = ()
    collaborator_quotes: tuple[CollaboratorQuote, ...] = ()
    clients: tuple[Client, ...] = ()
    collaborators: tuple[Collaborator, ...] = ()
    fixed_costs: tuple[FixedCost, ...] = ()


# ---------------------------------------------------------------------------
# Lenient coercion helpers
# ---------------------------------------------------------------------------


def to_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert a raw value into a finite float, or ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _deleted_marker(value: Any) -> Optional[str]:
    """Soft-delete markers count by truthiness: false, 0 and "" mean live."""
    return str(value) if value else None


def _records(raw: Any) -> list[Mapping[str, Any]]:
    """Keep only mapping entries that carry a non-empty id."""
    if not isinstance(raw, (list, tuple)):
        return []
    return [r for r in raw if isinstance(r, Mapping) and r.get("id") not in (None, "")]


def column_from_dict(raw: Mapping[str, Any]) -> Column:
    calc_raw = raw.get("calculation")
    calculation = None
    if isinstance(calc_raw, Mapping):
        calculation = ColumnCalculation(
            type=str(calc_raw.get("type") or "none"),
            formula=calc_raw.get("formula") or None,
        )
    return Column(
        id=str(raw["id"]),
        name=_text(raw.get("name")),
        type=str(raw.get("type") or "text"),
        calculation=calculation,
        row_formula=raw.get("rowFormula") or None,
    )


def item_from_dict(raw: Mapping[str, Any]) -> Item:
    custom = raw.get("customFields")
    return Item(
        id=str(raw["id"]),
        description=_text(raw.get("description")),
        unit_price=to_number(raw.get("unitPrice")) or 0.0,
        custom_fields=dict(custom) if isinstance(custom, Mapping) else {},
    )


def section_from_dict(raw: Mapping[str, Any]) -> Section:
    return Section(
        id=str(raw["id"]),
        name=_text(raw.get("name")),
        items=tuple(item_from_dict(i) for i in _records(raw.get("items"))),
    )


def payment_from_dict(raw: Mapping[str, Any]) -> Payment:
    amount = to_number(raw.get("amount"), default=None)
    percent = to_number(raw.get("percent"), default=None)

    amount_type = str(raw.get("amountType") or "").lower()
    if amount_type == "absolute":
        amount_type = "fixed"
    if amount_type not in ("fixed", "percent"):
        # Entries typed as "50%" were saved without amountType.
        amount_type = "percent" if percent is not None and amount is None else "fixed"

    return Payment(
        id=_text(raw.get("id")),
        status=str(raw.get("status") or "").lower(),
        amount_type=amount_type,
        amount=amount,
        percent=percent,
        date=to_date(raw.get("date")),
    )


def _columns(raw: Any) -> Optional[tuple[Column, ...]]:
    if raw is None:
        return None
    return tuple(column_from_dict(c) for c in _records(raw))


def _payments(raw: Any) -> Optional[tuple[Payment, ...]]:
    if not isinstance(raw, (list, tuple)):
        return None
    return tuple(payment_from_dict(p) for p in raw if isinstance(p, Mapping))


def quote_from_dict(raw: Mapping[str, Any]) -> Quote:
    status = raw.get("status")
    return Quote(
        id=str(raw["id"]),
        sections=tuple(section_from_dict(s) for s in _records(raw.get("sections"))),
        columns=_columns(raw.get("columns")),
        payments=_payments(raw.get("payments")),
        paid_date=to_date(raw.get("paidDate")),
        amount_paid=to_number(raw.get("amountPaid"), default=None),
        status=str(status).lower() if status else None,
        total=to_number(raw.get("total"), default=None),
    )


def collaborator_quote_from_dict(raw: Mapping[str, Any]) -> CollaboratorQuote:
    return CollaboratorQuote(
        id=str(raw["id"]),
        collaborator_id=_optional_id(raw.get("collaboratorId")),
        sections=tuple(section_from_dict(s) for s in _records(raw.get("sections"))),
        columns=_columns(raw.get("columns")),
        amount_paid=to_number(raw.get("amountPaid"), default=None),
        total=to_number(raw.get("total"), default=None),
    )


def _collaborator_links(raw: Mapping[str, Any]) -> tuple[CollaboratorLink, ...]:
    """Read the task's collaborator links.

    Current documents carry a ``collaborators`` list of
    ``{collaboratorId, collaboratorQuoteId}``; older ones carry singular
    ``collaboratorId`` / ``collaboratorQuoteId`` fields on the task.
    """
    links_raw = raw.get("collaborators")
    if isinstance(links_raw, (list, tuple)) and links_raw:
        return tuple(
            CollaboratorLink(
                collaborator_id=_optional_id(link.get("collaboratorId")),
                collaborator_quote_id=_optional_id(link.get("collaboratorQuoteId")),
            )
            for link in links_raw
            if isinstance(link, Mapping)
        )

    legacy_quote_id = _optional_id(raw.get("collaboratorQuoteId"))
    if legacy_quote_id is None:
        return ()
    return (
        CollaboratorLink(
            collaborator_id=_optional_id(raw.get("collaboratorId")),
            collaborator_quote_id=legacy_quote_id,
        ),
    )


def task_from_dict(raw: Mapping[str, Any]) -> Task:
    return Task(
        id=str(raw["id"]),
        name=_text(raw.get("name")),
        status=str(raw.get("status") or "todo").lower(),
        start_date=to_date(raw.get("startDate")),
        deadline=to_date(raw.get("deadline")),
        end_date=to_date(raw.get("endDate")),
        client_id=_optional_id(raw.get("clientId")),
        quote_id=_optional_id(raw.get("quoteId")),
        collaborator_links=_collaborator_links(raw),
        deleted_at=_deleted_marker(raw.get("deletedAt")),
    )


def _to_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return bool(value)


def fixed_cost_from_dict(raw: Mapping[str, Any]) -> FixedCost:
    return FixedCost(
        id=str(raw["id"]),
        name=_text(raw.get("name")),
        amount=to_number(raw.get("amount")) or 0.0,
        frequency=str(raw.get("frequency") or "monthly").lower(),
        start_date=to_date(raw.get("startDate")),
        end_date=to_date(raw.get("endDate")),
        is_active=_to_bool(raw.get("isActive"), default=True),
    )


def snapshot_from_dict(data: Mapping[str, Any]) -> Snapshot:
    """Build a Snapshot from the dashboard's JSON document.

    Missing collections are treated as empty. The input is never modified.
    """
    return Snapshot(
        tasks=tuple(task_from_dict(r) for r in _records(data.get("tasks"))),
        quotes=tuple(quote_from_dict(r) for r in _records(data.get("quotes"))),
        collaborator_quotes=tuple(
            collaborator_quote_from_dict(r)
            for r in _records(data.get("collaboratorQuotes"))
        ),
        clients=tuple(
            Client(id=str(r["id"]), name=_text(r.get("name")))
            for r in _records(data.get("clients"))
        ),
        collaborators=tuple(
            Collaborator(id=str(r["id"]), name=_text(r.get("name")))
            for r in _records(data.get("collaborators"))
        ),
        fixed_costs=tuple(
            fixed_cost_from_dict(r) for r in _records(data.get("fixedCosts"))
        ),
    )
