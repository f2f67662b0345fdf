# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core financial aggregation engine for Freelance FinSight.

This module turns a data snapshot (tasks, quotes, collaborator quotes,
clients, fixed costs) into the financial reports shown on the business
dashboard, for an optional date range.

1. Task facts
   -----------
   The engine first walks every reportable task once (archived and
   soft-deleted tasks are skipped) and records its "facts":
   - the task's quote and its computed grand total (valuation.py),
   - the dated payment events of that quote (payments.py),
   - one dated cost event per linked collaborator quote, dated from the
     client quote's payment milestone (payments.py).
   All reports below are projections of these facts, so revenue and cost
   figures cannot drift between views.

2. Reports
   --------
   - compute_financial_summary   : revenue, costs, profit for the range,
   - compute_revenue_breakdown   : revenue of completed tasks per client,
   - compute_task_details        : per-task revenue and cost line items,
   - compute_monthly_financials  : revenue, costs, profit per YYYY-MM,
   - compute_fixed_cost_details  : prorated fixed costs for the range.

   Forward-looking figures live in projections.py; the one-pass bundle of
   every report lives in reports.py.

3. Error handling
   ---------------
   Reports never fail. A dangling quote or collaborator-quote id, a bad
   formula or an unusable date degrades a single contribution to zero and
   the rest of the snapshot is still aggregated. Skipped records are
   reported at DEBUG level on the logger passed by the caller (or the
   module logger).

All functions are pure: the snapshot is never modified and no state is
kept between calls. Passing the same snapshot and range twice yields the
same numbers.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Optional

from . import periods
from .fixed_costs import cost_for_range, monthly_costs
from .lookup import UNKNOWN_CLIENT, LookupIndex
from .models import FixedCost, Quote, Snapshot, Task
from .payments import (
    PaymentEvent,
    collaborator_cost_event,
    payment_events,
    sum_in_range,
    task_fallback_date,
)
from .periods import (
    ALL_TIME,
    DateRange,
    in_range,
    iter_months,
    month_bounds,
    month_key,
)
from .valuation import quote_total

_LOG = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Report shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FinancialSummary:
    """
    Revenue, costs and profit for one date range.

    Attributes
    ----------
    revenue :
        Recognised client payments inside the range.
    costs :
        ``collaborator_costs + fixed_costs``.
    profit :
        ``revenue - costs``.
    collaborator_costs :
        Collaborator payouts dated inside the range.
    fixed_costs :
        Fixed costs prorated over the range.
    """

    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0
    collaborator_costs: float = 0.0
    fixed_costs: float = 0.0


@dataclass(frozen=True)
class RevenueBreakdownItem:
    name: str
    value: float


@dataclass(frozen=True)
class DetailItem:
    """
    One drill-down line of a report.

    ``id`` is always the task id (the UI opens the task on click); cost
    lines additionally carry the collaborator quote they come from.
    ``type`` is one of 'revenue', 'collaborator_cost', 'future_revenue',
    'lost_revenue'.
    """

    id: str
    name: str
    client_name: str
    amount: float
    type: str
    collaborator_quote_id: Optional[str] = None
    collaborator_name: Optional[str] = None


@dataclass(frozen=True)
class TaskDetails:
    revenue_items: tuple[DetailItem, ...] = ()
    cost_items: tuple[DetailItem, ...] = ()


@dataclass(frozen=True)
class MonthlyFinancials:
    month_year: str
    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True)
class FixedCostItem:
    id: str
    name: str
    frequency: str
    amount: float


@dataclass(frozen=True)
class FixedCostDetails:
    fixed_cost_items: tuple[FixedCostItem, ...] = ()
    total_fixed_costs: float = 0.0
    date_range: DateRange = ALL_TIME


# ---------------------------------------------------------------------------
# Task facts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CostLine:
    """Cost of one collaborator quote linked to a task."""

    collaborator_quote_id: str
    collaborator_id: Optional[str]
    event: PaymentEvent


@dataclass(frozen=True)
class TaskFacts:
    """Everything the reports need to know about one reportable task."""

    task: Task
    quote: Optional[Quote]
    total: float
    revenue_events: tuple[PaymentEvent, ...]
    cost_lines: tuple[CostLine, ...]


def _task_facts(task: Task, index: LookupIndex, log: logging.Logger) -> TaskFacts:
    fallback = task_fallback_date(task)

    quote = index.quote(task.quote_id)
    if quote is None:
        if task.quote_id is not None:
            log.debug("Task %s: quote %s not found, no revenue", task.id, task.quote_id)
        total = 0.0
        revenue: tuple[PaymentEvent, ...] = ()
    else:
        total = quote_total(quote)
        revenue = tuple(payment_events(quote, total, fallback))

    lines: list[CostLine] = []
    for link in task.collaborator_links:
        cq = index.collaborator_quote(link.collaborator_quote_id)
        if cq is None:
            log.debug(
                "Task %s: collaborator quote %s not found, skipped",
                task.id,
                link.collaborator_quote_id,
            )
            continue
        lines.append(
            CostLine(
                collaborator_quote_id=cq.id,
                collaborator_id=link.collaborator_id or cq.collaborator_id,
                event=collaborator_cost_event(cq, quote, fallback),
            )
        )

    return TaskFacts(
        task=task,
        quote=quote,
        total=total,
        revenue_events=revenue,
        cost_lines=tuple(lines),
    )


def collect_task_facts(
    snapshot: Snapshot,
    index: LookupIndex,
    logger: Optional[logging.Logger] = None,
) -> list[TaskFacts]:
    """Compute the facts of every reportable task, in snapshot order."""
    log = logger or _LOG
    facts: list[TaskFacts] = []
    for task in snapshot.tasks:
        if not task.is_reportable:
            continue
        try:
            facts.append(_task_facts(task, index, log))
        except (TypeError, ValueError, ArithmeticError) as exc:
            log.debug("Task %s skipped: %s", task.id, exc)
    return facts


def _fixed_cost_for_range(
    cost: FixedCost,
    date_range: Optional[DateRange],
    as_of: Optional[date],
    log: logging.Logger,
) -> float:
    try:
        return cost_for_range(cost, date_range, as_of)
    except (TypeError, ValueError, ArithmeticError) as exc:
        log.debug("Fixed cost %s skipped: %s", cost.id, exc)
        return 0.0


# ---------------------------------------------------------------------------
# Reports from facts
# ---------------------------------------------------------------------------


def summary_from_facts(
    facts: Iterable[TaskFacts],
    fixed_costs: Iterable[FixedCost],
    date_range: Optional[DateRange],
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> FinancialSummary:
    log = logger or _LOG
    revenue = 0.0
    collaborator = 0.0
    for f in facts:
        revenue += sum_in_range(f.revenue_events, date_range)
        collaborator += sum_in_range((c.event for c in f.cost_lines), date_range)

    fixed = sum(_fixed_cost_for_range(c, date_range, as_of, log) for c in fixed_costs)
    costs = collaborator + fixed
    return FinancialSummary(
        revenue=revenue,
        costs=costs,
        profit=revenue - costs,
        collaborator_costs=collaborator,
        fixed_costs=fixed,
    )


def breakdown_from_facts(
    facts: Iterable[TaskFacts],
    index: LookupIndex,
    date_range: Optional[DateRange],
) -> list[RevenueBreakdownItem]:
    by_client: dict[Optional[str], float] = {}
    for f in facts:
        if f.task.status != "done":
            continue
        amount = sum_in_range(f.revenue_events, date_range)
        if amount:
            # Dangling or unnamed clients share a single "Unknown client" row.
            key = f.task.client_id
            if index.client_name(key) == UNKNOWN_CLIENT:
                key = None
            by_client[key] = by_client.get(key, 0.0) + amount

    items = [
        RevenueBreakdownItem(name=index.client_name(client_id), value=value)
        for client_id, value in by_client.items()
        if value > 0
    ]
    return sorted(items, key=lambda i: (-i.value, i.name))


def task_details_from_facts(
    facts: Iterable[TaskFacts],
    index: LookupIndex,
    date_range: Optional[DateRange],
) -> TaskDetails:
    revenue_items: list[DetailItem] = []
    cost_items: list[DetailItem] = []

    for f in facts:
        client_name = index.client_name(f.task.client_id)

        amount = sum_in_range(f.revenue_events, date_range)
        if amount > 0:
            revenue_items.append(
                DetailItem(
                    id=f.task.id,
                    name=f.task.name,
                    client_name=client_name,
                    amount=amount,
                    type="revenue",
                )
            )

        for line in f.cost_lines:
            if line.event.amount > 0 and in_range(line.event.date, date_range):
                cost_items.append(
                    DetailItem(
                        id=f.task.id,
                        name=f.task.name,
                        client_name=client_name,
                        amount=line.event.amount,
                        type="collaborator_cost",
                        collaborator_quote_id=line.collaborator_quote_id,
                        collaborator_name=index.collaborator_name(line.collaborator_id),
                    )
                )

    def _order(item: DetailItem) -> tuple[float, str]:
        return (-item.amount, item.name)

    return TaskDetails(
        revenue_items=tuple(sorted(revenue_items, key=_order)),
        cost_items=tuple(sorted(cost_items, key=_order)),
    )


def _months_overlapping(
    keys: Iterable[str], date_range: Optional[DateRange]
) -> list[str]:
    """Keep the YYYY-MM keys whose month overlaps ``date_range``."""
    if date_range is None or date_range.is_all_time:
        return list(keys)
    kept = []
    for key in keys:
        year, month = int(key[:4]), int(key[5:7])
        first, last = month_bounds(year, month)
        if date_range.start is not None and last < date_range.start:
            continue
        if date_range.end is not None and first > date_range.end:
            continue
        kept.append(key)
    return kept


def monthly_from_facts(
    facts: Iterable[TaskFacts],
    fixed_costs: Iterable[FixedCost],
    date_range: Optional[DateRange],
    as_of: Optional[date] = None,
) -> list[MonthlyFinancials]:
    revenue: dict[str, float] = {}
    costs: dict[str, float] = {}

    def _add(bucket: dict[str, float], event: PaymentEvent) -> None:
        if event.date is None or not in_range(event.date, date_range):
            return
        key = month_key(event.date)
        bucket[key] = bucket.get(key, 0.0) + event.amount

    for f in facts:
        for event in f.revenue_events:
            _add(revenue, event)
        for line in f.cost_lines:
            _add(costs, line.event)

    months: list[str] = []
    if date_range is not None and date_range.is_bounded:
        span = list(iter_months(date_range.start, date_range.end))
        months = [month_key(date(y, m, 1)) for y, m in span]
        fixed = monthly_costs(fixed_costs, span)
    else:
        fixed = monthly_costs(fixed_costs, None, as_of)
        fixed = {k: fixed[k] for k in _months_overlapping(fixed, date_range)}

    for key, amount in fixed.items():
        costs[key] = costs.get(key, 0.0) + amount

    all_keys = sorted(set(months) | set(revenue) | set(costs))
    out: list[MonthlyFinancials] = []
    for key in all_keys:
        rev = revenue.get(key, 0.0)
        cost = costs.get(key, 0.0)
        out.append(MonthlyFinancials(month_year=key, revenue=rev, costs=cost, profit=rev - cost))
    return out


def fixed_cost_details_for(
    fixed_costs: Iterable[FixedCost],
    date_range: Optional[DateRange],
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> FixedCostDetails:
    log = logger or _LOG
    if date_range is None or date_range.is_all_time:
        today = as_of or periods._today()
        date_range = periods.period_month(today.year, today.month)

    items = []
    for cost in fixed_costs:
        amount = _fixed_cost_for_range(cost, date_range, as_of, log)
        if amount > 0:
            items.append(
                FixedCostItem(
                    id=cost.id, name=cost.name, frequency=cost.frequency, amount=amount
                )
            )
    return FixedCostDetails(
        fixed_cost_items=tuple(items),
        total_fixed_costs=sum(i.amount for i in items),
        date_range=date_range,
    )


# ---------------------------------------------------------------------------
# Public entry points (one snapshot, one range)
# ---------------------------------------------------------------------------


def compute_financial_summary(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> FinancialSummary:
    """Revenue, collaborator + fixed costs and profit for ``date_range``.

    Args:
        snapshot: Full data snapshot.
        date_range: Query window; None (or an all-time range) means no
            bound. Open sides of the window are closed per fixed cost by
            that cost's own lifetime.
        as_of: Day used as "today" for running fixed costs.
        logger: Observer for skipped records (DEBUG level).
    """
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger)
    return summary_from_facts(facts, snapshot.fixed_costs, date_range, as_of, logger)


def compute_revenue_breakdown(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> list[RevenueBreakdownItem]:
    """Recognised revenue of completed tasks per client, largest first."""
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger)
    return breakdown_from_facts(facts, index, date_range)


def compute_task_details(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> TaskDetails:
    """Per-task revenue lines and per-collaborator-quote cost lines."""
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger)
    return task_details_from_facts(facts, index, date_range)


def compute_monthly_financials(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> list[MonthlyFinancials]:
    """Revenue, costs and profit per calendar month, oldest first.

    With a bounded range, every month touched by the range is listed (even
    empty ones). Without a range, the months found in the data are listed,
    fixed costs being spread over each cost's own active lifetime.
    """
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger)
    return monthly_from_facts(facts, snapshot.fixed_costs, date_range, as_of)


def compute_fixed_cost_details(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    as_of: Optional[date] = None,
    logger: Optional[logging.Logger] = None,
) -> FixedCostDetails:
    """Prorated amount of each fixed cost (current month when no range)."""
    return fixed_cost_details_for(snapshot.fixed_costs, date_range, as_of, logger)


__all__ = [
    "FinancialSummary",
    "RevenueBreakdownItem",
    "DetailItem",
    "TaskDetails",
    "MonthlyFinancials",
    "FixedCostItem",
    "FixedCostDetails",
    "TaskFacts",
    "CostLine",
    "collect_task_facts",
    "compute_financial_summary",
    "compute_revenue_breakdown",
    "compute_task_details",
    "compute_monthly_financials",
    "compute_fixed_cost_details",
]
