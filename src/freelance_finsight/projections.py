# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Forward-looking figures: revenue still to be collected and revenue at risk.

- future revenue: for every active task (not archived, not on hold), the
  part of its quote total that has not been recognised as paid yet,
  whatever the payment dates;
- lost revenue: the full quote total of tasks put on hold.

Both figures only consider tasks whose reference date (end date, then
deadline, then start date) falls inside the requested range; tasks
without any date are left out of bounded ranges.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .engine import DetailItem, TaskFacts, collect_task_facts
from .lookup import LookupIndex
from .models import Snapshot
from .payments import task_reference_date
from .periods import DateRange, in_range

_LOG = logging.getLogger(__name__)

# Statuses that never produce future revenue.
_NO_FUTURE_STATUSES = frozenset({"archived", "onhold"})


@dataclass(frozen=True)
class AdditionalFinancials:
    future_revenue: float = 0.0
    lost_revenue: float = 0.0


@dataclass(frozen=True)
class AdditionalTaskDetails:
    future_revenue_items: tuple[DetailItem, ...] = ()
    lost_revenue_items: tuple[DetailItem, ...] = ()


def _task_in_range(fact: TaskFacts, date_range: Optional[DateRange]) -> bool:
    if date_range is None or date_range.is_all_time:
        return True
    return in_range(task_reference_date(fact.task), date_range)


def outstanding_amount(fact: TaskFacts) -> float:
    """Quote total not yet recognised as paid (never negative)."""
    paid = sum(e.amount for e in fact.revenue_events)
    return max(0.0, fact.total - paid)


def _future_facts(facts: Iterable[TaskFacts], date_range: Optional[DateRange]):
    for f in facts:
        if f.task.status in _NO_FUTURE_STATUSES or f.quote is None:
            continue
        if _task_in_range(f, date_range):
            yield f


def _lost_facts(facts: Iterable[TaskFacts], date_range: Optional[DateRange]):
    for f in facts:
        if f.task.status == "onhold" and f.quote is not None and _task_in_range(f, date_range):
            yield f


def additional_from_facts(
    facts: Iterable[TaskFacts], date_range: Optional[DateRange]
) -> AdditionalFinancials:
    facts = list(facts)
    return AdditionalFinancials(
        future_revenue=sum(outstanding_amount(f) for f in _future_facts(facts, date_range)),
        lost_revenue=sum(f.total for f in _lost_facts(facts, date_range)),
    )


def additional_task_details_from_facts(
    facts: Iterable[TaskFacts],
    index: LookupIndex,
    date_range: Optional[DateRange],
) -> AdditionalTaskDetails:
    facts = list(facts)

    future = []
    for f in _future_facts(facts, date_range):
        amount = outstanding_amount(f)
        if amount > 0:
            future.append(
                DetailItem(
                    id=f.task.id,
                    name=f.task.name,
                    client_name=index.client_name(f.task.client_id),
                    amount=amount,
                    type="future_revenue",
                )
            )

    lost = [
        DetailItem(
            id=f.task.id,
            name=f.task.name,
            client_name=index.client_name(f.task.client_id),
            amount=f.total,
            type="lost_revenue",
        )
        for f in _lost_facts(facts, date_range)
        if f.total > 0
    ]

    def _order(item: DetailItem) -> tuple[float, str]:
        return (-item.amount, item.name)

    return AdditionalTaskDetails(
        future_revenue_items=tuple(sorted(future, key=_order)),
        lost_revenue_items=tuple(sorted(lost, key=_order)),
    )


def compute_additional_financials(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> AdditionalFinancials:
    """Future revenue (unpaid remainder) and lost revenue (on-hold totals)."""
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger or _LOG)
    return additional_from_facts(facts, date_range)


def compute_additional_task_details(
    snapshot: Snapshot,
    date_range: Optional[DateRange] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> AdditionalTaskDetails:
    """Per-task lines behind :func:`compute_additional_financials`."""
    index = LookupIndex.build(snapshot)
    facts = collect_task_facts(snapshot, index, logger or _LOG)
    return additional_task_details_from_facts(facts, index, date_range)
