# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Payment recognition: how much of a quote was paid, and when.

Quotes record payment in one of several shapes, depending on how (and
when) the user filled them in. :func:`resolution_mode` inspects a quote
once and returns exactly one of the following variants, in order of
precedence:

1. ``Itemized``     - the quote has a non-empty payments list;
2. ``DirectAmount`` - no payments list, but an explicit ``amount_paid``;
3. ``StatusFlag``   - neither of the above, but ``status == "paid"``;
4. ``NoEvidence``   - nothing indicates a payment: recognises 0.

The selected variant is then turned into dated payment events
(:class:`PaymentEvent`). Reports filter those events by date range
(summary, breakdown, details) or group them by month (monthly view), so
every view is built from the same events.

Fallback dates
--------------
When a payment event has no date of its own, it is placed on the quote's
``paid_date``, and failing that on the owning task's fallback date
(deadline, then end date, then start date). An event that still has no
date is never part of any date range.

Collaborator costs
------------------
Collaborator payouts follow the client's payment milestone, not the
collaborator quote's own bookkeeping. :func:`collaborator_cost_event`
therefore ignores any payment data on the collaborator quote and dates
the cost from the main quote (see :func:`main_quote_paid_date`).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from .models import CollaboratorQuote, Payment, Quote, Task
from .periods import DateRange, in_range
from .valuation import collaborator_quote_total


@dataclass(frozen=True)
class Itemized:
    payments: tuple[Payment, ...]


@dataclass(frozen=True)
class DirectAmount:
    amount: float
    date: Optional[date]


@dataclass(frozen=True)
class StatusFlag:
    status: str
    date: Optional[date]


@dataclass(frozen=True)
class NoEvidence:
    pass


PaymentResolutionMode = Union[Itemized, DirectAmount, StatusFlag, NoEvidence]


@dataclass(frozen=True)
class PaymentEvent:
    """A recognised amount placed on a (possibly unknown) calendar day."""

    amount: float
    date: Optional[date]


def first_date(*candidates: Optional[date]) -> Optional[date]:
    """Return the first non-None date of a priority chain."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def task_fallback_date(task: Task) -> Optional[date]:
    """Date used for payments of a task's quote: deadline → end → start."""
    return first_date(task.deadline, task.end_date, task.start_date)


def task_reference_date(task: Task) -> Optional[date]:
    """Date placing a task itself in time: end → deadline → start."""
    return first_date(task.end_date, task.deadline, task.start_date)


def clamp_percent(percent: Optional[float]) -> float:
    if percent is None:
        return 0.0
    return max(0.0, min(100.0, float(percent)))


def payment_amount(payment: Payment, total: float) -> float:
    """Monetary value of one payment entry (status is not checked here)."""
    if payment.amount_type == "percent":
        return total * clamp_percent(payment.percent) / 100.0
    return max(float(payment.amount or 0.0), 0.0)


def resolution_mode(quote: Quote) -> PaymentResolutionMode:
    """Select the payment shape of ``quote`` (first matching branch wins)."""
    if quote.payments:
        return Itemized(payments=quote.payments)
    if quote.amount_paid is not None:
        return DirectAmount(amount=quote.amount_paid, date=quote.paid_date)
    if quote.status == "paid":
        return StatusFlag(status=quote.status, date=quote.paid_date)
    return NoEvidence()


def payment_events(
    quote: Quote,
    total: float,
    fallback_date: Optional[date],
) -> list[PaymentEvent]:
    """Turn the quote's payment shape into dated payment events.

    Args:
        quote: Client quote.
        total: The quote's computed grand total (percent payments and the
            status flag are resolved against it).
        fallback_date: Date used when neither the payment nor the quote
            carries one.
    """
    mode = resolution_mode(quote)

    if isinstance(mode, Itemized):
        return [
            PaymentEvent(
                amount=payment_amount(p, total),
                date=first_date(p.date, quote.paid_date, fallback_date),
            )
            for p in mode.payments
            if p.status == "paid"
        ]

    if isinstance(mode, DirectAmount):
        return [
            PaymentEvent(amount=mode.amount, date=first_date(mode.date, fallback_date))
        ]

    if isinstance(mode, StatusFlag):
        return [PaymentEvent(amount=total, date=first_date(mode.date, fallback_date))]

    return []


def sum_in_range(events: Iterable[PaymentEvent], date_range: Optional[DateRange]) -> float:
    return sum(e.amount for e in events if in_range(e.date, date_range))


def recognized_amount(
    quote: Quote,
    total: float,
    date_range: Optional[DateRange],
    fallback_date: Optional[date],
) -> float:
    """Paid amount of ``quote`` that falls inside ``date_range``."""
    return sum_in_range(payment_events(quote, total, fallback_date), date_range)


def total_paid(quote: Quote, total: float) -> float:
    """Everything recognised as paid on ``quote``, whatever its date."""
    return sum(e.amount for e in payment_events(quote, total, None))


def main_quote_paid_date(quote: Optional[Quote]) -> Optional[date]:
    """Payment milestone of the client quote.

    The quote's ``paid_date`` if set, else the earliest dated payment with
    status ``paid``.
    """
    if quote is None:
        return None
    if quote.paid_date is not None:
        return quote.paid_date
    paid_dates = [
        p.date for p in (quote.payments or ()) if p.status == "paid" and p.date
    ]
    return min(paid_dates) if paid_dates else None


def collaborator_cost_event(
    cq: CollaboratorQuote,
    main_quote: Optional[Quote],
    fallback_date: Optional[date],
) -> PaymentEvent:
    """Cost of a collaborator quote, dated from the client quote.

    Amount: ``cq.amount_paid`` if present, else the collaborator quote
    total. Date: the main quote's payment milestone, else ``fallback_date``.
    """
    amount = cq.amount_paid if cq.amount_paid is not None else collaborator_quote_total(cq)
    return PaymentEvent(
        amount=float(amount),
        date=first_date(main_quote_paid_date(main_quote), fallback_date),
    )
