# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Proration of recurring fixed costs (rent, subscriptions, insurance...).

Two allocation strategies coexist and are intentionally different:

Range mode (:func:`cost_for_range`)
    Recurring costs are converted to a daily rate using fixed period
    lengths (7, 30.44 and 365.25 days for weekly, monthly and yearly
    costs) and multiplied by the inclusive number of days of the query
    range. One-time costs count in full when their start date is inside
    the range.

Month mode (:func:`cost_for_month`)
    Used by the monthly time series. For every calendar month in which the
    cost is active, a monthly cost counts its raw amount, a weekly cost
    counts ``daily rate × days in that month``, a yearly cost counts
    ``amount / 12``. One-time costs count in full in the month of their
    start date.

A cost only applies while ``is_active`` and while its
``[start_date, end_date]`` interval (open-ended without end date)
overlaps the window. A cost without a start date never applies.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional

from . import periods
from .models import FixedCost
from .periods import (
    DateRange,
    days_in_month,
    in_range,
    inclusive_day_count,
    iter_months,
    month_bounds,
    month_key,
)

# Fixed period lengths (in days) used to derive a daily rate.
PERIOD_DAYS: dict[str, float] = {
    "weekly": 7.0,
    "monthly": 30.44,
    "yearly": 365.25,
}


def daily_rate(cost: FixedCost) -> float:
    """Daily rate of a recurring cost, 0.0 for one-time or unknown frequencies."""
    days = PERIOD_DAYS.get(cost.frequency)
    if days is None:
        return 0.0
    return cost.amount / days


def is_applicable(
    cost: FixedCost,
    window_start: Optional[date],
    window_end: Optional[date],
) -> bool:
    """True if the cost is active and its lifetime overlaps the window."""
    if not cost.is_active or cost.start_date is None:
        return False
    if window_end is not None and cost.start_date > window_end:
        return False
    if (
        window_start is not None
        and cost.end_date is not None
        and cost.end_date < window_start
    ):
        return False
    return True


def resolve_window(
    cost: FixedCost,
    date_range: Optional[DateRange],
    as_of: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """Close the open sides of ``date_range`` with the cost's own lifetime.

    A missing lower bound becomes the cost's start date; a missing upper
    bound becomes its end date, or ``as_of`` (default: today) for costs
    that are still running.
    """
    start = date_range.start if date_range is not None else None
    end = date_range.end if date_range is not None else None
    if start is None:
        start = cost.start_date
    if end is None:
        end = cost.end_date or as_of or periods._today()
    return start, end


def cost_for_range(
    cost: FixedCost,
    date_range: Optional[DateRange],
    as_of: Optional[date] = None,
) -> float:
    """Amount of ``cost`` allocated to ``date_range`` (range mode)."""
    start, end = resolve_window(cost, date_range, as_of)
    if start is None or end is None or end < start:
        return 0.0
    if not is_applicable(cost, start, end):
        return 0.0

    if cost.frequency == "once":
        window = DateRange(start=start, end=end)
        return cost.amount if in_range(cost.start_date, window) else 0.0

    return daily_rate(cost) * inclusive_day_count(start, end)


def cost_for_month(cost: FixedCost, year: int, month: int) -> float:
    """Amount of ``cost`` allocated to one calendar month (month mode)."""
    first, last = month_bounds(year, month)
    if not is_applicable(cost, first, last):
        return 0.0

    if cost.frequency == "once":
        return cost.amount if in_range(cost.start_date, DateRange(first, last)) else 0.0
    if cost.frequency == "monthly":
        return cost.amount
    if cost.frequency == "weekly":
        return daily_rate(cost) * days_in_month(year, month)
    if cost.frequency == "yearly":
        return cost.amount / 12.0
    return 0.0


def lifetime_months(cost: FixedCost, as_of: Optional[date] = None) -> list[tuple[int, int]]:
    """Calendar months spanned by the cost's active lifetime.

    Running costs (no end date) are followed up to ``as_of`` (default:
    today). Inactive or undated costs span no month.
    """
    if not cost.is_active or cost.start_date is None:
        return []
    end = cost.end_date or as_of or periods._today()
    if end < cost.start_date:
        return []
    return list(iter_months(cost.start_date, end))


def monthly_costs(
    costs: Iterable[FixedCost],
    months: Optional[Iterable[tuple[int, int]]] = None,
    as_of: Optional[date] = None,
) -> dict[str, float]:
    """Fixed costs per ``YYYY-MM`` key.

    With ``months`` given, every cost is allocated to those months only.
    Without it, each cost is allocated over its own active lifetime.
    """
    by_month: dict[str, float] = {}
    month_list = list(months) if months is not None else None

    for cost in costs:
        span = month_list if month_list is not None else lifetime_months(cost, as_of)
        for year, month in span:
            amount = cost_for_month(cost, year, month)
            if amount:
                key = month_key(date(year, month, 1))
                by_month[key] = by_month.get(key, 0.0) + amount
    return by_month
