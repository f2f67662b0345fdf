# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Freelance FinSight.

This module defines the DateRange value object used by every report, the
day-granular inclusion test applied to payment and task dates, calendar
helpers (inclusive day counts, month enumeration) and the reporting
presets offered by the dashboard (all time, week, month, year).

Date semantics
--------------
Only the calendar day of a date is significant. A range ``[start, end]``
is widened to ``start 00:00:00`` .. ``end 23:59:59.999`` and a candidate
date is moved to noon of its own calendar day before comparison, so a
value that sits close to midnight can never slip out of the range it
belongs to. A missing or unparsable candidate date is never included.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterator, Optional

import pandas as pd

PERIOD_CHOICES: tuple[str, ...] = ("all", "week", "month", "year")

_DAY_START = time(0, 0, 0)
_DAY_END = time(23, 59, 59, 999000)
_NOON = time(12, 0, 0)


@dataclass(frozen=True)
class DateRange:
    """Optional ``[start, end]`` calendar window with a human-readable label.

    ``start=None`` means no lower bound, ``end=None`` no upper bound; both
    ``None`` is the all-time window.
    """

    start: Optional[date] = None
    end: Optional[date] = None
    label: str = "All time"

    @property
    def is_all_time(self) -> bool:
        return self.start is None and self.end is None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None


ALL_TIME = DateRange()


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def to_date(value: Any) -> Optional[date]:
    """Coerce a raw date value into a calendar ``date``.

    Accepts ``date``, ``datetime``, ``pandas.Timestamp`` and ISO-like
    strings (``2024-03-10``, ``2024-03-10T17:00:00.000Z``). Timezone-aware
    values are converted to local time before the calendar day is taken.

    Returns None for None, empty strings, NaT and anything unparsable.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and not value.strip():
        return None

    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None

    if ts.tzinfo is None:
        return ts.date()
    # Sub-microsecond precision has no bearing on the calendar day.
    return ts.floor("us").to_pydatetime().astimezone().date()


def range_bounds(
    date_range: DateRange,
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Return the normalized ``(floor(start), ceil(end))`` datetimes."""
    lower = (
        datetime.combine(date_range.start, _DAY_START)
        if date_range.start is not None
        else None
    )
    upper = (
        datetime.combine(date_range.end, _DAY_END)
        if date_range.end is not None
        else None
    )
    return lower, upper


def in_range(candidate: Any, date_range: Optional[DateRange]) -> bool:
    """Return True if ``candidate`` falls inside ``date_range``.

    - a missing or unparsable candidate always fails the test,
    - ``date_range=None`` or an all-time range accepts any valid date,
    - both bounds are inclusive at day granularity.
    """
    day = to_date(candidate)
    if day is None:
        return False
    if date_range is None or date_range.is_all_time:
        return True

    lower, upper = range_bounds(date_range)
    point = datetime.combine(day, _NOON)
    if lower is not None and point < lower:
        return False
    if upper is not None and point > upper:
        return False
    return True


def inclusive_day_count(start: date, end: date) -> int:
    """Number of calendar days in ``[start, end]``, both endpoints counted.

    Computed as ``ceil((end - start) / 1 day) + 1``. Returns 0 when
    ``end`` is before ``start``.
    """
    if end < start:
        return 0
    return int(math.ceil((end - start) / timedelta(days=1))) + 1


def month_key(day: date) -> str:
    """Return the ``YYYY-MM`` key of a calendar day."""
    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def iter_months(start: date, end: date) -> Iterator[tuple[int, int]]:
    """Yield ``(year, month)`` for every month touched by ``[start, end]``."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1


# ---------------------------------------------------------------------------
# Reporting presets
# ---------------------------------------------------------------------------


def period_all() -> DateRange:
    """All-time window (no bounds)."""
    return ALL_TIME


def period_week(anchor: Optional[date] = None) -> DateRange:
    """Monday-to-Sunday week containing ``anchor`` (default: today)."""
    anchor = anchor or _today()
    start = anchor - timedelta(days=anchor.weekday())
    end = start + timedelta(days=6)
    return DateRange(start=start, end=end, label=f"Week of {start.isoformat()}")


def period_month(year: Optional[int] = None, month: Optional[int] = None) -> DateRange:
    """Full calendar month (default: current month)."""
    today = _today()
    year = year or today.year
    month = month or today.month
    start, end = month_bounds(year, month)
    return DateRange(start=start, end=end, label=f"Month {month_key(start)}")


def period_year(year: Optional[int] = None) -> DateRange:
    """Full calendar year (default: current year)."""
    year = year or _today().year
    return DateRange(
        start=date(year, 1, 1),
        end=date(year, 12, 31),
        label=f"Year {year}",
    )


def period_from_preset(name: str, anchor: Optional[date] = None) -> DateRange:
    """Build one of the dashboard presets around ``anchor`` (default: today)."""
    anchor = anchor or _today()
    if name == "all":
        return period_all()
    if name == "week":
        return period_week(anchor)
    if name == "month":
        return period_month(anchor.year, anchor.month)
    if name == "year":
        return period_year(anchor.year)
    raise ValueError(f"Unknown period: {name!r}")


def determine_range_from_args(args, default_period: str = "month") -> DateRange:
    """
    Determine the reporting range to use based on CLI args.

    Priority (highest to lowest):

        1. args.period (all, week, month, year), anchored on args.anchor
        2. args.from_date / args.to_date (custom range, either side optional)
        3. ``default_period`` (usually taken from the configuration)
    """
    anchor_raw: Optional[str] = getattr(args, "anchor", None)
    try:
        anchor = date.fromisoformat(anchor_raw) if anchor_raw else None
    except ValueError as exc:
        raise ValueError(f"Invalid anchor date {anchor_raw!r}, expected YYYY-MM-DD.") from exc

    # 1) Predefined period wins over everything else
    if getattr(args, "period", None):
        return period_from_preset(args.period, anchor)

    # 2) Custom from/to dates
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        try:
            start = date.fromisoformat(from_raw) if from_raw else None
            end = date.fromisoformat(to_raw) if to_raw else None
        except ValueError as exc:
            raise ValueError("Invalid custom range, expected YYYY-MM-DD dates.") from exc

        if start is not None and end is not None and end < start:
            raise ValueError("Custom range end date cannot be before start date.")

        label = f"Custom range ({start or '…'} → {end or '…'})"
        return DateRange(start=start, end=end, label=label)

    # 3) Default preset
    return period_from_preset(default_period, anchor)
