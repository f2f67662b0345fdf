import warnings
from argparse import Namespace
from datetime import date, datetime, timezone

import pandas as pd
import pytest

import freelance_finsight.periods as periods
from freelance_finsight.periods import DateRange


def test_in_range_bounds_are_inclusive_at_day_granularity() -> None:
    """Dates on the first and last day of the range are included."""
    r = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31))

    assert periods.in_range(date(2024, 3, 1), r)
    assert periods.in_range(date(2024, 3, 31), r)
    assert periods.in_range(datetime(2024, 3, 31, 23, 59), r)
    assert not periods.in_range(date(2024, 2, 29), r)
    assert not periods.in_range(date(2024, 4, 1), r)


def test_in_range_missing_or_unparsable_date_is_excluded() -> None:
    """A missing date is never part of any range, not even all-time."""
    assert not periods.in_range(None, None)
    assert not periods.in_range(None, periods.ALL_TIME)
    assert not periods.in_range("not a date", periods.ALL_TIME)
    assert periods.in_range("2024-03-10", None)


def test_in_range_open_sides() -> None:
    """A missing bound does not restrict that side."""
    after = DateRange(start=date(2024, 1, 1))
    before = DateRange(end=date(2024, 1, 1))

    assert periods.in_range(date(2030, 1, 1), after)
    assert not periods.in_range(date(2023, 12, 31), after)
    assert periods.in_range(date(1999, 1, 1), before)
    assert not periods.in_range(date(2024, 1, 2), before)


def test_to_date_accepts_common_representations() -> None:
    """Strings, timestamps and datetimes collapse to a calendar date."""
    assert periods.to_date("2024-03-10") == date(2024, 3, 10)
    assert periods.to_date(pd.Timestamp("2024-03-10 08:00")) == date(2024, 3, 10)
    assert periods.to_date(datetime(2024, 3, 10, 18, 30)) == date(2024, 3, 10)
    assert periods.to_date(date(2024, 3, 10)) == date(2024, 3, 10)
    assert periods.to_date("") is None
    assert periods.to_date(pd.NaT) is None
    assert periods.to_date("garbage") is None


def test_to_date_converts_aware_values_to_local_time() -> None:
    """Aware datetimes are read as the local calendar day."""
    aware = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert periods.to_date(aware) == aware.astimezone().date()


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2024, 2, 1), date(2024, 2, 29), 29),
        (date(2024, 1, 1), date(2024, 1, 1), 1),
        (date(2024, 1, 1), date(2024, 12, 31), 366),
        (date(2024, 1, 2), date(2024, 1, 1), 0),
    ],
)
def test_inclusive_day_count(start: date, end: date, expected: int) -> None:
    """Both endpoints are counted; reversed ranges count zero days."""
    assert periods.inclusive_day_count(start, end) == expected


def test_iter_months_crosses_year_boundary() -> None:
    """Every month touched by the range is yielded, in order."""
    months = list(periods.iter_months(date(2023, 11, 15), date(2024, 2, 1)))
    assert months == [(2023, 11), (2023, 12), (2024, 1), (2024, 2)]


def test_month_helpers() -> None:
    assert periods.month_key(date(2024, 3, 9)) == "2024-03"
    assert periods.month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert periods.days_in_month(2023, 2) == 28


def test_period_presets_around_anchor() -> None:
    """Week starts on Monday; month and year are full calendar periods."""
    anchor = date(2024, 5, 15)  # Wednesday

    week = periods.period_from_preset("week", anchor)
    assert (week.start, week.end) == (date(2024, 5, 13), date(2024, 5, 19))

    month = periods.period_from_preset("month", anchor)
    assert (month.start, month.end) == (date(2024, 5, 1), date(2024, 5, 31))

    year = periods.period_from_preset("year", anchor)
    assert (year.start, year.end) == (date(2024, 1, 1), date(2024, 12, 31))

    assert periods.period_from_preset("all", anchor).is_all_time

    with pytest.raises(ValueError):
        periods.period_from_preset("quarter", anchor)


def test_period_month_defaults_to_today(monkeypatch) -> None:
    """Without arguments, the current month is used."""
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 2, 10))
    r = periods.period_month()
    assert (r.start, r.end) == (date(2024, 2, 1), date(2024, 2, 29))


def _args(**kwargs) -> Namespace:
    base = {"period": None, "anchor": None, "from_date": None, "to_date": None}
    base.update(kwargs)
    return Namespace(**base)


def test_determine_range_priority(monkeypatch) -> None:
    """Preset wins over custom dates, custom dates over the default period."""
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 7, 4))

    r = periods.determine_range_from_args(
        _args(period="year", from_date="2024-03-01", to_date="2024-03-31")
    )
    assert (r.start, r.end) == (date(2024, 1, 1), date(2024, 12, 31))

    r = periods.determine_range_from_args(_args(from_date="2024-03-01"))
    assert (r.start, r.end) == (date(2024, 3, 1), None)

    r = periods.determine_range_from_args(_args(), default_period="month")
    assert (r.start, r.end) == (date(2024, 7, 1), date(2024, 7, 31))


def test_determine_range_rejects_invalid_input() -> None:
    with pytest.raises(ValueError):
        periods.determine_range_from_args(_args(from_date="2024-13-01"))
    with pytest.raises(ValueError):
        periods.determine_range_from_args(
            _args(from_date="2024-03-31", to_date="2024-03-01")
        )
    with pytest.raises(ValueError):
        periods.determine_range_from_args(_args(anchor="yesterday", period="week"))


def test_to_date_nanosecond_values_do_not_warn() -> None:
    """Epoch nanoseconds keep their calendar day without pandas warnings."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert periods.to_date(1_700_000_000_123_456_789) == date(2023, 11, 14)
        aware = pd.Timestamp(1_700_000_000_123_456_789, tz="UTC")
        assert periods.to_date(aware) == aware.floor("us").to_pydatetime().astimezone().date()
