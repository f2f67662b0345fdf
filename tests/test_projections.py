from datetime import date

import pytest

from freelance_finsight.models import Client, Item, Payment, Quote, Section, Snapshot, Task
from freelance_finsight.periods import DateRange
from freelance_finsight.projections import (
    compute_additional_financials,
    compute_additional_task_details,
)

MARCH = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31))


def _quote(qid: str, total: float, **kwargs) -> Quote:
    items = (Item(id="i1", unit_price=total),)
    return Quote(id=qid, sections=(Section(id="s1", items=items),), **kwargs)


def test_on_hold_task_is_lost_not_future_revenue() -> None:
    """An on-hold task of 500,000 is lost revenue and no future revenue."""
    snapshot = Snapshot(
        tasks=(Task(id="t1", name="Rebrand", status="onhold", quote_id="q1", end_date=date(2024, 3, 20)),),
        quotes=(_quote("q1", 500_000),),
    )

    result = compute_additional_financials(snapshot, MARCH)

    assert result.lost_revenue == pytest.approx(500_000)
    assert result.future_revenue == 0.0


def test_future_revenue_is_unpaid_remainder() -> None:
    """Paid amounts are subtracted whatever their date, never below zero."""
    snapshot = Snapshot(
        tasks=(
            Task(id="t1", name="Site", status="inprogress", quote_id="q1", deadline=date(2024, 3, 15)),
            Task(id="t2", name="Logo", status="done", quote_id="q2", deadline=date(2024, 3, 10)),
            Task(id="t3", name="Old", status="archived", quote_id="q3", deadline=date(2024, 3, 10)),
            Task(id="t4", name="Later", status="todo", quote_id="q4", deadline=date(2024, 5, 10)),
        ),
        quotes=(
            _quote(
                "q1",
                1000,
                payments=(Payment(id="p1", status="paid", amount=250, date=date(2023, 12, 1)),),
            ),
            _quote("q2", 400, amount_paid=600),
            _quote("q3", 900),
            _quote("q4", 700),
        ),
    )

    result = compute_additional_financials(snapshot, MARCH)

    assert result.future_revenue == pytest.approx(750)
    assert result.lost_revenue == 0.0

    everything = compute_additional_financials(snapshot)
    assert everything.future_revenue == pytest.approx(750 + 700)


def test_task_without_date_is_outside_bounded_ranges() -> None:
    snapshot = Snapshot(
        tasks=(Task(id="t1", status="onhold", quote_id="q1"),),
        quotes=(_quote("q1", 100),),
    )
    assert compute_additional_financials(snapshot, MARCH).lost_revenue == 0.0
    assert compute_additional_financials(snapshot).lost_revenue == pytest.approx(100)


def test_additional_task_details_lines() -> None:
    snapshot = Snapshot(
        tasks=(
            Task(id="t1", name="Site", status="inprogress", quote_id="q1", client_id="c1", deadline=date(2024, 3, 5)),
            Task(id="t2", name="Shop", status="todo", quote_id="q2", client_id="c1", deadline=date(2024, 3, 6)),
            Task(id="t3", name="App", status="onhold", quote_id="q3", deadline=date(2024, 3, 7)),
        ),
        quotes=(_quote("q1", 100), _quote("q2", 300), _quote("q3", 80)),
        clients=(Client(id="c1", name="Acme"),),
    )

    details = compute_additional_task_details(snapshot, MARCH)

    assert [(i.id, i.amount, i.type) for i in details.future_revenue_items] == [
        ("t2", 300, "future_revenue"),
        ("t1", 100, "future_revenue"),
    ]
    assert details.future_revenue_items[0].client_name == "Acme"
    assert [(i.id, i.client_name, i.amount) for i in details.lost_revenue_items] == [
        ("t3", "Unknown client", 80)
    ]
