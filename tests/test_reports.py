from datetime import date

import pytest

from freelance_finsight.engine import (
    compute_financial_summary,
    compute_monthly_financials,
    compute_revenue_breakdown,
    compute_task_details,
)
from freelance_finsight.models import (
    Client,
    CollaboratorLink,
    CollaboratorQuote,
    FixedCost,
    Item,
    Payment,
    Quote,
    Section,
    Snapshot,
    Task,
)
from freelance_finsight.periods import ALL_TIME, DateRange
from freelance_finsight.projections import compute_additional_financials
from freelance_finsight.reports import compute_reports

Q1_2024 = DateRange(start=date(2024, 1, 1), end=date(2024, 3, 31), label="Q1 2024")


def _snapshot() -> Snapshot:
    def quote(qid: str, total: float, **kwargs) -> Quote:
        items = (Item(id="i1", unit_price=total),)
        return Quote(id=qid, sections=(Section(id="s1", items=items),), **kwargs)

    return Snapshot(
        tasks=(
            Task(
                id="t1",
                name="Website",
                status="done",
                client_id="c1",
                quote_id="q1",
                deadline=date(2024, 2, 28),
                collaborator_links=(CollaboratorLink("col1", "cq1"),),
            ),
            Task(id="t2", name="Audit", status="inprogress", client_id="c2", quote_id="q2", deadline=date(2024, 3, 15)),
            Task(id="t3", name="Paused", status="onhold", client_id="c2", quote_id="q3", end_date=date(2024, 1, 10)),
        ),
        quotes=(
            quote(
                "q1",
                2000,
                payments=(
                    Payment(id="p1", status="paid", amount_type="percent", percent=30, date=date(2024, 1, 15)),
                    Payment(id="p2", status="paid", amount=1400, date=date(2024, 2, 20)),
                ),
            ),
            quote("q2", 900, amount_paid=300, paid_date=date(2024, 3, 1)),
            quote("q3", 450),
        ),
        collaborator_quotes=(CollaboratorQuote(id="cq1", collaborator_id="col1", amount_paid=500),),
        clients=(Client(id="c1", name="Acme"), Client(id="c2", name="Globex")),
        fixed_costs=(
            FixedCost(id="fc1", name="Tools", amount=120, frequency="yearly", start_date=date(2024, 1, 1)),
        ),
    )


def test_compute_reports_matches_individual_reports() -> None:
    """The one-pass bundle agrees with every standalone report."""
    snapshot = _snapshot()
    as_of = date(2024, 3, 31)

    reports = compute_reports(snapshot, Q1_2024, as_of=as_of)

    assert reports.date_range == Q1_2024
    assert reports.summary == compute_financial_summary(snapshot, Q1_2024, as_of=as_of)
    assert list(reports.revenue_breakdown) == compute_revenue_breakdown(snapshot, Q1_2024)
    assert reports.task_details == compute_task_details(snapshot, Q1_2024)
    assert reports.additional == compute_additional_financials(snapshot, Q1_2024)
    assert list(reports.monthly) == compute_monthly_financials(snapshot, Q1_2024, as_of=as_of)


def test_compute_reports_figures() -> None:
    reports = compute_reports(_snapshot(), Q1_2024, as_of=date(2024, 3, 31))

    assert reports.summary.revenue == pytest.approx(600 + 1400 + 300)
    assert reports.summary.collaborator_costs == pytest.approx(500)
    assert reports.summary.fixed_costs == pytest.approx(120 / 365.25 * 91)
    assert [(b.name, b.value) for b in reports.revenue_breakdown] == [("Acme", 2000)]
    assert reports.additional.future_revenue == pytest.approx(600)
    assert reports.additional.lost_revenue == pytest.approx(450)
    assert [i.id for i in reports.additional_task_details.lost_revenue_items] == ["t3"]
    assert [m.month_year for m in reports.monthly] == ["2024-01", "2024-02", "2024-03"]
    # The collaborator payout follows the first client payment (January).
    assert reports.monthly[0].costs == pytest.approx(500 + 10)
    assert reports.monthly[1].costs == pytest.approx(10)
    assert reports.fixed_costs.total_fixed_costs == pytest.approx(reports.summary.fixed_costs)


def test_compute_reports_defaults_to_all_time() -> None:
    reports = compute_reports(_snapshot(), as_of=date(2024, 3, 31))

    assert reports.date_range == ALL_TIME
    assert reports.summary.revenue == pytest.approx(2300)
    # Fixed cost details fall back to the month of as_of.
    assert reports.fixed_costs.date_range.start == date(2024, 3, 1)
