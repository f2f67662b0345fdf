import pytest

from freelance_finsight.engine import (
    DetailItem,
    FinancialSummary,
    FixedCostDetails,
    FixedCostItem,
    MonthlyFinancials,
    RevenueBreakdownItem,
    TaskDetails,
)
from freelance_finsight.projections import AdditionalFinancials, AdditionalTaskDetails
from freelance_finsight.views import (
    DETAIL_COLUMNS,
    MONTHLY_COLUMNS,
    breakdown_to_dataframe,
    fixed_costs_to_dataframe,
    monthly_to_dataframe,
    projections_to_dataframe,
    summary_to_dataframe,
    task_details_to_dataframe,
)


def test_summary_to_dataframe_rounds_and_orders_metrics() -> None:
    summary = FinancialSummary(
        revenue=1000.456, costs=300.0, profit=700.456, collaborator_costs=200.0, fixed_costs=100.0
    )
    df = summary_to_dataframe(summary, AdditionalFinancials(50.0, 25.0), decimals=2)

    assert list(df.columns) == ["metric", "amount"]
    assert list(df["metric"]) == [
        "revenue",
        "collaborator_costs",
        "fixed_costs",
        "costs",
        "profit",
        "future_revenue",
        "lost_revenue",
    ]
    assert df.loc[0, "amount"] == pytest.approx(1000.46)


def test_task_details_to_dataframe_revenue_then_costs() -> None:
    details = TaskDetails(
        revenue_items=(DetailItem("t1", "Site", "Acme", 500.0, "revenue"),),
        cost_items=(
            DetailItem("t1", "Site", "Acme", 120.4, "collaborator_cost", "cq1", "Jane"),
        ),
    )
    df = task_details_to_dataframe(details)

    assert list(df.columns) == DETAIL_COLUMNS
    assert list(df["type"]) == ["revenue", "collaborator_cost"]
    assert list(df["collaborator_name"]) == ["", "Jane"]
    assert df.loc[1, "amount"] == 120


def test_empty_reports_keep_their_columns() -> None:
    """Empty reports still render with the expected columns."""
    assert list(monthly_to_dataframe([]).columns) == MONTHLY_COLUMNS
    assert list(breakdown_to_dataframe([]).columns) == ["name", "value"]
    assert list(task_details_to_dataframe(TaskDetails()).columns) == DETAIL_COLUMNS
    assert list(projections_to_dataframe(AdditionalTaskDetails()).columns) == DETAIL_COLUMNS
    assert list(fixed_costs_to_dataframe(FixedCostDetails()).columns) == [
        "id",
        "name",
        "frequency",
        "amount",
    ]
    assert monthly_to_dataframe([]).empty


def test_row_order_is_preserved() -> None:
    breakdown = [RevenueBreakdownItem("Globex", 300.0), RevenueBreakdownItem("Acme", 150.0)]
    assert list(breakdown_to_dataframe(breakdown)["name"]) == ["Globex", "Acme"]

    months = [MonthlyFinancials("2024-01", 10, 4, 6), MonthlyFinancials("2024-02", 0, 5, -5)]
    df = monthly_to_dataframe(months)
    assert list(df["month_year"]) == ["2024-01", "2024-02"]
    assert list(df["profit"]) == [6, -5]

    fixed = FixedCostDetails(fixed_cost_items=(FixedCostItem("fc1", "Rent", "monthly", 99.6),))
    assert fixed_costs_to_dataframe(fixed).loc[0, "amount"] == 100
