import pytest

from freelance_finsight.models import (
    Column,
    ColumnCalculation,
    CollaboratorQuote,
    Item,
    Quote,
    Section,
)
from freelance_finsight.valuation import (
    collaborator_quote_total,
    column_aggregates,
    item_value,
    quote_total,
)

NUMBER = "number"


def _quote(items, columns=None) -> Quote:
    return Quote(id="q1", sections=(Section(id="s1", items=tuple(items)),), columns=columns)


def test_quote_total_with_default_columns_sums_unit_prices() -> None:
    """A quote that never customised its columns is valued on unitPrice."""
    quote = _quote([Item(id="i1", unit_price=1200), Item(id="i2", unit_price=300)])
    assert quote_total(quote) == pytest.approx(1500.0)


def test_quote_total_spans_all_sections() -> None:
    quote = Quote(
        id="q1",
        sections=(
            Section(id="s1", items=(Item(id="i1", unit_price=100),)),
            Section(id="s2", items=(Item(id="i2", unit_price=50), Item(id="i3", unit_price=25))),
        ),
    )
    assert quote_total(quote) == pytest.approx(175.0)


def test_row_formula_on_value_column() -> None:
    """The value column formula is evaluated against sibling number columns."""
    columns = (
        Column(id="description", type="text"),
        Column(id="quantity", type=NUMBER),
        Column(id="rate", type=NUMBER),
        Column(id="unitPrice", type=NUMBER, row_formula="quantity * rate"),
    )
    items = [
        Item(id="i1", unit_price=999, custom_fields={"quantity": 2, "rate": "150"}),
        Item(id="i2", custom_fields={"quantity": 1, "rate": 100}),
    ]
    quote = _quote(items, columns)

    assert item_value(items[0], columns) == pytest.approx(300.0)
    assert quote_total(quote) == pytest.approx(400.0)


def test_malformed_row_formula_values_item_at_zero() -> None:
    """A broken formula zeroes the cell but the other items still count."""
    columns = (
        Column(id="quantity", type=NUMBER),
        Column(id="unitPrice", type=NUMBER, row_formula="quantity * __import__('os')"),
    )
    quote = _quote([Item(id="i1", custom_fields={"quantity": 3})], columns)
    assert quote_total(quote) == 0.0


def test_non_numeric_row_values_count_as_zero() -> None:
    columns = (
        Column(id="quantity", type=NUMBER),
        Column(id="unitPrice", type=NUMBER, row_formula="quantity + 10"),
    )
    quote = _quote([Item(id="i1", custom_fields={"quantity": "n/a"})], columns)
    assert quote_total(quote) == pytest.approx(10.0)


def test_explicit_columns_without_value_column_total_zero() -> None:
    """An explicit layout without unitPrice values the quote at 0."""
    columns = (Column(id="description", type="text"), Column(id="hours", type=NUMBER))
    quote = _quote([Item(id="i1", unit_price=500, custom_fields={"hours": 8})], columns)
    assert quote_total(quote) == 0.0


def test_collaborator_quote_total_falls_back_to_stored_total() -> None:
    cq = CollaboratorQuote(
        id="cq1",
        columns=(Column(id="hours", type=NUMBER),),
        sections=(Section(id="s1", items=(Item(id="i1", custom_fields={"hours": 4}),)),),
        total=800,
    )
    assert collaborator_quote_total(cq) == pytest.approx(800.0)

    computed = CollaboratorQuote(
        id="cq2",
        sections=(Section(id="s1", items=(Item(id="i1", unit_price=250),)),),
        total=800,
    )
    assert collaborator_quote_total(computed) == pytest.approx(250.0)


def test_column_aggregates_kinds() -> None:
    """sum / average / min / max / custom aggregates of number columns."""
    columns = (
        Column(id="description", type="text"),
        Column(id="hours", type=NUMBER, calculation=ColumnCalculation(type="average")),
        Column(id="rate", type=NUMBER, calculation=ColumnCalculation(type="max")),
        Column(
            id="unitPrice",
            type=NUMBER,
            row_formula="hours * rate",
            calculation=ColumnCalculation(type="sum"),
        ),
        Column(
            id="margin",
            type=NUMBER,
            calculation=ColumnCalculation(type="custom", formula="unitPrice * 0.2"),
        ),
        Column(id="notes", type=NUMBER, calculation=ColumnCalculation(type="none")),
    )
    items = [
        Item(id="i1", custom_fields={"hours": 2, "rate": 100}),
        Item(id="i2", custom_fields={"hours": 4, "rate": 50}),
    ]
    aggs = {a.column_id: a for a in column_aggregates(_quote(items, columns))}

    assert set(aggs) == {"hours", "rate", "unitPrice", "margin"}
    assert aggs["hours"].value == pytest.approx(3.0)
    assert aggs["rate"].value == pytest.approx(100.0)
    assert aggs["unitPrice"].value == pytest.approx(400.0)
    assert aggs["margin"].value == pytest.approx(80.0)


def test_column_aggregates_empty_quote() -> None:
    """Empty columns aggregate to zero instead of failing."""
    columns = (
        Column(id="unitPrice", type=NUMBER, calculation=ColumnCalculation(type="min")),
        Column(id="hours", type=NUMBER, calculation=ColumnCalculation(type="average")),
    )
    aggs = column_aggregates(_quote([], columns))
    assert [a.value for a in aggs] == [0.0, 0.0]
