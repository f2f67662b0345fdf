import pytest

from freelance_finsight.formula import (
    FormulaError,
    evaluate_row_formula,
    safe_eval_arithmetic,
    substitute_variables,
)


def test_safe_eval_arithmetic_precedence_and_parentheses() -> None:
    """Standard precedence applies and parentheses override it."""
    assert safe_eval_arithmetic("2 + 3 * 4") == pytest.approx(14.0)
    assert safe_eval_arithmetic("(2 + 3) * 4") == pytest.approx(20.0)
    assert safe_eval_arithmetic("-(1.5) + 10 / 4") == pytest.approx(1.0)


@pytest.mark.parametrize(
    "expr",
    [
        "__import__('os').system('echo hi')",
        "2 ** 10",
        "open('x')",
        "[1, 2]",
        "1 if 1 else 2",
        "'a' + 'b'",
        "unknown * 2",
        "1 / 0",
        "1 +",
    ],
)
def test_safe_eval_arithmetic_rejects_everything_else(expr: str) -> None:
    """Anything other than numbers and + - * / ( ) is rejected."""
    with pytest.raises(FormulaError):
        safe_eval_arithmetic(expr)


def test_substitute_variables_matches_whole_ids_longest_first() -> None:
    """An id that prefixes another id must not be replaced inside it."""
    expr = substitute_variables("qty * qty2 + qty_total", {"qty": 2, "qty2": 3})
    assert "qty_total" in expr
    assert safe_eval_arithmetic(expr.replace("qty_total", "0")) == pytest.approx(6.0)


def test_substitute_variables_keeps_negative_values_grouped() -> None:
    """Negative values are parenthesised so 'a * b' stays a product."""
    expr = substitute_variables("a * b", {"a": -2, "b": 3})
    assert safe_eval_arithmetic(expr) == pytest.approx(-6.0)


def test_evaluate_row_formula_computes_from_row_values() -> None:
    """quantity * rate evaluates against the row's numeric values."""
    assert evaluate_row_formula("quantity * rate", {"quantity": 3, "rate": 150}) == pytest.approx(450.0)


@pytest.mark.parametrize(
    "formula",
    [None, "", "   ", "quantity * missing", "quantity / 0", "quantity ** 2", "quantity +"],
)
def test_evaluate_row_formula_degrades_to_zero(formula) -> None:
    """Empty, unresolved, invalid or failing formulas yield 0."""
    assert evaluate_row_formula(formula, {"quantity": 3}) == 0.0


def test_evaluate_row_formula_non_finite_result_is_zero() -> None:
    """Overflowing results are not finite and yield 0."""
    assert evaluate_row_formula("a * a", {"a": 1e200}) == 0.0


def test_evaluate_row_formula_rejects_oversized_expressions() -> None:
    """Pathologically long or nested formulas yield 0 instead of failing."""
    assert evaluate_row_formula("-" * 200_000 + "1", {}) == 0.0
    assert evaluate_row_formula("1+" * 200_000 + "1", {}) == 0.0
