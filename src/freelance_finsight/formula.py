# Freelance FinSight - Financial reporting engine for freelance dashboards
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Row formula evaluation for quote columns.

A quote column may carry a per-row formula such as ``"qty * rate"`` or
``"(colA + colB) / 2"`` where each identifier is the id of a sibling
column. Evaluation proceeds in two steps:

1. every known column id is replaced by its numeric value for the row,
   longest ids first so that ``col10`` is never rewritten through ``col1``;
2. the resulting arithmetic expression is parsed with :mod:`ast` and
   walked by a small evaluator that only accepts numeric literals,
   ``+ - * /``, unary ``+``/``-`` and parentheses.

Nothing is ever executed: any other construct (names left unresolved,
calls, attributes, comparisons, ``**``...) is rejected. The public helper
:func:`evaluate_row_formula` turns every failure into ``0.0`` so a bad
formula degrades a single cell instead of failing a report.
"""

import ast
import math
import operator
import re
from collections.abc import Mapping
from typing import Optional

_ALLOWED_BINOPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_ALLOWED_UNARYOPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


# Longer expressions are rejected before parsing; deeply nested input
# exhausts the parser.
MAX_EXPRESSION_LENGTH = 10_000


class FormulaError(ValueError):
    """Raised by :func:`safe_eval_arithmetic` for rejected expressions."""


def substitute_variables(expr: str, values: Mapping[str, float]) -> str:
    """Replace each variable id found in ``expr`` by its value as a literal.

    Ids are matched as whole tokens: an id is not replaced when it is
    directly preceded or followed by another word character. Values are
    wrapped in parentheses so negative numbers keep their meaning.
    """
    if not values:
        return expr

    ids = sorted((str(k) for k in values), key=len, reverse=True)
    pattern = re.compile(
        r"(?<![\w.])(" + "|".join(re.escape(i) for i in ids) + r")(?![\w])"
    )

    def _repl(match: re.Match) -> str:
        return f"({float(values[match.group(1)])!r})"

    return pattern.sub(_repl, expr)


def safe_eval_arithmetic(expr: str) -> float:
    """
    Safely evaluate a purely numeric arithmetic expression.

    Supported:
        - numeric literals
        - binary operations: +, -, *, /
        - unary + and -
        - parentheses

    Raises:
        FormulaError: if the expression cannot be parsed, contains an
            unsupported construct, or divides by zero.
    """
    try:
        tree = ast.parse(expr.strip(), mode="eval")
    except SyntaxError as exc:
        raise FormulaError(f"Invalid expression syntax: {expr!r}") from exc

    def _eval(node: ast.AST) -> float:
        if isinstance(node, ast.Expression):
            return _eval(node.body)

        if isinstance(node, ast.Constant):
            if isinstance(node.value, (int, float)) and not isinstance(
                node.value, bool
            ):
                return float(node.value)
            raise FormulaError(f"Unsupported constant in expression: {node.value!r}")

        if isinstance(node, ast.BinOp):
            op_func = _ALLOWED_BINOPS.get(type(node.op))
            if op_func is None:
                raise FormulaError(
                    f"Unsupported operator in expression: {type(node.op).__name__}"
                )
            left = _eval(node.left)
            right = _eval(node.right)
            try:
                return float(op_func(left, right))
            except ZeroDivisionError as exc:
                raise FormulaError(f"Division by zero in {expr!r}") from exc

        if isinstance(node, ast.UnaryOp):
            op_func = _ALLOWED_UNARYOPS.get(type(node.op))
            if op_func is None:
                raise FormulaError(
                    f"Unsupported unary operator: {type(node.op).__name__}"
                )
            return float(op_func(_eval(node.operand)))

        if isinstance(node, ast.Name):
            raise FormulaError(f"Unresolved reference in expression: {node.id!r}")

        raise FormulaError(f"Unsupported expression node: {type(node).__name__}")

    return _eval(tree)


def evaluate_row_formula(
    formula: Optional[str],
    values: Mapping[str, float],
) -> float:
    """Evaluate a row formula against the numeric values of one row.

    Args:
        formula: Expression referencing column ids (may be None or empty).
        values: Mapping of column id to numeric value for the current row.

    Returns:
        The computed value, or 0.0 if the formula is empty, references an
        unknown column, fails to parse or evaluate, or is not finite.
    """
    if not formula or not str(formula).strip():
        return 0.0

    expr = substitute_variables(str(formula), values)
    if len(expr) > MAX_EXPRESSION_LENGTH:
        return 0.0
    try:
        result = safe_eval_arithmetic(expr)
    except (FormulaError, MemoryError, OverflowError, RecursionError, ValueError):
        return 0.0

    if not math.isfinite(result):
        return 0.0
    return result
