"""ArithmeticEvaluator: recursive descent evaluator for literal arithmetic.

Operates on expressions whose cell references have already been replaced by
their values, e.g. ``"10 + 20.5 * (3 - -1)"``.  Supports ``+ - * /`` with the
usual precedence, unary signs, parentheses and int/decimal/scientific
literals.  Anything else (identifiers, functions, stray characters) is a
syntax error.

Division by zero yields NaN rather than raising, so callers decide how to
report it.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Union

logger = logging.getLogger(__name__)

# ("+", left, right), ("neg", operand) or a float leaf
Node = Union[float, tuple]

_NUMBER_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class ExpressionSyntaxError(ValueError):
    """Raised when an expression cannot be parsed."""


# ---------------------------------------------------------------------------
# Expression parsing helpers
# ---------------------------------------------------------------------------


def _find_matching_paren(expr: str, start: int) -> int:
    """Index of the ``')'`` matching the ``'('`` at *expr[start]*, or -1."""
    depth = 1
    i = start + 1
    while i < len(expr):
        ch = expr[i]
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _find_top_level_split(expr: str) -> tuple[str, str, str] | None:
    """Find the rightmost lowest-precedence binary operator at paren depth 0.

    Additive operators bind looser than multiplicative ones.  Right-to-left
    scan produces correct left-to-right associativity.
    Returns ``(left, op, right)`` or ``None``.
    """
    for operators in (('+', '-'), ('*', '/')):
        depth = 0
        i = len(expr) - 1
        while i > 0:
            ch = expr[i]

            # Track parentheses (inverted for right-to-left)
            if ch == ')':
                depth += 1
                i -= 1
                continue
            if ch == '(':
                depth -= 1
                i -= 1
                continue

            if depth != 0 or ch not in operators:
                i -= 1
                continue

            # Verify it's a binary operator (not unary prefix)
            j = i - 1
            while j >= 0 and expr[j] == ' ':
                j -= 1
            if j < 0 or expr[j] in ('(', '+', '-', '*', '/'):
                i -= 1
                continue
            # Skip +/- that are part of scientific notation (e.g. 2.5e-1)
            if ch in ('+', '-') and j >= 1 and expr[j] in ('e', 'E') and expr[j - 1].isdigit():
                i -= 1
                continue

            left = expr[:i].strip()
            right = expr[i + 1 :].strip()
            if left and right:
                return (left, ch, right)

            i -= 1

    return None


def _parse(expr: str) -> Node:
    """Parse *expr* into a small tuple tree.

    Dispatch order (first match wins):

    1. Binary split at top level (paren-aware, precedence-correct)
    2. Parenthesized sub-expression ``(...)``
    3. Unary minus / plus
    4. Numeric literal
    """
    expr = expr.strip()
    if not expr:
        raise ExpressionSyntaxError("Empty expression")

    # 1. Binary split (additive -> multiplicative)
    split = _find_top_level_split(expr)
    if split:
        left_str, op, right_str = split
        return (op, _parse(left_str), _parse(right_str))

    # 2. Parenthesized sub-expression: (expr)
    if expr.startswith('('):
        close = _find_matching_paren(expr, 0)
        if close == -1:
            raise ExpressionSyntaxError(f"Unbalanced parentheses in {expr!r}")
        if close == len(expr) - 1:
            return _parse(expr[1:close])

    # 3. Unary minus / plus
    if expr.startswith('-'):
        return ("neg", _parse(expr[1:]))
    if expr.startswith('+'):
        return _parse(expr[1:])

    # 4. Numeric literal
    if _NUMBER_RE.fullmatch(expr):
        return float(expr)

    raise ExpressionSyntaxError(f"Unexpected token {expr!r}")


def _divide(left: float, right: float) -> float:
    if right == 0:
        return math.nan
    return left / right


def _eval_node(node: Node) -> float:
    if isinstance(node, float):
        return node
    if node[0] == "neg":
        return -_eval_node(node[1])
    op, left_node, right_node = node
    left = _eval_node(left_node)
    right = _eval_node(right_node)
    if op == '+':
        return left + right
    if op == '-':
        return left - right
    if op == '*':
        return left * right
    return _divide(left, right)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class ArithmeticEvaluator:
    """Default :class:`~cellstore.calc.ExpressionEvaluator` implementation.

    Usage::

        evaluator = ArithmeticEvaluator()
        if evaluator.check_syntax("3 + 4 * 2"):
            result = evaluator.calculate("3 + 4 * 2")  # 11.0
        else:
            print(evaluator.error_message)
    """

    def __init__(self) -> None:
        self.error_message = ""

    def check_syntax(self, expr: str) -> bool:
        """Validate *expr*; on failure the reason is kept in ``error_message``."""
        try:
            _parse(expr)
        except ExpressionSyntaxError as exc:
            self.error_message = str(exc)
            return False
        except RecursionError:
            self.error_message = "Expression is nested too deeply"
            return False
        self.error_message = ""
        return True

    def calculate(self, expr: str) -> float:
        """Evaluate *expr* and return a float (NaN for division by zero).

        Raises ExpressionSyntaxError if *expr* does not parse.
        """
        result = float(_eval_node(_parse(expr)))
        logger.debug("Calculated %r = %r", expr, result)
        return result
