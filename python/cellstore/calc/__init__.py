"""cellstore.calc - dependency tracking and arithmetic evaluation."""

from cellstore.calc._evaluator import ArithmeticEvaluator, ExpressionSyntaxError
from cellstore.calc._graph import DependencyGraph
from cellstore.calc._parser import (
    extract_dependencies,
    is_numeric,
    references_cell,
    split_tokens,
    substitute_references,
)
from cellstore.calc._protocol import ExpressionEvaluator

__all__ = [
    "ArithmeticEvaluator",
    "DependencyGraph",
    "ExpressionEvaluator",
    "ExpressionSyntaxError",
    "extract_dependencies",
    "is_numeric",
    "references_cell",
    "split_tokens",
    "substitute_references",
]
