"""ExpressionEvaluator protocol consumed by the spreadsheet engine."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ExpressionEvaluator(Protocol):
    """Evaluates purely literal arithmetic text; knows nothing about cells."""

    error_message: str

    def check_syntax(self, expr: str) -> bool:
        """Return ``True`` when *expr* is well formed.

        On ``False`` the reason is available in ``error_message``.
        """
        ...

    def calculate(self, expr: str) -> float:
        """Compute *expr*. May return NaN or raise on arithmetic failure."""
        ...
