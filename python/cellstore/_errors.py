"""Error taxonomy for cellstore.

Every error derives from :class:`SpreadsheetError`, itself a ``ValueError``,
so callers can catch the whole family or a single kind.
"""

from __future__ import annotations


class SpreadsheetError(ValueError):
    """Base class for all cellstore errors."""


class InvalidIdError(SpreadsheetError):
    """Raised for a missing or malformed cell identifier."""

    def __init__(self, message: str, cell_id: object = None) -> None:
        super().__init__(message)
        self.cell_id = cell_id


class CircularReferenceError(SpreadsheetError):
    """Raised when a formula would read back from the cell that holds it."""

    def __init__(self, message: str = "Circular reference detected", cell_id: str | None = None) -> None:
        super().__init__(message)
        self.cell_id = cell_id


class UnknownCellError(SpreadsheetError):
    """Raised when reading a cell that was never written."""

    def __init__(self, cell_id: str) -> None:
        super().__init__(f"Cell {cell_id} does not exist")
        self.cell_id = cell_id


class InvalidFormulaError(SpreadsheetError):
    """Raised for a syntax error, a NaN result or any evaluator failure.

    ``detail`` keeps the underlying evaluator message.
    """

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail


class MissingFormulaError(SpreadsheetError):
    """A cell holds formula text but the graph has no formula recorded for it.

    This is a bookkeeping bug, not a user error.
    """
