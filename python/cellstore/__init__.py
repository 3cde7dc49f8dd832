"""cellstore - in-memory reactive cell store with undo/redo.

Usage::

    from cellstore import Spreadsheet

    sheet = Spreadsheet()
    sheet.set_cell_value("A1", 10)
    sheet.set_cell_value("A2", 20)
    sheet.set_cell_value("A3", "=A1+A2")
    sheet.get_cell_value("A3")  # 30.0

    sheet.set_cell_value("A1", 5)
    sheet.get_cell_value("A3")  # 25.0
    sheet.undo()
    sheet.get_cell_value("A3")  # 30.0
"""

from cellstore._cell import CellStore, is_formula, is_valid_cell_id, validate_cell_id
from cellstore._errors import (
    CircularReferenceError,
    InvalidFormulaError,
    InvalidIdError,
    MissingFormulaError,
    SpreadsheetError,
    UnknownCellError,
)
from cellstore._history import History, HistoryRecord
from cellstore._spreadsheet import DEFAULT_MAX_DEPTH, Spreadsheet

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CellStore",
    "CircularReferenceError",
    "DEFAULT_MAX_DEPTH",
    "History",
    "HistoryRecord",
    "InvalidFormulaError",
    "InvalidIdError",
    "MissingFormulaError",
    "Spreadsheet",
    "SpreadsheetError",
    "UnknownCellError",
    "is_formula",
    "is_valid_cell_id",
    "validate_cell_id",
]
