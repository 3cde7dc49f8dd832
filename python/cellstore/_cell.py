"""Cell identifiers, formula detection and the raw cell store."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Union

from cellstore._errors import InvalidIdError

logger = logging.getLogger(__name__)

CellValue = Union[int, float, str]

_CELL_ID_RE = re.compile(r"[A-Z]+[1-9][0-9]*")


def is_valid_cell_id(cell_id: object) -> bool:
    """``True`` for identifiers like ``A1`` or ``BC12``."""
    return isinstance(cell_id, str) and _CELL_ID_RE.fullmatch(cell_id) is not None


def validate_cell_id(cell_id: object) -> None:
    """Raise InvalidIdError unless *cell_id* is a well-formed identifier."""
    if cell_id is None or cell_id == "":
        logger.error("Invalid cellId")
        raise InvalidIdError("Invalid cellId", cell_id)
    if not is_valid_cell_id(cell_id):
        logger.error("Invalid cellId format: %r", cell_id)
        raise InvalidIdError("Invalid cellId format", cell_id)


def is_formula(value: object) -> bool:
    return isinstance(value, str) and value.startswith("=")


def check_cell_value(value: object) -> None:
    """Reject values that are neither numbers nor text."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        logger.error("Unsupported cell value type: %s", type(value).__name__)
        raise TypeError(f"Unsupported cell value type: {type(value).__name__}")


class CellStore:
    """Plain mapping of cell id -> stored literal or formula text.

    The store never evaluates anything; formula text is kept verbatim.
    """

    __slots__ = ("_cells",)

    def __init__(self) -> None:
        self._cells: dict[str, CellValue] = {}

    def get(self, cell_id: str) -> CellValue | None:
        return self._cells.get(cell_id)

    def put(self, cell_id: str, value: CellValue) -> None:
        self._cells[cell_id] = value

    def remove(self, cell_id: str) -> None:
        self._cells.pop(cell_id, None)

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._cells))
