"""Linear undo/redo history of single-cell writes."""

from __future__ import annotations

from dataclasses import dataclass

from cellstore._cell import CellValue


@dataclass(frozen=True)
class HistoryRecord:
    """State of one cell to restore: its value, or ``None`` if it did not exist."""

    cell_id: str
    value: CellValue | None = None


class History:
    """Two stacks of :class:`HistoryRecord`: ``past`` (undo) and ``future`` (redo).

    A new write truncates the future, so history never branches.
    """

    __slots__ = ("_past", "_future")

    def __init__(self) -> None:
        self._past: list[HistoryRecord] = []
        self._future: list[HistoryRecord] = []

    def record_write(self, record: HistoryRecord) -> None:
        self._past.append(record)
        self._future.clear()

    def peek_past(self) -> HistoryRecord | None:
        return self._past[-1] if self._past else None

    def pop_past(self) -> HistoryRecord | None:
        return self._past.pop() if self._past else None

    def pop_future(self) -> HistoryRecord | None:
        return self._future.pop() if self._future else None

    def push_past(self, record: HistoryRecord) -> None:
        self._past.append(record)

    def push_future(self, record: HistoryRecord) -> None:
        self._future.append(record)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def __len__(self) -> int:
        return len(self._past)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
