"""Tests for Spreadsheet undo/redo and the dependency bookkeeping it restores."""

from __future__ import annotations

import pytest

from cellstore import CircularReferenceError, Spreadsheet, UnknownCellError


@pytest.fixture
def sheet() -> Spreadsheet:
    return Spreadsheet()


class TestUndo:
    def test_undo_removes_new_cell(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 10)
        sheet.set_cell_value("A2", 20)
        sheet.set_cell_value("A3", "=A1+A2")
        sheet.undo()
        with pytest.raises(UnknownCellError):
            sheet.get_cell_value("A3")
        assert sheet.dependencies_of("A3") == frozenset()
        assert sheet.dependents_of("A1") == frozenset()

    def test_cell_history(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("A1", 2)
        sheet.undo()
        assert sheet.get_cell_value("A1") == 1

    def test_walk_full_history(self, sheet: Spreadsheet) -> None:
        for value in (1, 2, 3):
            sheet.set_cell_value("A1", value)
        sheet.undo()
        assert sheet.get_cell_value("A1") == 2
        sheet.undo()
        assert sheet.get_cell_value("A1") == 1
        sheet.undo()
        with pytest.raises(UnknownCellError):
            sheet.get_cell_value("A1")
        assert not sheet.can_undo

    def test_undo_empty_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.undo()
        sheet.undo()
        assert len(sheet) == 0
        assert not sheet.can_redo

    def test_undo_past_start_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.undo()
        sheet.undo()
        assert "A1" not in sheet
        sheet.redo()
        assert sheet.get_cell_value("A1") == 1

    def test_undo_restores_formula_dependencies(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("B1", "=A1")
        sheet.set_cell_value("B1", 5)
        assert sheet.dependencies_of("B1") == frozenset()
        sheet.undo()
        assert sheet.raw_value("B1") == "=A1"
        assert sheet.dependencies_of("B1") == {"A1"}
        assert sheet.dependents_of("A1") == {"B1"}
        assert sheet.get_cell_value("B1") == 1.0

    def test_undo_to_literal_clears_dependencies(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("B1", 3)
        sheet.set_cell_value("B1", "=A1")
        sheet.undo()
        assert sheet.get_cell_value("B1") == 3
        assert sheet.dependencies_of("B1") == frozenset()

    def test_undo_reverts_referenced_cell(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 10)
        sheet.set_cell_value("A2", 20)
        sheet.set_cell_value("A3", "=A1+A2")
        sheet.set_cell_value("A1", 5)
        assert sheet.get_cell_value("A3") == 25.0
        sheet.undo()
        assert sheet.get_cell_value("A3") == 30.0

    def test_undo_reinsertion_cycle_leaves_state(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "=B1")
        sheet.set_cell_value("A1", 5)
        # stale entry: B1 recorded as reading A1
        sheet._graph.set_dependencies("B1", {"A1"})
        with pytest.raises(CircularReferenceError):
            sheet.undo()
        assert sheet.raw_value("A1") == 5
        assert sheet.dependencies_of("A1") == frozenset()
        assert sheet.can_undo
        assert not sheet.can_redo


class TestRedo:
    def test_redo_restores_formula(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 10)
        sheet.set_cell_value("A2", 20)
        sheet.set_cell_value("A3", "=A1+A2")
        sheet.undo()
        sheet.redo()
        assert sheet.get_cell_value("A3") == 30.0
        assert sheet.dependencies_of("A3") == {"A1", "A2"}

    def test_formula_preserved_after_redo(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 10)
        sheet.set_cell_value("A2", 20)
        sheet.set_cell_value("A3", "=A1+A2")
        sheet.undo()
        sheet.redo()
        sheet.set_cell_value("A1", 5)
        assert sheet.get_cell_value("A3") == 25.0

    def test_redo_empty_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.redo()
        sheet.set_cell_value("A1", 1)
        sheet.redo()
        sheet.redo()
        assert sheet.get_cell_value("A1") == 1
        assert not sheet.can_redo

    def test_write_discards_redo(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("A1", 2)
        sheet.undo()
        assert sheet.can_redo
        sheet.set_cell_value("B1", 9)
        assert not sheet.can_redo
        sheet.redo()
        assert sheet.get_cell_value("A1") == 1

    def test_undo_after_redo_reverts_again(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("A1", 2)
        sheet.undo()
        sheet.redo()
        assert sheet.get_cell_value("A1") == 2
        sheet.undo()
        assert sheet.get_cell_value("A1") == 1

    def test_full_rewind_and_replay(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("B1", 2)
        sheet.set_cell_value("C1", "=A1+B1")
        for _ in range(3):
            sheet.undo()
        assert len(sheet) == 0
        for _ in range(3):
            sheet.redo()
        assert sheet.get_cell_value("C1") == 3.0
        assert not sheet.can_redo

    def test_redo_literal_clears_stale_dependencies(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "=B1")
        sheet.set_cell_value("A1", 5)
        sheet.undo()
        assert sheet.dependencies_of("A1") == {"B1"}
        sheet.redo()
        assert sheet.dependencies_of("A1") == frozenset()
        # A1 is a literal again, so B1 may read it
        sheet.set_cell_value("B1", "=A1")
        assert sheet.get_cell_value("B1") == 5.0


class TestClearHistory:
    def test_clear_keeps_cells(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", 1)
        sheet.set_cell_value("A2", "=A1")
        sheet.undo()
        sheet.clear_history()
        assert not sheet.can_undo
        assert not sheet.can_redo
        assert sheet.get_cell_value("A1") == 1
        sheet.undo()
        assert sheet.get_cell_value("A1") == 1
