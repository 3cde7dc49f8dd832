"""Spreadsheet: cell writes, lazy formula evaluation and undo/redo.

A write validates the cell id, registers the formula's dependencies (rejecting
direct cycles), records history and commits the value.  A read returns
literals unchanged and evaluates formulas from scratch every time, substituting
referenced cell values before handing the literal expression to an
:class:`~cellstore.calc.ExpressionEvaluator`.

Instances are not thread-safe.  Every public method runs to completion, so a
single lock around each call is enough to share one.
"""

from __future__ import annotations

import logging
import math

from cellstore._cell import (
    CellStore,
    CellValue,
    check_cell_value,
    is_formula,
    validate_cell_id,
)
from cellstore._errors import (
    CircularReferenceError,
    InvalidFormulaError,
    MissingFormulaError,
    UnknownCellError,
)
from cellstore._history import History, HistoryRecord
from cellstore.calc._evaluator import ArithmeticEvaluator
from cellstore.calc._graph import DependencyGraph
from cellstore.calc._parser import (
    extract_dependencies,
    formula_body,
    references_cell,
    substitute_references,
)
from cellstore.calc._protocol import ExpressionEvaluator

logger = logging.getLogger(__name__)

# Each nesting level costs a few interpreter frames; stay well under the
# default recursion limit.
DEFAULT_MAX_DEPTH = 100


class Spreadsheet:
    """In-memory store of named cells holding literals or ``=`` formulas.

    Usage::

        sheet = Spreadsheet()
        sheet.set_cell_value("A1", 10)
        sheet.set_cell_value("A2", "=A1*2")
        sheet.get_cell_value("A2")  # 20.0
        sheet.undo()
        "A2" in sheet  # False
    """

    def __init__(
        self,
        *,
        evaluator: ExpressionEvaluator | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self._cells = CellStore()
        self._graph = DependencyGraph()
        self._history = History()
        self._evaluator: ExpressionEvaluator = evaluator if evaluator is not None else ArithmeticEvaluator()
        self._max_depth = max_depth
        self._depth = 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_cell_value(self, cell_id: str, value: CellValue) -> None:
        """Store a literal or formula in *cell_id* as one undoable step.

        Raises InvalidIdError for a malformed id and CircularReferenceError
        when a formula would read back from *cell_id*; in both cases nothing
        is changed.
        """
        validate_cell_id(cell_id)
        check_cell_value(value)
        if is_formula(value):
            self._update_dependencies(cell_id, value)
        else:
            # Cells reading this one keep their own bookkeeping as is
            self._graph.clear_dependencies(cell_id)
        self._history.record_write(HistoryRecord(cell_id, self._cells.get(cell_id)))
        self._cells.put(cell_id, value)
        logger.debug("Set %s = %r", cell_id, value)

    def _update_dependencies(self, cell_id: str, formula: str) -> None:
        """Register *formula* for *cell_id*, rolling back on a direct cycle."""
        graph = self._graph
        previous = graph.dependencies.get(cell_id)
        previous = set(previous) if previous is not None else None

        graph.set_dependencies(cell_id, extract_dependencies(formula))
        if graph.has_direct_cycle(cell_id):
            if previous is None:
                graph.clear_dependencies(cell_id)
            else:
                graph.set_dependencies(cell_id, previous)
            logger.error("Circular reference detected in cell %s", cell_id)
            raise CircularReferenceError(cell_id=cell_id)
        graph.formulas[cell_id] = formula

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_cell_value(self, cell_id: str) -> CellValue:
        """Return a literal as stored, or a formula's result as a float."""
        if cell_id not in self._cells:
            logger.error("Cell %s does not exist", cell_id)
            raise UnknownCellError(cell_id)
        value = self._cells.get(cell_id)
        if not is_formula(value):
            return value

        formula = self._graph.formula_of(cell_id)
        if formula is None:
            logger.error("Formula does not exist for cell %s", cell_id)
            raise MissingFormulaError(f"Formula does not exist for cell {cell_id}")
        return self._evaluate(formula_body(formula), cell_id)

    def raw_value(self, cell_id: str) -> CellValue:
        """Stored literal or formula text, without evaluating."""
        if cell_id not in self._cells:
            logger.error("Cell %s does not exist", cell_id)
            raise UnknownCellError(cell_id)
        return self._cells.get(cell_id)

    def dependencies_of(self, cell_id: str) -> frozenset[str]:
        """Tokens the formula in *cell_id* reads from (empty for literals)."""
        return self._graph.dependencies_of(cell_id)

    def dependents_of(self, cell_id: str) -> frozenset[str]:
        """Formula cells whose formula names *cell_id*."""
        return self._graph.dependents_of(cell_id)

    def cell_ids(self) -> list[str]:
        return list(self._cells)

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    # ------------------------------------------------------------------
    # Formula evaluation
    # ------------------------------------------------------------------

    def _evaluate(self, body: str, origin: str) -> float:
        if self._depth >= self._max_depth:
            logger.error("Formula nesting in cell %s exceeds %d levels", origin, self._max_depth)
            raise CircularReferenceError(
                f"Formula nesting exceeds {self._max_depth} levels, possible circular reference",
                cell_id=origin,
            )
        self._depth += 1
        try:
            expr = self._substitute(body, origin)
        finally:
            self._depth -= 1
        return self._calculate(expr, origin)

    def _substitute(self, body: str, origin: str) -> str:
        """Replace every stored cell named in *body* with its current value."""
        refs = [ref for ref in self._cells if references_cell(body, ref)]
        for ref in refs:
            if self._graph.depends_on(ref, origin):
                logger.error("Circular reference detected in expression: %s", body)
                raise CircularReferenceError(cell_id=origin)

        rendered: dict[str, str] = {}
        for ref in refs:
            value = self.get_cell_value(ref)
            try:
                rendered[ref] = str(value)
            except (ValueError, OverflowError) as exc:
                # e.g. ints past the interpreter's digit limit
                logger.error("Cannot render value of %s for cell %s: %s", ref, origin, exc)
                raise InvalidFormulaError(
                    f"Invalid formula in cell {origin}: Cannot render value of {ref}: {exc}",
                    detail=str(exc),
                ) from exc
        return substitute_references(body, rendered)

    def _calculate(self, expr: str, origin: str) -> float:
        evaluator = self._evaluator
        try:
            valid = evaluator.check_syntax(expr)
        except Exception as exc:
            raise self._evaluator_failure(expr, origin, exc) from exc
        if not valid:
            message = evaluator.error_message
            logger.error("Invalid syntax in formula: %s. Error: %s", expr, message)
            raise InvalidFormulaError(
                f"Invalid formula in cell {origin}: Invalid syntax in formula: {message}",
                detail=message,
            )

        try:
            result = float(evaluator.calculate(expr))
        except Exception as exc:
            raise self._evaluator_failure(expr, origin, exc) from exc
        if math.isnan(result):
            logger.error("Error in calculations, resulted in NaN. Expression: %s", expr)
            raise InvalidFormulaError(
                f"Invalid formula in cell {origin}: Error in calculations, resulted in NaN",
                detail="resulted in NaN",
            )
        logger.debug("Result of the expression %s: %s", expr, result)
        return result

    @staticmethod
    def _evaluator_failure(expr: str, origin: str, exc: Exception) -> InvalidFormulaError:
        if isinstance(exc, ArithmeticError):
            reason = f"Arithmetic error: {exc}"
        else:
            reason = str(exc) or type(exc).__name__
        logger.error("Invalid expression %r in cell %s: %s", expr, origin, reason)
        return InvalidFormulaError(f"Invalid formula in cell {origin}: Invalid expression: {reason}", detail=str(exc))

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def undo(self) -> None:
        """Revert the most recent write; no-op when there is none.

        Restoring a formula re-registers its dependencies, which raises
        CircularReferenceError (leaving everything unchanged) if the old
        formula now reads back from its own cell.
        """
        record = self._history.peek_past()
        if record is None:
            logger.debug("Nothing to undo")
            return
        cell_id, previous = record.cell_id, record.value
        if is_formula(previous):
            self._update_dependencies(cell_id, previous)
        else:
            self._graph.clear_dependencies(cell_id)

        self._history.pop_past()
        self._history.push_future(HistoryRecord(cell_id, self._cells.get(cell_id)))
        self._cells.remove(cell_id)
        if previous is not None:
            self._cells.put(cell_id, previous)
        logger.debug("Undo %s -> %r", cell_id, previous)

    def redo(self) -> None:
        """Re-apply the most recently undone write; no-op when there is none.

        The past stack gets the pre-redo value, so a following undo reverts the redo.
        """
        record = self._history.pop_future()
        if record is None:
            logger.warning("Nothing to redo")
            return
        cell_id, value = record.cell_id, record.value
        self._history.push_past(HistoryRecord(cell_id, self._cells.get(cell_id)))

        # Already accepted once, so no cycle check
        if is_formula(value):
            self._graph.register_formula(cell_id, value)
        else:
            self._graph.clear_dependencies(cell_id)
        if value is None:
            self._cells.remove(cell_id)
        else:
            self._cells.put(cell_id, value)
        logger.debug("Redo %s -> %r", cell_id, value)

    def clear_history(self) -> None:
        """Drop all undo and redo records; cell contents are kept."""
        self._history.clear()
