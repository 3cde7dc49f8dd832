"""Dependency graph for formula cells with direct-cycle detection."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from cellstore.calc._parser import extract_dependencies

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Tracks which cells each formula cell reads from.

    Only cells currently holding a formula have an entry.
    """

    __slots__ = ("dependencies", "dependents", "formulas")

    def __init__(self) -> None:
        # cell -> set of cells it reads from
        self.dependencies: dict[str, set[str]] = {}
        # cell -> set of cells that read from it (reverse edges)
        self.dependents: dict[str, set[str]] = {}
        # cell -> formula string
        self.formulas: dict[str, str] = {}

    def set_dependencies(self, cell_ref: str, deps: Iterable[str]) -> None:
        """Replace the dependency set of *cell_ref*, creating it if absent."""
        self._drop_reverse_edges(cell_ref)
        new_deps = set(deps)
        self.dependencies[cell_ref] = new_deps
        for ref in new_deps:
            if ref not in self.dependents:
                self.dependents[ref] = set()
            self.dependents[ref].add(cell_ref)

    def register_formula(self, cell_ref: str, formula: str) -> None:
        """Record a formula cell and its dependencies. No cycle check."""
        self.set_dependencies(cell_ref, extract_dependencies(formula))
        self.formulas[cell_ref] = formula

    def clear_dependencies(self, cell_ref: str) -> None:
        """Forget everything about *cell_ref* as a formula cell."""
        self._drop_reverse_edges(cell_ref)
        self.dependencies.pop(cell_ref, None)
        self.formulas.pop(cell_ref, None)

    def _drop_reverse_edges(self, cell_ref: str) -> None:
        for ref in self.dependencies.get(cell_ref, ()):
            readers = self.dependents.get(ref)
            if readers is None:
                continue
            readers.discard(cell_ref)
            if not readers:
                del self.dependents[ref]

    def has_entry(self, cell_ref: str) -> bool:
        return cell_ref in self.dependencies

    def dependencies_of(self, cell_ref: str) -> frozenset[str]:
        return frozenset(self.dependencies.get(cell_ref, ()))

    def dependents_of(self, cell_ref: str) -> frozenset[str]:
        return frozenset(self.dependents.get(cell_ref, ()))

    def formula_of(self, cell_ref: str) -> str | None:
        return self.formulas.get(cell_ref)

    def depends_on(self, cell_ref: str, other: str) -> bool:
        """One-hop check: does *cell_ref*'s formula name *other* directly?"""
        return other in self.dependencies.get(cell_ref, ())

    def has_direct_cycle(self, cell_ref: str) -> bool:
        """BFS from *cell_ref*; ``True`` once a visited cell names *cell_ref* directly.

        The traversal is transitive but only direct back-edges to the origin
        are tested at each node.
        """
        visited: set[str] = {cell_ref}
        queue: deque[str] = deque([cell_ref])

        while queue:
            cell = queue.popleft()
            deps = self.dependencies.get(cell)
            if deps is None:
                continue
            if cell_ref in deps:
                logger.warning("Circular dependency detected for cellId: %s", cell_ref)
                return True
            for dep in deps:
                if dep not in visited:
                    visited.add(dep)
                    queue.append(dep)

        return False
