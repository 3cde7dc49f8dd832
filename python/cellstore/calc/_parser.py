"""Formula tokenizing: dependency extraction and reference substitution."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from functools import lru_cache

# ---------------------------------------------------------------------------
# Token splitting
# ---------------------------------------------------------------------------

# Split on arithmetic operators, except a sign inside scientific notation (2.5e-1)
_OPERATOR_SPLIT_RE = re.compile(r"(?<!\d[eE])[+\-]|[*/]")

_TOKEN_STRIP = " \t\r\n()"


def formula_body(formula: str) -> str:
    """Return *formula* without its leading ``=``."""
    return formula[1:] if formula.startswith("=") else formula


def is_numeric(token: str) -> bool:
    """``True`` when *token* is a finite number literal like ``3``, ``2.5`` or ``1e3``."""
    try:
        num = float(token)
    except ValueError:
        return False
    return math.isfinite(num)


def split_tokens(formula: str) -> list[str]:
    """Split a formula body into trimmed operand tokens, dropping empty ones."""
    tokens: list[str] = []
    for part in _OPERATOR_SPLIT_RE.split(formula_body(formula)):
        token = part.strip(_TOKEN_STRIP)
        if token:
            tokens.append(token)
    return tokens


def extract_dependencies(formula: str) -> set[str]:
    """Extract every non-numeric operand of *formula*.

    Tokens are not checked to be well-formed cell ids, so ``=foo+1`` yields
    ``{"foo"}``.
    """
    return {token for token in split_tokens(formula) if not is_numeric(token)}


# ---------------------------------------------------------------------------
# Whole-token reference matching
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1024)
def _reference_re(cell_id: str) -> re.Pattern[str]:
    # A1 must not match inside A10 or BA1
    return re.compile(rf"(?<![A-Za-z0-9_]){re.escape(cell_id)}(?![A-Za-z0-9_])")


def references_cell(expr: str, cell_id: str) -> bool:
    """``True`` when *cell_id* occurs in *expr* as a whole token."""
    return _reference_re(cell_id).search(expr) is not None


def substitute_references(expr: str, values: Mapping[str, str]) -> str:
    """Replace whole-token cell ids in *expr* with their rendered *values* in one pass.

    Replacement text is never rescanned, so a value that looks like a cell id
    stays as written.
    """
    if not values:
        return expr
    # Longest first so an alternation never stops at a shorter id
    alternation = "|".join(re.escape(ref) for ref in sorted(values, key=len, reverse=True))
    pattern = re.compile(rf"(?<![A-Za-z0-9_])(?:{alternation})(?![A-Za-z0-9_])")
    return pattern.sub(lambda m: values[m.group(0)], expr)
