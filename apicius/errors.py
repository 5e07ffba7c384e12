"""Exception types raised by the recipe pipeline.

Recipe problems found by the check phase are *not* exceptions: they are
collected as diagnostics (see ``apicius.diagnostics``). The classes here cover
syntax errors, asking for a tree from a failed check, and programming errors
that should abort the run.
"""
from __future__ import annotations

from typing import Optional, Sequence


class ApiciusError(Exception):
    pass


class RecipeSyntaxError(ApiciusError, ValueError):
    """The recipe source could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class RecipeCheckError(ApiciusError):
    """A tree was requested from a recipe that has diagnostics."""

    def __init__(self, diagnostics: Sequence):
        self.diagnostics = list(diagnostics)
        super().__init__(f"recipe has {len(self.diagnostics)} problem(s)")


class ProvenanceError(ApiciusError, LookupError):
    """A handle was resolved against a registry that did not mint it."""


class StructureInvariantError(ApiciusError, AssertionError):
    """The directed structure broke a guarantee the builder should enforce."""


class TreeConsistencyError(ApiciusError, AssertionError):
    """A result-tree node has inconsistent shape or metrics."""
