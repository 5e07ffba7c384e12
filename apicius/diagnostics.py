"""Recipe problems found by the check phase.

Each kind is a small frozen value. They are collected into a list so a recipe
author sees every problem at once instead of fixing them one run at a time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple, Union

from apicius.registry import ActionStep, TextHandle
from apicius.types import IngredientGroup, JoinRef, Span


@dataclass(frozen=True)
class MissingContinuation:
    """A join point is reached but nothing carries on from it."""

    code: ClassVar[str] = "missing-continuation"
    name: TextHandle
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class DuplicateContinuation:
    """More than one rule continues from the same join point."""

    code: ClassVar[str] = "duplicate-continuation"
    name: TextHandle
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class UnknownJoinReference:
    """A join point is continued from but no rule ever leads into it."""

    code: ClassVar[str] = "unknown-join-reference"
    name: TextHandle
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class OrphanIngredientRoot:
    """A rule names ingredients but never reaches a join point or `<>`."""

    code: ClassVar[str] = "orphan-ingredient-root"
    ingredients: IngredientGroup
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class DanglingSteps:
    """Steps after a join point that never reach another join point or `<>`."""

    code: ClassVar[str] = "dangling-steps"
    start: JoinRef
    actions: Tuple[ActionStep, ...] = ()
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class CycleDetected:
    code: ClassVar[str] = "cycle-detected"
    name: TextHandle
    # join points along the cycle, starting and ending at `name`
    cycle: Tuple[TextHandle, ...] = ()
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class DisconnectedChain:
    """Ingredients whose chain never reaches `<>`."""

    code: ClassVar[str] = "disconnected-chain"
    root: IngredientGroup
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class EmptyRecipe:
    code: ClassVar[str] = "empty-recipe"
    span: Optional[Span] = field(default=None, compare=False)


Diagnostic = Union[
    MissingContinuation,
    DuplicateContinuation,
    UnknownJoinReference,
    OrphanIngredientRoot,
    DanglingSteps,
    CycleDetected,
    DisconnectedChain,
    EmptyRecipe,
]
