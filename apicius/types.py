"""Path fragments: the parser's per-rule view of a recipe.

A fragment is one rule, e.g. ``garlic -> mince -> $oil;``. It starts from an
ingredient group or a join, runs through action steps and join references,
and ends at a join, at the terminal ``<>``, or (for a broken rule) nowhere.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from apicius.registry import ActionStep, Ingredient, TextHandle


@dataclass(frozen=True, order=True)
class Span:
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class IngredientGroup:
    ingredients: Tuple[Ingredient, ...]
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class JoinRef:
    name: TextHandle
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class Step:
    step: ActionStep
    span: Optional[Span] = field(default=None, compare=False)


@dataclass(frozen=True)
class Terminal:
    span: Optional[Span] = field(default=None, compare=False)


Start = Union[IngredientGroup, JoinRef]
BodyElement = Union[Step, JoinRef]
End = Union[JoinRef, Terminal]


@dataclass(frozen=True)
class PathFragment:
    start: Start
    body: Tuple[BodyElement, ...] = ()
    # None when the rule stops without reaching a join or the terminal
    end: Optional[End] = None
    span: Optional[Span] = field(default=None, compare=False)

    @property
    def starts_at_join(self) -> bool:
        return isinstance(self.start, JoinRef)


@dataclass(frozen=True)
class Recipe:
    name: TextHandle
    fragments: Tuple[PathFragment, ...] = ()
