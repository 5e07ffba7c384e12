"""Interned text and the value types that refer to it.

Values never point back at the registry that created them: they hold plain
``TextHandle`` indices and callers pass the registry explicitly wherever text
is needed (see ``apicius.printable``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from apicius.errors import ProvenanceError


@dataclass(frozen=True, order=True)
class TextHandle:
    index: int


@dataclass(frozen=True)
class Ingredient:
    name: TextHandle
    amount: Optional[TextHandle] = None


@dataclass(frozen=True)
class ActionStep:
    description: TextHandle
    # the `& butter + salt` clause, ordered and without repeats
    seasonings: Tuple[Ingredient, ...] = ()


class Registry:
    """Append-only string interner with canonical ingredient/action values.

    ``intern`` and ``resolve`` are O(1). Handles are only meaningful for the
    registry that minted them; mixing registries is a programming error.
    """

    def __init__(self) -> None:
        self._index: Dict[str, TextHandle] = {}
        self._strings: List[str] = []
        self._ingredients: Dict[Tuple[TextHandle, Optional[TextHandle]], Ingredient] = {}
        self._actions: Dict[Tuple[TextHandle, Tuple[Ingredient, ...]], ActionStep] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, text: object) -> bool:
        return text in self._index

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Registry":
        self._frozen = True
        return self

    def intern(self, text: str) -> TextHandle:
        handle = self._index.get(text)
        if handle is not None:
            return handle
        if self._frozen:
            raise ProvenanceError(f"registry is frozen, cannot intern {text!r}")
        handle = TextHandle(len(self._strings))
        self._strings.append(text)
        self._index[text] = handle
        return handle

    def resolve(self, handle: TextHandle) -> str:
        if not isinstance(handle, TextHandle):
            raise ProvenanceError(f"not a text handle: {handle!r}")
        if not 0 <= handle.index < len(self._strings):
            raise ProvenanceError(f"handle {handle.index} was not minted by this registry")
        return self._strings[handle.index]

    def ingredient(self, name: str, amount: Optional[str] = None) -> Ingredient:
        key = (self.intern(name), self.intern(amount) if amount is not None else None)
        found = self._ingredients.get(key)
        if found is None:
            found = Ingredient(name=key[0], amount=key[1])
            self._ingredients[key] = found
        return found

    def action_step(self, description: str, seasonings: Iterable[Ingredient] = ()) -> ActionStep:
        key = (self.intern(description), unique(seasonings))
        found = self._actions.get(key)
        if found is None:
            found = ActionStep(description=key[0], seasonings=key[1])
            self._actions[key] = found
        return found


def unique(items: Iterable) -> tuple:
    """Drop repeats, keeping first-seen order."""
    return tuple(dict.fromkeys(items))
