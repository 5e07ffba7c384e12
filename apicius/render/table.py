"""Lay a backward tree out as a table.

Each ingredient gets a row; every step is a cell spanning the rows of all the
ingredients that feed it, so reading left to right follows the recipe and the
final ``<>`` column spans the whole table::

    | [2] eggs    | whisk | stir | <> |
    | milk        |       |      |    |
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from apicius.registry import ActionStep, Ingredient, Registry
from apicius.render import constants
from apicius.tree import BackwardTree


class HTMLTableOptions(BaseModel):
    standalone: bool = False
    html_header: str = constants.STANDALONE_HTML_HEADER
    html_footer: str = constants.STANDALONE_HTML_FOOTER
    amount_class: str = constants.AMOUNT_CLASS
    seasonings_class: str = constants.SEASONINGS_CLASS
    ingredient_class: str = constants.INGREDIENT_CLASS
    action_class: str = constants.ACTION_CLASS
    done_class: str = constants.DONE_CLASS

    @classmethod
    def from_settings(cls, settings, **overrides) -> "HTMLTableOptions":
        values = {name: getattr(settings, name) for name in cls.model_fields}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class CellIngredient:
    name: str
    amount: Optional[str] = None

    def debug(self) -> str:
        return f"[{self.amount}] {self.name}" if self.amount is not None else self.name


@dataclass(frozen=True)
class Cell:
    kind: str  # "ingredient", "step" or "done"
    colspan: int = 1
    rowspan: int = 1
    text: str = ""
    ingredient: Optional[CellIngredient] = None
    seasonings: Tuple[CellIngredient, ...] = field(default_factory=tuple)

    def debug(self) -> str:
        if self.kind == "done":
            return "<>"
        if self.kind == "ingredient":
            return self.ingredient.debug()
        if not self.seasonings:
            return self.text
        return f"{self.text} & " + ",".join(i.debug() for i in self.seasonings)


class Table:
    def __init__(self, registry: Registry, tree: BackwardTree):
        self.registry = registry
        self.rows: List[List[Cell]] = self._layout(tree)

    def _ingredient(self, ingredient: Ingredient) -> CellIngredient:
        amount = self.registry.resolve(ingredient.amount) if ingredient.amount is not None else None
        return CellIngredient(name=self.registry.resolve(ingredient.name), amount=amount)

    def _step(self, step: ActionStep, rowspan: int) -> Cell:
        return Cell(
            kind="step",
            rowspan=rowspan,
            text=self.registry.resolve(step.description),
            seasonings=tuple(self._ingredient(i) for i in step.seasonings),
        )

    def _layout(self, tree: BackwardTree) -> List[List[Cell]]:
        # columns left for each node's ingredients and steps, set top-down
        depth = {id(tree): tree.max_depth}
        nodes = list(tree.walk())
        for node in nodes:
            for path in node.paths:
                depth[id(path)] = depth[id(node)] - len(node.actions)

        rows_of: Dict[int, List[List[Cell]]] = {}
        for focus in reversed(nodes):
            rows: List[List[Cell]] = []
            for ingredient in focus.ingredients:
                rows.append([
                    Cell(
                        kind="ingredient",
                        colspan=depth[id(focus)] - len(focus.actions) + 1,
                        ingredient=self._ingredient(ingredient),
                    )
                ])
            if not focus.paths:
                rows[0].extend(self._step(a, focus.size) for a in focus.actions)
            for pos, path in enumerate(focus.paths):
                below = rows_of.pop(id(path))
                if pos == 0:
                    if focus is tree:
                        below[0].append(Cell(kind="done", rowspan=focus.size))
                    else:
                        below[0].extend(self._step(a, focus.size) for a in focus.actions)
                rows.extend(below)
            rows_of[id(focus)] = rows
        return rows_of[id(tree)]

    def debug(self) -> str:
        lines = []
        for row in self.rows:
            lines.append("".join(f" ({c.colspan}, {c.rowspan}, {c.debug()})" for c in row))
        return "\n".join(lines) + "\n"

    def html(self, opts: Optional[HTMLTableOptions] = None) -> str:
        opts = opts or HTMLTableOptions()
        table = ET.Element("table")
        for row in self.rows:
            tr = ET.SubElement(table, "tr")
            for cell in row:
                td = ET.SubElement(
                    tr,
                    "td",
                    {
                        "class": _cell_class(cell, opts),
                        "rowspan": str(cell.rowspan),
                        "colspan": str(cell.colspan),
                    },
                )
                _fill_cell(td, cell, opts)
        ET.indent(table)
        body = ET.tostring(table, encoding="unicode", method="html")
        if opts.standalone:
            return f"{opts.html_header}{body}\n{opts.html_footer}"
        return body + "\n"


def _cell_class(cell: Cell, opts: HTMLTableOptions) -> str:
    if cell.kind == "ingredient":
        return opts.ingredient_class
    if cell.kind == "done":
        return opts.done_class
    return opts.action_class


def _add_ingredient(parent: ET.Element, ingredient: CellIngredient, opts: HTMLTableOptions) -> None:
    if ingredient.amount is None:
        _append_text(parent, ingredient.name)
        return
    span = ET.SubElement(parent, "span", {"class": opts.amount_class})
    span.text = ingredient.amount
    span.tail = f" {ingredient.name}"


def _append_text(parent: ET.Element, text: str) -> None:
    children = list(parent)
    if children:
        children[-1].tail = (children[-1].tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def _fill_cell(td: ET.Element, cell: Cell, opts: HTMLTableOptions) -> None:
    if cell.kind == "done":
        td.text = "<>"
    elif cell.kind == "ingredient":
        _add_ingredient(td, cell.ingredient, opts)
    else:
        td.text = cell.text
        if cell.seasonings:
            div = ET.SubElement(td, "div", {"class": opts.seasonings_class})
            for pos, ingredient in enumerate(cell.seasonings):
                if pos:
                    _append_text(div, " ")
                _add_ingredient(div, ingredient, opts)
