"""Resolved, serializable view of a backward tree."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from apicius.registry import ActionStep, Ingredient, Registry
from apicius.tree import BackwardTree


class ChartIngredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    amount: Optional[str] = None


class ChartStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    seasonings: List[ChartIngredient] = []


class ChartNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int
    max_depth: int
    actions: List[ChartStep] = []
    ingredients: List[ChartIngredient] = []
    paths: List["ChartNode"] = []

    def to_dict(self) -> dict:
        return self.model_dump(exclude_defaults=True)


class Chart(BaseModel):
    title: str
    tree: ChartNode

    def to_dict(self) -> dict:
        return {"title": self.title, "tree": self.tree.to_dict()}


def _ingredient(ingredient: Ingredient, registry: Registry) -> ChartIngredient:
    amount = registry.resolve(ingredient.amount) if ingredient.amount is not None else None
    return ChartIngredient(name=registry.resolve(ingredient.name), amount=amount)


def _step(step: ActionStep, registry: Registry) -> ChartStep:
    return ChartStep(
        name=registry.resolve(step.description),
        seasonings=[_ingredient(i, registry) for i in step.seasonings],
    )


def to_chart_node(tree: BackwardTree, registry: Registry) -> ChartNode:
    built: Dict[int, ChartNode] = {}
    for node in reversed(list(tree.walk())):
        built[id(node)] = ChartNode(
            size=node.size,
            max_depth=node.max_depth,
            actions=[_step(a, registry) for a in node.actions],
            ingredients=[_ingredient(i, registry) for i in node.ingredients],
            paths=[built.pop(id(p)) for p in node.paths],
        )
    return built[id(tree)]


def to_chart(title: str, tree: BackwardTree, registry: Registry) -> Chart:
    return Chart(title=title, tree=to_chart_node(tree, registry))
