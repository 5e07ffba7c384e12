"""The check phase: recipe -> directed structure -> analysis -> backward tree."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from apicius.analyzer import analyze_structure
from apicius.diagnostics import Diagnostic
from apicius.errors import RecipeCheckError
from apicius.grammar import parse_recipe
from apicius.registry import Registry
from apicius.structure import DirectedStructure, build_structure
from apicius.tree import BackwardTree, construct_tree
from apicius.types import Recipe

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    recipe: Recipe
    structure: DirectedStructure
    diagnostics: List[Diagnostic] = field(default_factory=list)
    order: Optional[List[int]] = None
    tree: Optional[BackwardTree] = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def into_tree(self) -> BackwardTree:
        if self.tree is None:
            raise RecipeCheckError(self.diagnostics)
        return self.tree


def check_recipe(recipe: Recipe, registry: Registry) -> CheckResult:
    """Validate `recipe` and build its backward tree when it has no problems."""
    structure, diagnostics = build_structure(recipe.fragments)
    analysis = analyze_structure(structure, earlier=diagnostics)
    result = CheckResult(
        recipe=recipe,
        structure=structure,
        diagnostics=diagnostics + analysis.diagnostics,
        order=analysis.order,
    )
    if not result.ok:
        logger.warning(
            "Recipe %r has %d problem(s): %s",
            registry.resolve(recipe.name),
            len(result.diagnostics),
            ", ".join(sorted({d.code for d in result.diagnostics})),
        )
        return result
    result.tree = construct_tree(structure, analysis.order)
    logger.info(
        "Checked recipe %r: %d rule(s), size %d, max depth %d",
        registry.resolve(recipe.name),
        len(recipe.fragments),
        result.tree.size,
        result.tree.max_depth,
    )
    return result


def compile_source(source: str) -> Tuple[CheckResult, Registry]:
    """Parse and check recipe source text."""
    recipe, registry = parse_recipe(source)
    return check_recipe(recipe, registry), registry
