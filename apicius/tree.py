"""The backward tree handed to renderers.

Built from a validated directed structure in the analyzer's build order, so every
vertex is finished before the chain leaving it is followed towards ``<>``.
Join points are gone by the time the tree exists: a straight run of steps
through several joins becomes one node, and a node only has several children
where branches genuinely merge.

For the recipe::

    mushrooms {
      garlic -> mince -> $oil;
      oil -> $oil -> fry -> $add;
      mushrooms -> chop -> $add -> sautee -> <>;
    }

the tree is (``size``/``max_depth`` in parentheses)::

    root (3/3)
      sautee (3/3)
        fry (2/2)
          [garlic] mince (1/1)
          [oil] (1/0)
        [mushrooms] chop (1/1)

``size`` counts the ingredient leaves feeding a node; ``max_depth`` is the
longest run of steps from the node down to any leaf, both used for layout.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple, Union

from apicius.errors import TreeConsistencyError
from apicius.registry import ActionStep, Ingredient
from apicius.structure import TERMINAL, DirectedStructure, VertexKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackwardTree:
    # in cooking order, earliest step first
    actions: Tuple[ActionStep, ...] = ()
    ingredients: Tuple[Ingredient, ...] = ()
    size: int = 0
    max_depth: int = 0
    paths: Tuple["BackwardTree", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.paths

    def walk(self) -> Iterator["BackwardTree"]:
        """Every node, parents before children, children in order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.paths))


def _leaf(actions: Sequence[ActionStep], ingredients: Tuple[Ingredient, ...]) -> BackwardTree:
    return BackwardTree(
        actions=tuple(actions),
        ingredients=ingredients,
        size=len(ingredients),
        max_depth=len(actions),
    )


def _branch(actions: Sequence[ActionStep], paths: Sequence[BackwardTree]) -> BackwardTree:
    return BackwardTree(
        actions=tuple(actions),
        size=sum(p.size for p in paths),
        max_depth=len(actions) + max((p.max_depth for p in paths), default=0),
        paths=tuple(paths),
    )


def _finish(run: Sequence[ActionStep], below: Union[Tuple[Ingredient, ...], List[BackwardTree]]) -> BackwardTree:
    if isinstance(below, list):
        return _branch(run, below)
    return _leaf(run, below)


def construct_tree(structure: DirectedStructure, order: Sequence[int]) -> BackwardTree:
    """Build the backward tree of a structure the analyzer found valid.

    `order` is the analyzer's build order, predecessors first. The result is a
    synthetic root with no actions or ingredients whose only path is the tree
    built from the terminal vertex.
    """
    # vertex id -> (steps so far, ingredients or finished branches)
    pending: Dict[int, Tuple[List[ActionStep], Union[Tuple[Ingredient, ...], List[BackwardTree]]]] = {}
    for vertex_id in order:
        vertex = structure.vertex(vertex_id)
        if vertex.kind is VertexKind.INGREDIENT_ROOT:
            pending[vertex_id] = ([], vertex.ingredients.ingredients)
            continue
        flows = []
        for edge in structure.incoming_edges(vertex_id):
            run, below = pending.pop(edge.source)
            flows.append((run + list(edge.actions), below))
        if len(flows) == 1:
            # single-entry joins fold into the run
            pending[vertex_id] = flows[0]
        else:
            pending[vertex_id] = ([], [_finish(run, below) for run, below in flows])

    top = _finish(*pending[TERMINAL])
    root = BackwardTree(size=top.size, max_depth=top.max_depth, paths=(top,))
    check_tree(root)
    logger.debug("Constructed backward tree: size %d, max depth %d", root.size, root.max_depth)
    return root


def check_tree(root: BackwardTree) -> None:
    """Assert the shape and metric invariants of every node under `root`."""
    if root.actions or root.ingredients or len(root.paths) != 1:
        raise TreeConsistencyError("root must have no actions, no ingredients and exactly one path")
    for node in root.walk():
        if node is not root and bool(node.ingredients) == bool(node.paths):
            raise TreeConsistencyError("a node must have either ingredients or paths")
        expected_size = sum(p.size for p in node.paths) if node.paths else len(node.ingredients)
        if node.size != expected_size:
            raise TreeConsistencyError(f"node size {node.size} should be {expected_size}")
        expected_depth = len(node.actions) + max((p.max_depth for p in node.paths), default=0)
        if node.max_depth != expected_depth:
            raise TreeConsistencyError(f"node max_depth {node.max_depth} should be {expected_depth}")
