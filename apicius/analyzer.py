"""Invariant analysis of a directed structure.

Proves the structure is a single-rooted in-tree: no cycles, at most one way
forward from every vertex, every ingredient chain reaching ``<>``. On success
it yields a build order in which every vertex comes after its predecessors and
the terminal comes last.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

import networkx as nx

from apicius.diagnostics import CycleDetected, Diagnostic, DisconnectedChain, EmptyRecipe
from apicius.errors import StructureInvariantError
from apicius.structure import TERMINAL, DirectedStructure, VertexKind

logger = logging.getLogger(__name__)


@dataclass
class Analysis:
    diagnostics: List[Diagnostic] = field(default_factory=list)
    # vertex ids, predecessors first; None unless the structure is valid
    order: Optional[List[int]] = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def _find_cycles(structure: DirectedStructure, g: nx.DiGraph) -> List[CycleDetected]:
    if nx.is_directed_acyclic_graph(g):
        return []
    found: List[CycleDetected] = []
    reached: Set[int] = set()
    starts = [v.id for v in structure.roots()] + [v.id for v in structure.join_vertices()]
    for start in starts:
        if start in reached:
            continue
        try:
            loop = nx.find_cycle(g, source=start)
        except nx.NetworkXNoCycle:
            loop = []
        # every vertex has one way forward, so loops never overlap
        if loop and loop[0][0] not in reached:
            vertex = structure.vertex(loop[0][0])
            names = [structure.vertex(u).name for u, _ in loop] + [vertex.name]
            found.append(CycleDetected(name=vertex.name, cycle=tuple(names), span=vertex.span))
        reached.add(start)
        reached.update(nx.descendants(g, start))
    return found


def _check_single_outgoing(structure: DirectedStructure) -> None:
    sources = Counter(e.source for e in structure.edges)
    for vertex in structure.vertices:
        count = sources.get(vertex.id, 0)
        if vertex.kind is VertexKind.TERMINAL and count:
            raise StructureInvariantError("terminal vertex has an outgoing edge")
        if count > 1:
            raise StructureInvariantError(f"vertex {vertex.id} has {count} outgoing edges")
        if vertex.kind is VertexKind.INGREDIENT_ROOT and (count != 1 or vertex.incoming):
            raise StructureInvariantError(f"ingredient root {vertex.id} is not a single-edge source")
        expected = structure.edge(vertex.outgoing).source if vertex.outgoing is not None else vertex.id
        if expected != vertex.id or (vertex.outgoing is None) != (count == 0):
            raise StructureInvariantError(f"vertex {vertex.id} has a mismatched outgoing edge")


def _find_disconnected(structure: DirectedStructure, g: nx.DiGraph) -> List[DisconnectedChain]:
    reaching = nx.ancestors(g, TERMINAL)
    return [
        DisconnectedChain(root=root.ingredients, span=root.span)
        for root in structure.roots()
        if root.id not in reaching
    ]


def analyze_structure(structure: DirectedStructure, earlier: Sequence[Diagnostic] = ()) -> Analysis:
    """Run the structural checks in order and collect every finding.

    `earlier` holds problems already reported while building the structure;
    no build order is produced while there are any.
    """
    analysis = Analysis()
    g = structure.to_digraph()
    analysis.diagnostics.extend(_find_cycles(structure, g))
    _check_single_outgoing(structure)

    analysis.diagnostics.extend(_find_disconnected(structure, g))
    if structure.indegree(TERMINAL) == 0:
        analysis.diagnostics.append(EmptyRecipe())

    if analysis.diagnostics or earlier:
        logger.debug("Structure analysis found %d problem(s)", len(analysis.diagnostics))
        return analysis

    # the reversed graph of a valid recipe is a tree hanging from `<>`
    if not nx.is_arborescence(g.reverse(copy=False)):
        raise StructureInvariantError("validated structure is not an in-tree rooted at the terminal")
    analysis.order = list(nx.lexicographical_topological_sort(g, key=lambda v: v))
    if analysis.order[-1] != TERMINAL:
        raise StructureInvariantError("terminal vertex is not the last vertex of the build order")
    logger.debug("Structure analysis ok, build order over %d vertices", len(analysis.order))
    return analysis
