"""Join resolution: path fragments -> one directed structure.

Every rule is a chain of action steps between *vertices*: ingredient roots,
named join points and the shared terminal ``<>``. This module stitches the
chains of all rules together by join name. Problems are collected as
diagnostics and building carries on, so the analyzer can add its own findings
to the same report.

The structure is an explicit vertex table plus an edge list, both addressed by
integer id. Vertex 0 is always the terminal.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from apicius.diagnostics import (
    DanglingSteps,
    Diagnostic,
    DuplicateContinuation,
    MissingContinuation,
    OrphanIngredientRoot,
    UnknownJoinReference,
)
from apicius.registry import ActionStep, TextHandle
from apicius.types import IngredientGroup, JoinRef, PathFragment, Span, Step, Terminal

logger = logging.getLogger(__name__)

TERMINAL = 0


class VertexKind(str, Enum):
    INGREDIENT_ROOT = "ingredient-root"
    JOIN = "join"
    TERMINAL = "terminal"


@dataclass
class Vertex:
    id: int
    kind: VertexKind
    name: Optional[TextHandle] = None
    ingredients: Optional[IngredientGroup] = None
    # edge ids, in registration order
    incoming: List[int] = field(default_factory=list)
    outgoing: Optional[int] = None
    span: Optional[Span] = None


@dataclass(frozen=True)
class Edge:
    id: int
    source: int
    target: int
    actions: Tuple[ActionStep, ...] = ()
    span: Optional[Span] = None


@dataclass
class DirectedStructure:
    vertices: List[Vertex] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    joins: Dict[TextHandle, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.vertices:
            self.vertices.append(Vertex(id=TERMINAL, kind=VertexKind.TERMINAL))

    @property
    def terminal(self) -> Vertex:
        return self.vertices[TERMINAL]

    def vertex(self, vertex_id: int) -> Vertex:
        return self.vertices[vertex_id]

    def edge(self, edge_id: int) -> Edge:
        return self.edges[edge_id]

    def join(self, name: TextHandle) -> Optional[Vertex]:
        vertex_id = self.joins.get(name)
        return self.vertices[vertex_id] if vertex_id is not None else None

    def incoming_edges(self, vertex_id: int) -> List[Edge]:
        return [self.edges[e] for e in self.vertices[vertex_id].incoming]

    def outgoing_edge(self, vertex_id: int) -> Optional[Edge]:
        out = self.vertices[vertex_id].outgoing
        return self.edges[out] if out is not None else None

    def successor(self, vertex_id: int) -> Optional[int]:
        edge = self.outgoing_edge(vertex_id)
        return edge.target if edge is not None else None

    def indegree(self, vertex_id: int) -> int:
        return len(self.vertices[vertex_id].incoming)

    def roots(self) -> Iterator[Vertex]:
        return (v for v in self.vertices if v.kind is VertexKind.INGREDIENT_ROOT)

    def join_vertices(self) -> Iterator[Vertex]:
        return (v for v in self.vertices if v.kind is VertexKind.JOIN)

    def to_digraph(self) -> nx.DiGraph:
        g = nx.DiGraph()
        for v in self.vertices:
            g.add_node(v.id, kind=v.kind.value)
        for e in self.edges:
            g.add_edge(e.source, e.target, edge_id=e.id, steps=len(e.actions))
        return g

    # construction helpers

    def _add_vertex(self, kind: VertexKind, **attrs) -> Vertex:
        vertex = Vertex(id=len(self.vertices), kind=kind, **attrs)
        self.vertices.append(vertex)
        return vertex

    def _join_vertex(self, ref: JoinRef) -> Vertex:
        found = self.join(ref.name)
        if found is None:
            found = self._add_vertex(VertexKind.JOIN, name=ref.name, span=ref.span)
            self.joins[ref.name] = found.id
        return found

    def _add_edge(self, source: int, target: int, actions: Iterable[ActionStep], span: Optional[Span]) -> Edge:
        edge = Edge(id=len(self.edges), source=source, target=target, actions=tuple(actions), span=span)
        self.edges.append(edge)
        self.vertices[source].outgoing = edge.id
        self.vertices[target].incoming.append(edge.id)
        return edge


class _Builder:
    def __init__(self) -> None:
        self.structure = DirectedStructure()
        self.diagnostics: List[Diagnostic] = []
        # join vertex id -> spans of the rules continuing from it
        self.claims: Dict[int, List[Optional[Span]]] = {}
        # join vertex id -> spans of the references leading into it
        self.feeds: Dict[int, List[Optional[Span]]] = {}

    def claim(self, ref: JoinRef) -> Optional[int]:
        """Register `ref` as the start of a continuation.

        Returns the vertex to draw the continuation from, or None when the
        join already has one.
        """
        vertex = self.structure._join_vertex(ref)
        spans = self.claims.setdefault(vertex.id, [])
        spans.append(ref.span)
        return vertex.id if len(spans) == 1 else None

    def feed(self, source: Optional[int], ref: JoinRef, actions: List[ActionStep], span: Optional[Span]) -> int:
        vertex = self.structure._join_vertex(ref)
        self.feeds.setdefault(vertex.id, []).append(ref.span)
        if source is not None:
            self.structure._add_edge(source, vertex.id, actions, span)
        return vertex.id

    def add_fragment(self, fragment: PathFragment) -> None:
        start = fragment.start
        if isinstance(start, IngredientGroup):
            if fragment.end is None and not any(isinstance(e, JoinRef) for e in fragment.body):
                self.diagnostics.append(OrphanIngredientRoot(ingredients=start, span=start.span))
                return
            source: Optional[int] = self.structure._add_vertex(
                VertexKind.INGREDIENT_ROOT, ingredients=start, span=start.span
            ).id
        elif not fragment.body and fragment.end is None:
            # a bare `$a;` names the join without continuing it
            return
        else:
            source = self.claim(start)

        last_join: Optional[JoinRef] = start if isinstance(start, JoinRef) else None
        run_span = start.span
        actions: List[ActionStep] = []
        for element in fragment.body:
            if isinstance(element, Step):
                actions.append(element.step)
                continue
            # a join with more to come: ends the current run, starts the next
            self.feed(source, element, actions, run_span)
            source = self.claim(element)
            last_join, run_span, actions = element, element.span, []

        end = fragment.end
        if isinstance(end, Terminal):
            self.structure.terminal.span = self.structure.terminal.span or end.span
            if source is not None:
                self.structure._add_edge(source, TERMINAL, actions, run_span)
        elif isinstance(end, JoinRef):
            self.feed(source, end, actions, run_span)
        else:
            self.diagnostics.append(DanglingSteps(start=last_join, actions=tuple(actions), span=run_span))

    def check_joins(self) -> None:
        for vertex in self.structure.join_vertices():
            claims = self.claims.get(vertex.id, [])
            feeds = self.feeds.get(vertex.id, [])
            if feeds and not claims:
                self.diagnostics.append(MissingContinuation(name=vertex.name, span=feeds[0]))
            if claims and not feeds:
                self.diagnostics.append(UnknownJoinReference(name=vertex.name, span=claims[0]))
            if len(claims) > 1:
                self.diagnostics.append(DuplicateContinuation(name=vertex.name, span=claims[1]))


def build_structure(fragments: Iterable[PathFragment]) -> Tuple[DirectedStructure, List[Diagnostic]]:
    """Resolve join references across `fragments`, in source order."""
    builder = _Builder()
    for fragment in fragments:
        builder.add_fragment(fragment)
    builder.check_joins()
    structure = builder.structure
    logger.debug(
        "Built directed structure: %d vertices, %d edges, %d join(s), %d problem(s)",
        len(structure.vertices),
        len(structure.edges),
        len(structure.joins),
        len(builder.diagnostics),
    )
    return structure, builder.diagnostics
