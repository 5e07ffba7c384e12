"""Human-readable text for handle-bearing values.

Values only hold handles, so rendering them needs the registry that minted
those handles: ``str(Printable(value, registry))``.
"""
from __future__ import annotations

from typing import Any, List, Sequence, get_args

from apicius import diagnostics as d
from apicius.registry import ActionStep, Ingredient, Registry, TextHandle
from apicius.structure import TERMINAL, DirectedStructure, Edge, VertexKind
from apicius.tree import BackwardTree
from apicius.types import IngredientGroup, JoinRef, PathFragment, Recipe, Step, Terminal

DIAGNOSTIC_TYPES = get_args(d.Diagnostic)


class Printable:
    """A value paired with the registry needed to print it."""

    __slots__ = ("value", "registry")

    def __init__(self, value: Any, registry: Registry):
        self.value = value
        self.registry = registry

    def __str__(self) -> str:
        return render(self.value, self.registry)

    def __repr__(self) -> str:
        return f"Printable({render(self.value, self.registry)!r})"


def printable(value: Any, registry: Registry) -> Printable:
    return Printable(value, registry)


def render(value: Any, registry: Registry) -> str:
    if isinstance(value, TextHandle):
        return registry.resolve(value)
    if isinstance(value, Ingredient):
        name = registry.resolve(value.name)
        if value.amount is None:
            return name
        return f"[{registry.resolve(value.amount)}] {name}"
    if isinstance(value, IngredientGroup):
        return _ingredients(value.ingredients, registry)
    if isinstance(value, ActionStep):
        text = registry.resolve(value.description)
        if value.seasonings:
            text += " & " + _ingredients(value.seasonings, registry)
        return text
    if isinstance(value, Step):
        return render(value.step, registry)
    if isinstance(value, JoinRef):
        return "$" + registry.resolve(value.name)
    if isinstance(value, Terminal):
        return "<>"
    if isinstance(value, PathFragment):
        return _fragment(value, registry)
    if isinstance(value, Recipe):
        lines = [f"{registry.resolve(value.name)} {{"]
        lines.extend(f"  {_fragment(f, registry)}" for f in value.fragments)
        lines.append("}")
        return "\n".join(lines)
    if isinstance(value, DIAGNOSTIC_TYPES):
        return _problem(value, registry)
    if isinstance(value, DirectedStructure):
        return _analysis(value, registry)
    if isinstance(value, BackwardTree):
        return "\n".join(_tree(value, registry))
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(v, DIAGNOSTIC_TYPES) for v in value):
            return describe_problems(value, registry)
        if value and all(isinstance(v, Ingredient) for v in value):
            return _ingredients(value, registry)
        return "[" + ", ".join(render(v, registry) for v in value) + "]"
    raise TypeError(f"don't know how to print {type(value).__name__}")


def describe_problems(problems: Sequence[d.Diagnostic], registry: Registry) -> str:
    if not problems:
        return "graph ok"
    lines = ["graph problems:"]
    lines.extend(f" - {_problem(p, registry)}" for p in problems)
    return "\n".join(lines)


def _ingredients(items: Sequence[Ingredient], registry: Registry) -> str:
    return " + ".join(render(i, registry) for i in items)


def _join(name: TextHandle, registry: Registry) -> str:
    return "$" + registry.resolve(name)


def _fragment(fragment: PathFragment, registry: Registry) -> str:
    parts = [render(fragment.start, registry)]
    parts.extend(render(e, registry) for e in fragment.body)
    if fragment.end is not None:
        parts.append(render(fragment.end, registry))
    return " -> ".join(parts) + ";"


def _steps(actions: Sequence[ActionStep], registry: Registry, sep: str) -> str:
    return sep.join(render(a, registry) for a in actions)


def _problem(problem: d.Diagnostic, registry: Registry) -> str:
    if isinstance(problem, d.MissingContinuation):
        text = f"the join point '{_join(problem.name, registry)}' is reached but no rule continues from it"
    elif isinstance(problem, d.DuplicateContinuation):
        text = f"the join point '{_join(problem.name, registry)}' is continued by more than one rule"
    elif isinstance(problem, d.UnknownJoinReference):
        text = f"the join point '{_join(problem.name, registry)}' is continued but no rule leads into it"
    elif isinstance(problem, d.OrphanIngredientRoot):
        text = (
            f"path starting from ingredients list '{render(problem.ingredients, registry)}'"
            " never reaches a join point"
        )
    elif isinstance(problem, d.DanglingSteps):
        text = (
            f"path starting at join point '{render(problem.start, registry)}'"
            f" goes through action path '{_steps(problem.actions, registry, ' -> ')} -> ...'"
            " but never reaches a join point"
        )
    elif isinstance(problem, d.CycleDetected):
        text = f"the join point '{_join(problem.name, registry)}' is involved in a cycle"
        if problem.cycle:
            text += " (" + " -> ".join(_join(n, registry) for n in problem.cycle) + ")"
    elif isinstance(problem, d.DisconnectedChain):
        text = f"path starting from ingredients list '{render(problem.root, registry)}' never reaches `<>`"
    elif isinstance(problem, d.EmptyRecipe):
        text = "no `<>` state"
    else:
        raise TypeError(f"not a diagnostic: {problem!r}")
    if problem.span is not None:
        text += f" (at {problem.span})"
    return text


def _edge_source(structure: DirectedStructure, edge: Edge, registry: Registry) -> str:
    source = structure.vertex(edge.source)
    if source.kind is VertexKind.INGREDIENT_ROOT:
        return render(source.ingredients, registry)
    return _join(source.name, registry)


def _analysis(structure: DirectedStructure, registry: Registry) -> str:
    lines = ["analysis {"]
    keys = [TERMINAL] + [v.id for v in structure.join_vertices()]
    for vertex_id in keys:
        vertex = structure.vertex(vertex_id)
        if vertex_id == TERMINAL:
            if not vertex.incoming:
                continue
            lines.append("  DONE")
        else:
            lines.append(f"  {_join(vertex.name, registry)}")
        for edge in structure.incoming_edges(vertex_id):
            backwards = "".join(f" <- {render(a, registry)}" for a in reversed(edge.actions))
            lines.append(f"    {backwards} <- {_edge_source(structure, edge, registry)}")
    lines.append("}")
    return "\n".join(lines)


def _tree(root: BackwardTree, registry: Registry) -> List[str]:
    out: List[str] = []
    # node, indent of its lines, prefix of its first line
    stack = [(root, "", "")]
    while stack:
        node, indent, lead = stack.pop()
        out.append(f"{lead}size: {node.size}")
        out.append(f"{indent}max_depth: {node.max_depth}")
        if node.actions:
            out.append(f"{indent}actions: [{_steps(node.actions, registry, ', ')}]")
        if node.ingredients:
            out.append(f"{indent}ingredients: [{', '.join(render(i, registry) for i in node.ingredients)}]")
        if node.paths:
            out.append(indent + "paths:")
            stack.extend((child, indent + "  ", indent + "- ") for child in reversed(node.paths))
    return out
