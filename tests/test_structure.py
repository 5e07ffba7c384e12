from apicius.diagnostics import (
    DanglingSteps,
    DuplicateContinuation,
    MissingContinuation,
    OrphanIngredientRoot,
    UnknownJoinReference,
)
from apicius.grammar import parse_recipe
from apicius.structure import TERMINAL, VertexKind, build_structure
from apicius.types import JoinRef

MUSHROOMS = """
mushrooms {
  garlic -> mince -> $oil;
  oil -> $oil -> fry -> $add;
  mushrooms -> chop -> $add -> sautee -> <>;
}
"""


def _build(source):
    recipe, registry = parse_recipe(source)
    structure, problems = build_structure(recipe.fragments)
    return structure, problems, registry


def _names(structure, registry, edges):
    return [[registry.resolve(a.description) for a in e.actions] for e in edges]


def test_vertices_and_edges_of_mushroom_recipe():
    structure, problems, registry = _build(MUSHROOMS)
    assert problems == []
    kinds = [v.kind for v in structure.vertices]
    assert kinds == [
        VertexKind.TERMINAL,
        VertexKind.INGREDIENT_ROOT,
        VertexKind.JOIN,
        VertexKind.INGREDIENT_ROOT,
        VertexKind.JOIN,
        VertexKind.INGREDIENT_ROOT,
    ]
    assert len(structure.edges) == 5
    assert structure.terminal.kind is VertexKind.TERMINAL


def test_incoming_edges_keep_source_order():
    structure, _, registry = _build(MUSHROOMS)
    oil = structure.join(registry.intern("oil"))
    add = structure.join(registry.intern("add"))
    assert _names(structure, registry, structure.incoming_edges(oil.id)) == [["mince"], []]
    assert _names(structure, registry, structure.incoming_edges(add.id)) == [["fry"], ["chop"]]
    assert _names(structure, registry, structure.incoming_edges(TERMINAL)) == [["sautee"]]


def test_mid_rule_join_feeds_and_continues():
    structure, _, registry = _build(MUSHROOMS)
    oil = structure.join(registry.intern("oil"))
    add = structure.join(registry.intern("add"))
    assert structure.successor(oil.id) == add.id
    assert structure.successor(add.id) == TERMINAL
    assert structure.outgoing_edge(TERMINAL) is None
    assert structure.indegree(oil.id) == 2


def test_every_root_has_one_outgoing_edge():
    structure, _, _ = _build(MUSHROOMS)
    for root in structure.roots():
        assert root.outgoing is not None
        assert root.incoming == []


def test_digraph_projection():
    structure, _, _ = _build(MUSHROOMS)
    g = structure.to_digraph()
    assert g.number_of_nodes() == 6
    assert g.number_of_edges() == 5
    assert g.nodes[TERMINAL]["kind"] == "terminal"


def test_missing_continuation():
    _, problems, registry = _build("c { eggs -> whisk -> $mix; }")
    assert problems == [MissingContinuation(name=registry.intern("mix"))]


def test_duplicate_continuation_keeps_first():
    structure, problems, registry = _build(
        """
        e {
          eggs -> whisk -> $mix;
          $mix -> stir -> <>;
          $mix -> fold -> <>;
        }
        """
    )
    assert problems == [DuplicateContinuation(name=registry.intern("mix"))]
    assert problems[0].span.line == 5
    assert _names(structure, registry, structure.incoming_edges(TERMINAL)) == [["stir"]]


def test_unknown_join_reference():
    _, problems, registry = _build("u { $ghost -> stir -> <>; }")
    assert problems == [UnknownJoinReference(name=registry.intern("ghost"))]


def test_orphan_ingredient_root_is_not_a_vertex():
    structure, problems, registry = _build("o { garlic; eggs -> whisk -> <>; }")
    assert len(problems) == 1
    assert isinstance(problems[0], OrphanIngredientRoot)
    assert problems[0].ingredients.ingredients == (registry.ingredient("garlic"),)
    assert len(list(structure.roots())) == 1


def test_steps_without_join_after_ingredients_are_orphaned():
    _, problems, _ = _build("o { garlic -> chop; }")
    assert [type(p) for p in problems] == [OrphanIngredientRoot]


def test_dangling_steps_after_join():
    _, problems, registry = _build("d { eggs -> whisk -> $a; $a -> stir; }")
    assert problems == [
        DanglingSteps(
            start=JoinRef(name=registry.intern("a")),
            actions=(registry.action_step("stir"),),
        )
    ]


def test_bare_join_rule_does_not_continue_the_join():
    structure, problems, registry = _build("x { eggs -> $a; $a; }")
    assert problems == [MissingContinuation(name=registry.intern("a"))]
    assert problems[0].span.line == 1
    assert structure.join(registry.intern("a")).outgoing is None
