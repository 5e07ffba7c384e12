import pytest

from apicius.errors import RecipeSyntaxError
from apicius.grammar import parse_recipe
from apicius.types import IngredientGroup, JoinRef, Span, Step, Terminal

SAMPLE = """
nicer scrambled eggs {
  [1/2] onion + [1 clove] garlic
    -> chop coarsely -> sautee & butter -> $mix;
  [2] eggs -> whisk -> $mix;
  $mix -> stir & salt -> <>;
}
"""


def test_parse_sample_recipe():
    recipe, registry = parse_recipe(SAMPLE)
    assert registry.resolve(recipe.name) == "nicer scrambled eggs"
    assert len(recipe.fragments) == 3

    first = recipe.fragments[0]
    assert isinstance(first.start, IngredientGroup)
    assert first.start.ingredients == (
        registry.ingredient("onion", "1/2"),
        registry.ingredient("garlic", "1 clove"),
    )
    assert [registry.resolve(e.step.description) for e in first.body] == ["chop coarsely", "sautee"]
    assert first.body[1].step.seasonings == (registry.ingredient("butter"),)
    assert first.end == JoinRef(name=registry.intern("mix"))

    last = recipe.fragments[2]
    assert last.starts_at_join
    assert isinstance(last.end, Terminal)


def test_registry_is_frozen_after_parse():
    _, registry = parse_recipe(SAMPLE)
    assert registry.frozen


def test_mid_rule_join_stays_in_body():
    recipe, registry = parse_recipe("r { oil -> $oil -> fry -> $add; }")
    fragment = recipe.fragments[0]
    assert fragment.body[0] == JoinRef(name=registry.intern("oil"))
    assert isinstance(fragment.body[1], Step)
    assert fragment.end == JoinRef(name=registry.intern("add"))


def test_rule_without_end_is_dangling():
    recipe, _ = parse_recipe("r { eggs -> whisk; }")
    assert recipe.fragments[0].end is None
    assert len(recipe.fragments[0].body) == 1


def test_spans_point_at_source():
    recipe, _ = parse_recipe("r {\n  eggs -> whisk -> <>;\n}")
    fragment = recipe.fragments[0]
    assert fragment.start.span == Span(line=2, column=3)
    assert fragment.body[0].span == Span(line=2, column=11)
    assert fragment.end.span == Span(line=2, column=20)


def test_words_with_hyphens_slashes_and_comments():
    source = """
    // a quick one
    stir-fry {
      bok choy -> stir-fry 1/2 minute -> <>; // done
    }
    """
    recipe, registry = parse_recipe(source)
    assert registry.resolve(recipe.name) == "stir-fry"
    step = recipe.fragments[0].body[0].step
    assert registry.resolve(step.description) == "stir-fry 1/2 minute"


def test_repeated_ingredient_is_kept_once():
    recipe, registry = parse_recipe("r { garlic + garlic -> mince -> <>; }")
    assert recipe.fragments[0].start.ingredients == (registry.ingredient("garlic"),)


def test_done_must_end_the_rule():
    with pytest.raises(RecipeSyntaxError) as info:
        parse_recipe("r {\n  eggs -> <> -> whisk;\n}")
    assert info.value.line == 2


def test_syntax_error_reports_position():
    with pytest.raises(RecipeSyntaxError) as info:
        parse_recipe("r {\n  eggs -> -> whisk;\n}")
    assert info.value.line == 2
    assert "line 2" in str(info.value)


def test_missing_closing_brace():
    with pytest.raises(RecipeSyntaxError):
        parse_recipe("r { eggs -> whisk -> <>;")
