"""Recipe DSL parser.

Turns recipe source such as::

    nicer scrambled eggs {
      [1/2] onion + [1 clove] garlic
        -> chop coarsely -> sautee & butter -> $mix;
      [2] eggs -> whisk -> $mix;
      $mix -> stir & salt -> <>;
    }

into a ``Recipe`` of ordered ``PathFragment`` values, interning every piece of
text into a ``Registry``.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedEOF, UnexpectedInput, VisitError

from apicius.errors import RecipeSyntaxError
from apicius.registry import Registry, unique
from apicius.types import IngredientGroup, JoinRef, PathFragment, Recipe, Span, Step, Terminal

logger = logging.getLogger(__name__)

GRAMMAR = r"""
    recipe: TEXT "{" rule* "}"
    rule: input ("->" action)* ";"

    ?input: ingredients | join
    ingredients: ingredient ("+" ingredient)*
    ingredient: amount? TEXT
    amount: "[" TEXT "]"

    ?action: step | join | done
    step: TEXT ("&" ingredients)?
    join: JOIN
    done: DONE

    DONE: "<>"
    JOIN: /\$[A-Za-z0-9_]+/
    TEXT: /[^\s\[\]{};$&+<>\-\/](?:-(?!>)|\/(?!\/)|[^\[\]{};$&+<>\-\/\n])*/
    COMMENT: /\/\/[^\n]*/

    %import common.WS
    %ignore WS
    %ignore COMMENT
"""

_PARSER = Lark(GRAMMAR, start="recipe", parser="lalr")


def _span(token: Token) -> Span:
    return Span(line=token.line, column=token.column)


@v_args(inline=True)
class _RecipeBuilder(Transformer):
    def __init__(self, registry: Registry):
        super().__init__()
        self.registry = registry

    def recipe(self, name: Token, *rules: PathFragment) -> Recipe:
        return Recipe(name=self.registry.intern(name.strip()), fragments=tuple(rules))

    def amount(self, text: Token) -> Token:
        return text

    def ingredient(self, *parts: Token) -> Tuple[object, Span]:
        amount: Optional[Token] = parts[0] if len(parts) == 2 else None
        name = parts[-1]
        first = amount if amount is not None else name
        ingredient = self.registry.ingredient(
            name.strip(), amount.strip() if amount is not None else None
        )
        return ingredient, _span(first)

    def ingredients(self, *items: Tuple[object, Span]) -> IngredientGroup:
        return IngredientGroup(
            ingredients=unique(i for i, _ in items),
            span=items[0][1],
        )

    def step(self, text: Token, seasonings: Optional[IngredientGroup] = None) -> Step:
        found = seasonings.ingredients if seasonings is not None else ()
        return Step(step=self.registry.action_step(text.strip(), found), span=_span(text))

    def join(self, token: Token) -> JoinRef:
        return JoinRef(name=self.registry.intern(token[1:]), span=_span(token))

    def done(self, token: Token) -> Terminal:
        return Terminal(span=_span(token))

    def rule(self, start, *actions) -> PathFragment:
        items: List[object] = list(actions)
        for pos, item in enumerate(items):
            if isinstance(item, Terminal) and pos != len(items) - 1:
                raise RecipeSyntaxError(
                    "`<>` must be the last step of a rule", item.span.line, item.span.column
                )
        end = None
        if items and isinstance(items[-1], (JoinRef, Terminal)):
            end = items.pop()
        return PathFragment(start=start, body=tuple(items), end=end, span=start.span)


def parse_recipe(source: str, registry: Optional[Registry] = None) -> Tuple[Recipe, Registry]:
    """Parse recipe source text, returning the recipe and its registry.

    The registry is frozen once parsing succeeds.
    """
    registry = registry if registry is not None else Registry()
    try:
        tree = _PARSER.parse(source)
        recipe = _RecipeBuilder(registry).transform(tree)
    except UnexpectedEOF as exc:
        raise RecipeSyntaxError("unexpected end of recipe") from exc
    except UnexpectedInput as exc:
        raise RecipeSyntaxError(_describe(exc, source), exc.line, exc.column) from exc
    except VisitError as exc:
        if isinstance(exc.orig_exc, RecipeSyntaxError):
            raise exc.orig_exc from exc
        raise
    logger.debug(
        "Parsed recipe with %d rule(s), %d interned string(s)",
        len(recipe.fragments),
        len(registry),
    )
    return recipe, registry.freeze()


def _describe(exc: UnexpectedInput, source: str) -> str:
    context = exc.get_context(source).rstrip()
    return f"unexpected input in recipe:\n{context}"
