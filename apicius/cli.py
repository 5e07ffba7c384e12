"""CLI interface."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import typer

from apicius.checks import CheckResult, check_recipe
from apicius.errors import RecipeSyntaxError
from apicius.grammar import parse_recipe
from apicius.printable import describe_problems, printable
from apicius.registry import Registry
from apicius.render.export import to_chart
from apicius.render.table import HTMLTableOptions, Table
from apicius.tree import BackwardTree
from apicius.types import Recipe
from apicius.utils.config import settings

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Render recipes written in the Apicius DSL as charts.")

INPUT = typer.Argument(None, help="Recipe file to read, or - for stdin.", show_default=False)
OUTPUT = typer.Argument(None, help="File to write, or - for stdout.", show_default=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output.")):
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    source = Path(path)
    if not source.exists():
        raise typer.BadParameter(f"File not found: {path}")
    return source.read_text(encoding="utf-8")


def _write_output(path: Optional[str], text: str) -> None:
    if not text.endswith("\n"):
        text += "\n"
    if path is None or path == "-":
        typer.echo(text, nl=False)
        return
    Path(path).write_text(text, encoding="utf-8")
    logger.info("Wrote %s", path)


def _parse(path: Optional[str]) -> Tuple[Recipe, Registry]:
    try:
        return parse_recipe(_read_input(path))
    except RecipeSyntaxError as exc:
        typer.echo(f"Error when running `apicius`: {exc}", err=True)
        raise typer.Exit(code=2)


def _check(path: Optional[str]) -> Tuple[CheckResult, Registry]:
    recipe, registry = _parse(path)
    return check_recipe(recipe, registry), registry


def _tree(path: Optional[str]) -> Tuple[BackwardTree, Registry, CheckResult]:
    result, registry = _check(path)
    if not result.ok:
        typer.echo(describe_problems(result.diagnostics, registry), err=True)
        raise typer.Exit(code=1)
    return result.into_tree(), registry, result


@app.command("debug-parse-tree")
def debug_parse_tree(input: Optional[str] = INPUT, output: Optional[str] = OUTPUT):
    """Print the raw parse tree."""
    recipe, registry = _parse(input)
    _write_output(output, str(printable(recipe, registry)))


@app.command("debug-analysis")
def debug_analysis(input: Optional[str] = INPUT, output: Optional[str] = OUTPUT):
    """Print the analysis output."""
    result, registry = _check(input)
    text = str(printable(result.structure, registry)) + "\n" + describe_problems(result.diagnostics, registry)
    _write_output(output, text)


@app.command("debug-backward-tree")
def debug_backward_tree(input: Optional[str] = INPUT, output: Optional[str] = OUTPUT):
    """Print the generated backward tree."""
    tree, registry, _ = _tree(input)
    _write_output(output, str(printable(tree, registry)))


@app.command("debug-table")
def debug_table(input: Optional[str] = INPUT, output: Optional[str] = OUTPUT):
    """Print the raw table layout info."""
    tree, registry, _ = _tree(input)
    _write_output(output, Table(registry, tree).debug())


@app.command("html-table")
def html_table(
    input: Optional[str] = INPUT,
    output: Optional[str] = OUTPUT,
    standalone: Optional[bool] = typer.Option(None, "--standalone/--fragment", help="Wrap the table in a full HTML page."),
    html_header: Optional[str] = typer.Option(None, "--html-header"),
    html_footer: Optional[str] = typer.Option(None, "--html-footer"),
    amount_class: Optional[str] = typer.Option(None, "--amount-class"),
    seasonings_class: Optional[str] = typer.Option(None, "--seasonings-class"),
    ingredient_class: Optional[str] = typer.Option(None, "--ingredient-class"),
    action_class: Optional[str] = typer.Option(None, "--action-class"),
    done_class: Optional[str] = typer.Option(None, "--done-class"),
):
    """Convert the recipe to an HTML table."""
    opts = HTMLTableOptions.from_settings(
        settings,
        standalone=standalone,
        html_header=html_header,
        html_footer=html_footer,
        amount_class=amount_class,
        seasonings_class=seasonings_class,
        ingredient_class=ingredient_class,
        action_class=action_class,
        done_class=done_class,
    )
    tree, registry, _ = _tree(input)
    _write_output(output, Table(registry, tree).html(opts))


@app.command("json")
def json_export(input: Optional[str] = INPUT, output: Optional[str] = OUTPUT):
    """Export the backward tree as JSON."""
    tree, registry, result = _tree(input)
    chart = to_chart(registry.resolve(result.recipe.name), tree, registry)
    _write_output(output, chart.model_dump_json(indent=settings.json_indent, exclude_defaults=True))


if __name__ == "__main__":
    app()
