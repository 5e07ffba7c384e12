"""Apicius: recipes as graphs, checked and turned into chartable trees."""
from apicius.checks import CheckResult, check_recipe, compile_source
from apicius.grammar import parse_recipe
from apicius.printable import Printable, printable
from apicius.registry import Registry
from apicius.tree import BackwardTree

__all__ = [
    "BackwardTree",
    "CheckResult",
    "Printable",
    "Registry",
    "check_recipe",
    "compile_source",
    "parse_recipe",
    "printable",
]
