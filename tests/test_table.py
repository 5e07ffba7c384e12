from apicius.checks import compile_source
from apicius.render.table import HTMLTableOptions, Table

MUSHROOMS = """
mushrooms {
  garlic -> mince -> $oil;
  oil -> $oil -> fry -> $add;
  mushrooms -> chop -> $add -> sautee -> <>;
}
"""


def _table(source):
    result, registry = compile_source(source)
    return Table(registry, result.into_tree())


def test_debug_layout_single_chain():
    assert _table("b { eggs -> whisk -> <>; }").debug() == " (1, 1, eggs) (1, 1, whisk) (1, 1, <>)\n"


def test_debug_layout_mushrooms():
    assert _table(MUSHROOMS).debug() == (
        " (1, 1, garlic) (1, 1, mince) (1, 2, fry) (1, 3, sautee) (1, 3, <>)\n"
        " (2, 1, oil)\n"
        " (2, 1, mushrooms) (1, 1, chop)\n"
    )


def test_debug_layout_branches_at_terminal_has_one_done_cell():
    table = _table(
        """
        sample {
          one -> foo -> $a;
          two -> bar -> $a;
          $a -> baz -> <>;
          three -> quux -> <>;
        }
        """
    )
    assert table.debug() == (
        " (1, 1, one) (1, 1, foo) (1, 2, baz) (1, 3, <>)\n"
        " (1, 1, two) (1, 1, bar)\n"
        " (2, 1, three) (1, 1, quux)\n"
    )


def test_debug_layout_shows_amounts_and_seasonings():
    table = _table("s { [2] eggs -> fry & butter + salt -> <>; }")
    assert table.debug() == " (1, 1, [2] eggs) (1, 1, fry & butter,salt) (1, 1, <>)\n"


def test_html_table_uses_classes_and_escapes():
    html = _table("s { [2] eggs -> fry & butter -> <>; }").html()
    assert html.startswith("<table>")
    assert 'class="ingredient"' in html
    assert '<span class="amount">2</span> eggs' in html
    assert 'class="action" rowspan="1" colspan="1">fry' in html
    assert '<div class="seasonings">butter</div>' in html
    assert "&lt;&gt;" in html
    assert html.count("<tr>") == 1


def test_html_table_custom_options_and_standalone():
    opts = HTMLTableOptions(standalone=True, done_class="end", html_header="<html>", html_footer="</html>")
    html = _table("b { eggs -> whisk -> <>; }").html(opts)
    assert html.startswith("<html><table>")
    assert html.rstrip().endswith("</html>")
    assert 'class="end"' in html


def test_options_from_settings_with_overrides():
    class _Settings:
        standalone = False
        html_header = "H"
        html_footer = "F"
        amount_class = "qty"
        seasonings_class = "s"
        ingredient_class = "i"
        action_class = "a"
        done_class = "d"

    opts = HTMLTableOptions.from_settings(_Settings(), action_class="step", done_class=None)
    assert opts.amount_class == "qty"
    assert opts.action_class == "step"
    assert opts.done_class == "d"


def test_deeply_merged_recipe_lays_out_one_row_per_ingredient():
    count = 1500
    rules = ["a -> s0 -> $j1;"]
    for k in range(1, count + 1):
        rules.append(f"b{k} -> $j{k};")
        rules.append(f"$j{k} -> s{k} -> " + (f"$j{k + 1};" if k < count else "<>;"))
    table = _table("deep {\n" + "\n".join(rules) + "\n}")
    assert len(table.rows) == count + 1
    assert table.rows[0][-1].kind == "done"
    assert table.rows[0][0].colspan == 1
