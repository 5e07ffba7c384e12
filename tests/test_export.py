import json

from apicius.checks import compile_source
from apicius.render.export import Chart, to_chart, to_chart_node


def _compiled(source):
    result, registry = compile_source(source)
    return result.into_tree(), registry


def test_chart_resolves_text():
    tree, registry = _compiled("b { [2] eggs -> fry & butter -> <>; }")
    chart = to_chart("b", tree, registry)
    assert chart.to_dict() == {
        "title": "b",
        "tree": {
            "size": 1,
            "max_depth": 1,
            "paths": [
                {
                    "size": 1,
                    "max_depth": 1,
                    "actions": [{"name": "fry", "seasonings": [{"name": "butter"}]}],
                    "ingredients": [{"name": "eggs", "amount": "2"}],
                }
            ],
        },
    }


def test_chart_json_round_trips_through_model():
    tree, registry = _compiled(
        "m { garlic -> mince -> $oil; oil -> $oil -> fry -> <>; }"
    )
    chart = to_chart("m", tree, registry)
    loaded = Chart.model_validate(json.loads(chart.model_dump_json()))
    assert loaded == chart
    assert [p.ingredients[0].name for p in loaded.tree.paths[0].paths] == ["garlic", "oil"]


def test_chart_node_keeps_child_order():
    tree, registry = _compiled(
        "s { one -> foo -> $a; two -> bar -> $a; $a -> baz -> <>; three -> quux -> <>; }"
    )
    node = to_chart_node(tree, registry)
    top = node.paths[0]
    assert top.actions == []
    assert [p.actions[0].name for p in top.paths] == ["baz", "quux"]


def test_chart_of_deeply_merged_recipe():
    count = 1500
    rules = ["a -> s0 -> $j1;"]
    for k in range(1, count + 1):
        rules.append(f"b{k} -> $j{k};")
        rules.append(f"$j{k} -> s{k} -> " + (f"$j{k + 1};" if k < count else "<>;"))
    tree, registry = _compiled("deep {\n" + "\n".join(rules) + "\n}")
    node = to_chart_node(tree, registry)
    assert node.size == count + 1
    assert node.paths[0].actions[0].name == f"s{count}"
