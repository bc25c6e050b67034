import json
import types

from tree_aggregator.ignore_file import load_ignore_patterns
from tree_aggregator.logging_config import setup_logging
from tree_aggregator.render import render_json, render_tree, to_plain


def test_to_plain_modules_and_objects():
    module = types.ModuleType("settings")
    module.DEBUG = True
    module.helper = len
    module._private = 1
    module.json = json

    plain = to_plain({"settings": module, "items": (1, 2), "obj": object})
    assert plain["settings"] == {"DEBUG": True, "helper": "<callable len>"}
    assert plain["items"] == [1, 2]
    assert plain["obj"] == "<class object>"


def test_to_plain_breaks_cycles():
    node = {"a": 1}
    node["self"] = node
    assert to_plain(node) == {"a": 1, "self": "<cycle>"}


def test_render_json_and_bare_values():
    assert json.loads(render_json({"a": {"b": 1}})) == {"a": {"b": 1}}
    assert render_tree(5, root_name="x") == "x/\n└── 5"


def test_render_tree_connectors():
    text = render_tree({"a": {"b": 1, "c": 2}, "d": "e"}, root_name="root")
    assert text.splitlines() == [
        "root/",
        "├── a/",
        "│   ├── b: 1",
        "│   └── c: 2",
        '└── d: "e"',
    ]


def test_load_ignore_patterns(tmp_path):
    assert load_ignore_patterns(tmp_path) == []
    (tmp_path / ".tagrignore").write_text("# comment\n\n*.yaml\nbuild/\n", encoding="utf-8")
    assert load_ignore_patterns(tmp_path) == ["*.yaml", "build/"]


def test_setup_logging_level_override_and_fallback(tmp_path):
    import logging

    setup_logging("debug")
    assert logging.getLogger("tree_aggregator").level == logging.DEBUG

    setup_logging(logging.ERROR, config_path=tmp_path / "missing.yaml")
    assert logging.getLogger("tree_aggregator").level == logging.ERROR
