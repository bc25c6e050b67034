import types

import pytest

from tree_aggregator import aggregate
from tree_aggregator.exporter import export_root, safe_var_name, unique_prop_name
from tree_aggregator.models import ExportRequest, normalize_config


@pytest.fixture
def target():
    module = types.ModuleType("host")
    module.__file__ = "/nowhere/host/__init__.py"
    return module


class TestNames:
    @pytest.mark.parametrize("name, expected", [
        ("class", "Class"),
        ("import", "Import"),
        ("match", "Match"),
        ("users", "users"),
        ("my-file", "my_file"),
        ("1st", "_1st"),
    ])
    def test_safe_var_name(self, name, expected):
        assert safe_var_name(name) == expected

    def test_unique_prop_name_appends_counter(self, target):
        assert unique_prop_name("users", target) == "users"
        target.users = object()
        assert unique_prop_name("users", target) == "users1"
        target.users1 = object()
        target.users2 = object()
        assert unique_prop_name("users", target) == "users3"

    def test_counter_does_not_leak_between_calls(self, target):
        target.a = 1
        target.a1 = 1
        assert unique_prop_name("a", target) == "a2"
        target.b = 1
        assert unique_prop_name("b", target) == "b1"


class TestExportRoot:
    def test_default_exporter_sets_attributes(self, target):
        config = normalize_config({"export": True})
        exported = export_root({"users": {"n": 1}, "posts": [1, 2]}, target, config)
        assert exported == ["users", "posts"]
        assert target.users == {"n": 1}
        assert target.posts == [1, 2]

    def test_safe_names_and_collisions(self, target):
        target.data = "existing"
        config = normalize_config({"export": True, "safe": True})
        exported = export_root({"class": 1, "data": 2}, target, config)
        assert exported == ["Class", "data1"]
        assert target.Class == 1
        assert target.data == "existing"
        assert target.data1 == 2

    def test_custom_exporter_receives_request(self, target):
        calls = []

        def exporter(request: ExportRequest):
            calls.append(request)
            setattr(request.target, request.module_name.upper(), request.module_exports)

        modules_hash = {"users": 1}
        export_root(modules_hash, target, normalize_config({"export": exporter}))
        assert len(calls) == 1
        assert calls[0].module_name == "users"
        assert calls[0].module_exports == 1
        assert calls[0].modules_hash is modules_hash
        assert calls[0].target is target
        assert target.USERS == 1

    def test_none_values_are_not_exported(self, target):
        exported = export_root({"a": None, "b": 2}, target, normalize_config({"export": True}))
        assert exported == ["b"]
        assert not hasattr(target, "a")

    @pytest.mark.parametrize("modules_hash, options", [
        ({"a": 1}, {"export": False}),
        ({}, {"export": True}),
        ({"a": None}, {"export": True}),
        (5, {"export": True}),
    ])
    def test_nothing_exported_when_not_applicable(self, target, modules_hash, options):
        assert export_root(modules_hash, target, normalize_config(options)) == []

    def test_non_module_target_is_never_exported_to(self):
        assert export_root({"a": 1}, "some/path", normalize_config({"export": True})) == []


def test_aggregate_exports_onto_target_module(make_tree, caller):
    root = make_tree({
        "pkg/__init__.py": "",
        "pkg/users.json": '{"n": 1}',
        "pkg/class.json": '"kw"',
    })
    module = types.ModuleType("pkg")
    module.__file__ = str(root / "pkg" / "__init__.py")

    result = aggregate(module, {"export": True, "safe": True}, caller=caller)

    assert result == {"users": {"n": 1}, "class": "kw"}
    assert module.users == {"n": 1}
    assert module.Class == "kw"
