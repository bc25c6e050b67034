import types

from tree_aggregator.tree import PropsTree, can_hold_fields


def test_set_creates_intermediate_nodes():
    tree = PropsTree()
    tree.set(["a", "b", "c"], 1)
    assert tree.root == {"a": {"b": {"c": 1}}}
    assert tree.has(["a", "b"])
    assert tree.get(["a", "b", "c"]) == 1
    assert not tree.has(["a", "x"])
    assert tree.get(["a", "x"], "missing") == "missing"


def test_empty_path_addresses_the_root():
    tree = PropsTree()
    assert not tree.has([])
    tree.set([], 5)
    assert tree.has([])
    assert tree.root == 5
    assert tree.get([]) == 5


def test_non_empty_root_mapping_counts_as_present():
    tree = PropsTree()
    tree.set(["a"], 1)
    assert tree.has([])


def test_attribute_nodes():
    module = types.ModuleType("m")
    tree = PropsTree()
    tree.set(["pkg"], module)
    tree.set(["pkg", "child"], 2)
    assert module.child == 2
    assert tree.has(["pkg", "child"])
    assert tree.get(["pkg", "child"]) == 2


def test_value_that_cannot_hold_fields_is_kept():
    tree = PropsTree()
    tree.set(["a"], 3)
    assert tree.set(["a", "b"], 4) is False
    assert tree.set(["a", "b", "c"], 5) is False
    assert tree.root == {"a": 3}


def test_list_root_is_kept():
    tree = PropsTree()
    tree.set([], [1, 2])
    assert tree.set(["other"], 1) is False
    assert tree.root == [1, 2]


def test_builtin_attributes_are_not_fields():
    tree = PropsTree()
    tree.set(["s"], "idx")
    tree.set(["l"], [1])
    assert not tree.has(["s", "upper"])
    assert not tree.has(["l", "count"])
    assert tree.get(["l", "count"], "missing") == "missing"


def test_stored_mappings_are_copied_before_writes():
    shared = {"inner": {"x": 1}}
    tree = PropsTree()
    tree.set(["a"], shared)
    tree.set(["a", "inner", "y"], 2)
    tree.set(["a", "z"], 3)
    assert tree.root == {"a": {"inner": {"x": 1, "y": 2}, "z": 3}}
    assert shared == {"inner": {"x": 1}}


def test_writable_copies_each_mapping_once():
    tree = PropsTree()
    source = {"k": 1}
    copy = tree.writable(source)
    assert copy == source and copy is not source
    assert tree.writable(copy) is copy
    assert tree.writable(5) == 5


def test_can_hold_fields():
    assert can_hold_fields({})
    assert can_hold_fields(types.ModuleType("m"))
    assert can_hold_fields(types.SimpleNamespace())
    assert not can_hold_fields(1)
    assert not can_hold_fields("s")
    assert not can_hold_fields([1])
    assert not can_hold_fields(None)
