from tree_aggregator.models import AggregatorConfig, ExcludeConfig, normalize_config


def test_defaults_are_fully_populated():
    config = normalize_config(None)
    assert config.async_ is True
    assert config.recurse is True
    assert config.index_prop is False
    assert config.index_name == "index"
    assert config.export is False
    assert config.resolve is None
    assert config.safe is False
    assert config.exclude == ExcludeConfig()
    assert config.exclude.files is None
    assert config.exclude.self_ is True
    assert config.exclude.parents is True
    assert config.exclude.siblings is True
    assert config.exclude.children is True


def test_valid_values_are_kept():
    def resolver(record):
        return record

    def exporter(request):
        pass

    config = normalize_config({
        "async": False,
        "recurse": False,
        "indexProp": True,
        "indexName": "  main ",
        "export": exporter,
        "resolve": resolver,
        "safe": True,
        "exclude": {"files": ["*.yaml"], "self": False, "parents": False, "siblings": False, "children": False},
    })
    assert config.async_ is False
    assert config.recurse is False
    assert config.index_prop is True
    assert config.index_name == "main"
    assert config.export is exporter
    assert config.resolve is resolver
    assert config.safe is True
    assert config.exclude.files == ["*.yaml"]
    assert config.exclude.self_ is False
    assert config.exclude.parents is False
    assert config.exclude.siblings is False
    assert config.exclude.children is False


def test_snake_case_names_are_accepted():
    config = normalize_config({"index_prop": True, "index_name": "init", "export": True})
    assert config.index_prop is True
    assert config.index_name == "init"
    assert config.export is True


def test_malformed_values_fall_back_to_defaults():
    config = normalize_config({
        "recurse": "yes",
        "index_prop": 1,
        "index_name": 7,
        "export": "sure",
        "resolve": "not callable",
        "safe": None,
        "exclude": ["nope"],
    })
    assert config == AggregatorConfig()


def test_malformed_exclude_fields_fall_back():
    config = normalize_config({"exclude": {"files": 3, "self": "no", "siblings": 0}})
    assert config.exclude.files is None
    assert config.exclude.self_ is True
    assert config.exclude.siblings is True


def test_single_pattern_string_becomes_list():
    assert normalize_config({"exclude": {"files": "*.py"}}).exclude.files == ["*.py"]


def test_non_mapping_options_give_defaults():
    assert normalize_config("recurse=false") == AggregatorConfig()


def test_config_instance_is_copied():
    original = AggregatorConfig(recurse=False)
    copied = normalize_config(original)
    assert copied == original
    assert copied is not original
    copied.exclude.siblings = False
    assert original.exclude.siblings is True


def test_exclude_instance_is_copied():
    exclude = ExcludeConfig(siblings=False)
    config = normalize_config({"exclude": exclude})
    assert config.exclude == exclude
    assert config.exclude is not exclude
    config.exclude.children = False
    assert exclude.children is True
