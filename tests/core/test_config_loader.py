# tests/core/test_config_loader.py
import json
import logging

import pytest

from spiracss.config.loader import (
    ConfigLoadError,
    get_nested_config,
    load_format_options,
    load_generator_options,
    load_lint_options,
    load_spiracss_config,
)
from spiracss.config.warnings import collect_custom_pattern_warnings, warn_invalid_custom_patterns

MOCK_CONFIG = {
    "generator": {
        "globalScssModule": "@/styles/global",
        "pageEntryAlias": "src",
        "pageEntrySubdir": "",
        "childScssDir": "parts",
        "layoutMixins": ["@include bp(lg)", "  ", 3],
        "rootFileCase": "pascal",
        "childFileCase": "shouting",
    },
    "stylelint": {
        "base": {
            "naming": {"blockCase": "snake"},
            "external": {"classes": ["swiper"]},
        },
        "class": {
            "naming": {"blockCase": "camel"},
            "external": {"prefixes": ["js-"]},
        },
        "classStructure": {"allowExternalClasses": ["ignored"]},
    },
    "selectorPolicy": {"variant": {"mode": "class"}},
    "htmlFormat": {"classAttribute": "className"},
    "debug": {"level": "DEBUG"},
}


@pytest.fixture
def config_file(tmp_path):
    """A spiracss.config.json with every recognized section."""
    path = tmp_path / "spiracss.config.json"
    path.write_text(json.dumps(MOCK_CONFIG), encoding="utf-8")
    return path


# --- Loading ---

def test_load_config(config_file):
    config = load_spiracss_config(config_file)
    assert config["generator"]["childScssDir"] == "parts"
    assert get_nested_config(config, "debug.level") == "DEBUG"
    assert get_nested_config(config, "generator.missing.key", "default") == "default"


def test_missing_config_returns_none(tmp_path):
    assert load_spiracss_config(tmp_path / "spiracss.config.json") is None


def test_malformed_config_raises(tmp_path):
    path = tmp_path / "spiracss.config.json"
    path.write_text("{ generator: }", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="Failed to load spiracss.config.json"):
        load_spiracss_config(path)


def test_non_object_config_raises(tmp_path):
    path = tmp_path / "spiracss.config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="top-level value must be an object"):
        load_spiracss_config(path)


def test_directory_instead_of_file_raises(tmp_path):
    (tmp_path / "spiracss.config.json").mkdir()
    with pytest.raises(ConfigLoadError, match="Cannot access"):
        load_spiracss_config(tmp_path / "spiracss.config.json")


# --- Generator options ---

def test_generator_defaults():
    options = load_generator_options(None)
    assert options.global_scss_module == "@styles/partials/global"
    assert options.page_entry_prefix == "@assets/css"
    assert options.child_scss_dir == "scss"
    assert options.layout_mixins == ["@include breakpoint-up(md)"]
    assert options.root_file_case == "preserve"
    assert options.selector_policy is None


def test_generator_options_from_config(config_file):
    options = load_generator_options(load_spiracss_config(config_file))
    assert options.global_scss_module == "@/styles/global"
    assert options.page_entry_prefix == "@src"
    assert options.child_scss_dir == "parts"
    assert options.layout_mixins == ["@include bp(lg)"]
    assert options.root_file_case == "pascal"
    assert options.child_file_case == "preserve"
    assert options.naming.block_case == "snake"
    assert options.selector_policy == {"variant": {"mode": "class"}}


def test_empty_layout_mixin_list_is_kept():
    options = load_generator_options({"generator": {"layoutMixins": ["", " "]}})
    assert options.layout_mixins == []


def test_external_sections_are_merged(config_file):
    options = load_generator_options(load_spiracss_config(config_file))
    assert options.external.classes == ["swiper"]
    assert options.external.prefixes == ["js-"]


def test_class_structure_external_fills_gaps():
    config = {"stylelint": {"classStructure": {"allowExternalClasses": ["swiper"], "allowExternalPrefixes": ["js-"]}}}
    external = load_lint_options(config).external
    assert external.classes == ["swiper"]
    assert external.prefixes == ["js-"]


# --- Naming source ---

@pytest.mark.parametrize("stylelint, case, source", [
    ({"base": {"naming": {"blockCase": "snake"}}, "class": {"naming": {"blockCase": "camel"}}},
     "snake", "stylelint.base.naming"),
    ({"class": {"naming": {"blockCase": "camel"}}}, "camel", "stylelint.class.naming"),
    ({"classStructure": {"naming": {"blockCase": "pascal"}}}, "pascal", "stylelint.classStructure.naming"),
    ({}, "kebab", "stylelint.base.naming"),
])
def test_naming_source_precedence(stylelint, case, source):
    options = load_lint_options({"stylelint": stylelint})
    assert options.naming.block_case == case
    assert options.naming_source == source


def test_format_options(config_file):
    options = load_format_options(load_spiracss_config(config_file))
    assert options.class_attribute == "className"
    assert load_format_options({"htmlFormat": {"classAttribute": "klass"}}).class_attribute == "class"


# --- Custom pattern warnings ---

def test_custom_pattern_warnings():
    raw = {"customPatterns": {"block": "/^x$/g", "element": 5, "modifier": "^-[a-z]+$"}}
    assert collect_custom_pattern_warnings(raw, "stylelint.base.naming") == [
        'WARN [INVALID_CUSTOM_PATTERN] stylelint.base.naming.customPatterns.block must not include "g" or "y" flags. Ignored.',
        "WARN [INVALID_CUSTOM_PATTERN] stylelint.base.naming.customPatterns.element must be a RegExp. Ignored.",
    ]


def test_custom_patterns_must_be_a_mapping():
    assert collect_custom_pattern_warnings({"customPatterns": "^x$"}, "stylelint.class.naming") == [
        "WARN [INVALID_CUSTOM_PATTERN] stylelint.class.naming.customPatterns "
        "must be a plain object of RegExp values. Ignored.",
    ]


def test_no_warnings_without_custom_patterns():
    assert collect_custom_pattern_warnings({"blockCase": "kebab"}) == []
    assert collect_custom_pattern_warnings(None) == []


def test_warn_callback_receives_each_message():
    received = []
    warn_invalid_custom_patterns({"customPatterns": {"block": "("}}, received.append, "stylelint.base.naming")
    assert received == ["WARN [INVALID_CUSTOM_PATTERN] stylelint.base.naming.customPatterns.block must be a RegExp. Ignored."]


def test_loading_options_logs_pattern_warnings(caplog):
    config = {"stylelint": {"class": {"naming": {"customPatterns": {"modifier": "/^-x$/y"}}}}}
    with caplog.at_level(logging.WARNING, logger="spiracss.config.warnings"):
        load_lint_options(config)
    assert "stylelint.class.naming.customPatterns.modifier must not include" in caplog.text
