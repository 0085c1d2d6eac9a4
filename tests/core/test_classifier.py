# tests/core/test_classifier.py
import re

import pytest

from spiracss.naming.classifier import (
    classify_base_class,
    classify_with_external,
    filter_modifier_tokens,
    find_first_non_external_base_kind,
    is_block_class,
    is_element_base,
    is_modifier_class,
)
from spiracss.naming.file_case import format_file_base, split_words
from spiracss.naming.options import CustomPattern, ExternalOptions, NamingOptions


@pytest.fixture
def kebab():
    return NamingOptions()


# --- Block / Element / Modifier ---

@pytest.mark.parametrize("name, expected", [
    ("hero-banner", True),
    ("card2-list", True),
    ("hero", False),
    ("hero-banner-main", False),
    ("Hero-banner", False),
    ("-hero-banner", False),
    ("u-hero-banner", False),
    ("", False),
])
def test_block_detection_kebab(kebab, name, expected):
    """Kebab Blocks are exactly two words by default."""
    assert is_block_class(name, kebab) is expected


def test_block_max_words_widens_the_pattern():
    """blockMaxWords allows longer Block names."""
    naming = NamingOptions(blockMaxWords=3)
    assert is_block_class("hero-banner-main", naming)
    assert not is_block_class("hero-banner-main-area", naming)


@pytest.mark.parametrize("case, block, element", [
    ("snake", "hero_banner", "title"),
    ("camel", "heroBanner", "title"),
    ("pascal", "HeroBanner", "Title"),
])
def test_other_cases(case, block, element):
    """Each case style has its own Block and Element shape."""
    naming = NamingOptions(blockCase=case, elementCase=case)
    assert is_block_class(block, naming)
    assert is_element_base(element, naming)
    assert classify_base_class(block, naming) == "block"
    assert classify_base_class(element, naming) == "element"


@pytest.mark.parametrize("name, expected", [
    ("title", "element"),
    ("title2", "element"),
    ("hero-banner", "block"),
    ("-primary", "invalid"),
    ("u-hidden", "invalid"),
    ("_private", "invalid"),
    ("Title", "invalid"),
    ("hero_banner", "invalid"),
])
def test_classify_base_class(kebab, name, expected):
    assert classify_base_class(name, kebab) == expected


def test_classify_is_stable_for_same_inputs(kebab):
    """Classification is a pure function of name and options."""
    results = {classify_base_class("hero-banner", kebab) for _ in range(5)}
    assert results == {"block"}


@pytest.mark.parametrize("name, expected", [
    ("-primary", True),
    ("-is-open", True),
    ("-a-b-c", False),
    ("primary", False),
    ("-", False),
    ("", False),
])
def test_modifier_detection(kebab, name, expected):
    assert is_modifier_class(name, kebab) is expected


def test_custom_modifier_prefix_is_escaped():
    """The prefix is matched literally, not as a regex."""
    naming = NamingOptions(modifierPrefix="--")
    assert is_modifier_class("--large", naming)
    assert not is_modifier_class("-large", naming)

    dotted = NamingOptions(modifierPrefix=".")
    assert is_modifier_class(".large", dotted)
    assert not is_modifier_class("xlarge", dotted)


# --- Custom patterns ---

def test_custom_block_pattern_replaces_case_rule():
    naming = NamingOptions(customPatterns={"block": "^c-[a-z]+$"})
    assert is_block_class("c-card", naming)
    assert not is_block_class("hero-banner", naming)


def test_custom_pattern_literal_with_ignore_case():
    naming = NamingOptions(customPatterns={"element": "/^item$/i"})
    assert is_element_base("ITEM", naming)


def test_stateful_or_broken_patterns_fall_back_to_case_rules():
    """Patterns with g/y flags or invalid syntax are treated as not provided."""
    naming = NamingOptions(customPatterns={"block": "/^x$/g", "element": "(", "modifier": 42})
    assert naming.custom_patterns.block is None
    assert naming.custom_patterns.element is None
    assert naming.custom_patterns.modifier is None
    assert is_block_class("hero-banner", naming)


def test_custom_pattern_coerce():
    assert CustomPattern.coerce("/^x/y") is None
    assert CustomPattern.coerce("/^x/s") is None
    assert CustomPattern.coerce(re.compile("^x", re.MULTILINE)) is None

    compiled = CustomPattern.coerce(re.compile("^x", re.IGNORECASE))
    assert compiled.source == "^x"
    assert compiled.ignore_case is True

    bare = CustomPattern.coerce("^x$")
    assert bare.matches("x")
    assert not bare.matches("xx")


def test_custom_patterns_must_be_a_mapping():
    naming = NamingOptions(customPatterns="^x$")
    assert naming.custom_patterns.block is None


# --- Option normalization ---

@pytest.mark.parametrize("raw, expected", [(1, 2), (2, 2), (7, 7), (500, 100), ("3", 2), (True, 2)])
def test_block_max_words_is_clamped(raw, expected):
    assert NamingOptions(blockMaxWords=raw).block_max_words == expected


def test_unknown_case_falls_back_to_kebab():
    naming = NamingOptions.from_config({"blockCase": "SCREAMING", "modifierPrefix": 3})
    assert naming.block_case == "kebab"
    assert naming.modifier_prefix == "-"


def test_from_config_ignores_non_mappings():
    assert NamingOptions.from_config(None) == NamingOptions()
    assert NamingOptions.from_config(["x"]) == NamingOptions()


# --- External classes ---

def test_external_classes_and_prefixes():
    external = ExternalOptions(classes=["swiper", "  "], prefixes=["js-", ""])
    assert external.classes == ["swiper"]
    assert external.prefixes == ["js-"]
    assert classify_with_external("swiper", None, external) == "external"
    assert classify_with_external("js-toggle", None, external) == "external"
    assert classify_with_external("hero-banner", None, external) == "block"


def test_find_first_non_external_base_kind():
    external = ExternalOptions(classes=["swiper"])
    assert find_first_non_external_base_kind(["title", "hero-banner"], None, external) == "block"
    assert find_first_non_external_base_kind(["swiper", "title"], None, external) == "element"
    assert find_first_non_external_base_kind(["-primary"], None, external) is None


def test_filter_modifier_tokens_skips_external_and_non_modifiers():
    external = ExternalOptions(prefixes=["-js"])
    tokens = ["-primary", "title", "-jsHook", "-large"]
    assert filter_modifier_tokens(tokens, None, external) == ["-primary", "-large"]


# --- File name cases ---

@pytest.mark.parametrize("name, case, expected", [
    ("hero-banner", "pascal", "HeroBanner"),
    ("hero-banner", "camel", "heroBanner"),
    ("hero-banner", "snake", "hero_banner"),
    ("heroBanner", "kebab", "hero-banner"),
    ("HTMLParser", "kebab", "html-parser"),
    ("hero-banner", "preserve", "hero-banner"),
    ("hero-banner", "unknown", "hero-banner"),
])
def test_format_file_base(name, case, expected):
    assert format_file_base(name, case) == expected


@pytest.mark.parametrize("case, names", [
    ("kebab", ["hero-banner", "card2-list"]),
    ("snake", ["hero_banner", "card_list"]),
    ("camel", ["heroBanner", "cardList"]),
    ("pascal", ["HeroBanner", "CardList"]),
])
def test_file_base_keeps_word_sequence(case, names):
    """Reformatting a Block name never changes its words."""
    naming = NamingOptions(blockCase=case)
    for name in names:
        assert is_block_class(name, naming)
        expected = [word.lower() for word in split_words(name)]
        for target in ("kebab", "snake", "camel", "pascal"):
            assert [word.lower() for word in split_words(format_file_base(name, target))] == expected
