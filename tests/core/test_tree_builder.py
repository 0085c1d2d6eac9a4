# tests/core/test_tree_builder.py
import logging

import pytest
from bs4 import BeautifulSoup

from spiracss.dom.builder import MAX_DEPTH, ComponentTreeBuilder, build_tree, dedup, merge_components
from spiracss.dom.core import AttributeSelector, ComponentStructure


def first_tag(html: str):
    return BeautifulSoup(html, "html.parser", multi_valued_attributes=None).find(True)


@pytest.fixture
def builder():
    return ComponentTreeBuilder()


def test_unclassed_element_has_no_tree(builder):
    assert builder.build(first_tag("<div><p class='title'></p></div>")) is None
    assert builder.build(first_tag('<div class="   "></div>')) is None


def test_base_modifiers_and_buckets():
    """Elements go to nested_children, Blocks to independent_children."""
    tree = build_tree(first_tag(
        '<section class="page-layout -wide">'
        '<h1 class="title"></h1><div class="hero-banner"></div><p class="lead"></p>'
        '</section>'
    ))
    assert tree.base_class == "page-layout"
    assert tree.modifiers == ["-wide"]
    assert tree.is_independent
    assert tree.element_tag == "section"
    assert [child.base_class for child in tree.nested_children] == ["title", "lead"]
    assert [child.base_class for child in tree.independent_children] == ["hero-banner"]
    assert [child.base_class for child in tree.ordered_children] == ["title", "hero-banner", "lead"]


def test_unclassed_wrappers_disappear(builder):
    tree = builder.build(first_tag(
        '<div class="hero-banner"><div><div><span class="title"></span></div></div><p class="lead"></p></div>'
    ))
    by_base = {child.base_class: child for child in tree.ordered_children}
    assert by_base["title"].via_deep is True
    assert by_base["lead"].via_deep is False


def test_duplicate_siblings_are_merged(builder):
    tree = builder.build(first_tag(
        '<div class="hero-banner">'
        '<p class="desc -a" data-variant="en"></p>'
        '<p class="desc -b" data-variant="ja"><span class="note"></span></p>'
        '<p class="desc -a" data-variant="en"><span class="note -x"></span></p>'
        '</div>'
    ))
    assert len(tree.nested_children) == 1
    desc = tree.nested_children[0]
    assert desc.modifiers == ["-a", "-b"]
    assert [attr.value for attr in desc.variant_attributes] == ["en", "ja"]
    assert len(desc.nested_children) == 1
    assert desc.nested_children[0].modifiers == ["-x"]


def test_ordered_children_point_at_merged_instances(builder):
    tree = builder.build(first_tag(
        '<div class="hero-banner"><p class="desc -a"></p><div class="media-card"></div><p class="desc -b"></p></div>'
    ))
    assert [child.base_class for child in tree.ordered_children] == ["desc", "media-card"]
    assert tree.ordered_children[0] is tree.nested_children[0]
    assert tree.ordered_children[1] is tree.independent_children[0]


def test_attribute_selectors_follow_policy():
    builder = ComponentTreeBuilder(policy={"state": {"ariaKeys": ["aria-expanded"]}})
    variant, state = builder.collect_attribute_selectors({
        "id": "main",
        "data-variant": " primary ",
        "data-state": "open",
        "aria-expanded": "true",
        "aria-hidden": "true",
        "data-state-extra": "x",
    })
    assert variant == [AttributeSelector(key="data-variant", value="primary")]
    assert [attr.identity for attr in state] == ["data-state=open", "aria-expanded=true"]


def test_boolean_attribute_has_empty_value(builder):
    tree = builder.build(first_tag('<div class="hero-banner" data-state></div>'))
    assert tree.state_attributes == [AttributeSelector(key="data-state", value="")]
    assert tree.state_attributes[0].to_selector() == "[data-state]"


def test_depth_is_bounded():
    """Chains deeper than MAX_DEPTH are cut off instead of raising."""
    levels = MAX_DEPTH + 40
    html = '<div class="title">' * levels + "</div>" * levels
    tree = build_tree(first_tag(html))
    assert tree.depth() == MAX_DEPTH


def test_merge_unions_without_duplicates():
    first = ComponentStructure(
        base_class="desc",
        modifiers=["-a"],
        variant_attributes=[AttributeSelector(key="data-variant", value="en")],
    )
    second = ComponentStructure(
        base_class="desc",
        modifiers=["-a", "-b"],
        variant_attributes=[
            AttributeSelector(key="data-variant", value="en"),
            AttributeSelector(key="data-variant", value="ja"),
        ],
    )
    merged = merge_components(first, second)
    assert merged.modifiers == ["-a", "-b"]
    assert [attr.value for attr in merged.variant_attributes] == ["en", "ja"]
    # Inputs stay untouched.
    assert first.modifiers == ["-a"]


def test_merge_follows_later_bucket_and_warns(caplog):
    element = ComponentStructure(base_class="odd", is_independent=False)
    block = ComponentStructure(base_class="odd", is_independent=True)
    with caplog.at_level(logging.WARNING, logger="spiracss.dom.builder"):
        merged = dedup([element, block])
    assert len(merged) == 1
    assert merged[0].is_independent is True
    assert "seen as both Block and Element" in caplog.text


def test_via_deep_only_when_every_occurrence_was_deep():
    deep = ComponentStructure(base_class="title", via_deep=True)
    direct = ComponentStructure(base_class="title")
    assert merge_components(deep, deep).via_deep is True
    assert merge_components(deep, direct).via_deep is False
