# src/spiracss/dom/builder.py
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bs4 import Tag

from spiracss.naming.classifier import is_block_class, is_external_class
from spiracss.naming.options import ExternalOptions, NamingOptions
from spiracss.selector_policy import NormalizedSelectorPolicy, normalize_selector_policy
from .core import (
    AttributeSelector,
    ComponentStructure,
    dedup_attribute_selectors,
    unique_strings,
)

logger = logging.getLogger(__name__)

MAX_DEPTH = 256

# Attributes never considered as variant/state selectors.
_SKIPPED_ATTRIBUTES = ("class", "data-spiracss-classname")


def _unique_by_base(nodes: Iterable[ComponentStructure]) -> List[ComponentStructure]:
    seen: Dict[str, ComponentStructure] = {}
    for node in nodes:
        seen.setdefault(node.base_class, node)
    return list(seen.values())


def _remap(
        ordered: Iterable[ComponentStructure],
        nested: List[ComponentStructure],
        independent: List[ComponentStructure]
) -> List[ComponentStructure]:
    """Points an ordered list at the merged instances (Elements checked first)."""
    by_base: Dict[str, ComponentStructure] = {}
    for node in independent:
        by_base[node.base_class] = node
    for node in nested:
        by_base[node.base_class] = node
    return [by_base.get(node.base_class, node) for node in ordered]


def merge_components(first: ComponentStructure, second: ComponentStructure) -> ComponentStructure:
    """
    Merges two nodes that share a base class into a new node.

    Modifiers and attribute selectors are unioned without duplicates, children
    are concatenated and merged recursively, and `ordered_children` keeps
    first-seen order while pointing at the merged child instances.
    """
    if first.is_independent != second.is_independent:
        logger.warning(
            "Base class '%s' seen as both Block and Element; using the later occurrence.",
            first.base_class,
        )

    nested = dedup([*first.nested_children, *second.nested_children])
    independent = dedup([*first.independent_children, *second.independent_children])
    ordered = _unique_by_base([*first.ordered_children, *second.ordered_children])

    return ComponentStructure(
        base_class=first.base_class,
        is_independent=second.is_independent,
        modifiers=unique_strings([*first.modifiers, *second.modifiers]),
        variant_attributes=dedup_attribute_selectors([*first.variant_attributes, *second.variant_attributes]),
        state_attributes=dedup_attribute_selectors([*first.state_attributes, *second.state_attributes]),
        nested_children=nested,
        independent_children=independent,
        ordered_children=_remap(ordered, nested, independent),
        element_tag=first.element_tag,
        is_root=first.is_root,
        via_deep=first.via_deep and second.via_deep,
    )


def dedup(nodes: Iterable[ComponentStructure]) -> List[ComponentStructure]:
    """
    Merges nodes with the same base class, keeping first-seen order.

    Single occurrences are returned as-is; the builder already merged their children.
    """
    merged: Dict[str, ComponentStructure] = {}
    for node in nodes:
        existing = merged.get(node.base_class)
        merged[node.base_class] = node if existing is None else merge_components(existing, node)
    return list(merged.values())


class ComponentTreeBuilder:
    """
    Turns a parsed (sanitized) DOM subtree into a ComponentStructure tree.

    Unclassed wrapper elements are descended through so they vanish from the
    logical tree; the classed nodes found that way are flagged `via_deep`.
    """

    def __init__(
            self,
            naming: Optional[NamingOptions] = None,
            policy: Optional[Any] = None,
            external: Optional[Any] = None
    ):
        self.naming = NamingOptions.from_config(naming)
        self.policy: NormalizedSelectorPolicy = normalize_selector_policy(policy)
        self.external = ExternalOptions.from_config(external)

    def build(self, tag: Tag, depth: int = 0) -> Optional[ComponentStructure]:
        """
        Builds the node for `tag`, or returns None when it has no usable base class
        or the depth bound is reached.
        """
        if depth >= MAX_DEPTH:
            return None

        tokens = [token for token in re.split(r"\s+", (tag.get("class") or "").strip()) if token]
        if not tokens:
            return None
        base, modifiers = tokens[0], tokens[1:]

        variant_attributes, state_attributes = self.collect_attribute_selectors(tag.attrs)
        is_independent = not is_external_class(base, self.external) and is_block_class(base, self.naming)

        found: List[ComponentStructure] = []
        for child in self._child_tags(tag):
            direct = self.build(child, depth + 1)
            if direct is not None:
                found.append(direct)
            else:
                found.extend(self._collect_deep(child, depth + 1))

        merged = dedup(found)
        nested = [node for node in merged if not node.is_independent]
        independent = [node for node in merged if node.is_independent]

        return ComponentStructure(
            base_class=base,
            is_independent=is_independent,
            modifiers=modifiers,
            variant_attributes=variant_attributes,
            state_attributes=state_attributes,
            nested_children=nested,
            independent_children=independent,
            ordered_children=_remap(merged, nested, independent),
            element_tag=tag.name or "",
        )

    def _collect_deep(self, tag: Tag, depth: int) -> List[ComponentStructure]:
        """First classed descendants of an unclassed element, tagged via_deep."""
        if depth >= MAX_DEPTH:
            return []

        found: List[ComponentStructure] = []
        for child in self._child_tags(tag):
            node = self.build(child, depth + 1)
            if node is not None:
                found.append(node.model_copy(update={"via_deep": True}))
            else:
                found.extend(self._collect_deep(child, depth + 1))
        return found

    def collect_attribute_selectors(
            self, attrs: Dict[str, Any]
    ) -> Tuple[List[AttributeSelector], List[AttributeSelector]]:
        """
        Splits reserved attributes into variant and state selectors.

        Only keys named by the selector policy are kept; a key may land in both
        lists when the policy reserves it for both axes.
        """
        variant: List[AttributeSelector] = []
        state: List[AttributeSelector] = []

        for key, value in (attrs or {}).items():
            if key in _SKIPPED_ATTRIBUTES:
                continue
            selector = AttributeSelector(key=key, value=value.strip() if isinstance(value, str) else "")
            if self.policy.is_variant_key(key):
                variant.append(selector)
            if self.policy.is_state_key(key):
                state.append(selector)

        return dedup_attribute_selectors(variant), dedup_attribute_selectors(state)

    @staticmethod
    def _child_tags(tag: Tag) -> List[Tag]:
        return [child for child in tag.children if isinstance(child, Tag)]


def build_tree(
        tag: Tag,
        naming: Optional[NamingOptions] = None,
        policy: Optional[Any] = None,
        external: Optional[Any] = None,
        depth: int = 0
) -> Optional[ComponentStructure]:
    """
    Builds the component tree rooted at `tag`.

    Args:
        tag: A BeautifulSoup element from sanitized markup.
        naming: Naming options (defaults apply when None).
        policy: Raw or normalized selector policy.
        external: External-class allow-list (mapping or ExternalOptions).
        depth: Starting depth; nodes at MAX_DEPTH and beyond are dropped.

    Returns:
        The root ComponentStructure, or None when `tag` has no class.

    Raises:
        SelectorPolicyError: if `policy` is malformed.
    """
    builder = ComponentTreeBuilder(naming, policy, external)
    tree = builder.build(tag, depth)
    if tree is not None:
        logger.debug("Built component tree for '%s'.", tree.base_class)
    return tree
