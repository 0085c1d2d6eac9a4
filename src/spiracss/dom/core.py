# src/spiracss/dom/core.py
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field


class AttributeSelector(BaseModel):
    """
    A reserved variant/state attribute found on a node, e.g. data-variant="primary".

    Boolean attributes (`<div data-state>`) carry an empty value.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    value: str = ""

    @property
    def identity(self) -> str:
        return f"{self.key}={self.value}"

    def to_selector(self) -> str:
        """Renders `[key="value"]`, or `[key]` for an empty value."""
        if self.value:
            return f'[{self.key}="{self.value}"]'
        return f"[{self.key}]"


class ComponentStructure(BaseModel):
    """
    One classed markup node in the logical Block/Element tree.

    Instances are immutable. Merging duplicates always builds a new node, so
    `ordered_children` refers to the very same objects held by
    `nested_children` (Elements) and `independent_children` (Blocks).
    """
    model_config = ConfigDict(frozen=True)

    base_class: str
    is_independent: bool = False
    modifiers: List[str] = Field(default_factory=list)
    variant_attributes: List[AttributeSelector] = Field(default_factory=list)
    state_attributes: List[AttributeSelector] = Field(default_factory=list)
    nested_children: List["ComponentStructure"] = Field(default_factory=list)
    independent_children: List["ComponentStructure"] = Field(default_factory=list)
    ordered_children: List["ComponentStructure"] = Field(default_factory=list)
    element_tag: str = ""
    is_root: bool = False
    via_deep: bool = False

    @property
    def all_classes(self) -> List[str]:
        return [self.base_class, *self.modifiers]

    def depth(self) -> int:
        """Number of levels in the deepest chain starting at this node."""
        if not self.ordered_children:
            return 1
        return 1 + max(child.depth() for child in self.ordered_children)


ComponentStructure.model_rebuild()


def dedup_attribute_selectors(selectors: Iterable[AttributeSelector]) -> List[AttributeSelector]:
    """Removes exact key=value duplicates, keeping first-seen order."""
    seen: Dict[str, AttributeSelector] = {}
    for selector in selectors:
        seen.setdefault(selector.identity, selector)
    return list(seen.values())


def unique_strings(values: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)
