# src/spiracss/lint/core.py
from typing import Callable, List, Optional, Set, Tuple

from spiracss.dom.core import ComponentStructure
from spiracss.naming.classifier import (
    classify_with_external,
    filter_modifier_tokens,
    find_first_non_external_base_kind,
    is_external_class,
    modifier_matches,
)
from spiracss.naming.options import ExternalOptions, NamingOptions
from spiracss.selector_policy import NormalizedSelectorPolicy


def lint_spec(codes: List[str]):
    """
    Decorator to declare which issue codes a lint rule function can return.
    Facilitates auto-discovery by the LintRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


# Type alias for rule findings: (Code, Message)
LintResult = Tuple[str, str]


class NodeContext:
    """
    Everything a rule needs to judge one node of the component tree.

    Classification results are computed once here so that every rule sees the
    same view of the node.
    """

    def __init__(
            self,
            node: ComponentStructure,
            parent: Optional[ComponentStructure],
            ancestor_block: Optional[ComponentStructure],
            path: List[str],
            is_root_node: bool,
            is_root_mode: bool,
            naming: NamingOptions,
            policy: NormalizedSelectorPolicy,
            external: ExternalOptions
    ):
        self.node = node
        self.parent = parent
        self.ancestor_block = ancestor_block
        self.path = path
        self.is_root_node = is_root_node
        self.is_root_mode = is_root_mode
        self.naming = naming
        self.policy = policy
        self.external = external

        self.base = node.base_class
        self.full_classes = node.all_classes
        self.base_kind = classify_with_external(self.base, naming, external)
        self.is_external_base = self.base_kind == "external"
        self.has_base = self.base_kind in ("block", "element")

        # An external base hides the real kind of the node; look past it.
        self.inferred_kind = (
            find_first_non_external_base_kind(node.modifiers, naming, external)
            if self.is_external_base else None
        )
        self.effective_kind = self.inferred_kind or self.base_kind
        self.has_non_external_class = self.is_external_base and any(
            not is_external_class(token, external) for token in node.modifiers
        )

        self.modifier_tokens = filter_modifier_tokens(node.modifiers, naming, external)
        self.base_is_modifier = modifier_matches(self.base, naming) and not is_external_class(self.base, external)

    @property
    def is_checked_base(self) -> bool:
        """A real (non-external) Block or Element base."""
        return not self.is_external_base and self.has_base


LintRule = Callable[[NodeContext], List[LintResult]]


class RuleSet:
    """
    Configuration object grouping related lint rules under one name.
    """

    def __init__(
            self,
            name: str,
            rules: Optional[List[LintRule]] = None,
            order: int = 100,
            possible_codes: Optional[List[str]] = None
    ):
        self.name = name
        self.rules = rules or []
        self.order = order

        # --- Auto-Discovery of Issue Codes ---
        final_codes: Set[str] = set(possible_codes or [])

        for rule in self.rules:
            if hasattr(rule, 'defined_codes'):
                final_codes.update(rule.defined_codes)

        self.codes = sorted(final_codes)
