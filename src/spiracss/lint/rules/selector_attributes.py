# src/spiracss/lint/rules/selector_attributes.py
from typing import List

from spiracss.selector_policy import build_value_pattern
from ..core import LintResult, NodeContext, RuleSet, lint_spec


@lint_spec(codes=["DISALLOWED_VARIANT_ATTRIBUTE"])
def check_variant_attribute_allowed(ctx: NodeContext) -> List[LintResult]:
    """Rule: Variant attributes are reserved for data mode."""
    if not ctx.is_checked_base or ctx.policy.variant.mode != "class":
        return []
    return [
        (
            "DISALLOWED_VARIANT_ATTRIBUTE",
            f'Variant attribute "{attr.key}" is not allowed when selectorPolicy.variant.mode is "class".'
        )
        for attr in ctx.node.variant_attributes
    ]


@lint_spec(codes=["DISALLOWED_STATE_ATTRIBUTE"])
def check_state_attribute_allowed(ctx: NodeContext) -> List[LintResult]:
    """Rule: State attributes are reserved for data mode."""
    if not ctx.is_checked_base or ctx.policy.state.mode != "class":
        return []
    return [
        (
            "DISALLOWED_STATE_ATTRIBUTE",
            f'State attribute "{attr.key}" is not allowed when selectorPolicy.state.mode is "class".'
        )
        for attr in ctx.node.state_attributes
    ]


@lint_spec(codes=["INVALID_VARIANT_VALUE"])
def check_variant_values(ctx: NodeContext) -> List[LintResult]:
    """
    Rule: Variant values must follow the configured value naming.
    Empty (boolean) attributes are not checked.
    """
    if not ctx.is_checked_base or ctx.policy.variant.mode != "data":
        return []

    pattern = build_value_pattern(ctx.policy.variant.value_naming)
    return [
        (
            "INVALID_VARIANT_VALUE",
            f'Attribute "{attr.key}" value "{attr.value}" does not match selectorPolicy valueNaming.'
        )
        for attr in ctx.node.variant_attributes
        if attr.value and not pattern.search(attr.value)
    ]


@lint_spec(codes=["INVALID_STATE_VALUE"])
def check_state_values(ctx: NodeContext) -> List[LintResult]:
    """
    Rule: data-* state values must follow the configured value naming.
    aria-* values are defined by ARIA and therefore exempt.
    """
    if not ctx.is_checked_base or ctx.policy.state.mode != "data":
        return []

    pattern = build_value_pattern(ctx.policy.state.value_naming)
    return [
        (
            "INVALID_STATE_VALUE",
            f'Attribute "{attr.key}" value "{attr.value}" does not match selectorPolicy valueNaming.'
        )
        for attr in ctx.node.state_attributes
        if attr.key.startswith("data-") and attr.value and not pattern.search(attr.value)
    ]


# --- RULE SET DEFINITION ---

DEFINITION = RuleSet(
    name="selector_attributes",
    order=20,
    rules=[
        check_variant_attribute_allowed,
        check_state_attribute_allowed,
        check_variant_values,
        check_state_values,
    ]
)
