# src/spiracss/lint/rules/modifiers.py
from typing import List

from spiracss.naming.classifier import is_block_class, is_element_base, is_external_class
from ..core import LintResult, NodeContext, RuleSet, lint_spec


@lint_spec(codes=["DISALLOWED_MODIFIER"])
def check_modifier_allowed(ctx: NodeContext) -> List[LintResult]:
    """Rule: With both variant and state in data mode, modifier classes are not used."""
    both_data = ctx.policy.variant.mode == "data" and ctx.policy.state.mode == "data"
    if not ctx.is_checked_base or not both_data:
        return []
    return [
        (
            "DISALLOWED_MODIFIER",
            f'Modifier "{modifier}" is not allowed when selectorPolicy variant/state are both "data".'
        )
        for modifier in ctx.modifier_tokens
    ]


@lint_spec(codes=["MODIFIER_WITHOUT_BASE"])
def check_modifier_has_base(ctx: NodeContext) -> List[LintResult]:
    """Rule: A modifier needs a Block/Element base on the same element."""
    if ctx.is_external_base or ctx.has_base:
        return []
    if not (ctx.modifier_tokens or ctx.base_is_modifier):
        return []
    classes = " ".join(ctx.full_classes)
    return [(
        "MODIFIER_WITHOUT_BASE",
        f'Modifier class used without Block/Element base (classes: "{classes}").'
    )]


@lint_spec(codes=["UTILITY_WITHOUT_BASE"])
def check_utility_has_base(ctx: NodeContext) -> List[LintResult]:
    """Rule: A u- utility class needs a Block/Element base on the same element."""
    if ctx.is_external_base or ctx.has_base:
        return []
    if not any(token.startswith("u-") for token in ctx.full_classes):
        return []
    classes = " ".join(ctx.full_classes)
    return [(
        "UTILITY_WITHOUT_BASE",
        f'Utility class used without Block/Element base (classes: "{classes}").'
    )]


@lint_spec(codes=["MULTIPLE_BASE_CLASSES"])
def check_single_base(ctx: NodeContext) -> List[LintResult]:
    """Rule: Only one Block/Element-shaped class per element (first offender reported)."""
    if not ctx.is_checked_base:
        return []
    for other in ctx.node.modifiers:
        if is_external_class(other, ctx.external):
            continue
        if is_block_class(other, ctx.naming) or is_element_base(other, ctx.naming):
            return [(
                "MULTIPLE_BASE_CLASSES",
                f'Multiple Block/Element-like classes on the same element ("{ctx.base}", "{other}").'
            )]
    return []


# --- RULE SET DEFINITION ---

DEFINITION = RuleSet(
    name="modifiers",
    order=30,
    rules=[
        check_modifier_allowed,
        check_modifier_has_base,
        check_utility_has_base,
        check_single_base,
    ]
)
