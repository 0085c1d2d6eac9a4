# src/spiracss/lint/rules/base_class.py
from typing import List

from ..core import LintResult, NodeContext, RuleSet, lint_spec


@lint_spec(codes=["INVALID_BASE_CLASS"])
def check_external_base(ctx: NodeContext) -> List[LintResult]:
    """
    Rule: An allow-listed external class must not be the first class when the
    element also carries project classes.
    """
    if not (ctx.is_external_base and ctx.has_non_external_class):
        return []

    if ctx.inferred_kind:
        message = f'External class "{ctx.base}" cannot be used as the base class. Place Block/Element first.'
    else:
        message = f'External class "{ctx.base}" cannot be used as the base class. No Block/Element class found.'
    return [("INVALID_BASE_CLASS", message)]


@lint_spec(codes=["INVALID_BASE_CLASS"])
def check_invalid_base(ctx: NodeContext) -> List[LintResult]:
    """Rule: The first class must be a Block or an Element."""
    if ctx.is_external_base or ctx.base_kind != "invalid":
        return []
    return [("INVALID_BASE_CLASS", f'Invalid base class "{ctx.base}" (must be Block or Element).')]


# --- RULE SET DEFINITION ---

DEFINITION = RuleSet(
    name="base_class",
    order=10,
    rules=[check_external_base, check_invalid_base]
)
