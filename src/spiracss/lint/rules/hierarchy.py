# src/spiracss/lint/rules/hierarchy.py
from typing import List

from spiracss.naming.classifier import classify_with_external
from ..core import LintResult, NodeContext, RuleSet, lint_spec


@lint_spec(codes=["ROOT_NOT_BLOCK"])
def check_root_is_block(ctx: NodeContext) -> List[LintResult]:
    """Rule: In root mode the component root must be a Block."""
    if ctx.is_external_base or not (ctx.is_root_mode and ctx.is_root_node):
        return []
    if ctx.base_kind == "block":
        return []
    return [("ROOT_NOT_BLOCK", f'Root element base class "{ctx.base}" must be a Block.')]


@lint_spec(codes=["ELEMENT_WITHOUT_BLOCK_ANCESTOR"])
def check_element_has_block(ctx: NodeContext) -> List[LintResult]:
    """Rule: An Element only makes sense somewhere inside a Block."""
    if ctx.is_external_base or ctx.base_kind != "element" or ctx.ancestor_block is not None:
        return []
    return [("ELEMENT_WITHOUT_BLOCK_ANCESTOR", f'Element "{ctx.base}" does not have any Block ancestor.')]


@lint_spec(codes=["ELEMENT_PARENT_OF_BLOCK"])
def check_block_parent(ctx: NodeContext) -> List[LintResult]:
    """Rule: A Block may not sit directly under an Element."""
    if ctx.is_external_base or ctx.base_kind != "block" or ctx.parent is None:
        return []
    parent_kind = classify_with_external(ctx.parent.base_class, ctx.naming, ctx.external)
    if parent_kind != "element":
        return []
    return [(
        "ELEMENT_PARENT_OF_BLOCK",
        f'Block "{ctx.base}" cannot be nested directly under Element "{ctx.parent.base_class}".'
    )]


# --- RULE SET DEFINITION ---

DEFINITION = RuleSet(
    name="hierarchy",
    order=40,
    rules=[check_root_is_block, check_element_has_block, check_block_parent]
)
