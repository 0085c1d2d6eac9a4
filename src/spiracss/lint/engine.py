# src/spiracss/lint/engine.py
import logging
from typing import Any, List, Optional

from spiracss.dom.builder import ComponentTreeBuilder
from spiracss.dom.core import ComponentStructure
from spiracss.dom.document import MarkupDocument, has_class_attribute
from spiracss.dom.root_scan import find_unbalanced_tags
from spiracss.model import HtmlLintIssue
from spiracss.naming.options import NamingOptions
from .core import NodeContext
from .registry import LintRegistry

logger = logging.getLogger(__name__)

# Codes raised by the document-level checks rather than by a node rule.
DOCUMENT_CODES = ["INVALID_BASE_CLASS", "MULTIPLE_ROOT_ELEMENTS", "UNBALANCED_HTML"]


def _document_issue(code: str, message: str) -> HtmlLintIssue:
    return HtmlLintIssue(code=code, message=message, base_class="", path=[])


class HtmlStructureLinter:
    """
    Lint engine for SpiraCSS class structure in markup.

    It builds the component tree for each root and applies every registered
    rule to every node. Document-level checks (tag balance, root selection)
    run first. Markup problems never raise; they are all returned as issues.
    """

    def __init__(
            self,
            naming: Optional[Any] = None,
            selector_policy: Optional[Any] = None,
            external: Optional[Any] = None
    ):
        """
        Raises:
            SelectorPolicyError: if `selector_policy` is malformed.
        """
        LintRegistry.discover()
        self.rules = LintRegistry.get_all_rules()
        self.builder = ComponentTreeBuilder(naming, selector_policy, external)

    @staticmethod
    def possible_codes() -> List[str]:
        LintRegistry.discover()
        return sorted(set(LintRegistry.get_all_possible_codes()) | set(DOCUMENT_CODES))

    def run(self, html: str, is_root_mode: bool) -> List[HtmlLintIssue]:
        """
        Lints one markup fragment.

        Args:
            html (str): Raw markup; template syntax is sanitized first.
            is_root_mode (bool): True to treat the markup as one component root,
                False (selection mode) to lint every top-level classed element.

        Returns:
            List[HtmlLintIssue]: All issues found in a single pass.
        """
        doc = MarkupDocument(html, is_root_mode)
        issues: List[HtmlLintIssue] = []

        # --- Document Level Checks ---
        unbalanced = find_unbalanced_tags(doc.sanitized)
        if unbalanced:
            issues.append(_document_issue("UNBALANCED_HTML", unbalanced.format_message()))

        if is_root_mode:
            if doc.has_ambiguous_root():
                issues.append(_document_issue(
                    "MULTIPLE_ROOT_ELEMENTS",
                    "Multiple root elements found. Root mode expects a single root element."
                ))
            node = doc.resolve_root_node()
            if node is None:
                issues.append(_document_issue("INVALID_BASE_CLASS", "No element found."))
                return issues
            if not has_class_attribute(node):
                issues.append(_document_issue("INVALID_BASE_CLASS", "Root element does not have a class attribute."))
                return issues
            roots = [node]
        else:
            roots = doc.selection_roots()
            if not roots:
                issues.append(_document_issue("INVALID_BASE_CLASS", "No element with class attribute found."))
                return issues

        # --- Tree Walk ---
        for root in roots:
            tree = self.builder.build(root)
            if tree is None:
                continue
            self._traverse(tree, None, None, [], True, is_root_mode, issues)

        logger.debug(f"HTML lint finished with {len(issues)} issue(s).")
        return issues

    def _traverse(
            self,
            node: ComponentStructure,
            parent: Optional[ComponentStructure],
            ancestor_block: Optional[ComponentStructure],
            path_stack: List[str],
            is_root_node: bool,
            is_root_mode: bool,
            issues: List[HtmlLintIssue]
    ) -> None:
        path = [*path_stack, node.base_class]
        ctx = NodeContext(
            node=node,
            parent=parent,
            ancestor_block=ancestor_block,
            path=path,
            is_root_node=is_root_node,
            is_root_mode=is_root_mode,
            naming=self.builder.naming,
            policy=self.builder.policy,
            external=self.builder.external,
        )

        for rule in self.rules:
            for code, message in rule(ctx):
                issues.append(HtmlLintIssue(code=code, message=message, base_class=node.base_class, path=path))

        next_ancestor = node if ctx.effective_kind == "block" else ancestor_block
        for child in [*node.nested_children, *node.independent_children]:
            self._traverse(child, node, next_ancestor, path, False, is_root_mode, issues)


def lint_html_structure(
        html: str,
        is_root_mode: bool,
        naming: Optional[NamingOptions] = None,
        selector_policy: Optional[Any] = None,
        external: Optional[Any] = None
) -> List[HtmlLintIssue]:
    """
    Lints markup against the SpiraCSS class-structure rules.

    Raises only for malformed configuration (SelectorPolicyError); markup
    problems are always returned as issues.
    """
    return HtmlStructureLinter(naming, selector_policy, external).run(html, is_root_mode)
