# src/spiracss/scss/generator.py
import logging
from typing import Any, Dict, List, Optional

from bs4 import Tag

from spiracss.dom.builder import ComponentTreeBuilder, dedup
from spiracss.dom.core import ComponentStructure
from spiracss.dom.document import MarkupDocument, has_class_attribute
from spiracss.model import GeneratedFile, GenerationError, GeneratorOptions, RootBlockSummary
from spiracss.naming.file_case import format_file_base
from .writer import ScssWriter

logger = logging.getLogger(__name__)

ROOT_PAGE_ENTRY_HINT = "index.scss"
SELECTION_PAGE_ENTRY_HINT = "page-entry.scss"


def _resolve_options(options: Optional[Any]) -> GeneratorOptions:
    if isinstance(options, GeneratorOptions):
        return options
    return GeneratorOptions.model_validate(options or {})


class ScssGenerator:
    """
    Generates SCSS scaffolding files from markup.

    One file per Block: the root (page entry) file, one file per descendant
    Block under `child_scss_dir`, and an aggregating `index.scss` there.
    """

    def __init__(self, options: Optional[Any] = None):
        """
        Raises:
            SelectorPolicyError: if the options carry a malformed selector policy.
        """
        self.options = _resolve_options(options)
        self.builder = ComponentTreeBuilder(
            self.options.naming, self.options.selector_policy, self.options.external
        )
        self.writer = ScssWriter(self.options, self.builder.policy)

    def _select_roots(self, doc: MarkupDocument) -> List[Tag]:
        if not doc.is_root_mode:
            roots = doc.selection_roots()
            if not roots:
                raise GenerationError("No elements with a class attribute found.")
            return roots

        if doc.has_ambiguous_root():
            raise GenerationError("Multiple root elements found. Root mode expects a single root element.")
        node = doc.resolve_root_node()
        if node is None:
            raise GenerationError("No root element found.")
        if not has_class_attribute(node):
            raise GenerationError("Root element does not have a class attribute.")
        return [node]

    def _root_trees(self, roots: List[Tag], is_root_mode: bool) -> List[ComponentStructure]:
        trees: List[ComponentStructure] = []
        for root in roots:
            tree = self.builder.build(root)
            if tree is None or not tree.is_independent:
                logger.debug("Skipping non-Block root element <%s>.", root.name)
                continue
            trees.append(tree.model_copy(update={"is_root": is_root_mode}))
        return trees if is_root_mode else dedup(trees)

    def generate(self, html: str, is_root_mode: bool) -> List[GeneratedFile]:
        """
        Generates the SCSS files for one markup fragment.

        Args:
            html (str): Raw markup.
            is_root_mode (bool): True for a single component root, False to
                generate every top-level classed Block (selection mode).

        Returns:
            List[GeneratedFile]: Files with paths relative to the document directory.

        Raises:
            GenerationError: if the root cannot be determined unambiguously or has no class.
        """
        doc = MarkupDocument(html, is_root_mode)
        roots = self._select_roots(doc)

        child_dir = self.options.child_scss_dir
        results: List[GeneratedFile] = []
        uses: Dict[str, None] = {}

        for tree in self._root_trees(roots, is_root_mode):
            root_file_base = format_file_base(tree.base_class, self.options.root_file_case)
            root_path = f"{root_file_base}.scss" if is_root_mode else f"{child_dir}/{root_file_base}.scss"
            hint = ROOT_PAGE_ENTRY_HINT if is_root_mode else SELECTION_PAGE_ENTRY_HINT
            results.append(GeneratedFile(path=root_path, content=self.writer.file_content(tree, None, hint)))

            if not is_root_mode:
                uses.setdefault(f'@use "{root_file_base}";', None)
            for file_base in self._gather_independent(tree):
                uses.setdefault(f'@use "{file_base}";', None)

            self._emit_children(tree, root_file_base, results)

        if uses:
            results.append(GeneratedFile(path=f"{child_dir}/index.scss", content="\n".join(uses) + "\n"))

        logger.debug(f"Generated {len(results)} SCSS file(s).")
        return results

    def _gather_independent(self, root: ComponentStructure) -> List[str]:
        """File bases of every descendant Block, for the index."""
        out: List[str] = []
        stack = list(root.independent_children)
        while stack:
            node = stack.pop()
            out.append(format_file_base(node.base_class, self.options.child_file_case))
            stack.extend(node.independent_children)
        return out

    def _emit_children(self, parent: ComponentStructure, root_file_base: str, results: List[GeneratedFile]) -> None:
        for child in parent.independent_children:
            child_file_base = format_file_base(child.base_class, self.options.child_file_case)
            results.append(GeneratedFile(
                path=f"{self.options.child_scss_dir}/{child_file_base}.scss",
                content=self.writer.file_content(
                    child, parent, "", root_file_base if parent.is_root else None
                ),
            ))
            self._emit_children(child, root_file_base, results)

    def summarize(self, html: str, is_root_mode: bool) -> List[RootBlockSummary]:
        """Counts top-level Block roots by base class; never raises for markup."""
        doc = MarkupDocument(html, is_root_mode)
        if is_root_mode:
            node = doc.resolve_root_node()
            if node is None or not has_class_attribute(node):
                return []
            roots = [node]
        else:
            roots = doc.selection_roots()

        counts: Dict[str, int] = {}
        for root in roots:
            tree = self.builder.build(root)
            if tree is None or not tree.is_independent:
                continue
            counts[tree.base_class] = counts.get(tree.base_class, 0) + 1

        return [RootBlockSummary(base_class=base, count=count) for base, count in counts.items()]


def generate_from_html(
        html: str,
        doc_dir: str,
        is_root_mode: bool,
        options: Optional[Any] = None
) -> List[GeneratedFile]:
    """
    Generates SCSS files from markup.

    `doc_dir` is where the caller will write the files; returned paths are
    relative to it and the generator itself does no I/O.
    """
    logger.debug(f"Generating SCSS for {doc_dir} ({'root' if is_root_mode else 'selection'} mode).")
    return ScssGenerator(options).generate(html, is_root_mode)


def summarize_root_blocks(html: str, is_root_mode: bool, options: Optional[Any] = None) -> List[RootBlockSummary]:
    return ScssGenerator(options).summarize(html, is_root_mode)
