# src/spiracss/scss/writer.py
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from spiracss.dom.core import ComponentStructure, unique_strings
from spiracss.model import GeneratorOptions
from spiracss.naming.classifier import filter_modifier_tokens
from spiracss.naming.file_case import format_file_base
from spiracss.selector_policy import NormalizedSelectorPolicy

INDENT = "  "

# Section markers re-parsed by the stylelint plugin; keep them byte-identical.
SHARED_MARKER = "// --shared ----------------------------------------"
INTERACTION_MARKER = "// --interaction -----------------------------------"

_INDENT_CACHE: Dict[int, str] = {}


def indent(level: int) -> str:
    if level not in _INDENT_CACHE:
        _INDENT_CACHE[level] = INDENT * level
    return _INDENT_CACHE[level]


class ElementStateEntry(BaseModel):
    """State selectors of a descendant Element, addressed by its `> .a > .b` path."""
    path: List[str]
    selectors: List[str]

    def path_selector(self) -> str:
        return " ".join(f"> .{name}" for name in self.path)


class ScssWriter:
    """
    Renders SCSS text for Block nodes of a component tree.

    Elements are inlined into their Block's rule; child Blocks only get a
    `// @rel/...` link, since they are written to their own files.
    """

    def __init__(self, options: GeneratorOptions, policy: NormalizedSelectorPolicy):
        self.options = options
        self.policy = policy
        self.naming = options.naming
        self.external = options.external
        self.layout_mixins = options.layout_mixins
        self.child_dir = options.child_scss_dir

    # --- Selector Helpers ---

    def split_class_modifiers(self, modifiers: List[str]) -> Tuple[List[str], List[str]]:
        """
        Decides whether modifier classes act as variants or as states.

        Returns:
            (variant_modifiers, state_modifiers). With both axes in class mode the
            modifiers are ambiguous and are treated as variants.
        """
        tokens = filter_modifier_tokens(modifiers, self.naming, self.external)
        if not tokens:
            return [], []

        if self.policy.state.mode == "data":
            if self.policy.variant.mode == "class":
                return tokens, []
            return [], []

        if self.policy.variant.mode == "data":
            return [], tokens

        return tokens, []

    def variant_selectors(self, node: ComponentStructure) -> List[str]:
        variant_modifiers, _ = self.split_class_modifiers(node.modifiers)
        selectors = [f"&.{modifier}" for modifier in variant_modifiers]
        if self.policy.variant.mode != "class":
            selectors.extend(f"&{attr.to_selector()}" for attr in node.variant_attributes)
        return unique_strings(selectors)

    def state_selectors(self, node: ComponentStructure) -> List[str]:
        _, state_modifiers = self.split_class_modifiers(node.modifiers)
        selectors: List[str] = []
        if self.policy.state.mode == "data":
            selectors.extend(f"&{attr.to_selector()}" for attr in node.state_attributes)
        selectors.extend(f"&.{modifier}" for modifier in state_modifiers)
        return unique_strings(selectors)

    def element_state_entries(
            self, node: ComponentStructure, path: Optional[List[str]] = None
    ) -> List[ElementStateEntry]:
        """Depth-first state selectors of descendant Elements, stopping at child Blocks."""
        entries: List[ElementStateEntry] = []
        for child in node.ordered_children:
            if child.is_independent:
                continue
            child_path = [*(path or []), child.base_class]
            selectors = self.state_selectors(child)
            if selectors:
                entries.append(ElementStateEntry(path=child_path, selectors=selectors))
            entries.extend(self.element_state_entries(child, child_path))
        return entries

    # --- Body ---

    def block_body(self, node: ComponentStructure, level: int, is_root: bool = False) -> str:
        """
        Renders the inside of a `.base { ... }` rule at the given indent level.

        Independent (Block) nodes end with the shared and interaction sections;
        Elements are rendered recursively in place.
        """
        ind = indent(level)
        inner = indent(level + 1)
        buf: List[str] = []

        if is_root and any(child.is_independent for child in node.ordered_children):
            buf.extend([f'{ind}@include meta.load-css("{self.child_dir}");', ""])

        if not self.layout_mixins:
            kind = "block" if node.is_independent else "element"
            buf.extend([f"{ind}// {kind} base styles", ""])
        else:
            for mixin in self.layout_mixins:
                buf.extend([f"{ind}{mixin} {{", f"{inner}// layout mixin", f"{ind}}}", ""])

        for selector in self.variant_selectors(node):
            if not self.layout_mixins:
                buf.extend([f"{ind}{selector} {{", f"{inner}// variant styles", f"{ind}}}", ""])
                continue
            for mixin in self.layout_mixins:
                buf.extend([
                    f"{ind}{selector} {{",
                    f"{inner}{mixin} {{",
                    f"{indent(level + 2)}// variant styles",
                    f"{inner}}}",
                    f"{ind}}}",
                    "",
                ])

        for child in node.ordered_children:
            if child.is_independent:
                buf.extend(self._child_block_link(node, child, level))
            else:
                buf.extend([
                    f"{ind}> .{child.base_class} {{",
                    self.block_body(child, level + 1),
                    f"{ind}}}",
                    "",
                ])

        if node.is_independent:
            buf.extend(self._sections(node, level))

        return "\n".join(buf).rstrip()

    def _child_block_link(self, node: ComponentStructure, child: ComponentStructure, level: int) -> List[str]:
        # Block > Block is always a direct child in SpiraCSS.
        ind = indent(level)
        inner = indent(level + 1)
        child_file_base = format_file_base(child.base_class, self.options.child_file_case)
        rel_base = f"{self.child_dir}/{child_file_base}" if node.is_root else child_file_base

        if not self.layout_mixins:
            return [
                f"{ind}> .{child.base_class} {{",
                f"{inner}// @rel/{rel_base}.scss",
                f"{inner}// child component layout",
                f"{ind}}}",
                "",
            ]

        lines: List[str] = []
        for mixin in self.layout_mixins:
            lines.extend([
                f"{ind}> .{child.base_class} {{",
                f"{inner}// @rel/{rel_base}.scss",
                f"{inner}{mixin} {{",
                f"{indent(level + 2)}// child component layout",
                f"{inner}}}",
                f"{ind}}}",
                "",
            ])
        return lines

    def _sections(self, node: ComponentStructure, level: int) -> List[str]:
        ind = indent(level)
        lines = ["", f"{ind}{SHARED_MARKER}", "", f"{ind}{INTERACTION_MARKER}"]

        state_selectors = self.state_selectors(node)
        element_entries = self.element_state_entries(node)
        if not state_selectors and not element_entries:
            lines.extend([f"{ind}// @at-root & {{", f"{ind}// }}", ""])
            return lines

        lines.append(f"{ind}@at-root & {{")
        for selector in state_selectors:
            lines.extend([
                f"{indent(level + 1)}{selector} {{",
                f"{indent(level + 2)}// state styles",
                f"{indent(level + 1)}}}",
                "",
            ])
        for entry in element_entries:
            lines.append(f"{indent(level + 1)}{entry.path_selector()} {{")
            for selector in entry.selectors:
                lines.extend([
                    f"{indent(level + 2)}{selector} {{",
                    f"{indent(level + 3)}// state styles",
                    f"{indent(level + 2)}}}",
                    "",
                ])
            lines.extend([f"{indent(level + 1)}}}", ""])
        lines.extend([f"{ind}}}", ""])
        return lines

    # --- File ---

    def file_content(
            self,
            node: ComponentStructure,
            parent: Optional[ComponentStructure],
            hint: str,
            parent_root_file_base: Optional[str] = None
    ) -> str:
        """
        Renders a complete SCSS file for one Block.

        Args:
            node: The Block to render.
            parent: The Block that links to this one (None for a page-entry root).
            hint: Page entry file name shown in a root file header.
            parent_root_file_base: File base of the root file when `parent` is the root.

        Returns:
            The file text, ending with a newline.
        """
        module = self.options.global_scss_module
        if node.is_root:
            header = (
                f'@use "{module}" as *;\n@use "sass:meta";\n\n'
                f"// {self.options.page_entry_prefix}/{hint}\n\n"
            )
        elif parent is None:
            header = f'@use "{module}" as *;\n\n// @rel/(parent-block).scss\n\n'
        else:
            if parent_root_file_base:
                rel = f"../{parent_root_file_base}"
            elif parent.is_root:
                rel = f"../{format_file_base(parent.base_class, self.options.root_file_case)}"
            else:
                rel = format_file_base(parent.base_class, self.options.child_file_case)
            header = f'@use "{module}" as *;\n\n// @rel/{rel}.scss\n\n'

        body = self.block_body(node, 1, node.is_root)
        return f"{header}.{node.base_class} {{\n{body}\n}}\n"
