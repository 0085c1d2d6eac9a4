# src/spiracss/format/placeholders.py
import logging
import re
from typing import Any, List, Literal, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from spiracss.naming.classifier import classify_base_class
from spiracss.naming.options import NamingOptions

logger = logging.getLogger(__name__)

ClassAttribute = Literal["class", "className"]

MAX_DEPTH = 256
WRAPPER_TAG = "spiracss-internal-wrapper"
INTERNAL_CLASS_ATTR = "data-spiracss-classname"

# --- Template detection ---
_TEMPLATE_PATTERNS = [
    re.compile(r"<%[\s\S]*?%>"),        # EJS
    re.compile(r"\{\{[\s\S]*?\}\}"),    # Nunjucks variable
    re.compile(r"\{%[\s\S]*?%\}"),      # Nunjucks tag
    re.compile(r"\{#[\s\S]*?#\}"),      # Nunjucks comment
    re.compile(r"^\s*---[\s\S]*?---"),  # Astro frontmatter
]

# --- Class attribute spellings (template literal / braced string / plain string) ---
_ATTR_NAME = {"class": r"(?<![\w-])class", "className": r"(?<![\w-])className"}
_PLACEHOLDER_RE = re.compile(r"\$\{[\s\S]*?\}")


def _binding_patterns(attr: str) -> List[Tuple[re.Pattern, bool]]:
    """(pattern, is_template_literal) pairs in replacement order."""
    name = _ATTR_NAME[attr]
    return [
        (re.compile(name + r"\s*=\s*\{\s*`([^`]*)`\s*\}"), True),
        (re.compile(name + r'\s*=\s*\{\s*"([^"]*)"\s*\}'), False),
        (re.compile(name + r"\s*=\s*\{\s*'([^']*)'\s*\}"), False),
        (re.compile(name + r'\s*=\s*"([^"]*)"'), False),
        (re.compile(name + r"\s*=\s*'([^']*)'"), False),
    ]


_CLASSNAME_PATTERNS = _binding_patterns("className")
_CLASS_PATTERNS = _binding_patterns("class")


class PlaceholderResult(BaseModel):
    html: str
    has_template_syntax: bool = False
    change_count: int = 0


def _has_dynamic_binding(html: str, attr: str) -> bool:
    """True when a `{...}` class binding is anything other than a string/template literal."""
    cleaned = html
    for pattern, _ in _binding_patterns(attr)[:3]:
        cleaned = pattern.sub("", cleaned)
    return re.search(_ATTR_NAME[attr] + r"\s*=\s*\{", cleaned) is not None


def contains_template_syntax(html: str) -> bool:
    """
    Detects EJS, Nunjucks, Astro frontmatter and dynamic JSX class bindings.

    Formatting such sources through an HTML parser would destroy the template,
    so callers skip them.
    """
    if any(pattern.search(html) for pattern in _TEMPLATE_PATTERNS):
        return True
    return _has_dynamic_binding(html, "className") or _has_dynamic_binding(html, "class")


def _drop_placeholders(value: str) -> str:
    return re.sub(r"\s{2,}", " ", _PLACEHOLDER_RE.sub("", value)).strip()


def normalize_class_attributes(html: str, class_attribute: ClassAttribute) -> Tuple[str, bool]:
    """
    Rewrites every class/className spelling to one parseable attribute.

    `className` always becomes the internal attribute; `class` does too when the
    output attribute is className. Returns (html, whether the output attribute
    spelling changes anywhere).
    """
    class_target = INTERNAL_CLASS_ATTR if class_attribute == "className" else "class"
    changed = False

    def rewrite(patterns, target: str, counts_as_change: bool, text: str) -> str:
        nonlocal changed
        for pattern, is_template in patterns:
            def replace(match: re.Match) -> str:
                nonlocal changed
                if counts_as_change:
                    changed = True
                value = _drop_placeholders(match.group(1)) if is_template else match.group(1)
                return f'{target}="{value}"'
            text = pattern.sub(replace, text)
        return text

    out = rewrite(_CLASSNAME_PATTERNS, INTERNAL_CLASS_ATTR, class_attribute == "class", html)
    out = rewrite(_CLASS_PATTERNS, class_target, class_attribute == "className", out)
    return out, changed


def block_placeholder(naming: NamingOptions) -> str:
    return {
        "snake": "block_box",
        "camel": "blockBox",
        "pascal": "BlockBox",
    }.get(naming.block_case, "block-box")


def element_placeholder(naming: NamingOptions) -> str:
    return "Element" if naming.element_case == "pascal" else "element"


def element_to_block(element_name: str, naming: NamingOptions) -> str:
    """Turns an Element name into a Block name valid for the configured blockCase."""
    if naming.block_case == "snake":
        return f"{element_name.lower()}_box"
    if naming.block_case == "camel":
        return f"{element_name[:1].lower()}{element_name[1:]}Box"
    if naming.block_case == "pascal":
        return f"{element_name[:1].upper()}{element_name[1:]}Box"
    return f"{element_name.lower()}-box"


def ensure_placeholder_first(classes: List[str], placeholder: str) -> bool:
    """Moves (or inserts) `placeholder` to the front; returns False if already first."""
    if classes and classes[0] == placeholder:
        return False
    if placeholder in classes:
        classes.remove(placeholder)
    classes.insert(0, placeholder)
    return True


class PlaceholderFormatter:
    """
    Adds placeholder classes so static markup follows the Block > Element shape.

    Roots that are not Blocks get the Block placeholder first. Below that,
    Elements that have children become `<name>-box` Blocks, and unclassed or
    invalid elements get the Block or Element placeholder depending on whether
    they have children.
    """

    def __init__(self, naming: Optional[Any] = None, class_attribute: ClassAttribute = "class"):
        self.naming = NamingOptions.from_config(naming)
        self.class_attribute: ClassAttribute = "className" if class_attribute == "className" else "class"
        self.change_count = 0

    def _class_attr(self, tag: Tag) -> Tuple[str, str]:
        for name in (INTERNAL_CLASS_ATTR, "class"):
            value = tag.get(name)
            if value is not None:
                return name, value if isinstance(value, str) else " ".join(value)
        if self.class_attribute == "className":
            return INTERNAL_CLASS_ATTR, ""
        return "class", ""

    @staticmethod
    def _has_child_elements(tag: Tag) -> bool:
        return any(isinstance(child, Tag) for child in tag.children)

    def _set_first(self, tag: Tag, attr: str, classes: List[str], placeholder: str) -> None:
        if ensure_placeholder_first(classes, placeholder):
            tag[attr] = " ".join(classes)
            self.change_count += 1

    def process_root(self, tag: Tag) -> None:
        attr, value = self._class_attr(tag)
        classes = value.split()
        base = classes[0] if classes else ""
        kind = classify_base_class(base, self.naming) if base else "invalid"
        if kind != "block":
            self._set_first(tag, attr, classes, block_placeholder(self.naming))
        self.process_descendants(tag, 1)

    def process_descendants(self, parent: Tag, depth: int) -> None:
        if depth >= MAX_DEPTH:
            return

        for child in parent.children:
            if not isinstance(child, Tag):
                continue
            attr, value = self._class_attr(child)
            classes = value.split()
            base = classes[0] if classes else ""
            kind = classify_base_class(base, self.naming) if base else "invalid"
            has_children = self._has_child_elements(child)

            if kind == "block":
                self.process_descendants(child, depth + 1)
            elif kind == "element":
                # Leaf Elements stay as they are.
                if has_children:
                    classes[0] = element_to_block(base, self.naming)
                    child[attr] = " ".join(classes)
                    self.change_count += 1
                    self.process_descendants(child, depth + 1)
            elif has_children:
                self._set_first(child, attr, classes, block_placeholder(self.naming))
                self.process_descendants(child, depth + 1)
            else:
                self._set_first(child, attr, classes, element_placeholder(self.naming))

    def run(self, html: str) -> PlaceholderResult:
        if contains_template_syntax(html):
            return PlaceholderResult(html=html, has_template_syntax=True)

        normalized, attribute_changed = normalize_class_attributes(html, self.class_attribute)
        soup = BeautifulSoup(
            f"<{WRAPPER_TAG}>{normalized}</{WRAPPER_TAG}>", "html.parser", multi_valued_attributes=None
        )
        wrapper = soup.find(WRAPPER_TAG)
        roots = [child for child in wrapper.children if isinstance(child, Tag)] if wrapper else []
        if not roots:
            return PlaceholderResult(html=html)

        self.change_count = 0
        for root in roots:
            self.process_root(root)

        # Unchanged input is returned verbatim to avoid serializer diffs.
        if self.change_count == 0 and not attribute_changed:
            return PlaceholderResult(html=html)

        output_attr = "className" if self.class_attribute == "className" else "class"
        updated = wrapper.decode_contents().replace(INTERNAL_CLASS_ATTR, output_attr)
        change_count = self.change_count + (1 if attribute_changed else 0)
        logger.debug(f"Inserted placeholders: {change_count} change(s).")
        return PlaceholderResult(html=updated, change_count=change_count)


def insert_placeholders_with_info(
        html: str,
        naming: Optional[Any] = None,
        class_attribute: ClassAttribute = "class"
) -> PlaceholderResult:
    """
    Inserts placeholder classes and reports what happened.

    Template sources are returned untouched with `has_template_syntax=True`.
    """
    return PlaceholderFormatter(naming, class_attribute).run(html)


def insert_placeholders(html: str, naming: Optional[Any] = None, class_attribute: ClassAttribute = "class") -> str:
    return insert_placeholders_with_info(html, naming, class_attribute).html
