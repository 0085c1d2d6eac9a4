# src/spiracss/dom/root_scan.py
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from .core import unique_strings
from .sanitizer import CDATA_RE, SCRIPT_STYLE_RE

HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
# Only attribute values are blanked; quotes in text content are left alone.
QUOTED_VALUE_RE = re.compile(r"""=\s*(?:"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')""")
TEXT_CONTAINER_RE = re.compile(
    r"<\s*(template|textarea|noscript|xmp|listing|foreignObject)\b[^>]*>[\s\S]*?<\/\s*\1\s*>",
    re.IGNORECASE,
)
TAG_RE = re.compile(r"<\/?([A-Za-z][\w:-]*)(?:\s[^<>]*?)?>")

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img",
    "input", "link", "meta", "param", "source", "track", "wbr",
})

# Top-level tags that never count as a component root.
ROOT_IGNORED_TAGS = frozenset({
    "template", "textarea", "script", "style", "head", "noscript", "xmp", "listing",
})


class UnbalancedTags(BaseModel):
    missing: List[str] = Field(default_factory=list)
    unexpected: List[str] = Field(default_factory=list)

    def format_message(self) -> str:
        parts = []
        if self.missing:
            parts.append(f"Missing closing tags: {', '.join(self.missing)}")
        if self.unexpected:
            parts.append(f"Unexpected closing tags: {', '.join(self.unexpected)}")
        if not parts:
            return "HTML tags are not balanced."
        return f"HTML tags are not balanced. {' / '.join(parts)}"


def strip_for_root_scan(html: str) -> str:
    """
    Removes everything that can contain tag-like text without being structure:
    comments, CDATA, script/style bodies, quoted attribute values and opaque
    text containers such as <template> or <textarea>.
    """
    cleaned = HTML_COMMENT_RE.sub("", html)
    cleaned = CDATA_RE.sub("", cleaned)
    cleaned = SCRIPT_STYLE_RE.sub("", cleaned)
    cleaned = QUOTED_VALUE_RE.sub('=""', cleaned)
    return TEXT_CONTAINER_RE.sub("", cleaned)


def detect_explicit_root(html: str) -> Optional[str]:
    """
    Returns 'html' or 'body' when that tag opens at depth 0, else None.

    Only tag depth is tracked, so an <html> mentioned inside an attribute,
    a comment or a nested element is not mistaken for the document root.
    """
    depth = 0
    for match in TAG_RE.finditer(strip_for_root_scan(html)):
        full = match.group(0)
        tag = match.group(1).lower()

        if full.startswith("</"):
            if depth > 0:
                depth -= 1
            continue

        if full.endswith("/>") or tag in VOID_TAGS:
            continue

        if depth == 0 and tag in ("html", "body"):
            return tag

        depth += 1

    return None


def find_unbalanced_tags(html: str) -> Optional[UnbalancedTags]:
    """
    Stack-based tag balance check.

    Void and self-closing tags are skipped. A closing tag that matches an outer
    open tag reports every tag opened after it as missing. Stray </html>,
    </body> and </head> on an empty stack are tolerated.

    Returns:
        UnbalancedTags with de-duplicated tag names, or None when balanced.
    """
    stack: List[str] = []
    missing: List[str] = []
    unexpected: List[str] = []

    for match in TAG_RE.finditer(strip_for_root_scan(html)):
        full = match.group(0)
        tag = match.group(1).lower()

        if not full.startswith("</"):
            if full.endswith("/>") or tag in VOID_TAGS:
                continue
            stack.append(tag)
            continue

        if not stack:
            if tag not in ("html", "body", "head"):
                unexpected.append(tag)
            continue

        if stack[-1] == tag:
            stack.pop()
            continue

        if tag not in stack:
            unexpected.append(tag)
            continue

        idx = len(stack) - 1 - stack[::-1].index(tag)
        missing.extend(reversed(stack[idx + 1:]))
        del stack[idx:]

    missing.extend(reversed(stack))

    result = UnbalancedTags(missing=unique_strings(missing), unexpected=unique_strings(unexpected))
    if not result.missing and not result.unexpected:
        return None
    return result


def format_unbalanced_message(result: UnbalancedTags) -> str:
    return result.format_message()
