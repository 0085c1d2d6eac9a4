# src/spiracss/dom/document.py
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from .root_scan import ROOT_IGNORED_TAGS, detect_explicit_root
from .sanitizer import sanitize_html

logger = logging.getLogger(__name__)

SELECTION_WRAPPER_TAG = "wrapper"


def has_class_attribute(tag: Tag) -> bool:
    value = tag.get("class")
    return isinstance(value, str) and value.strip() != ""


class MarkupDocument:
    """
    Sanitized, parsed markup plus the root-selection rules shared by lint and generation.

    Root mode treats the input as one component (or a full page with <html>/<body>);
    selection mode wraps the input so every top-level classed element becomes a root.
    """

    def __init__(self, raw_html: str, is_root_mode: bool):
        self.is_root_mode = is_root_mode
        raw = raw_html if is_root_mode else f"<{SELECTION_WRAPPER_TAG}>{raw_html}</{SELECTION_WRAPPER_TAG}>"
        self.sanitized = sanitize_html(raw)
        self.explicit_root = detect_explicit_root(self.sanitized)
        try:
            # Keep `class` as one string so token order survives parsing.
            self.soup = BeautifulSoup(self.sanitized, "html.parser", multi_valued_attributes=None)
        except ParserRejectedMarkup as e:
            logger.warning(f"Markup rejected by the HTML parser, treating it as empty: {e}")
            self.soup = BeautifulSoup("", "html.parser")

    def root_candidates(self) -> List[Tag]:
        """Top-level classed elements, ignoring opaque containers like <template>."""
        return [
            child for child in self.soup.children
            if isinstance(child, Tag) and child.name not in ROOT_IGNORED_TAGS and has_class_attribute(child)
        ]

    def has_ambiguous_root(self) -> bool:
        """True when root mode has no <html>/<body> anchor and several top-level roots."""
        if self.explicit_root:
            return False
        return len(self.root_candidates()) > 1

    def resolve_root_node(self) -> Optional[Tag]:
        """The explicit <html>/<body> element, else the first element in document order."""
        if self.explicit_root:
            node = self.soup.find(self.explicit_root)
            if isinstance(node, Tag):
                return node
        node = self.soup.find(True)
        return node if isinstance(node, Tag) else None

    def selection_roots(self) -> List[Tag]:
        """Classed direct children of the selection wrapper."""
        wrapper = self.soup.find(SELECTION_WRAPPER_TAG)
        if not isinstance(wrapper, Tag):
            logger.debug("Selection wrapper not found after sanitizing.")
            return []
        return [
            child for child in wrapper.children
            if isinstance(child, Tag) and has_class_attribute(child)
        ]
