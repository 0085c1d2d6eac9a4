# src/spiracss/dom/sanitizer.py
import re

# --- Shared patterns (also used by the root scanner) ---
CDATA_RE = re.compile(r"<!\[CDATA\[[\s\S]*?\]\]>")
SCRIPT_STYLE_RE = re.compile(r"<\s*(script|style)\b[^>]*>[\s\S]*?<\/\s*\1\s*>", re.IGNORECASE)

# --- Class attribute folding ---
CLASS_TEMPLATE_RE = re.compile(r"class\s*=\s*\{\s*`([^`]*)`\s*\}")
CLASSNAME_TEMPLATE_RE = re.compile(r"className\s*=\s*\{\s*`([^`]*)`\s*\}")
CLASSNAME_DQ_RE = re.compile(r'className\s*=\s*"([^"]*)"')
CLASSNAME_SQ_RE = re.compile(r"className\s*=\s*'([^']*)'")
CLASSNAME_BRACE_DQ_RE = re.compile(r'className\s*=\s*\{\s*"([^"]*)"\s*\}')
CLASSNAME_BRACE_SQ_RE = re.compile(r"className\s*=\s*\{\s*'([^']*)'\s*\}")
CLASS_BRACE_DQ_RE = re.compile(r'class\s*=\s*\{\s*"([^"]*)"\s*\}')
CLASS_BRACE_SQ_RE = re.compile(r"class\s*=\s*\{\s*'([^']*)'\s*\}")
CLASSNAME_REST_RE = re.compile(r"""className\s*=\s*(?:"[^"]*"|'[^']*'|\{[^}]*\})""")

ASTRO_FRONTMATTER_RE = re.compile(r"^---[\s\S]*?---\s*")
BACKTICK_ATTR_RE = re.compile(r"=`([^`]*)`")
SELF_CLOSING_RE = re.compile(r"<([A-Z][\w.-]*)([^>]*)\/>")
CLASS_CLEAN_RE = re.compile(r'class="([^"]*)"')
TRIM_ATTR_RE = re.compile(r'=\s*"\s*([^"]*?)\s*"')

# --- Template / framework syntax removed outright, in this order ---
REMOVE_PATTERNS = [
    re.compile(r"\{\.\.\.[^}]+\}"),                       # JSX spread
    re.compile(r"<%[\s\S]*?%>"),                          # EJS
    re.compile(r"\{\{[\s\S]*?\}\}"),                      # Nunjucks variable
    re.compile(r"\{%[\s\S]*?%\}"),                        # Nunjucks tag
    re.compile(r"\{#[\s\S]*?#\}"),                        # Nunjucks comment
    re.compile(r"\{\/\*[\s\S]*?\*\/\}"),                  # JSX comment
    re.compile(r"<>\s*|<\/>"),                            # JSX fragment
    re.compile(
        r"""\s+(?:(?:on|bind|class|use|transition|in|out|animate|let|client|set):[\w-]+"""
        r"""|v-[\w-]+|[:@#][\w-]+)(?:=(?:"[^"]*"|'[^']*'))?"""
    ),                                                    # directive attributes
    re.compile(r"""\s+on[A-Z][\w-]*(?:=(?:"[^"]*"|'[^']*'))?"""),  # React events
    re.compile(r"""\s+dangerouslySetInnerHTML=(?:"[^"]*"|\{[\s\S]*?\})"""),
    re.compile(r"\$\{[\s\S]*?\}"),                        # leftover interpolation
]

MULTI_SPACE_RE = re.compile(r"\s{2,}")


def _to_class_attr(match: re.Match) -> str:
    return f'class="{match.group(1)}"'


def _clean_class_value(match: re.Match) -> str:
    tokens = [token for token in match.group(1).split() if token not in ("-", "_")]
    cleaned = " ".join(tokens)
    return f'class="{cleaned}"' if cleaned else ""


def sanitize_html(raw: str) -> str:
    """
    Reduces templated markup (JSX, Astro, Vue, Svelte, EJS, Nunjucks) to plain HTML
    with one canonical `class="..."` attribute per element.

    Never raises; unknown syntax is passed through for the parser to tolerate.
    """
    html = CLASSNAME_TEMPLATE_RE.sub(_to_class_attr, raw)
    html = CLASS_TEMPLATE_RE.sub(_to_class_attr, html)
    html = ASTRO_FRONTMATTER_RE.sub("", html, count=1)
    html = CDATA_RE.sub("", html)

    # Inline JS/CSS never carries component classes
    html = SCRIPT_STYLE_RE.sub("", html)

    for pattern in REMOVE_PATTERNS:
        html = pattern.sub("", html)
    html = MULTI_SPACE_RE.sub(" ", html)

    html = BACKTICK_ATTR_RE.sub(r'="\1"', html)
    for pattern in (
            CLASSNAME_BRACE_DQ_RE,
            CLASSNAME_BRACE_SQ_RE,
            CLASSNAME_DQ_RE,
            CLASSNAME_SQ_RE,
            CLASS_BRACE_DQ_RE,
            CLASS_BRACE_SQ_RE,
    ):
        html = pattern.sub(_to_class_attr, html)
    html = CLASSNAME_REST_RE.sub("", html)

    html = SELF_CLOSING_RE.sub(r"<\1\2></\1>", html)
    html = CLASS_CLEAN_RE.sub(_clean_class_value, html)
    return TRIM_ATTR_RE.sub(r'="\1"', html)
