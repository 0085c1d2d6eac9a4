# src/spiracss/naming/patterns.py
import re
from functools import lru_cache
from typing import Pattern

WORD_CASES = ("kebab", "snake", "camel", "pascal")

BLOCK_MAX_WORDS_MIN = 2
BLOCK_MAX_WORDS_MAX = 100


@lru_cache(maxsize=1024)
def compile_pattern(source: str, flags: int = 0) -> Pattern[str]:
    """
    Compiles a regex source once per (source, flags) pair.

    Compiled patterns are immutable, so sharing them between callers (or threads)
    is safe; a concurrent first use can at worst compile the same source twice.
    """
    return re.compile(source, flags)


def block_pattern_source(block_case: str, block_max_words: int) -> str:
    """
    Builds the Block regex for a case style.

    The first word is always required and 1..(max_words - 1) further segments
    must follow, so a Block always has at least two words.
    """
    segments = max(1, block_max_words - 1)
    word_range = f"{{1,{segments}}}"

    if block_case == "snake":
        return rf"^[a-z][a-z0-9]*(?:_[a-z0-9]+){word_range}$"
    if block_case == "camel":
        return rf"^[a-z][a-z0-9]*(?:[A-Z][a-zA-Z0-9]*){word_range}$"
    if block_case == "pascal":
        return rf"^[A-Z][a-z0-9]*(?:[A-Z][a-zA-Z0-9]*){word_range}$"
    return rf"^[a-z][a-z0-9]*(?:-[a-z0-9]+){word_range}$"


def element_pattern_source(element_case: str) -> str:
    """Elements are a single word; only pascal starts uppercase."""
    if element_case == "pascal":
        return r"^[A-Z][a-z0-9]*$"
    return r"^[a-z][a-z0-9]*$"


def modifier_pattern_source(modifier_case: str, modifier_prefix: str) -> str:
    """Builds the modifier regex: escaped prefix plus one or two words."""
    if modifier_case == "snake":
        one, two = r"[a-z0-9]+", r"[a-z0-9]+_[a-z0-9]+"
    elif modifier_case == "camel":
        one, two = r"[a-z][a-zA-Z0-9]*", r"[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*"
    elif modifier_case == "pascal":
        one, two = r"[A-Z][a-zA-Z0-9]*", r"[A-Z][a-z0-9]*[A-Z][a-zA-Z0-9]*"
    else:
        one, two = r"[a-z0-9]+", r"[a-z0-9]+-[a-z0-9]+"
    return f"^{re.escape(modifier_prefix)}(?:{one}|{two})$"


def value_pattern_source(value_case: str, max_words: int) -> str:
    """Builds the regex for variant/state attribute values."""
    extra = max_words - 1

    if value_case in ("camel", "pascal"):
        head = r"[a-z][a-zA-Z0-9]*" if value_case == "camel" else r"[A-Z][a-zA-Z0-9]*"
        rest = rf"(?:[A-Z][a-zA-Z0-9]*){{0,{extra}}}" if max_words > 1 else ""
        return f"^{head}{rest}$"

    separator = "_" if value_case == "snake" else "-"
    word = r"[a-z0-9]+"
    rest = rf"(?:{separator}{word}){{0,{extra}}}" if max_words > 1 else ""
    return f"^{word}{rest}$"
