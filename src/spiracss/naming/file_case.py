# src/spiracss/naming/file_case.py
import re
from typing import Any, List, Literal

FileNameCase = Literal["preserve", "kebab", "snake", "camel", "pascal"]

FILE_NAME_CASES = ("preserve", "kebab", "snake", "camel", "pascal")


def normalize_file_name_case(value: Any) -> str:
    """Unknown or missing file-case settings mean 'keep the class name as is'."""
    return value if value in FILE_NAME_CASES else "preserve"


def split_words(text: str) -> List[str]:
    """
    Splits a class name into words on `-`/`_` runs and case boundaries.

    "heroBanner" -> ["hero", "Banner"], "HTMLParser" -> ["HTML", "Parser"]
    """
    if not text.strip():
        return []
    normalized = re.sub(r"[-_]+", " ", text)
    normalized = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", normalized)
    normalized = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", normalized)
    return [word for word in normalized.split() if word]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def format_file_base(text: str, file_case: str) -> str:
    """
    Rewrites a Block class name into a file base name for the given case.

    Args:
        text: The Block class name, e.g. "hero-banner".
        file_case: One of preserve / kebab / snake / camel / pascal.

    Returns:
        The file base name without extension. `preserve` (and any unknown case)
        returns the input untouched.
    """
    if not text or file_case not in FILE_NAME_CASES or file_case == "preserve":
        return text

    words = split_words(text)
    if not words:
        return text

    lower = [word.lower() for word in words]
    if file_case == "kebab":
        return "-".join(lower)
    if file_case == "snake":
        return "_".join(lower)
    if file_case == "camel":
        return lower[0] + "".join(_capitalize(word) for word in lower[1:])
    return "".join(_capitalize(word) for word in lower)
