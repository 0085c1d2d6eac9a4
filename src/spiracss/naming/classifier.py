# src/spiracss/naming/classifier.py
from typing import Iterable, List, Literal, Optional

from .options import ExternalOptions, NamingOptions
from .patterns import (
    block_pattern_source,
    compile_pattern,
    element_pattern_source,
    modifier_pattern_source,
)

BaseKind = Literal["block", "element", "invalid"]
ExternalAwareKind = Literal["block", "element", "invalid", "external"]

_RESERVED_PREFIXES = ("u-", "-", "_")


def _resolve(naming: Optional[NamingOptions]) -> NamingOptions:
    return naming if naming is not None else NamingOptions()


def modifier_matches(name: str, naming: Optional[NamingOptions] = None) -> bool:
    naming = _resolve(naming)
    custom = naming.custom_patterns.modifier
    if custom is not None:
        return custom.matches(name)
    source = modifier_pattern_source(naming.modifier_case, naming.modifier_prefix)
    return compile_pattern(source).search(name) is not None


def is_modifier_class(name: str, naming: Optional[NamingOptions] = None) -> bool:
    """Returns True if `name` is a modifier token (prefix plus one or two words)."""
    if not name:
        return False
    return modifier_matches(name, naming)


def is_block_class(name: str, naming: Optional[NamingOptions] = None) -> bool:
    """
    Block detection.

    Reserved prefixes and modifier-shaped names are never Blocks. A configured
    custom Block pattern replaces the case-based rule entirely.
    """
    if not name:
        return False
    naming = _resolve(naming)
    if is_modifier_class(name, naming) or name.startswith(_RESERVED_PREFIXES):
        return False

    custom = naming.custom_patterns.block
    if custom is not None:
        return custom.matches(name)

    source = block_pattern_source(naming.block_case, naming.block_max_words)
    return compile_pattern(source).search(name) is not None


def is_element_base(name: str, naming: Optional[NamingOptions] = None) -> bool:
    """Element detection: a single word, same reserved-prefix exclusions as Blocks."""
    if not name:
        return False
    naming = _resolve(naming)
    if is_modifier_class(name, naming) or name.startswith(_RESERVED_PREFIXES):
        return False

    custom = naming.custom_patterns.element
    if custom is not None:
        return custom.matches(name)

    return compile_pattern(element_pattern_source(naming.element_case)).search(name) is not None


def classify_base_class(name: str, naming: Optional[NamingOptions] = None) -> BaseKind:
    """
    Classifies a base class token.

    Block wins over everything; names starting with `-` or `u-` are invalid
    before the Element check runs.
    """
    if is_block_class(name, naming):
        return "block"
    if name.startswith("-") or name.startswith("u-"):
        return "invalid"
    if is_element_base(name, naming):
        return "element"
    return "invalid"


def is_external_class(name: str, external: Optional[ExternalOptions]) -> bool:
    if external is None:
        return False
    return name in external.classes or any(name.startswith(prefix) for prefix in external.prefixes)


def classify_with_external(
        name: str,
        naming: Optional[NamingOptions],
        external: Optional[ExternalOptions]
) -> ExternalAwareKind:
    """Same as classify_base_class, but allow-listed external classes win."""
    if is_external_class(name, external):
        return "external"
    return classify_base_class(name, naming)


def find_first_non_external_base_kind(
        tokens: Iterable[str],
        naming: Optional[NamingOptions],
        external: Optional[ExternalOptions]
) -> Optional[Literal["block", "element"]]:
    """
    Looks past an external base class for the kind the node would have had.

    Any Block token wins immediately; otherwise an Element token is reported.
    """
    element_candidate = False
    for token in tokens:
        if is_external_class(token, external):
            continue
        if is_block_class(token, naming):
            return "block"
        if is_element_base(token, naming):
            element_candidate = True
    return "element" if element_candidate else None


def filter_modifier_tokens(
        tokens: Iterable[str],
        naming: Optional[NamingOptions],
        external: Optional[ExternalOptions] = None
) -> List[str]:
    """Keeps only modifier-shaped, non-external tokens, in their original order."""
    return [
        token for token in tokens
        if modifier_matches(token, naming) and not is_external_class(token, external)
    ]
