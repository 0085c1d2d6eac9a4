# src/spiracss/config/warnings.py
import logging
import re
from typing import Any, Callable, List, Optional

from spiracss.naming.options import CustomPattern

logger = logging.getLogger(__name__)

PATTERN_KEYS = ("block", "element", "modifier")
_LITERAL_FLAGS_RE = re.compile(r"^/.+/(?P<flags>[a-z]*)$", re.DOTALL)


def _has_stateful_flags(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    literal = _LITERAL_FLAGS_RE.match(value)
    return bool(literal and set(literal.group("flags")) & {"g", "y"})


def collect_custom_pattern_warnings(raw_naming: Any, source: str = "stylelint.base.naming") -> List[str]:
    """
    Lists warnings for unusable `customPatterns` entries of a raw naming block.

    Unusable entries are ignored by NamingOptions; these messages tell the user why.
    """
    if not isinstance(raw_naming, dict) or "customPatterns" not in raw_naming:
        return []

    prefix = f"{source}.customPatterns"
    patterns = raw_naming["customPatterns"]
    if patterns is None:
        return []
    if not isinstance(patterns, dict):
        return [f"WARN [INVALID_CUSTOM_PATTERN] {prefix} must be a plain object of RegExp values. Ignored."]

    warnings: List[str] = []
    for key in PATTERN_KEYS:
        value = patterns.get(key)
        if value is None:
            continue
        if _has_stateful_flags(value):
            warnings.append(
                f'WARN [INVALID_CUSTOM_PATTERN] {prefix}.{key} must not include "g" or "y" flags. Ignored.'
            )
        elif CustomPattern.coerce(value) is None:
            warnings.append(f"WARN [INVALID_CUSTOM_PATTERN] {prefix}.{key} must be a RegExp. Ignored.")
    return warnings


def warn_invalid_custom_patterns(
        raw_naming: Any,
        warn: Optional[Callable[[str], None]] = None,
        source: str = "stylelint.base.naming"
) -> List[str]:
    """Emits each custom pattern warning through `warn` (logger.warning by default)."""
    emit = warn or logger.warning
    warnings = collect_custom_pattern_warnings(raw_naming, source)
    for message in warnings:
        emit(message)
    return warnings
