# src/spiracss/naming/options.py
import re
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .patterns import (
    BLOCK_MAX_WORDS_MAX,
    BLOCK_MAX_WORDS_MIN,
    WORD_CASES,
    compile_pattern,
)

WordCase = Literal["kebab", "snake", "camel", "pascal"]

# Flags a JavaScript-style /source/flags literal may carry.
_JS_LITERAL_RE = re.compile(r"^/(?P<source>.+)/(?P<flags>[a-z]*)$", re.DOTALL)
_STATEFUL_FLAGS = {"g", "y"}


class CustomPattern(BaseModel):
    """
    A user supplied naming pattern, reduced to its source and a case-insensitive flag.

    Stateful iteration flags (`g`, `y`) are rejected when the value object is built,
    so a pattern can be reused safely across any number of calls.
    """
    model_config = ConfigDict(frozen=True)

    source: str
    ignore_case: bool = False

    @property
    def regex(self) -> re.Pattern:
        return compile_pattern(self.source, re.IGNORECASE if self.ignore_case else 0)

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None

    @classmethod
    def coerce(cls, value: Any) -> Optional["CustomPattern"]:
        """
        Builds a CustomPattern from a compiled pattern, a `/source/flags` literal
        or a bare source string.

        Returns None for anything that cannot be used; callers then fall back to
        the case-based rules.
        """
        if isinstance(value, CustomPattern):
            return value

        if isinstance(value, re.Pattern):
            if not isinstance(value.pattern, str):
                return None
            if value.flags & ~(re.IGNORECASE | re.UNICODE):
                return None
            candidate = cls(source=value.pattern, ignore_case=bool(value.flags & re.IGNORECASE))
        elif isinstance(value, str) and value:
            literal = _JS_LITERAL_RE.match(value)
            if literal:
                flags = set(literal.group("flags"))
                if flags & _STATEFUL_FLAGS or flags - {"i", "u"}:
                    return None
                candidate = cls(source=literal.group("source"), ignore_case="i" in flags)
            else:
                candidate = cls(source=value)
        else:
            return None

        try:
            compile_pattern(candidate.source, re.IGNORECASE if candidate.ignore_case else 0)
        except re.error:
            return None
        return candidate


class CustomPatterns(BaseModel):
    model_config = ConfigDict(frozen=True)

    block: Optional[CustomPattern] = None
    element: Optional[CustomPattern] = None
    modifier: Optional[CustomPattern] = None

    @field_validator("block", "element", "modifier", mode="before")
    @classmethod
    def _coerce_pattern(cls, value: Any) -> Optional[CustomPattern]:
        return CustomPattern.coerce(value)


class NamingOptions(BaseModel):
    """
    Per-project naming policy for Block / Element / Modifier class tokens.

    Accepts config keys in camelCase (as written in spiracss.config.json) or
    snake_case. Out-of-range values are normalized instead of rejected.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    block_case: WordCase = Field("kebab", alias="blockCase")
    block_max_words: int = Field(BLOCK_MAX_WORDS_MIN, alias="blockMaxWords")
    element_case: WordCase = Field("kebab", alias="elementCase")
    modifier_case: WordCase = Field("kebab", alias="modifierCase")
    modifier_prefix: str = Field("-", alias="modifierPrefix")
    custom_patterns: CustomPatterns = Field(default_factory=CustomPatterns, alias="customPatterns")

    @field_validator("block_case", "element_case", "modifier_case", mode="before")
    @classmethod
    def _fallback_case(cls, value: Any) -> str:
        return value if value in WORD_CASES else "kebab"

    @field_validator("block_max_words", mode="before")
    @classmethod
    def _clamp_block_max_words(cls, value: Any) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            return BLOCK_MAX_WORDS_MIN
        return min(max(value, BLOCK_MAX_WORDS_MIN), BLOCK_MAX_WORDS_MAX)

    @field_validator("modifier_prefix", mode="before")
    @classmethod
    def _default_prefix(cls, value: Any) -> str:
        return value if isinstance(value, str) else "-"

    @field_validator("custom_patterns", mode="before")
    @classmethod
    def _ignore_malformed_patterns(cls, value: Any) -> Any:
        if isinstance(value, (dict, CustomPatterns)):
            return value
        return {}

    @classmethod
    def from_config(cls, raw: Any) -> "NamingOptions":
        if isinstance(raw, NamingOptions):
            return raw
        return cls.model_validate(raw if isinstance(raw, dict) else {})


class ExternalOptions(BaseModel):
    """Allow-list of third-party classes that are skipped by naming checks."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    classes: List[str] = Field(default_factory=list, alias="allowExternalClasses")
    prefixes: List[str] = Field(default_factory=list, alias="allowExternalPrefixes")

    @field_validator("classes", "prefixes", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str) and item.strip()]

    @classmethod
    def from_config(cls, raw: Any) -> "ExternalOptions":
        if isinstance(raw, ExternalOptions):
            return raw
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)
