# src/spiracss/selector_policy.py
import logging
from typing import Any, Dict, List, Literal, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field

from spiracss.naming.patterns import WORD_CASES, compile_pattern, value_pattern_source

logger = logging.getLogger(__name__)

SelectorMode = Literal["data", "class"]

DEFAULT_VARIANT_KEYS = ["data-variant"]
DEFAULT_STATE_KEY = "data-state"
DEFAULT_ARIA_KEYS = ["aria-expanded", "aria-selected", "aria-disabled"]


class SelectorPolicyError(ValueError):
    """Raised when a selectorPolicy config block is malformed."""


class ValueNaming(BaseModel):
    model_config = ConfigDict(frozen=True)

    case: Literal["kebab", "snake", "camel", "pascal"] = "kebab"
    max_words: int = 2


class VariantPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: SelectorMode = "data"
    data_keys: List[str] = Field(default_factory=lambda: list(DEFAULT_VARIANT_KEYS))
    value_naming: ValueNaming = Field(default_factory=ValueNaming)


class StatePolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: SelectorMode = "data"
    data_key: str = DEFAULT_STATE_KEY
    aria_keys: List[str] = Field(default_factory=lambda: list(DEFAULT_ARIA_KEYS))
    value_naming: ValueNaming = Field(default_factory=ValueNaming)


class NormalizedSelectorPolicy(BaseModel):
    """
    Fully resolved variant/state attribute policy.

    Every key list is non-empty and every value-naming entry is filled in, so
    the tree builder, linter and writer never have to look at raw config again.
    """
    model_config = ConfigDict(frozen=True)

    value_naming: ValueNaming = Field(default_factory=ValueNaming)
    variant: VariantPolicy = Field(default_factory=VariantPolicy)
    state: StatePolicy = Field(default_factory=StatePolicy)

    def is_variant_key(self, key: str) -> bool:
        return key in self.variant.data_keys

    def is_state_key(self, key: str) -> bool:
        return key == self.state.data_key or key in self.state.aria_keys


def _pick(raw: Dict[str, Any], camel: str, snake: str) -> Any:
    if camel in raw:
        return raw[camel]
    return raw.get(snake)


def _normalize_value_naming(raw: Any, fallback: ValueNaming, field_name: str) -> ValueNaming:
    if not isinstance(raw, dict):
        return fallback

    case = raw.get("case")
    if case is not None and case not in WORD_CASES:
        raise SelectorPolicyError(f'{field_name}.case must be "kebab" | "snake" | "camel" | "pascal".')

    max_words = _pick(raw, "maxWords", "max_words")
    if max_words is not None:
        if not isinstance(max_words, int) or isinstance(max_words, bool) or max_words < 1:
            raise SelectorPolicyError(f"{field_name}.maxWords must be a positive integer.")

    return ValueNaming(
        case=case if case is not None else fallback.case,
        max_words=max_words if max_words is not None else fallback.max_words,
    )


def _normalize_mode(raw: Dict[str, Any], field_name: str) -> SelectorMode:
    if "mode" not in raw:
        return "data"
    mode = raw["mode"]
    if mode not in ("data", "class"):
        raise SelectorPolicyError(f'{field_name}.mode must be "data" or "class".')
    return mode


def _normalize_key_list(value: Any, fallback: List[str], field_name: str) -> List[str]:
    """Empty or missing lists fall back to the defaults; malformed ones raise."""
    if value is None:
        return list(fallback)
    if not isinstance(value, (list, tuple)):
        raise SelectorPolicyError(f"{field_name} must be an array of non-empty strings.")
    if len(value) == 0:
        return list(fallback)

    keys: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise SelectorPolicyError(f"{field_name} must be an array of non-empty strings.")
        keys.append(item.strip())
    return keys


def normalize_selector_policy(raw: Optional[Any] = None) -> NormalizedSelectorPolicy:
    """
    Validates and fills in a raw selectorPolicy config block.

    Args:
        raw: The `selectorPolicy` mapping from spiracss.config.json (camelCase or
            snake_case keys), an already normalized policy, or None.

    Returns:
        NormalizedSelectorPolicy with defaults applied. Variant/state value naming
        inherits from the top-level `valueNaming` when not set.

    Raises:
        SelectorPolicyError: on an unknown mode, a malformed key list, or an
            invalid valueNaming case/maxWords.
    """
    if isinstance(raw, NormalizedSelectorPolicy):
        return raw
    if not isinstance(raw, dict):
        return NormalizedSelectorPolicy()

    variant = raw.get("variant")
    variant = variant if isinstance(variant, dict) else {}
    state = raw.get("state")
    state = state if isinstance(state, dict) else {}

    variant_mode = _normalize_mode(variant, "selectorPolicy.variant")
    state_mode = _normalize_mode(state, "selectorPolicy.state")

    data_keys = _normalize_key_list(
        _pick(variant, "dataKeys", "data_keys"),
        DEFAULT_VARIANT_KEYS,
        "selectorPolicy.variant.dataKeys",
    )
    aria_keys = _normalize_key_list(
        _pick(state, "ariaKeys", "aria_keys"),
        DEFAULT_ARIA_KEYS,
        "selectorPolicy.state.ariaKeys",
    )

    data_key_raw = _pick(state, "dataKey", "data_key")
    data_key = data_key_raw.strip() if isinstance(data_key_raw, str) else ""

    base_naming = _normalize_value_naming(
        _pick(raw, "valueNaming", "value_naming"), ValueNaming(), "selectorPolicy.valueNaming"
    )
    variant_naming = _normalize_value_naming(
        _pick(variant, "valueNaming", "value_naming"), base_naming, "selectorPolicy.variant.valueNaming"
    )
    state_naming = _normalize_value_naming(
        _pick(state, "valueNaming", "value_naming"), base_naming, "selectorPolicy.state.valueNaming"
    )

    policy = NormalizedSelectorPolicy(
        value_naming=base_naming,
        variant=VariantPolicy(mode=variant_mode, data_keys=data_keys, value_naming=variant_naming),
        state=StatePolicy(
            mode=state_mode,
            data_key=data_key or DEFAULT_STATE_KEY,
            aria_keys=aria_keys,
            value_naming=state_naming,
        ),
    )
    logger.debug(
        "Selector policy: variant=%s %s, state=%s %s",
        policy.variant.mode, policy.variant.data_keys, policy.state.mode, policy.state.data_key,
    )
    return policy


def build_value_pattern(value_naming: ValueNaming) -> Pattern[str]:
    """Returns the (cached) regex a variant/state attribute value must match."""
    return compile_pattern(value_pattern_source(value_naming.case, value_naming.max_words))
