# src/spiracss/config/loader.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from spiracss.format.placeholders import ClassAttribute
from spiracss.model import (
    DEFAULT_CHILD_SCSS_DIR,
    DEFAULT_GLOBAL_SCSS_MODULE,
    DEFAULT_LAYOUT_MIXINS,
    DEFAULT_PAGE_ENTRY_ALIAS,
    DEFAULT_PAGE_ENTRY_SUBDIR,
    GeneratorOptions,
)
from spiracss.naming.options import ExternalOptions, NamingOptions
from .warnings import warn_invalid_custom_patterns

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "spiracss.config.json"

# Where naming options may live, in lookup order.
NAMING_SOURCES = (
    ("base", "stylelint.base.naming"),
    ("class", "stylelint.class.naming"),
    ("classStructure", "stylelint.classStructure.naming"),
)
DEFAULT_NAMING_SOURCE = "stylelint.base.naming"


class ConfigLoadError(RuntimeError):
    """Raised when a config file exists but cannot be read or decoded."""


class LintOptions(BaseModel):
    """Options the HTML lint needs, resolved from one config file."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    naming: NamingOptions = Field(default_factory=NamingOptions)
    selector_policy: Optional[Dict[str, Any]] = None
    external: ExternalOptions = Field(default_factory=ExternalOptions)
    naming_source: str = DEFAULT_NAMING_SOURCE


class FormatOptions(BaseModel):
    naming: NamingOptions = Field(default_factory=NamingOptions)
    class_attribute: ClassAttribute = "class"


def load_spiracss_config(path: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """
    Loads spiracss.config.json.

    Args:
        path: Path to the config file.

    Returns:
        The decoded config mapping, or None if the file does not exist.

    Raises:
        ConfigLoadError: if the path is not a readable file, the JSON is invalid,
            or the top-level value is not an object.
    """
    config_path = Path(path).resolve()
    if not config_path.exists():
        logger.info("Config file %s not found. Using defaults.", config_path)
        return None

    if not config_path.is_file():
        raise ConfigLoadError(
            f"Cannot access {CONFIG_FILE_NAME}: {config_path}\n\nCheck permissions and path state."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except OSError as e:
        raise ConfigLoadError(
            f"Cannot access {CONFIG_FILE_NAME}: {config_path}\n\nCheck permissions and path state."
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(
            f"Failed to load {CONFIG_FILE_NAME}: {config_path}\n\n"
            f"Ensure the config file format is valid.\n\nCause: {e}"
        ) from e

    if not isinstance(config, dict):
        raise ConfigLoadError(
            f"Failed to load {CONFIG_FILE_NAME}: {config_path}\n\nThe top-level value must be an object."
        )

    logger.debug("Loaded config from %s", config_path)
    return config


def get_nested_config(config: Optional[Dict[str, Any]], key_path: str, default: Optional[Any] = None) -> Any:
    """
    Safely retrieves a nested value using a dotted path, e.g. 'generator.childScssDir'.

    Returns:
        The value, or `default` when any segment is missing or not a mapping.
    """
    value: Any = config
    for key in key_path.split('.'):
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
    return value if value is not None else default


def resolve_naming(config: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], str]:
    """
    Picks the naming block from the first stylelint section that defines one.

    Returns:
        (raw naming mapping, dotted source path used in warnings)
    """
    for section, source in NAMING_SOURCES:
        naming = get_nested_config(config, f"stylelint.{section}.naming")
        if isinstance(naming, dict):
            return naming, source
    return {}, DEFAULT_NAMING_SOURCE


def resolve_external(config: Optional[Dict[str, Any]]) -> ExternalOptions:
    """Merges `external` from stylelint.base and stylelint.class (class wins per key)."""
    merged: Dict[str, Any] = {}
    for section in ("base", "class"):
        external = get_nested_config(config, f"stylelint.{section}.external")
        if isinstance(external, dict):
            merged.update(external)

    # classStructure.allowExternal* only fills in what `external` left unset.
    class_structure = get_nested_config(config, "stylelint.classStructure", {})
    if isinstance(class_structure, dict):
        for short, key in (("classes", "allowExternalClasses"), ("prefixes", "allowExternalPrefixes")):
            if short not in merged and key in class_structure:
                merged[short] = class_structure[key]

    return ExternalOptions.from_config(merged)


def resolve_selector_policy(config: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    policy = get_nested_config(config, "selectorPolicy")
    return policy if isinstance(policy, dict) else None


def _load_naming(config: Optional[Dict[str, Any]]) -> Tuple[NamingOptions, str]:
    raw_naming, source = resolve_naming(config)
    warn_invalid_custom_patterns(raw_naming, source=source)
    return NamingOptions.from_config(raw_naming), source


def load_lint_options(config: Optional[Dict[str, Any]]) -> LintOptions:
    naming, source = _load_naming(config)
    return LintOptions(
        naming=naming,
        selector_policy=resolve_selector_policy(config),
        external=resolve_external(config),
        naming_source=source,
    )


def _page_entry_prefix(generator: Dict[str, Any]) -> str:
    alias = generator.get("pageEntryAlias")
    alias = alias if isinstance(alias, str) else DEFAULT_PAGE_ENTRY_ALIAS
    subdir = generator.get("pageEntrySubdir")
    subdir = subdir if isinstance(subdir, str) else DEFAULT_PAGE_ENTRY_SUBDIR
    return f"@{alias}/{subdir}" if subdir.strip() else f"@{alias}"


def _layout_mixins(value: Any) -> List[str]:
    if not isinstance(value, list):
        return list(DEFAULT_LAYOUT_MIXINS)
    # An explicit list that filters down to nothing means "no layout mixins".
    return [item for item in value if isinstance(item, str) and item.strip()]


def _non_blank(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value.strip() else default


def load_generator_options(config: Optional[Dict[str, Any]]) -> GeneratorOptions:
    """
    Builds GeneratorOptions from the `generator`, `stylelint` and `selectorPolicy`
    sections of a config mapping (None means all defaults).
    """
    generator = get_nested_config(config, "generator", {})
    if not isinstance(generator, dict):
        generator = {}
    naming, _ = _load_naming(config)

    return GeneratorOptions(
        global_scss_module=_non_blank(generator.get("globalScssModule"), DEFAULT_GLOBAL_SCSS_MODULE),
        page_entry_prefix=_page_entry_prefix(generator),
        child_scss_dir=_non_blank(generator.get("childScssDir"), DEFAULT_CHILD_SCSS_DIR),
        layout_mixins=_layout_mixins(generator.get("layoutMixins")),
        naming=naming,
        root_file_case=generator.get("rootFileCase"),
        child_file_case=generator.get("childFileCase"),
        selector_policy=resolve_selector_policy(config),
        external=resolve_external(config),
    )


def load_format_options(config: Optional[Dict[str, Any]]) -> FormatOptions:
    naming, _ = _load_naming(config)
    class_attribute = get_nested_config(config, "htmlFormat.classAttribute")
    return FormatOptions(
        naming=naming,
        class_attribute=class_attribute if class_attribute in ("class", "className") else "class",
    )
