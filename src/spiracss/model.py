# src/spiracss/model.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spiracss.naming.file_case import FileNameCase, normalize_file_name_case
from spiracss.naming.options import ExternalOptions, NamingOptions

DEFAULT_GLOBAL_SCSS_MODULE = "@styles/partials/global"
DEFAULT_PAGE_ENTRY_ALIAS = "assets"
DEFAULT_PAGE_ENTRY_SUBDIR = "css"
DEFAULT_CHILD_SCSS_DIR = "scss"
DEFAULT_LAYOUT_MIXINS = ["@include breakpoint-up(md)"]


class GenerationError(ValueError):
    """Raised when markup has no single, classed entry point to generate from."""


class HtmlLintIssue(BaseModel):
    """
    One structural problem found in markup.
    `path` is the chain of base classes from the root down to the offending node.
    """
    code: str
    message: str
    base_class: str = ""
    path: List[str] = Field(default_factory=list)

    @property
    def location(self) -> str:
        return " > ".join(self.path) or "(root)"


class GeneratedFile(BaseModel):
    """A generated stylesheet; `path` is relative to the document directory."""
    path: str
    content: str


class RootBlockSummary(BaseModel):
    base_class: str
    count: int


class GeneratorOptions(BaseModel):
    """
    Settings for SCSS generation, usually read from the `generator` section of
    spiracss.config.json together with the naming and selector policy.
    """
    model_config = ConfigDict(populate_by_name=True)

    global_scss_module: str = Field(DEFAULT_GLOBAL_SCSS_MODULE, alias="globalScssModule")
    page_entry_prefix: str = Field(
        f"@{DEFAULT_PAGE_ENTRY_ALIAS}/{DEFAULT_PAGE_ENTRY_SUBDIR}", alias="pageEntryPrefix"
    )
    child_scss_dir: str = Field(DEFAULT_CHILD_SCSS_DIR, alias="childScssDir")
    layout_mixins: List[str] = Field(default_factory=lambda: list(DEFAULT_LAYOUT_MIXINS), alias="layoutMixins")
    naming: NamingOptions = Field(default_factory=NamingOptions)
    root_file_case: FileNameCase = Field("preserve", alias="rootFileCase")
    child_file_case: FileNameCase = Field("preserve", alias="childFileCase")
    selector_policy: Optional[Dict[str, Any]] = Field(None, alias="selectorPolicy")
    external: ExternalOptions = Field(default_factory=ExternalOptions)

    @field_validator("root_file_case", "child_file_case", mode="before")
    @classmethod
    def _fallback_file_case(cls, value: Any) -> str:
        return normalize_file_name_case(value)

    @field_validator("naming", mode="before")
    @classmethod
    def _coerce_naming(cls, value: Any) -> NamingOptions:
        return NamingOptions.from_config(value)

    @field_validator("external", mode="before")
    @classmethod
    def _coerce_external(cls, value: Any) -> ExternalOptions:
        return ExternalOptions.from_config(value)

    @field_validator("selector_policy", mode="before")
    @classmethod
    def _policy_mapping_only(cls, value: Any) -> Optional[Dict[str, Any]]:
        return value if isinstance(value, dict) else None
