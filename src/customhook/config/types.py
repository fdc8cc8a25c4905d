"""Configuration type definitions for customhook settings.

These are the config sections nested within the main Settings class:
- HookConfig: name, version, annotation_prefix
- MergeConfig: sort_overrides, indent
- LoggingConfig: level, component

All types use `extra="allow"` so unknown keys in YAML files are kept
rather than silently dropped; `get_extra_fields()` lists them.
"""

import typing as _typing

import pydantic as _pydantic

import customhook.constants as constants


class ConfigBase(_pydantic.BaseModel):
    """Base class for all config sections."""

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}


class HookConfig(ConfigBase):
    """
    Hook identity and override selection.

    YAML section: hook.*
    """

    name: str = constants.HOOK_NAME
    """Name reported by the Info callback."""

    version: _typing.Literal["v1alpha1", "v1alpha2"] = constants.DEFAULT_HOOK_VERSION  # type: ignore[assignment]
    """Hook API version advertised by the Info callback."""

    annotation_prefix: str = constants.DEFAULT_ANNOTATION_PREFIX
    """Annotation key prefix that marks a domain override."""

    @_pydantic.field_validator("annotation_prefix")
    @classmethod
    def _prefix_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("annotation_prefix must not be empty")
        return value


class MergeConfig(ConfigBase):
    """
    Merge behavior.

    YAML section: merge.*
    """

    sort_overrides: bool = False
    """Apply overrides sorted by path instead of annotation order."""

    indent: bool = False
    """Pretty-print the merged document."""


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = "info"
    """Log level."""

    component: str = constants.DEFAULT_LOG_COMPONENT
    """Component name included in every log line."""

    @_pydantic.field_validator("level", mode="before")
    @classmethod
    def _lowercase_level(cls, value: _typing.Any) -> _typing.Any:
        return value.lower() if isinstance(value, str) else value
