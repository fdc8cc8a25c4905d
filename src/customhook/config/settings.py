"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with CUSTOMHOOK_ prefix
3. .env file (if CUSTOMHOOK_ENV_FILE names one)
4. Layered YAML config files:
   - Explicit file: CUSTOMHOOK_CONFIG_FILE (highest)
   - User config: ~/.config/customhook/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  CUSTOMHOOK_HOOK__VERSION=v1alpha1
  CUSTOMHOOK_LOGGING__LEVEL=debug
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import customhook.config.sources as sources
import customhook.config.types as types
import customhook.utils as utils


def _get_env_file() -> str | None:
    """Return CUSTOMHOOK_ENV_FILE if it names an existing file."""
    if env_file := _os.environ.get("CUSTOMHOOK_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    customhook configuration settings.

    All settings can be overridden via environment variables with CUSTOMHOOK_
    prefix. For nested config, use double underscore:
    CUSTOMHOOK_MERGE__SORT_OVERRIDES=true
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="CUSTOMHOOK_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (CUSTOMHOOK_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config files
        5. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without .env
        interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    @classmethod
    def load(cls, config_file: _pathlib.Path | None = None, **kwargs: _typing.Any) -> "Settings":
        """
        Create Settings, optionally applying one explicit YAML file on top.

        Keys in ``config_file`` take precedence over environment variables,
        since the file was asked for explicitly. Keyword arguments win over
        both.

        Raises:
            ConfigFileError: If ``config_file`` is missing or malformed.
        """
        if config_file is None:
            return cls(**kwargs)

        if not config_file.exists():
            raise sources.ConfigFileError(config_file, "file not found")
        file_values = sources.load_yaml_file(config_file) or {}
        return cls(**utils.deep_merge(file_values, kwargs))

    version: int = _pydantic.Field(default=1, description="Config schema version")

    # =========================================================================
    # Nested config sections
    # =========================================================================

    hook: types.HookConfig = _pydantic.Field(default_factory=types.HookConfig)
    """Hook identity and override selection."""

    merge: types.MergeConfig = _pydantic.Field(default_factory=types.MergeConfig)
    """Merge behavior."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    # =========================================================================
    # Convenience accessors
    # =========================================================================

    @property
    def annotation_prefix(self) -> str:
        """Annotation prefix (alias to hook.annotation_prefix)."""
        return self.hook.annotation_prefix

    @property
    def hook_version(self) -> str:
        """Hook API version (alias to hook.version)."""
        return self.hook.version

    def to_display_dict(self) -> dict[str, _typing.Any]:
        """Return the effective config as plain data for `config show`."""
        return self.model_dump(mode="json")
