"""Custom pydantic-settings source for customhook configuration.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Explicit config file: CUSTOMHOOK_CONFIG_FILE
3. User config: ~/.config/customhook/config.yaml (or CUSTOMHOOK_CONFIG_DIR)
4. Built-in defaults: bundled defaults/config.yaml

LayeredYamlSettingsSource handles layers 2-4, deep merging them so that a
file only has to mention the keys it changes.
"""

import collections.abc as _abc
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import customhook.utils as utils

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "CUSTOMHOOK_CONFIG_DIR"

# Environment variable naming one extra config file on top of the user config
ENV_CONFIG_FILE = "CUSTOMHOOK_CONFIG_FILE"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML config file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents, or None if the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or does not hold a mapping at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that merges layered YAML config files.

    Layers (lowest to highest precedence):
    1. Built-in defaults (src/customhook/config/defaults/config.yaml)
    2. User config (~/.config/customhook/config.yaml)
    3. Explicit config file (CUSTOMHOOK_CONFIG_FILE)
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
        config_file: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            user_config_path: Override path for user config file (for testing).
                If not provided, uses CUSTOMHOOK_CONFIG_DIR or the default XDG path.
            builtin_config_path: Override path for builtin defaults (for testing).
            config_file: Explicit config file. If not provided, uses
                CUSTOMHOOK_CONFIG_FILE when set.
        """
        super().__init__(settings_cls)
        self._user_config_path = user_config_path
        self._builtin_config_path = builtin_config_path
        self._config_file = config_file
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._merged = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        layers: list[dict[str, _typing.Any]] = []

        # Built-in defaults are REQUIRED; missing means a broken installation
        builtin_path = self._builtin_config_path or get_builtin_defaults_path()
        if not builtin_path.exists():
            raise ConfigFileError(
                builtin_path,
                "built-in defaults not found (possible installation problem)",
            )
        builtin_content = load_yaml_file(builtin_path)
        if not builtin_content:
            raise ConfigFileError(
                builtin_path,
                "built-in defaults file is empty (possible installation problem)",
            )
        layers.append(builtin_content)
        self._loaded_layers.append(("built-in", builtin_path))

        # User config is optional
        user_path = self._user_config_path or get_user_config_path()
        if user_path.exists():
            content = load_yaml_file(user_path)
            if content:
                layers.append(content)
                self._loaded_layers.append(("user", user_path))

        # An explicit file was asked for, so it must exist
        explicit_path = self._config_file
        if explicit_path is None and (env_file := _os.environ.get(ENV_CONFIG_FILE)):
            explicit_path = _pathlib.Path(env_file)
        if explicit_path is not None:
            if not explicit_path.exists():
                raise ConfigFileError(explicit_path, "file not found")
            content = load_yaml_file(explicit_path)
            if content:
                layers.append(content)
                self._loaded_layers.append(("file", explicit_path))

        return utils.deep_merge(*layers)

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers that were actually loaded, lowest precedence first."""
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the merged layers.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._merged.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the merged config as a plain dict for Pydantic validation."""
        return utils.deep_merge(self._merged)


def get_builtin_defaults_path() -> _pathlib.Path:
    """Get the path to the built-in defaults config file."""
    return _pathlib.Path(__file__).parent / "defaults" / "config.yaml"


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects CUSTOMHOOK_CONFIG_DIR environment variable if set,
    otherwise uses XDG standard path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "customhook"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / "config.yaml"
