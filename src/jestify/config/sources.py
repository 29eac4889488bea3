"""
YAML config file source for pydantic-settings.

Layers (lowest to highest precedence):
1. User config (~/.config/jestify/config.yaml, or $JESTIFY_CONFIG_DIR/config.yaml)
2. Project config (.jestify/config.yaml under the project root)

Settings are flat, so layers merge with a plain dict update.
"""

from __future__ import annotations

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import jestify.constants as constants


class ConfigFileError(Exception):
    """Raised when a config file cannot be read or is malformed."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


def get_user_config_dir() -> _pathlib.Path:
    """
    Return the user config directory.

    Honors JESTIFY_CONFIG_DIR, then XDG_CONFIG_HOME, then ~/.config.
    """
    if override := _os.environ.get(f"{constants.ENV_PREFIX}CONFIG_DIR"):
        return _pathlib.Path(override).expanduser()
    xdg = _os.environ.get("XDG_CONFIG_HOME")
    base = _pathlib.Path(xdg) if xdg else _pathlib.Path.home() / ".config"
    return base / constants.CONFIG_DIR_NAME


def get_user_config_path() -> _pathlib.Path:
    """Path of the user config file."""
    return get_user_config_dir() / constants.CONFIG_FILE_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Path of the project config file under `project_root`."""
    return project_root / constants.PROJECT_CONFIG_DIR_NAME / constants.CONFIG_FILE_NAME


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """
    Load a YAML config file.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or is not a mapping at the top level.
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
        return {}

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class YamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """Settings source that merges the user and project YAML config files."""

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Directory holding .jestify/config.yaml (cwd if omitted).
            user_config_path: Override path for the user config file (for testing).
        """
        super().__init__(settings_cls)
        self._project_root = project_root or _pathlib.Path.cwd()
        self._user_config_path = user_config_path or get_user_config_path()
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._data = self._load_layers()

    def _load_layers(self) -> dict[str, _typing.Any]:
        merged: dict[str, _typing.Any] = {}
        layers = [
            ("user", self._user_config_path),
            ("project", get_project_config_path(self._project_root)),
        ]
        for name, path in layers:
            if not path.is_file():
                continue
            merged.update(load_yaml_file(path))
            self._loaded_layers.append((name, path))
        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers that were found and loaded, lowest precedence first."""
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """Get the merged value for one field."""
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return merged config as a plain dict for Pydantic validation."""
        return dict(self._data)
