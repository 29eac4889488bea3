"""
Configuration module for Jestify.

Uses pydantic-settings for environment variable and YAML file loading.
"""

from jestify.config.settings import LogLevel, ReporterType, Settings
from jestify.config.sources import (
    ConfigFileError,
    YamlSettingsSource,
    get_project_config_path,
    get_user_config_dir,
    get_user_config_path,
    load_yaml_file,
)

__all__ = [
    "ConfigFileError",
    "LogLevel",
    "ReporterType",
    "Settings",
    "YamlSettingsSource",
    "get_project_config_path",
    "get_user_config_dir",
    "get_user_config_path",
    "load_yaml_file",
]
