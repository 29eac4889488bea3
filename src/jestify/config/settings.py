"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with JESTIFY_ prefix
3. .env file (if present)
4. Project config: .jestify/config.yaml
5. User config: ~/.config/jestify/config.yaml
6. Field defaults (lowest)
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import jestify.config.sources as sources
import jestify.constants as constants

LogLevel = _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ReporterType = _typing.Literal["logging", "rich"]


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Priority:
    1. JESTIFY_ENV_FILE if set (explicit override)
    2. .env in the current directory
    3. None (rely on environment variables)
    """
    if env_file := _os.environ.get(f"{constants.ENV_PREFIX}ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
        # Explicitly set but missing: don't fall back silently
        return None

    if _pathlib.Path(".env").exists():
        return ".env"
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    Jestify configuration settings.

    All settings can be overridden via environment variables with the
    JESTIFY_ prefix, e.g. JESTIFY_DEFAULT_TIMEOUT_MS=10000.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
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
        2. env_settings (JESTIFY_* env vars)
        3. dotenv_settings (.env file)
        4. YAML config files (project over user)
        5. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.YamlSettingsSource(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings without loading a .env file (test isolation)."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    default_timeout_ms: int = _pydantic.Field(
        default=constants.DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Timeout for every suite run and test run, in milliseconds",
    )

    max_parallelism: int = _pydantic.Field(
        default=constants.DEFAULT_MAX_PARALLELISM,
        ge=1,
        description="Maximum concurrently running cases of a parallel each",
    )

    log_level: LogLevel = _pydantic.Field(
        default="INFO",
        description="Level for the CLI's log handler",
    )

    reporter: ReporterType = _pydantic.Field(
        default="logging",
        description="Reporter used by the default engine",
    )

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @_pydantic.field_validator("reporter", mode="before")
    @classmethod
    def _normalize_reporter(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value
