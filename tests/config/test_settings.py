"""Tests for Settings and the YAML config source."""

import pathlib as _pathlib

import pydantic as _pydantic
import pytest as _pytest

import jestify.config as config
import jestify.constants as constants


def _write(path: _pathlib.Path, content: str) -> _pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@_pytest.fixture
def project_dir(tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> _pathlib.Path:
    """An empty project directory used as the working directory."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


class TestDefaults:
    """Tests for default settings."""

    def test_defaults(self, project_dir: _pathlib.Path) -> None:
        """With no config anywhere, field defaults apply."""
        settings = config.Settings.construct_without_dotenv()
        assert settings.default_timeout_ms == constants.DEFAULT_TIMEOUT_MS == 5000
        assert settings.max_parallelism == constants.DEFAULT_MAX_PARALLELISM
        assert settings.log_level == "INFO"
        assert settings.reporter == "logging"


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_env_overrides(
        self, project_dir: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """JESTIFY_* variables set the matching fields."""
        monkeypatch.setenv("JESTIFY_DEFAULT_TIMEOUT_MS", "250")
        monkeypatch.setenv("JESTIFY_MAX_PARALLELISM", "3")
        monkeypatch.setenv("JESTIFY_LOG_LEVEL", "debug")
        monkeypatch.setenv("JESTIFY_REPORTER", "Rich")

        settings = config.Settings.construct_without_dotenv()

        assert settings.default_timeout_ms == 250
        assert settings.max_parallelism == 3
        assert settings.log_level == "DEBUG"
        assert settings.reporter == "rich"

    @_pytest.mark.parametrize(
        ("key", "value"),
        [
            ("JESTIFY_DEFAULT_TIMEOUT_MS", "0"),
            ("JESTIFY_MAX_PARALLELISM", "0"),
            ("JESTIFY_LOG_LEVEL", "chatty"),
            ("JESTIFY_REPORTER", "html"),
        ],
    )
    def test_invalid_values(
        self,
        project_dir: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
        key: str,
        value: str,
    ) -> None:
        """Out-of-range or unknown values fail validation."""
        monkeypatch.setenv(key, value)
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings.construct_without_dotenv()

    def test_constructor_beats_env(
        self, project_dir: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """Explicit arguments take precedence over the environment."""
        monkeypatch.setenv("JESTIFY_DEFAULT_TIMEOUT_MS", "250")
        settings = config.Settings.construct_without_dotenv(default_timeout_ms=900)
        assert settings.default_timeout_ms == 900


class TestYamlLayers:
    """Tests for user and project YAML config files."""

    def test_user_config(self, project_dir: _pathlib.Path) -> None:
        """The user config file is read from JESTIFY_CONFIG_DIR."""
        _write(config.get_user_config_path(), "default_timeout_ms: 1200\nreporter: rich\n")

        settings = config.Settings.construct_without_dotenv()

        assert settings.default_timeout_ms == 1200
        assert settings.reporter == "rich"

    def test_project_overrides_user(self, project_dir: _pathlib.Path) -> None:
        """Project config wins over user config, key by key."""
        _write(config.get_user_config_path(), "default_timeout_ms: 1200\nmax_parallelism: 8\n")
        _write(config.get_project_config_path(project_dir), "default_timeout_ms: 300\n")

        settings = config.Settings.construct_without_dotenv()

        assert settings.default_timeout_ms == 300
        assert settings.max_parallelism == 8

    def test_env_overrides_yaml(
        self, project_dir: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """Environment variables win over YAML files."""
        _write(config.get_project_config_path(project_dir), "default_timeout_ms: 300\n")
        monkeypatch.setenv("JESTIFY_DEFAULT_TIMEOUT_MS", "700")

        assert config.Settings.construct_without_dotenv().default_timeout_ms == 700

    def test_unknown_keys_ignored(self, project_dir: _pathlib.Path) -> None:
        """Keys that are not settings are ignored."""
        _write(config.get_project_config_path(project_dir), "colour: blue\n")
        assert config.Settings.construct_without_dotenv().reporter == "logging"

    def test_loaded_layers(self, project_dir: _pathlib.Path) -> None:
        """The source reports which files it found, lowest precedence first."""
        user = _write(config.get_user_config_path(), "reporter: rich\n")
        project = _write(config.get_project_config_path(project_dir), "reporter: logging\n")

        source = config.YamlSettingsSource(config.Settings, project_dir)

        assert source.get_loaded_layers() == [("user", user), ("project", project)]
        assert source() == {"reporter": "logging"}

    def test_malformed_yaml(self, project_dir: _pathlib.Path) -> None:
        """Broken YAML raises ConfigFileError naming the file."""
        path = _write(config.get_project_config_path(project_dir), "reporter: [unclosed\n")
        with _pytest.raises(config.ConfigFileError) as exc_info:
            config.Settings.construct_without_dotenv()
        assert exc_info.value.path == path
        assert "invalid YAML" in str(exc_info.value)

    def test_non_mapping_yaml(self, project_dir: _pathlib.Path) -> None:
        """A top-level list is rejected."""
        _write(config.get_project_config_path(project_dir), "- a\n- b\n")
        with _pytest.raises(config.ConfigFileError, match="mapping"):
            config.Settings.construct_without_dotenv()

    def test_empty_file(self, tmp_path: _pathlib.Path) -> None:
        """An empty file loads as an empty mapping."""
        assert config.load_yaml_file(_write(tmp_path / "empty.yaml", "")) == {}


class TestPaths:
    """Tests for config path helpers."""

    def test_config_dir_override(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """JESTIFY_CONFIG_DIR takes precedence."""
        monkeypatch.setenv("JESTIFY_CONFIG_DIR", str(tmp_path / "cfg"))
        assert config.get_user_config_dir() == tmp_path / "cfg"
        assert config.get_user_config_path() == tmp_path / "cfg" / "config.yaml"

    def test_xdg_config_home(
        self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        """Without an override, XDG_CONFIG_HOME is used."""
        monkeypatch.delenv("JESTIFY_CONFIG_DIR")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert config.get_user_config_dir() == tmp_path / "xdg" / "jestify"

    def test_project_path(self, tmp_path: _pathlib.Path) -> None:
        """Project config lives under .jestify/."""
        assert config.get_project_config_path(tmp_path) == tmp_path / ".jestify" / "config.yaml"
