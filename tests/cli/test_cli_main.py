"""Tests for the jestify command-line interface."""

import json as _json
import logging as _logging
import pathlib as _pathlib
import sys as _sys
import textwrap as _textwrap
import typing as _typing
import uuid as _uuid

import click.testing as _click_testing
import pytest as _pytest
import rich.logging as _rich_logging

import jestify
import jestify.api as api
import jestify.cli as cli

PASSING_TARGET = """
    import jestify

    async def main():
        async def suite():
            await jestify.it("adds", lambda: None)
            jestify.skip("subtracts", "not written yet")

        await jestify.describe("math", suite)
"""

FAILING_TARGET = """
    import jestify

    async def main():
        async def suite():
            def broken():
                raise AssertionError("1 + 1 != 3")

            await jestify.it("adds", lambda: None)
            await jestify.it("breaks", broken)

        await jestify.describe("math", suite)
"""


@_pytest.fixture
def runner() -> _click_testing.CliRunner:
    """Click test runner."""
    return _click_testing.CliRunner()


@_pytest.fixture(autouse=True)
def restore_logging() -> _typing.Iterator[None]:
    """Remove handlers the CLI attaches to the jestify logger."""
    logger = _logging.getLogger("jestify")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if isinstance(handler, _rich_logging.RichHandler):
            logger.removeHandler(handler)
    logger.setLevel(level)


@_pytest.fixture
def write_target(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _typing.Callable[[str], str]:
    """Write a target module into an importable working directory; returns its name."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.syspath_prepend(str(tmp_path))

    def write(source: str) -> str:
        name = f"target_{_uuid.uuid4().hex}"
        (tmp_path / f"{name}.py").write_text(_textwrap.dedent(source), encoding="utf-8")
        monkeypatch.delitem(_sys.modules, name, raising=False)
        return name

    return write


class TestRunCommand:
    """Tests for `jestify run`."""

    def test_passing_target(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """A target whose tests pass exits 0 and prints the summary."""
        module = write_target(PASSING_TARGET)

        result = runner.invoke(cli.cli, ["run", module])

        assert result.exit_code == 0, result.output
        assert "1 passed, 1 skipped (2 tests)" in result.output

    def test_failing_target(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """A failing test makes the command exit 1 and name the error."""
        module = write_target(FAILING_TARGET)

        result = runner.invoke(cli.cli, ["run", f"{module}:main"])

        assert result.exit_code == 1
        assert "1 passed, 1 failed (2 tests)" in result.output
        assert "Error: TestFailureError" in result.output

    def test_sync_target_with_custom_function(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """Synchronous callables other than main can be targeted."""
        module = write_target(
            """
            def smoke():
                print("smoke ran")
            """
        )

        result = runner.invoke(cli.cli, ["run", f"{module}:smoke"])

        assert result.exit_code == 0, result.output
        assert "smoke ran" in result.output
        assert "0 passed (0 tests)" in result.output

    def test_options_reach_default_engine(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """--timeout and --parallelism configure the engine the target sees."""
        module = write_target(
            """
            import jestify

            def main():
                engine = jestify.get_engine()
                print(f"timeout={engine.timeout_ms} parallelism={engine.max_parallelism}")
            """
        )

        result = runner.invoke(
            cli.cli, ["run", module, "--timeout", "123", "--parallelism", "2"]
        )

        assert result.exit_code == 0, result.output
        assert "timeout=123 parallelism=2" in result.output

    def test_rich_reporter(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """--reporter rich prints outcome lines to the console."""
        module = write_target(PASSING_TARGET)

        result = runner.invoke(cli.cli, ["run", module, "--reporter", "rich"])

        assert result.exit_code == 0, result.output
        assert "✔ adds" in result.output

    def test_default_engine_reset_after_run(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """The engine configured for the run does not outlive it."""
        module = write_target(PASSING_TARGET)
        runner.invoke(cli.cli, ["run", module])
        assert api._engine is None

    def test_missing_module(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """An unknown module is a usage error."""
        result = runner.invoke(cli.cli, ["run", "no_such_module_here"])
        assert result.exit_code == 1
        assert "Cannot import module 'no_such_module_here'" in result.output

    def test_missing_function(
        self,
        runner: _click_testing.CliRunner,
        write_target: _typing.Callable[[str], str],
    ) -> None:
        """A module without the named callable is a usage error."""
        module = write_target("VALUE = 1\n")

        result = runner.invoke(cli.cli, ["run", module])

        assert result.exit_code == 1
        assert "has no attribute 'main'" in result.output

    def test_invalid_timeout(self, runner: _click_testing.CliRunner) -> None:
        """Non-positive timeouts are rejected by option validation."""
        result = runner.invoke(cli.cli, ["run", "anything", "--timeout", "0"])
        assert result.exit_code == 2


class TestConfigCommand:
    """Tests for `jestify config show`."""

    def test_show_yaml(self, runner: _click_testing.CliRunner) -> None:
        """The default output is YAML."""
        result = runner.invoke(cli.cli, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert "default_timeout_ms: 5000" in result.output
        assert "reporter: logging" in result.output

    def test_show_json_reflects_env(
        self,
        runner: _click_testing.CliRunner,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """--json prints the effective settings, including environment overrides."""
        monkeypatch.setenv("JESTIFY_DEFAULT_TIMEOUT_MS", "250")

        result = runner.invoke(cli.cli, ["config", "show", "--json"])

        assert result.exit_code == 0, result.output
        data = _json.loads(result.output)
        assert data["default_timeout_ms"] == 250
        assert data["log_level"] == "INFO"

    def test_invalid_configuration(
        self,
        runner: _click_testing.CliRunner,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        """Invalid settings are reported instead of crashing."""
        monkeypatch.setenv("JESTIFY_DEFAULT_TIMEOUT_MS", "-1")

        result = runner.invoke(cli.cli, ["config", "show"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestVersion:
    """Tests for --version."""

    def test_version(self, runner: _click_testing.CliRunner) -> None:
        """--version prints the package version."""
        result = runner.invoke(cli.cli, ["--version"])
        assert result.exit_code == 0
        assert jestify.__version__ in result.output
