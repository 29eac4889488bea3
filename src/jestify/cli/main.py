"""
Main CLI entry point for Jestify.

Provides the command-line interface using Click. `jestify run` imports one
explicitly named callable and runs it against a freshly configured default
engine; it does not search for tests.
"""

import asyncio as _asyncio
import importlib as _importlib
import inspect as _inspect
import json as _json
import logging as _logging
import os as _os
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.logging as _rich_logging
import yaml as _yaml

import jestify
import jestify.api as api
import jestify.config as config
import jestify.core as core
import jestify.reporting as reporting

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

DEFAULT_TARGET_FUNCTION = "main"
"""Callable looked up when TARGET names only a module."""

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _run_async(coro: _typing.Coroutine[_typing.Any, _typing.Any, _typing.Any]) -> _typing.Any:
    """Run an async coroutine synchronously."""
    return _asyncio.run(coro)


def _configure_logging(level: str) -> None:
    """Route jestify's loggers to a Rich handler at `level`."""
    logger = _logging.getLogger("jestify")
    for handler in list(logger.handlers):
        if isinstance(handler, _rich_logging.RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(_rich_logging.RichHandler(show_path=False, markup=False))
    logger.setLevel(level)


def _load_target(target: str) -> _typing.Callable[[], _typing.Any]:
    """
    Import the callable named by TARGET ("module" or "module:function").

    Raises:
        click.ClickException: If the module or callable cannot be found.
    """
    module_name, _, attr = target.partition(":")
    attr = attr or DEFAULT_TARGET_FUNCTION
    if not module_name:
        raise _click.ClickException(f"Invalid target '{target}': expected module[:function]")

    # Make modules in the working directory importable, like `python -m`
    cwd = _os.getcwd()
    if cwd not in _sys.path:
        _sys.path.insert(0, cwd)

    try:
        module = _importlib.import_module(module_name)
    except ImportError as e:
        raise _click.ClickException(f"Cannot import module '{module_name}': {e}") from e

    func = getattr(module, attr, None)
    if func is None:
        raise _click.ClickException(f"Module '{module_name}' has no attribute '{attr}'")
    if not callable(func):
        raise _click.ClickException(f"'{target}' is not callable")
    return _typing.cast(_typing.Callable[[], _typing.Any], func)


async def _invoke(func: _typing.Callable[[], _typing.Any]) -> None:
    """Call the target and await its result if it returns an awaitable."""
    result = func()
    if _inspect.isawaitable(result):
        await result


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(jestify.__version__, "-v", "--version", prog_name="jestify")
@_click.pass_context
def cli(ctx: _click.Context) -> None:
    """Jestify - programmatic async test execution."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = config.Settings()
    except config.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid configuration:\n{e}") from e


@cli.command()
@_click.argument("target")
@_click.option(
    "--timeout",
    "timeout_ms",
    type=_click.IntRange(min=1),
    default=None,
    help="Timeout for every suite and test, in milliseconds",
)
@_click.option(
    "--parallelism",
    "max_parallelism",
    type=_click.IntRange(min=1),
    default=None,
    help="Maximum concurrent cases of a parallel each",
)
@_click.option(
    "--reporter",
    "reporter_type",
    type=_click.Choice(["logging", "rich"]),
    default=None,
    help="How outcomes are rendered",
)
@_click.option(
    "--log-level",
    type=_click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level for jestify's loggers",
)
@_click.pass_context
def run(
    ctx: _click.Context,
    target: str,
    timeout_ms: int | None,
    max_parallelism: int | None,
    reporter_type: str | None,
    log_level: str | None,
) -> None:
    """Run TARGET, a callable given as module[:function] (default: main).

    The callable may be sync or async. It runs against a default engine
    built from settings and the options given here, so the declarative
    functions (jestify.describe, jestify.it, ...) inside it use them.

    Exits with status 1 if any test failed, timed out or was cancelled,
    a teardown hook failed, or the target itself raised.

    Examples:
        jestify run tests_math                    # runs tests_math.main()
        jestify run suites.api:smoke --timeout 200
        jestify run suites.api:smoke --reporter rich --parallelism 4
    """
    base_settings: config.Settings = ctx.obj["settings"]
    overrides = {
        key: value
        for key, value in {
            "default_timeout_ms": timeout_ms,
            "max_parallelism": max_parallelism,
            "reporter": reporter_type,
            "log_level": log_level.upper() if log_level else None,
        }.items()
        if value is not None
    }
    settings = base_settings.model_copy(update=overrides)

    _configure_logging(settings.log_level)
    func = _load_target(target)

    recorder = reporting.RecordingReporter()
    reporter = reporting.MultiReporter(reporting.create_reporter(settings.reporter), recorder)
    api.configure(engine=core.Engine.from_settings(settings, reporter=reporter))

    error: Exception | None = None
    try:
        _run_async(_invoke(func))
    except Exception as e:
        error = e
    finally:
        api.reset()

    summary = recorder.summary()
    _click.echo(summary.describe())
    if error is not None:
        _click.echo(f"Error: {type(error).__name__}: {error}", err=True)
    if error is not None or not summary.ok:
        ctx.exit(1)


@cli.group(name="config")
def config_cmd() -> None:
    """Configuration commands."""


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool) -> None:
    """Show effective configuration from all sources.

    Examples:
        jestify config show          # Show config as YAML
        jestify config show --json   # Show as JSON
    """
    settings: config.Settings = ctx.obj["settings"]
    full_config = settings.model_dump(mode="json")

    if as_json:
        _click.echo(_json.dumps(full_config, indent=2))
    else:
        _click.echo(_yaml.dump(full_config, default_flow_style=False, sort_keys=False), nl=False)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="jestify")


if __name__ == "__main__":
    main()
