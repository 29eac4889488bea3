"""
Shared pytest fixtures for Jestify tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import jestify.api as api
import jestify.core.engine as engine_module
import jestify.reporting as reporting

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "JESTIFY_DEFAULT_TIMEOUT_MS",
    "JESTIFY_MAX_PARALLELISM",
    "JESTIFY_LOG_LEVEL",
    "JESTIFY_REPORTER",
    "JESTIFY_CONFIG_DIR",
    "JESTIFY_ENV_FILE",
]

# Timeout used by engine fixtures: long enough that ordinary bodies never hit it
FIXTURE_TIMEOUT_MS = 2000


# =============================================================================
# Environment
# =============================================================================


@_pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: _pytest.MonkeyPatch,
    tmp_path: _pathlib.Path,
) -> _typing.Iterator[None]:
    """
    Isolate every test from the user's jestify configuration.

    Clears JESTIFY_* variables, points the user config directory at an empty
    temp directory and the env file at a path that does not exist.
    """
    for key in ENV_KEYS_TO_CLEAR:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JESTIFY_CONFIG_DIR", str(tmp_path / "user-config"))
    monkeypatch.setenv("JESTIFY_ENV_FILE", str(tmp_path / "missing.env"))
    yield


@_pytest.fixture(autouse=True)
def reset_default_engine() -> _typing.Iterator[None]:
    """Drop the process-wide default engine after each test."""
    yield
    api.reset()


# =============================================================================
# Engines
# =============================================================================


@_pytest.fixture
def recorder() -> reporting.RecordingReporter:
    """A fresh recording reporter."""
    return reporting.RecordingReporter()


@_pytest.fixture
def engine(recorder: reporting.RecordingReporter) -> engine_module.Engine:
    """An engine reporting into `recorder` with a generous timeout."""
    return engine_module.Engine(reporter=recorder, timeout_ms=FIXTURE_TIMEOUT_MS)


@_pytest.fixture
def default_engine(engine: engine_module.Engine) -> engine_module.Engine:
    """`engine`, installed as the default engine behind jestify.describe/it/each."""
    return api.configure(engine=engine)
