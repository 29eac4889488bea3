"""
Declarative API: describe / it / each, hooks, skip and timeouts.

Every function forwards to a process-wide default Engine that is built lazily
from Settings on first use. configure() replaces it; reset() drops it so the
next call builds a fresh one.

Example usage:
    import jestify

    async def main():
        async def suite():
            @jestify.before_each
            def connect():
                ...

            await jestify.it("adds numbers", lambda: None)
            await jestify.each("doubles {}", [1, 2, 3], lambda n: None, parallel=True)

        await jestify.describe("math", suite)
"""

from __future__ import annotations

import typing as _typing

import jestify.callbacks as callbacks
import jestify.config as config
import jestify.core.cancellation as cancellation
import jestify.core.context as context
import jestify.core.engine as engine_module
import jestify.core.lifecycle as lifecycle
import jestify.core.outcome as outcome

if _typing.TYPE_CHECKING:
    import jestify.reporting.base as reporting_base

_F = _typing.TypeVar("_F", bound=_typing.Callable[..., _typing.Any])

_engine: engine_module.Engine | None = None


def get_engine() -> engine_module.Engine:
    """Return the default engine, building it from Settings on first use."""
    global _engine
    if _engine is None:
        _engine = engine_module.Engine.from_settings(config.Settings())
    return _engine


def configure(
    *,
    engine: engine_module.Engine | None = None,
    settings: config.Settings | None = None,
    reporter: reporting_base.Reporter | None = None,
    registry: lifecycle.LifecycleRegistry | None = None,
    timeout_ms: int | None = None,
) -> engine_module.Engine:
    """
    Replace the default engine.

    Call this at process start, not while suites are running.

    Args:
        engine: Use this engine as is (other arguments except timeout_ms
            are ignored).
        settings: Settings to build the engine from (loaded if omitted).
        reporter: Reporter overriding the one named by settings.
        registry: Lifecycle registry to use.
        timeout_ms: Effective timeout overriding settings.

    Returns:
        The new default engine.
    """
    global _engine
    if engine is None:
        engine = engine_module.Engine.from_settings(
            settings or config.Settings(),
            reporter=reporter,
            registry=registry,
        )
    if timeout_ms is not None:
        engine.set_timeout(timeout_ms)
    _engine = engine
    return engine


def reset() -> None:
    """Forget the default engine."""
    global _engine
    _engine = None


async def describe(
    title: str,
    body: _typing.Callable[..., _typing.Any],
    signal: cancellation.CancellationSignal | None = None,
) -> None:
    """Run a suite. `body` may take no arguments or the suite's signal."""
    await get_engine().run_suite(title, callbacks.with_signal(body), signal)


async def it(
    title: str,
    body: _typing.Callable[..., _typing.Any],
    signal: cancellation.CancellationSignal | None = None,
) -> outcome.TestOutcome:
    """Run a test in the current suite. `body` may take no arguments or the test's signal."""
    return await get_engine().run_test(title, callbacks.with_signal(body), signal)


async def each(
    title: str,
    cases: _typing.Iterable[_typing.Any],
    body: _typing.Callable[..., _typing.Any],
    *,
    parallel: bool = False,
    signal: cancellation.CancellationSignal | None = None,
    max_parallelism: int | None = None,
) -> list[outcome.TestOutcome]:
    """Run one test per case. `body` may take (), (case) or (case, signal)."""
    return await get_engine().run_each(
        title,
        cases,
        callbacks.with_case(body),
        parallel=parallel,
        signal=signal,
        max_parallelism=max_parallelism,
    )


def before_all(hook: _F) -> _F:
    """Register a before-all hook on the current suite. Usable as a decorator."""
    get_engine().registry.add_before_all_hook(callbacks.with_signal(hook))
    return hook


def after_all(hook: _F) -> _F:
    """Register an after-all hook on the current suite. Usable as a decorator."""
    get_engine().registry.add_after_all_hook(callbacks.with_signal(hook))
    return hook


def before_each(hook: _F) -> _F:
    """Register a before-each hook on the current suite. Usable as a decorator."""
    get_engine().registry.add_before_each_hook(callbacks.with_signal(hook))
    return hook


def after_each(hook: _F) -> _F:
    """Register an after-each hook on the current suite. Usable as a decorator."""
    get_engine().registry.add_after_each_hook(callbacks.with_signal(hook))
    return hook


def skip(title: str, reason: str | None = None) -> None:
    """Report a test as skipped without running anything."""
    get_engine().skip(title, reason)


def set_timeout(timeout_ms: int) -> None:
    """Set the effective timeout for runs that start from now on."""
    get_engine().set_timeout(timeout_ms)


def current_context() -> context.TestContext:
    """Return the TestContext of the running suite or test."""
    return get_engine().current_context()
