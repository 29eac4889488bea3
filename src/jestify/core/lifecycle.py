"""
Lifecycle registry - owns the suite stack and dispatches hooks.

Registration always targets the innermost open suite of the calling flow.
Execution follows a fixed policy:

- before_all / before_each are setup: hooks run sequentially in registration
  order and the first failure aborts the rest and propagates.
- after_all / after_each are teardown: every hook runs; each failure is
  reported as a hook error and swallowed so it never masks the run's outcome.

before_each walks the open suites outer to inner; after_each walks them inner
to outer.

Before-all hooks are usually registered by the suite body itself, after the
suite's initial before-all phase. Those run the first time something needs
them: before the next test of the suite starts, or once the body finishes.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import jestify.core.cancellation as cancellation
import jestify.core.context as context
import jestify.core.errors as errors
import jestify.core.suite as suite_module

if _typing.TYPE_CHECKING:
    import jestify.reporting.base as reporting_base

_logger = _logging.getLogger(__name__)


class LifecycleRegistry:
    """
    Central registry for the suite stack and hook execution.

    The stack itself lives in an ExecutionContext so that every logical
    execution flow sees its own nesting.
    """

    def __init__(
        self,
        reporter: reporting_base.Reporter,
        *,
        execution_context: context.ExecutionContext | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            reporter: Receives teardown hook errors.
            execution_context: Flow-local storage (a fresh one if omitted).
        """
        self._reporter = reporter
        self._context = execution_context or context.ExecutionContext()

    @property
    def reporter(self) -> reporting_base.Reporter:
        """Reporter receiving teardown hook errors."""
        return self._reporter

    @property
    def execution_context(self) -> context.ExecutionContext:
        """Flow-local storage backing this registry."""
        return self._context

    # =========================================================================
    # Stack
    # =========================================================================

    def get_current_suite(self) -> suite_module.Suite:
        """
        Return the innermost open suite of the calling flow.

        Raises:
            LifecycleError: If no suite is open.
        """
        stack = self._context.stack
        if not stack:
            raise errors.LifecycleError(
                "no open suite: test hooks must be called within a describe block"
            )
        return stack[-1]

    def push_suite(self, suite: suite_module.Suite) -> None:
        """Open `suite` as the innermost frame."""
        self._context.push(suite)
        _logger.debug("Pushed suite %r (depth %d)", suite.title, len(self._context.stack))

    def pop_suite(self) -> suite_module.Suite:
        """
        Close the innermost frame and return it.

        Raises:
            LifecycleError: If the stack is empty.
        """
        suite = self._context.pop()
        if suite is None:
            raise errors.LifecycleError("nothing to pop: no test suite is open")
        _logger.debug("Popped suite %r", suite.title)
        return suite

    # =========================================================================
    # Registration
    # =========================================================================

    def add_before_all_hook(self, hook: suite_module.HookCallback) -> None:
        """Register a before-all hook on the current suite."""
        self._add(suite_module.HookKind.BEFORE_ALL, hook)

    def add_after_all_hook(self, hook: suite_module.HookCallback) -> None:
        """Register an after-all hook on the current suite."""
        self._add(suite_module.HookKind.AFTER_ALL, hook)

    def add_before_each_hook(self, hook: suite_module.HookCallback) -> None:
        """Register a before-each hook on the current suite."""
        self._add(suite_module.HookKind.BEFORE_EACH, hook)

    def add_after_each_hook(self, hook: suite_module.HookCallback) -> None:
        """Register an after-each hook on the current suite."""
        self._add(suite_module.HookKind.AFTER_EACH, hook)

    def _add(self, kind: suite_module.HookKind, hook: suite_module.HookCallback) -> None:
        if not callable(hook):
            raise TypeError(f"{kind.label} hook must be callable, got {type(hook).__name__}")
        self.get_current_suite().add_hook(kind, hook)

    # =========================================================================
    # Execution
    # =========================================================================

    async def run_before_all_hooks(
        self,
        suite: suite_module.Suite,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """
        Run `suite`'s before-all hooks that have not run yet.

        Each hook runs at most once per suite run, even when several tests
        of the suite start concurrently. The first failure propagates, and
        every later call re-raises it without running further hooks.
        """
        async with suite.before_all_lock:
            if suite.before_all_error is not None:
                raise suite.before_all_error
            while suite.has_pending_before_all:
                hook = suite.before_all[suite.before_all_started]
                suite.before_all_started += 1
                try:
                    await cancellation.run_guarded(signal, hook)
                except Exception as e:
                    suite.before_all_error = e
                    raise

    async def run_pending_before_all_hooks(
        self,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """Run before-all hooks registered late on any open suite, outer to inner."""
        # Suites with any before-all hooks go through the lock so that a test
        # never overtakes a hook another test has started.
        for suite in self._context.stack:
            if suite.before_all:
                await self.run_before_all_hooks(suite, signal)

    async def run_after_all_hooks(
        self,
        suite: suite_module.Suite,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """Run every after-all hook of `suite`, reporting failures."""
        for hook in suite.hooks_for(suite_module.HookKind.AFTER_ALL):
            await self._run_teardown(suite_module.HookKind.AFTER_ALL, suite, hook, signal)

    async def run_before_each_hooks(
        self,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """Run before-each hooks of all open suites, outer to inner."""
        for suite in self._context.stack:
            for hook in suite.hooks_for(suite_module.HookKind.BEFORE_EACH):
                await cancellation.run_guarded(signal, hook)

    async def run_after_each_hooks(
        self,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """Run after-each hooks of all open suites, inner to outer, reporting failures."""
        for suite in reversed(self._context.stack):
            for hook in suite.hooks_for(suite_module.HookKind.AFTER_EACH):
                await self._run_teardown(suite_module.HookKind.AFTER_EACH, suite, hook, signal)

    async def _run_teardown(
        self,
        kind: suite_module.HookKind,
        suite: suite_module.Suite,
        hook: suite_module.HookCallback,
        signal: cancellation.CancellationSignal,
    ) -> None:
        try:
            await cancellation.run_guarded(signal, hook, call_when_cancelled=True)
        except Exception as e:
            _logger.debug("%s hook of suite %r failed: %s", kind.label, suite.title, e)
            self._reporter.on_hook_error(kind, suite.title, e)
