"""
Execution engine - runs suites, tests and data-driven cases.

The engine composes each run's cancellation signal from the caller's signal
and a timer for the effective timeout, drives the lifecycle registry's hooks
around suite and test bodies, classifies how tests end and reports every
outcome.

Teardown hooks (after_all, after_each) always run under the caller's signal
alone, so a timeout that already fired does not also cancel cleanup.
"""

from __future__ import annotations

import asyncio as _asyncio
import functools as _functools
import logging as _logging
import string as _string
import time as _time
import typing as _typing

import jestify.constants as constants
import jestify.core.cancellation as cancellation
import jestify.core.context as context
import jestify.core.errors as errors
import jestify.core.lifecycle as lifecycle
import jestify.core.outcome as outcome
import jestify.core.suite as suite_module

if _typing.TYPE_CHECKING:
    import jestify.config as config
    import jestify.reporting.base as reporting_base

_logger = _logging.getLogger(__name__)

Body = _typing.Callable[[cancellation.CancellationSignal], _typing.Any]
"""A suite or test body takes the run's signal and may return an awaitable."""

CaseBody = _typing.Callable[[_typing.Any, cancellation.CancellationSignal], _typing.Any]
"""A data-driven body takes the case and the run's signal."""


class Engine:
    """
    Runs suites and tests against an injectable registry and reporter.

    The engine holds no global state. Several engines may coexist, and one
    engine may serve many concurrent root suite runs.
    """

    def __init__(
        self,
        registry: lifecycle.LifecycleRegistry | None = None,
        reporter: reporting_base.Reporter | None = None,
        *,
        timeout_ms: int = constants.DEFAULT_TIMEOUT_MS,
        max_parallelism: int | None = None,
    ) -> None:
        """
        Initialize the engine.

        Test events and hook errors always reach the same reporter: an
        injected registry supplies the reporter when none is given, and must
        share it otherwise.

        Args:
            registry: Lifecycle registry. Built around `reporter` if omitted.
            reporter: Result reporter. Defaults to the registry's reporter,
                or a LoggingReporter when there is no registry either.
            timeout_ms: Effective timeout for suite and test runs.
            max_parallelism: Default cap for parallel `each` runs.

        Raises:
            ValueError: If `registry` reports to a different reporter.
        """
        if reporter is None:
            if registry is not None:
                reporter = registry.reporter
            else:
                import jestify.reporting as reporting

                reporter = reporting.LoggingReporter()
        if registry is not None and registry.reporter is not reporter:
            raise ValueError("Registry must report hook errors to the engine's reporter")
        self._reporter = reporter
        self._registry = registry or lifecycle.LifecycleRegistry(reporter)
        self._timeout_ms = _check_timeout(timeout_ms)
        self._max_parallelism = _check_parallelism(
            max_parallelism or constants.DEFAULT_MAX_PARALLELISM
        )

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings,
        *,
        reporter: reporting_base.Reporter | None = None,
        registry: lifecycle.LifecycleRegistry | None = None,
    ) -> Engine:
        """
        Create an engine configured from Settings.

        Args:
            settings: Loaded settings.
            reporter: Reporter to use instead of the one settings name.
            registry: Registry to use instead of a fresh one. Its reporter
                wins over the one settings name.

        Returns:
            Configured Engine.
        """
        if reporter is None and registry is not None:
            reporter = registry.reporter
        if reporter is None:
            # Import here to avoid circular imports
            import jestify.reporting as reporting

            reporter = reporting.create_reporter(settings.reporter)
        return cls(
            registry,
            reporter,
            timeout_ms=settings.default_timeout_ms,
            max_parallelism=settings.max_parallelism,
        )

    @property
    def registry(self) -> lifecycle.LifecycleRegistry:
        """Lifecycle registry used for the suite stack and hooks."""
        return self._registry

    @property
    def reporter(self) -> reporting_base.Reporter:
        """Reporter receiving every outcome."""
        return self._reporter

    @property
    def timeout_ms(self) -> int:
        """Effective timeout applied to runs that start from now on."""
        return self._timeout_ms

    @property
    def max_parallelism(self) -> int:
        """Default cap on concurrent cases of a parallel `each`."""
        return self._max_parallelism

    def set_timeout(self, timeout_ms: int) -> None:
        """
        Change the effective timeout.

        Runs already in flight keep the timeout they started with.

        Raises:
            ValueError: If `timeout_ms` is not greater than 0.
        """
        self._timeout_ms = _check_timeout(timeout_ms)

    def current_context(self) -> context.TestContext:
        """
        Return the TestContext live on the calling flow.

        Raises:
            LifecycleError: Outside any suite or test run.
        """
        ctx = self._registry.execution_context.current_test
        if ctx is None:
            raise errors.LifecycleError("no test context: not inside a describe or it block")
        return ctx

    # =========================================================================
    # Suite run
    # =========================================================================

    async def run_suite(
        self,
        title: str,
        body: Body,
        signal: cancellation.CancellationSignal | None = None,
    ) -> None:
        """
        Run one suite: before-all hooks, the body, then after-all hooks.

        The body registers hooks and awaits nested tests and suites against
        the new suite frame. After-all hooks, the pop and the context restore
        happen even when setup or the body fails.

        Args:
            title: Suite title.
            body: Called with the suite's combined signal.
            signal: Caller's cancellation signal (never fires if omitted).

        Raises:
            TestTimeoutError: If the suite's own timer fired.
            TestFailureError: If a signal other than the caller's or the
                suite's own interrupted setup or the body.
            OperationCancelledError: Re-raised unchanged when the caller's
                signal fired.
            Exception: Whatever else before-all hooks or the body raised.
        """
        _check_title(title)
        _check_callable(body, "Suite body")
        external = signal or cancellation.CancellationSignal()
        started = _time.perf_counter()
        timeout_ms = self._timeout_ms

        self._reporter.on_suite_start(title)
        suite = suite_module.Suite(title)
        self._registry.push_suite(suite)
        combined = cancellation.CancellationSignal.linked(external)
        scope = self._registry.execution_context.test_scope(
            context.TestContext(suite, title, timeout_ms, combined)
        )
        with combined, scope:
            try:
                combined.cancel_after(timeout_ms / 1000)
                await self._registry.run_before_all_hooks(suite, combined)
                await cancellation.run_guarded(combined, body)
                # Hooks the body registered but no test triggered
                await self._registry.run_before_all_hooks(suite, combined)
            except cancellation.OperationCancelledError as e:
                if external.cancelled:
                    raise
                if combined.timed_out:
                    _logger.warning("Suite %r timed out after %dms", title, timeout_ms)
                    raise errors.TestTimeoutError(title, timeout_ms) from e
                # Nobody cancelled this suite: e.g. a late before-all hook cut
                # short by the timer of the test that triggered it
                raise errors.TestFailureError(title, _elapsed_ms(started), e) from e
            finally:
                try:
                    await self._registry.run_after_all_hooks(suite, external)
                finally:
                    self._registry.pop_suite()

    # =========================================================================
    # Test run
    # =========================================================================

    async def run_test(
        self,
        title: str,
        body: Body,
        signal: cancellation.CancellationSignal | None = None,
    ) -> outcome.TestOutcome:
        """
        Run one test inside the current suite.

        Before-all hooks that open suites registered since their last
        before-all phase run first, then before-each hooks of every open
        suite outer to inner, then the body, then after-each hooks inner to
        outer. The outcome is reported
        and, unless successful, raised.

        Args:
            title: Test title.
            body: Called with the test's combined signal.
            signal: Caller's cancellation signal (never fires if omitted).

        Returns:
            The successful TestOutcome.

        Raises:
            LifecycleError: If no suite is open.
            TestTimeoutError: If the test's own timer fired.
            TestFailureError: If a before-each hook or the body raised.
            OperationCancelledError: Re-raised unchanged when the caller's
                signal fired.
            asyncio.CancelledError: Re-raised unchanged when the awaiting
                task was cancelled.
        """
        _check_title(title)
        _check_callable(body, "Test body")
        external = signal or cancellation.CancellationSignal()
        started = _time.perf_counter()
        timeout_ms = self._timeout_ms
        suite = self._registry.get_current_suite()

        combined = cancellation.CancellationSignal.linked(external)
        ctx = context.TestContext(suite, title, timeout_ms, combined)
        with combined, self._registry.execution_context.test_scope(ctx):
            error: BaseException | None = None
            try:
                combined.cancel_after(timeout_ms / 1000)
                await self._registry.run_pending_before_all_hooks(combined)
                await self._registry.run_before_each_hooks(combined)
                await cancellation.run_guarded(combined, body)
            except (Exception, _asyncio.CancelledError) as e:
                error = e
            elapsed_ms = _elapsed_ms(started)
            combined.close()

            await self._registry.run_after_each_hooks(external)
            return self._settle(title, elapsed_ms, timeout_ms, error, external, combined)

    def _settle(
        self,
        title: str,
        elapsed_ms: float,
        timeout_ms: int,
        error: BaseException | None,
        external: cancellation.CancellationSignal,
        combined: cancellation.CancellationSignal,
    ) -> outcome.TestOutcome:
        """Classify how a test ended, report it, and raise unless it succeeded."""
        kind = _classify(error, external, combined)
        _logger.debug("Test %r finished: %s", title, kind.value)

        if kind is outcome.OutcomeKind.SUCCESS:
            self._reporter.on_test_success(title, elapsed_ms)
            return outcome.TestOutcome(title, kind, elapsed_ms)

        assert error is not None
        if kind is outcome.OutcomeKind.CANCELLED:
            self._reporter.on_test_cancelled(title, elapsed_ms)
            raise error
        if kind is outcome.OutcomeKind.TIMEOUT:
            self._reporter.on_test_timeout(title, timeout_ms)
            raise errors.TestTimeoutError(title, timeout_ms) from error

        self._reporter.on_test_failure(title, elapsed_ms, error)
        raise errors.TestFailureError(title, elapsed_ms, error) from error

    # =========================================================================
    # Data-driven runs
    # =========================================================================

    async def run_each(
        self,
        template: str,
        cases: _typing.Iterable[_typing.Any],
        body: CaseBody,
        *,
        parallel: bool = False,
        signal: cancellation.CancellationSignal | None = None,
        max_parallelism: int | None = None,
    ) -> list[outcome.TestOutcome]:
        """
        Run `body` once per case as independent test runs.

        Sequential mode runs the cases in order and stops at the first
        failure. Parallel mode runs every case in its own task, at most
        `max_parallelism` at a time, and only raises after all cases finished.

        Args:
            template: Title template; see format_title().
            cases: Case values, in order.
            body: Called with (case, signal).
            parallel: Run cases concurrently.
            signal: Caller's cancellation signal shared by all cases.
            max_parallelism: Concurrency cap (engine default if omitted).

        Returns:
            One TestOutcome per case, in case order.

        Raises:
            EachFailureError: If several parallel cases failed.
            Exception: The failure of the single failing case otherwise.
        """
        _check_title(template)
        _check_callable(body, "Each body")
        items = list(cases)

        if not parallel:
            outcomes = []
            for case in items:
                outcomes.append(
                    await self.run_test(
                        format_title(template, case),
                        _functools.partial(body, case),
                        signal,
                    )
                )
            return outcomes

        limit = _check_parallelism(max_parallelism or self._max_parallelism)
        semaphore = _asyncio.Semaphore(limit)
        _logger.debug("Running %d cases of %r with parallelism %d", len(items), template, limit)

        async def run_case(case: _typing.Any) -> outcome.TestOutcome:
            async with semaphore:
                return await self.run_test(
                    format_title(template, case),
                    _functools.partial(body, case),
                    signal,
                )

        results = await _asyncio.gather(
            *(run_case(case) for case in items),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise errors.EachFailureError(template, failures)
        return _typing.cast(list[outcome.TestOutcome], results)

    # =========================================================================
    # Skip
    # =========================================================================

    def skip(self, title: str, reason: str | None = None) -> None:
        """
        Report a test as skipped.

        Purely advisory: no hooks run and the caller must not run the body.
        """
        _check_title(title)
        self._reporter.on_test_skipped(title, reason)


def format_title(template: str, case: _typing.Any) -> str:
    """
    Build the title of one data-driven case.

    A template with a positional placeholder ("{}", "{0}", "{0!r}", ...) is
    formatted with the case; any other template gets " - <case>" appended.

    Raises:
        ValueError: If the template needs more than the single case, e.g.
            "{} vs {}" or "{0} {name}".
    """
    if not _has_positional_field(template):
        return f"{template} - {case}"
    try:
        return template.format(case)
    except (IndexError, KeyError, AttributeError) as e:
        raise ValueError(f"Cannot format title template {template!r} with {case!r}: {e}") from e


def _has_positional_field(template: str) -> bool:
    try:
        parsed = list(_string.Formatter().parse(template))
    except ValueError:
        return False
    for _literal, field_name, _spec, _conversion in parsed:
        if field_name is None:
            continue
        root = field_name.split(".", 1)[0].split("[", 1)[0]
        if root in ("", "0"):
            return True
    return False


def _classify(
    error: BaseException | None,
    external: cancellation.CancellationSignal,
    combined: cancellation.CancellationSignal,
) -> outcome.OutcomeKind:
    if error is None:
        return outcome.OutcomeKind.SUCCESS
    if isinstance(error, _asyncio.CancelledError):
        return outcome.OutcomeKind.CANCELLED
    if isinstance(error, cancellation.OperationCancelledError):
        # The caller's state decides: a timer linked to an already-cancelled
        # caller signal still counts as the caller's cancellation.
        if external.cancelled:
            return outcome.OutcomeKind.CANCELLED
        if combined.cancelled:
            return outcome.OutcomeKind.TIMEOUT
    return outcome.OutcomeKind.FAILURE


def _elapsed_ms(started: float) -> float:
    return round((_time.perf_counter() - started) * 1000, 2)


def _check_title(title: str) -> None:
    if not title:
        raise ValueError("Title must not be empty")


def _check_callable(func: _typing.Any, what: str) -> None:
    if not callable(func):
        raise TypeError(f"{what} must be callable, got {type(func).__name__}")


def _check_timeout(timeout_ms: int) -> int:
    if timeout_ms <= 0:
        raise ValueError(f"Timeout must be greater than 0, got {timeout_ms}")
    return timeout_ms


def _check_parallelism(limit: int) -> int:
    if limit < 1:
        raise ValueError(f"Parallelism must be at least 1, got {limit}")
    return limit
