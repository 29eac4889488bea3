"""Reporter that forwards every event to several reporters."""

import jestify.core.suite as suite_module
import jestify.reporting.base as base


class MultiReporter(base.Reporter):
    """
    Fan-out reporter.

    Events are forwarded to each child in the order the children were given.
    """

    def __init__(self, *reporters: base.Reporter) -> None:
        self._reporters = list(reporters)

    def on_suite_start(self, title: str) -> None:
        for reporter in self._reporters:
            reporter.on_suite_start(title)

    def on_test_success(self, title: str, elapsed_ms: float) -> None:
        for reporter in self._reporters:
            reporter.on_test_success(title, elapsed_ms)

    def on_test_timeout(self, title: str, timeout_ms: int) -> None:
        for reporter in self._reporters:
            reporter.on_test_timeout(title, timeout_ms)

    def on_test_cancelled(self, title: str, elapsed_ms: float) -> None:
        for reporter in self._reporters:
            reporter.on_test_cancelled(title, elapsed_ms)

    def on_test_failure(
        self,
        title: str,
        elapsed_ms: float,
        error: BaseException,
    ) -> None:
        for reporter in self._reporters:
            reporter.on_test_failure(title, elapsed_ms, error)

    def on_test_skipped(self, title: str, reason: str | None = None) -> None:
        for reporter in self._reporters:
            reporter.on_test_skipped(title, reason)

    def on_hook_error(
        self,
        hook_kind: suite_module.HookKind,
        scope_title: str,
        error: BaseException,
    ) -> None:
        for reporter in self._reporters:
            reporter.on_hook_error(hook_kind, scope_title, error)
