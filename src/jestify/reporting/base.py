"""
Reporter interface.

The engine announces every suite start, test outcome, skip and swallowed hook
error through a Reporter. How the events are rendered (log records, console
lines, collected summaries) is up to the implementation, which allows
injecting a recording reporter for testing.
"""

import abc as _abc

import jestify.core.suite as suite_module


class Reporter(_abc.ABC):
    """Abstract base class for all result reporters."""

    @_abc.abstractmethod
    def on_suite_start(self, title: str) -> None:
        """A suite run began."""
        ...

    @_abc.abstractmethod
    def on_test_success(self, title: str, elapsed_ms: float) -> None:
        """A test body completed normally."""
        ...

    @_abc.abstractmethod
    def on_test_timeout(self, title: str, timeout_ms: int) -> None:
        """A test exceeded its effective timeout."""
        ...

    @_abc.abstractmethod
    def on_test_cancelled(self, title: str, elapsed_ms: float) -> None:
        """A test was stopped by its caller's cancellation."""
        ...

    @_abc.abstractmethod
    def on_test_failure(
        self,
        title: str,
        elapsed_ms: float,
        error: BaseException,
    ) -> None:
        """A test body raised."""
        ...

    @_abc.abstractmethod
    def on_test_skipped(self, title: str, reason: str | None = None) -> None:
        """A test was declared skipped."""
        ...

    @_abc.abstractmethod
    def on_hook_error(
        self,
        hook_kind: suite_module.HookKind,
        scope_title: str,
        error: BaseException,
    ) -> None:
        """
        A teardown hook raised and the error was swallowed.

        Args:
            hook_kind: Which kind of hook failed.
            scope_title: Title of the suite that owns the hook.
            error: The exception the hook raised.
        """
        ...
