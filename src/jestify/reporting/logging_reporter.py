"""
Logging reporter - renders outcomes as stdlib log records.

This is the default reporter. It writes to the `jestify.results` logger and
never configures handlers; the application decides where records go.
"""

import logging as _logging

import jestify.constants as constants
import jestify.core.suite as suite_module
import jestify.reporting.base as base


class LoggingReporter(base.Reporter):
    """Reporter that emits one log record per event."""

    def __init__(self, logger: _logging.Logger | None = None) -> None:
        """
        Initialize the reporter.

        Args:
            logger: Target logger (the `jestify.results` logger if omitted).
        """
        self._logger = logger or _logging.getLogger(constants.RESULTS_LOGGER_NAME)

    @property
    def logger(self) -> _logging.Logger:
        """Logger receiving the records."""
        return self._logger

    def on_suite_start(self, title: str) -> None:
        self._logger.info("[Describe] %s", title)

    def on_test_success(self, title: str, elapsed_ms: float) -> None:
        self._logger.info("✔ %s (Completed in %.0f ms)", title, elapsed_ms)

    def on_test_timeout(self, title: str, timeout_ms: int) -> None:
        self._logger.warning("⚠ %s (Timed out after %d ms)", title, timeout_ms)

    def on_test_cancelled(self, title: str, elapsed_ms: float) -> None:
        self._logger.warning("⚠ %s (Cancelled after %.0f ms)", title, elapsed_ms)

    def on_test_failure(
        self,
        title: str,
        elapsed_ms: float,
        error: BaseException,
    ) -> None:
        self._logger.error(
            "✘ %s (Failed after %.0f ms)",
            title,
            elapsed_ms,
            exc_info=(type(error), error, error.__traceback__),
        )

    def on_test_skipped(self, title: str, reason: str | None = None) -> None:
        suffix = f"(Skipped: {reason})" if reason is not None else "(Skipped)"
        self._logger.info("⏭ %s %s", title, suffix)

    def on_hook_error(
        self,
        hook_kind: suite_module.HookKind,
        scope_title: str,
        error: BaseException,
    ) -> None:
        self._logger.error(
            "Error in %s hook for suite: %s",
            hook_kind.label,
            scope_title,
            exc_info=(type(error), error, error.__traceback__),
        )
