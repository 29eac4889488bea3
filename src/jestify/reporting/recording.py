"""
Recording reporter and run summaries.

RecordingReporter keeps every event in memory, in arrival order. The CLI uses
it to decide the exit status; tests use it to assert on what the engine
reported.
"""

from __future__ import annotations

import dataclasses as _dataclasses

import jestify.core.outcome as outcome
import jestify.core.suite as suite_module
import jestify.reporting.base as base


@_dataclasses.dataclass(frozen=True)
class ReportEvent:
    """
    One event received by a RecordingReporter.

    Attributes:
        kind: Event name, e.g. "suite_start", "test_success", "hook_error".
        title: Test or suite title (scope title for hook errors).
        elapsed_ms: Elapsed time, for success/cancel/failure events.
        timeout_ms: Configured timeout, for timeout events.
        error: Exception, for failure and hook error events.
        reason: Skip reason, for skip events.
        hook_kind: Failing hook kind, for hook error events.
    """

    kind: str
    title: str
    elapsed_ms: float | None = None
    timeout_ms: int | None = None
    error: BaseException | None = None
    reason: str | None = None
    hook_kind: suite_module.HookKind | None = None


@_dataclasses.dataclass(frozen=True)
class TestRecord:
    """Terminal outcome of one test."""

    __test__ = False  # not a pytest test class

    title: str
    kind: outcome.OutcomeKind
    elapsed_ms: float | None = None
    message: str | None = None


@_dataclasses.dataclass
class RunSummary:
    """Aggregate view over recorded outcomes."""

    suites: list[str] = _dataclasses.field(default_factory=list)
    records: list[TestRecord] = _dataclasses.field(default_factory=list)
    hook_errors: list[ReportEvent] = _dataclasses.field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def passed(self) -> int:
        return self._count(outcome.OutcomeKind.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(outcome.OutcomeKind.FAILURE)

    @property
    def timed_out(self) -> int:
        return self._count(outcome.OutcomeKind.TIMEOUT)

    @property
    def cancelled(self) -> int:
        return self._count(outcome.OutcomeKind.CANCELLED)

    @property
    def skipped(self) -> int:
        return self._count(outcome.OutcomeKind.SKIPPED)

    @property
    def ok(self) -> bool:
        """True when nothing failed, timed out, was cancelled or broke a hook."""
        return not self.hook_errors and not any(
            r.kind.is_terminal_error for r in self.records
        )

    def _count(self, kind: outcome.OutcomeKind) -> int:
        return sum(1 for r in self.records if r.kind is kind)

    def describe(self) -> str:
        """One-line human summary, e.g. '3 passed, 1 failed, 1 skipped (5 tests)'."""
        parts = [f"{self.passed} passed"]
        for count, label in (
            (self.failed, "failed"),
            (self.timed_out, "timed out"),
            (self.cancelled, "cancelled"),
            (self.skipped, "skipped"),
            (len(self.hook_errors), "hook errors"),
        ):
            if count:
                parts.append(f"{count} {label}")
        return f"{', '.join(parts)} ({self.total} tests)"


class RecordingReporter(base.Reporter):
    """Reporter that stores every event for later inspection."""

    def __init__(self) -> None:
        self.events: list[ReportEvent] = []

    def on_suite_start(self, title: str) -> None:
        self.events.append(ReportEvent("suite_start", title))

    def on_test_success(self, title: str, elapsed_ms: float) -> None:
        self.events.append(ReportEvent("test_success", title, elapsed_ms=elapsed_ms))

    def on_test_timeout(self, title: str, timeout_ms: int) -> None:
        self.events.append(ReportEvent("test_timeout", title, timeout_ms=timeout_ms))

    def on_test_cancelled(self, title: str, elapsed_ms: float) -> None:
        self.events.append(ReportEvent("test_cancelled", title, elapsed_ms=elapsed_ms))

    def on_test_failure(
        self,
        title: str,
        elapsed_ms: float,
        error: BaseException,
    ) -> None:
        self.events.append(
            ReportEvent("test_failure", title, elapsed_ms=elapsed_ms, error=error)
        )

    def on_test_skipped(self, title: str, reason: str | None = None) -> None:
        self.events.append(ReportEvent("test_skipped", title, reason=reason))

    def on_hook_error(
        self,
        hook_kind: suite_module.HookKind,
        scope_title: str,
        error: BaseException,
    ) -> None:
        self.events.append(
            ReportEvent("hook_error", scope_title, error=error, hook_kind=hook_kind)
        )

    def kinds(self) -> list[str]:
        """Event kinds in arrival order."""
        return [e.kind for e in self.events]

    def titles(self, kind: str | None = None) -> list[str]:
        """Titles of all events, or of events of one kind, in arrival order."""
        return [e.title for e in self.events if kind is None or e.kind == kind]

    def of_kind(self, kind: str) -> list[ReportEvent]:
        """All events of one kind, in arrival order."""
        return [e for e in self.events if e.kind == kind]

    def summary(self) -> RunSummary:
        """Aggregate the recorded events."""
        summary = RunSummary()
        for event in self.events:
            if event.kind == "suite_start":
                summary.suites.append(event.title)
            elif event.kind == "hook_error":
                summary.hook_errors.append(event)
            else:
                summary.records.append(_to_record(event))
        return summary

    def clear(self) -> None:
        """Forget all recorded events."""
        self.events.clear()


_KIND_BY_EVENT: dict[str, outcome.OutcomeKind] = {
    "test_success": outcome.OutcomeKind.SUCCESS,
    "test_timeout": outcome.OutcomeKind.TIMEOUT,
    "test_cancelled": outcome.OutcomeKind.CANCELLED,
    "test_failure": outcome.OutcomeKind.FAILURE,
    "test_skipped": outcome.OutcomeKind.SKIPPED,
}


def _to_record(event: ReportEvent) -> TestRecord:
    message: str | None = None
    if event.error is not None:
        message = f"{type(event.error).__name__}: {event.error}"
    elif event.reason is not None:
        message = event.reason
    elif event.timeout_ms is not None:
        message = f"timed out after {event.timeout_ms} ms"
    return TestRecord(
        title=event.title,
        kind=_KIND_BY_EVENT[event.kind],
        elapsed_ms=event.elapsed_ms,
        message=message,
    )
