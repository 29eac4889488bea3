"""Outcome classification for test runs."""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum


class OutcomeKind(_enum.Enum):
    """How a test run ended."""

    SUCCESS = "success"
    """The body completed normally."""

    TIMEOUT = "timeout"
    """The run's own timer fired first."""

    CANCELLED = "cancelled"
    """The caller's signal (or the caller's task) requested cancellation."""

    FAILURE = "failure"
    """The body or a setup hook raised."""

    SKIPPED = "skipped"
    """The test was declared skipped and never ran."""

    @property
    def is_terminal_error(self) -> bool:
        """Whether the engine raises to its caller for this outcome."""
        return self in {OutcomeKind.TIMEOUT, OutcomeKind.CANCELLED, OutcomeKind.FAILURE}


@_dataclasses.dataclass(frozen=True)
class TestOutcome:
    """
    Result of a test run that completed.

    Attributes:
        title: Test title.
        kind: Outcome classification.
        elapsed_ms: Time spent in before-each hooks and the body.
    """

    __test__ = False  # not a pytest test class

    title: str
    kind: OutcomeKind
    elapsed_ms: float
