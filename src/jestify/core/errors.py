"""
Error taxonomy for suite and test runs.

- LifecycleError: structural misuse of the suite stack (a programming error)
- TestFailureError: a test body raised; wraps the cause and elapsed time
- TestTimeoutError: the run's own timer fired before the body completed
- EachFailureError: several cases of a parallel `each` failed

Cancellation requested by the caller is never wrapped: the original
OperationCancelledError (or asyncio.CancelledError) propagates unchanged.
"""

from __future__ import annotations

import typing as _typing


class LifecycleError(Exception):
    """Raised when hooks, suites or tests are used outside an open suite."""

    pass


class TestFailureError(Exception):
    """Raised when a test body fails with anything other than cancellation."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        title: str,
        elapsed_ms: float,
        cause: BaseException | None = None,
    ) -> None:
        self.title = title
        self.elapsed_ms = elapsed_ms
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = f"Test '{self.title}' failed after {self.elapsed_ms:.2f}ms"
        if self.cause is not None:
            message += f": {type(self.cause).__name__}: {self.cause}"
        return message


class TestTimeoutError(TestFailureError):
    """Raised when a run exceeds its effective timeout."""

    __test__ = False

    def __init__(self, title: str, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(title, float(timeout_ms))

    def _build_message(self) -> str:
        return (
            f"Test '{self.title}' timed out after {self.timeout_ms}ms. "
            "Consider increasing the timeout using set_timeout() "
            "if the test requires more time."
        )


class EachFailureError(Exception):
    """Raised when more than one case of a parallel `each` fails."""

    def __init__(
        self,
        template: str,
        errors: _typing.Sequence[BaseException],
    ) -> None:
        self.template = template
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} cases of '{template}' failed: "
            + "; ".join(str(e) for e in self.errors)
        )
