"""
Flow-local execution context.

Each logical execution flow (an asyncio task and everything it awaits) owns a
stack of open suites and the TestContext of whatever is currently running.
Both live in contextvars, so tasks started by asyncio.create_task() or
asyncio.gather() begin with a copy of their parent's state and never write
back into it. The stack is an immutable tuple so copies share nothing mutable.
"""

from __future__ import annotations

import contextlib as _contextlib
import contextvars as _contextvars
import itertools as _itertools
import typing as _typing

import jestify.core.cancellation as cancellation
import jestify.core.suite as suite_module

_instance_ids = _itertools.count()


class TestContext:
    """
    Describes the suite or test currently executing on a flow.

    Besides identification it carries a small key/value bag that hooks and
    bodies of the same run can use to share data.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        suite: suite_module.Suite,
        title: str,
        timeout_ms: int,
        signal: cancellation.CancellationSignal,
    ) -> None:
        """
        Initialize the context.

        Args:
            suite: Suite that owns the running suite body or test.
            title: Title of the running suite or test.
            timeout_ms: Effective timeout of the run (> 0).
            signal: Signal that is live for the run's duration.
        """
        if not title:
            raise ValueError("Test title must not be empty")
        if timeout_ms <= 0:
            raise ValueError(f"Timeout must be greater than 0, got {timeout_ms}")
        self.suite = suite
        self.title = title
        self.timeout_ms = timeout_ms
        self.signal = signal
        self._data: dict[str, _typing.Any] = {}

    def set(self, key: str, value: _typing.Any) -> None:
        """Store `value` under `key`. None is not a storable value."""
        _check_key(key)
        if value is None:
            raise ValueError(f"Cannot store None under '{key}'")
        self._data[key] = value

    def get(self, key: str, default: _typing.Any = None) -> _typing.Any:
        """Return the value stored under `key`, or `default`."""
        _check_key(key)
        return self._data.get(key, default)

    def remove(self, key: str) -> bool:
        """Remove `key`; returns whether it was present."""
        _check_key(key)
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        """Drop all shared data."""
        self._data.clear()

    def __repr__(self) -> str:
        return f"<TestContext {self.title!r} suite={self.suite.title!r} timeout={self.timeout_ms}ms>"


def _check_key(key: str) -> None:
    if not key:
        raise ValueError("Key must not be empty")


class ExecutionContext:
    """
    Flow-local storage for the suite stack and the current TestContext.

    Every instance has its own context variables, so two engines never see
    each other's stacks even on the same flow.
    """

    def __init__(self) -> None:
        instance = next(_instance_ids)
        self._stack: _contextvars.ContextVar[tuple[suite_module.Suite, ...]] = (
            _contextvars.ContextVar(f"jestify_suite_stack_{instance}", default=())
        )
        self._test: _contextvars.ContextVar[TestContext | None] = _contextvars.ContextVar(
            f"jestify_test_context_{instance}", default=None
        )

    @property
    def stack(self) -> tuple[suite_module.Suite, ...]:
        """Open suites on the calling flow, outermost first."""
        return self._stack.get()

    def push(self, suite: suite_module.Suite) -> None:
        """Open `suite` as the innermost frame of the calling flow."""
        self._stack.set(self._stack.get() + (suite,))

    def pop(self) -> suite_module.Suite | None:
        """Close the innermost frame; returns None when nothing is open."""
        stack = self._stack.get()
        if not stack:
            return None
        self._stack.set(stack[:-1])
        return stack[-1]

    @property
    def current_test(self) -> TestContext | None:
        """The TestContext live on the calling flow, if any."""
        return self._test.get()

    @_contextlib.contextmanager
    def test_scope(self, ctx: TestContext) -> _typing.Iterator[TestContext]:
        """Install `ctx` for the duration of the block, then restore the previous one."""
        token = self._test.set(ctx)
        try:
            yield ctx
        finally:
            self._test.reset(token)
