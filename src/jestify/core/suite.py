"""
Suite data model.

A Suite is the scope opened by one `describe` call. It carries four
append-only hook lists; the lifecycle registry decides when they run.
"""

from __future__ import annotations

import asyncio as _asyncio
import dataclasses as _dataclasses
import enum as _enum
import typing as _typing

if _typing.TYPE_CHECKING:
    import jestify.core.cancellation as cancellation

HookCallback = _typing.Callable[["cancellation.CancellationSignal"], _typing.Any]
"""A hook takes the live cancellation signal and may return an awaitable."""


class HookKind(_enum.Enum):
    """
    Points in a suite's lifecycle where hooks run.

    Setup hooks fail fast (the first error aborts the run); teardown hooks
    always run to completion and only report their errors.
    """

    BEFORE_ALL = "before_all"
    """Once per suite run, before the suite body."""

    AFTER_ALL = "after_all"
    """Once per suite run, after the suite body, even on failure."""

    BEFORE_EACH = "before_each"
    """Once per test, for every open suite from outer to inner."""

    AFTER_EACH = "after_each"
    """Once per test, for every open suite from inner to outer."""

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'AfterEach'."""
        return "".join(part.capitalize() for part in self.value.split("_"))


@_dataclasses.dataclass(eq=False)
class Suite:
    """
    One `describe` scope and its hooks.

    Attributes:
        title: Non-empty suite title.
        before_all: Hooks run once before the suite body.
        after_all: Hooks run once after the suite body.
        before_each: Hooks run before every test in this suite or below.
        after_each: Hooks run after every test in this suite or below.
    """

    title: str
    before_all: list[HookCallback] = _dataclasses.field(default_factory=list)
    after_all: list[HookCallback] = _dataclasses.field(default_factory=list)
    before_each: list[HookCallback] = _dataclasses.field(default_factory=list)
    after_each: list[HookCallback] = _dataclasses.field(default_factory=list)

    # Before-all bookkeeping: hooks [0, before_all_started) have been attempted
    # in this run; the first setup error sticks for the rest of the run.
    before_all_started: int = _dataclasses.field(default=0, init=False, repr=False)
    before_all_error: Exception | None = _dataclasses.field(default=None, init=False, repr=False)
    before_all_lock: _asyncio.Lock = _dataclasses.field(
        default_factory=_asyncio.Lock, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Suite title must not be empty")

    @property
    def has_pending_before_all(self) -> bool:
        """Whether before-all hooks were registered that have not run yet."""
        return self.before_all_started < len(self.before_all)

    def add_hook(self, kind: HookKind, hook: HookCallback) -> None:
        """Append a hook to the list for `kind`."""
        if not callable(hook):
            raise TypeError(f"{kind.label} hook must be callable, got {type(hook).__name__}")
        self._hooks(kind).append(hook)

    def hooks_for(self, kind: HookKind) -> list[HookCallback]:
        """Snapshot of the hooks registered for `kind`, in registration order."""
        return list(self._hooks(kind))

    def _hooks(self, kind: HookKind) -> list[HookCallback]:
        return _typing.cast(list[HookCallback], getattr(self, kind.value))
