"""
Cancellation signals and guarded execution.

A CancellationSignal is a one-shot flag that callers hand to hooks and test
bodies. Signals can be linked (a child fires when any parent fires) and armed
with a timer, which is how a run combines its caller's signal with its own
timeout.

run_guarded() awaits a callback under a signal: when the signal fires while the
callback is still pending, the callback's task is cancelled and the caller
sees OperationCancelledError. Callbacks that never look at their signal are
therefore still interrupted.
"""

from __future__ import annotations

import asyncio as _asyncio
import inspect as _inspect
import logging as _logging
import typing as _typing

_logger = _logging.getLogger(__name__)

TIMEOUT_REASON = "timeout"
"""Reason recorded on a signal fired by its own timer."""


class OperationCancelledError(Exception):
    """Raised when work is abandoned because a cancellation signal fired."""

    def __init__(
        self,
        signal: CancellationSignal | None = None,
        message: str = "The operation was cancelled",
    ) -> None:
        super().__init__(message)
        self.signal = signal


class CancellationSignal:
    """
    One-shot cancellation flag with callbacks, linking and timers.

    A fresh signal never fires unless someone calls cancel() on it or arms
    its timer. Once cancelled it stays cancelled.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[_typing.Callable[[CancellationSignal], None]] = []
        self._timer: _asyncio.TimerHandle | None = None
        self._detach: list[_typing.Callable[[], None]] = []

    @classmethod
    def linked(cls, *parents: CancellationSignal) -> CancellationSignal:
        """
        Create a signal that fires as soon as any of the parents fires.

        If a parent has already fired, the new signal starts cancelled with
        the parent's reason.
        """
        child = cls()
        for parent in parents:
            remove = parent.add_callback(
                lambda fired: child.cancel(fired.reason or "cancelled")
            )
            child._detach.append(remove)
        return child

    @property
    def cancelled(self) -> bool:
        """Whether the signal has fired."""
        return self._cancelled

    @property
    def reason(self) -> str | None:
        """Why the signal fired, or None while it has not."""
        return self._reason

    @property
    def timed_out(self) -> bool:
        """Whether the signal was fired by its own timer."""
        return self._cancelled and self._reason == TIMEOUT_REASON

    def cancel(self, reason: str = "cancelled") -> None:
        """Fire the signal. Subsequent calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)

    def cancel_after(self, seconds: float) -> None:
        """
        Arm a timer that fires the signal after `seconds`.

        Must be called from a running event loop. Re-arming replaces the
        previous timer.
        """
        if self._cancelled:
            return
        if self._timer is not None:
            self._timer.cancel()
        loop = _asyncio.get_running_loop()
        self._timer = loop.call_later(seconds, self.cancel, TIMEOUT_REASON)

    def add_callback(
        self,
        callback: _typing.Callable[[CancellationSignal], None],
    ) -> _typing.Callable[[], None]:
        """
        Register a callback invoked once when the signal fires.

        If the signal already fired, the callback runs immediately.

        Returns:
            A function that unregisters the callback.
        """
        if self._cancelled:
            callback(self)
            return _noop

        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if the signal has fired."""
        if self._cancelled:
            raise OperationCancelledError(self, f"The operation was cancelled ({self._reason})")

    def close(self) -> None:
        """Disarm the timer and detach from linked parents."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        detach, self._detach = self._detach, []
        for remove in detach:
            remove()

    def __enter__(self) -> CancellationSignal:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = f"cancelled ({self._reason})" if self._cancelled else "pending"
        return f"<CancellationSignal {state}>"


def _noop() -> None:
    pass


async def run_guarded(
    signal: CancellationSignal,
    func: _typing.Callable[..., _typing.Any],
    *args: _typing.Any,
    call_when_cancelled: bool = False,
) -> _typing.Any:
    """
    Call `func(*args, signal)` and await its result under `signal`.

    Synchronous callables run inline. Awaitables run in a child task that is
    cancelled if the signal fires first; that cancellation surfaces as
    OperationCancelledError. Cancellation of the awaiting task itself is
    forwarded to the child and re-raised unchanged.

    With `call_when_cancelled`, `func` is called even if the signal already
    fired: a synchronous teardown still runs, an asynchronous one is
    interrupted before its first step.

    A task that already absorbed an earlier cancellation (teardown after a
    cancelled test, for instance) may still call run_guarded: only
    cancellation requested after entry counts as the awaiting task's own.

    Raises:
        OperationCancelledError: If the signal has fired, before or during
            the call.
    """
    if not call_when_cancelled:
        signal.raise_if_cancelled()
    current = _asyncio.current_task()
    baseline = current.cancelling() if current is not None else 0
    result = func(*args, signal)
    if not _inspect.isawaitable(result):
        return result

    task = _asyncio.ensure_future(result)
    fired = False

    def _interrupt(_signal: CancellationSignal) -> None:
        nonlocal fired
        fired = True
        task.cancel()

    remove = signal.add_callback(_interrupt)
    try:
        return await task
    except _asyncio.CancelledError:
        if fired and (current is None or current.cancelling() <= baseline):
            _logger.debug("Guarded call interrupted: %s", signal)
            raise OperationCancelledError(
                signal, f"The operation was cancelled ({signal.reason})"
            ) from None
        raise
    finally:
        remove()
