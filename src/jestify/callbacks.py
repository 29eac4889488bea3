"""
Adapters between user callables and engine callbacks.

The engine always calls hooks and bodies with the run's cancellation signal
(data-driven bodies with the case first). Users may write callables that take
fewer positional arguments, synchronous or asynchronous; these helpers
drop the arguments a callable does not accept.
"""

from __future__ import annotations

import inspect as _inspect
import typing as _typing

if _typing.TYPE_CHECKING:
    import jestify.core.cancellation as cancellation

_UNBOUNDED = 1 << 16


def positional_capacity(func: _typing.Callable[..., _typing.Any]) -> int:
    """
    Count how many positional arguments `func` can take.

    Callables whose signature cannot be inspected are assumed to accept
    any number.
    """
    try:
        signature = _inspect.signature(func)
    except (TypeError, ValueError):
        return _UNBOUNDED

    count = 0
    for param in signature.parameters.values():
        if param.kind is _inspect.Parameter.VAR_POSITIONAL:
            return _UNBOUNDED
        if param.kind in (
            _inspect.Parameter.POSITIONAL_ONLY,
            _inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


def with_signal(
    func: _typing.Callable[..., _typing.Any],
) -> _typing.Callable[[cancellation.CancellationSignal], _typing.Any]:
    """Adapt `func()` or `func(signal)` to the hook/body calling convention."""
    _require_callable(func)
    if positional_capacity(func) >= 1:
        return func

    def call(_signal: cancellation.CancellationSignal) -> _typing.Any:
        return func()

    return call


def with_case(
    func: _typing.Callable[..., _typing.Any],
) -> _typing.Callable[[_typing.Any, cancellation.CancellationSignal], _typing.Any]:
    """Adapt `func()`, `func(case)` or `func(case, signal)` to the each calling convention."""
    _require_callable(func)
    capacity = positional_capacity(func)
    if capacity >= 2:
        return func

    def call(case: _typing.Any, _signal: cancellation.CancellationSignal) -> _typing.Any:
        if capacity == 1:
            return func(case)
        return func()

    return call


def _require_callable(func: _typing.Any) -> None:
    if not callable(func):
        raise TypeError(f"Expected a callable, got {type(func).__name__}")
