"""
Core lifecycle and execution engine.

Example usage:
    import jestify.core as core

    engine = core.Engine()

    async def suite(signal):
        engine.registry.add_before_each_hook(lambda s: print("setup"))
        await engine.run_test("adds", lambda s: None)

    await engine.run_suite("math", suite)
"""

from jestify.core.cancellation import (
    CancellationSignal,
    OperationCancelledError,
    run_guarded,
)
from jestify.core.context import ExecutionContext, TestContext
from jestify.core.engine import Engine, format_title
from jestify.core.errors import (
    EachFailureError,
    LifecycleError,
    TestFailureError,
    TestTimeoutError,
)
from jestify.core.lifecycle import LifecycleRegistry
from jestify.core.outcome import OutcomeKind, TestOutcome
from jestify.core.suite import HookCallback, HookKind, Suite

__all__ = [
    "CancellationSignal",
    "EachFailureError",
    "Engine",
    "ExecutionContext",
    "HookCallback",
    "HookKind",
    "LifecycleError",
    "LifecycleRegistry",
    "OperationCancelledError",
    "OutcomeKind",
    "Suite",
    "TestContext",
    "TestFailureError",
    "TestOutcome",
    "TestTimeoutError",
    "format_title",
    "run_guarded",
]
