"""
Jestify - programmatic async test execution

Declare nested suites and tests as ordinary function calls, attach lifecycle
hooks at every level, and run them with per-test timeouts, cancellation and
parallel data-driven cases.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("jestify")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Jestify Contributors"

from jestify.api import (  # noqa: E402
    after_all,
    after_each,
    before_all,
    before_each,
    configure,
    current_context,
    describe,
    each,
    get_engine,
    it,
    reset,
    set_timeout,
    skip,
)
from jestify.config import Settings  # noqa: E402
from jestify.core import (  # noqa: E402
    CancellationSignal,
    EachFailureError,
    Engine,
    HookKind,
    LifecycleError,
    LifecycleRegistry,
    OperationCancelledError,
    OutcomeKind,
    TestContext,
    TestFailureError,
    TestOutcome,
    TestTimeoutError,
)
from jestify.reporting import (  # noqa: E402
    LoggingReporter,
    RecordingReporter,
    Reporter,
    RichReporter,
)

__all__ = [
    "__version__",
    "__version_info__",
    "CancellationSignal",
    "EachFailureError",
    "Engine",
    "HookKind",
    "LifecycleError",
    "LifecycleRegistry",
    "LoggingReporter",
    "OperationCancelledError",
    "OutcomeKind",
    "RecordingReporter",
    "Reporter",
    "RichReporter",
    "Settings",
    "TestContext",
    "TestFailureError",
    "TestOutcome",
    "TestTimeoutError",
    "after_all",
    "after_each",
    "before_all",
    "before_each",
    "configure",
    "current_context",
    "describe",
    "each",
    "get_engine",
    "it",
    "reset",
    "set_timeout",
    "skip",
]
