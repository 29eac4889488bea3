"""
Result reporters for Jestify.

Each reporter handles one way of presenting outcomes:
- LoggingReporter: stdlib log records (default)
- RichReporter: colored console lines
- RecordingReporter: in-memory events and RunSummary
- MultiReporter: fan-out to several reporters
"""

from __future__ import annotations

import typing as _typing

from jestify.reporting.base import Reporter
from jestify.reporting.logging_reporter import LoggingReporter
from jestify.reporting.multi import MultiReporter
from jestify.reporting.recording import (
    RecordingReporter,
    ReportEvent,
    RunSummary,
    TestRecord,
)
from jestify.reporting.rich_reporter import RichReporter

__all__ = [
    "LoggingReporter",
    "MultiReporter",
    "RecordingReporter",
    "ReportEvent",
    "Reporter",
    "RichReporter",
    "RunSummary",
    "TestRecord",
    "create_reporter",
]


def create_reporter(
    reporter_type: _typing.Literal["logging", "rich"],
) -> Reporter:
    """
    Create a reporter by name.

    Args:
        reporter_type: Type of reporter to create.

    Returns:
        Appropriate reporter instance.

    Raises:
        ValueError: If reporter type is unknown.
    """
    if reporter_type == "logging":
        return LoggingReporter()
    elif reporter_type == "rich":
        return RichReporter()
    else:
        raise ValueError(f"Unknown reporter type: {reporter_type}")
