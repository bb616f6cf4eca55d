"""Core time computation: durations, ranges and entry drafts."""

from toggl_cli.core.durations import format_duration, parse_duration
from toggl_cli.core.errors import ErrorKind, ParseError, ValidationError
from toggl_cli.core.models import ReportSummary, TimeEntry, TimeRange, Violation, ViolationKind
from toggl_cli.core.ranges import resolve_range
from toggl_cli.core.synthesizer import synthesize_entry

__all__ = [
    "ErrorKind",
    "ParseError",
    "ValidationError",
    "TimeEntry",
    "TimeRange",
    "Violation",
    "ViolationKind",
    "ReportSummary",
    "parse_duration",
    "format_duration",
    "resolve_range",
    "synthesize_entry",
]
