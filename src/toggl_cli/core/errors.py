"""Error types raised by the time computation engine."""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Kinds of recoverable input failures."""

    INVALID_DURATION = "InvalidDuration"
    INVALID_RANGE = "InvalidRange"
    INCONSISTENT_SPAN = "InconsistentSpan"
    NON_POSITIVE_SPAN = "NonPositiveSpan"


class TimeEngineError(ValueError):
    """Base error for invalid user input.

    Attributes:
        kind: What went wrong
        value: The offending input, echoed back to the caller
    """

    def __init__(self, kind: ErrorKind, message: str, value: Any = None):
        super().__init__(message)
        self.kind = kind
        self.value = value


class ParseError(TimeEngineError):
    """Text could not be turned into a duration or range."""


class ValidationError(TimeEngineError):
    """A span of time does not describe a valid entry."""
