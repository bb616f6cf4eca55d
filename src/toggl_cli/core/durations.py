"""Parsing and formatting of human duration text such as ``1h 30m``."""

import logging
import re
from datetime import timedelta

from toggl_cli.core.errors import ErrorKind, ParseError

logger = logging.getLogger(__name__)

UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
}

DEFAULT_UNIT = "minutes"

_NUMBER = r"[+-]?\d+(?:\.\d+)?|[+-]?\.\d+"
_TOKEN_RE = re.compile(rf"\s*({_NUMBER})\s*([a-z]+)\s*")
_BARE_RE = re.compile(rf"\s*({_NUMBER})\s*")

# Largest first, for the canonical form
_FORMAT_UNITS = (("d", 86400), ("h", 3600), ("m", 60), ("s", 1))


def _to_seconds(number: str, unit_seconds: int, text: str) -> float:
    value = float(number)
    if value < 0 or number.startswith("-"):
        raise ParseError(
            ErrorKind.INVALID_DURATION,
            f"Invalid duration '{text}': negative values are not allowed",
            text,
        )
    return value * unit_seconds


def _to_timedelta(seconds: float, text: str) -> timedelta:
    try:
        return timedelta(seconds=round(seconds))
    except OverflowError:
        raise ParseError(
            ErrorKind.INVALID_DURATION,
            f"Invalid duration '{text}': value is too large",
            text,
        )


def parse_duration(text: str, default_unit: str = DEFAULT_UNIT) -> timedelta:
    """Parse duration text into a timedelta.

    Accepts one or more ``<number><unit>`` tokens (``8 hours``, ``90m``,
    ``1h 30min``), which are summed. A bare number uses ``default_unit``.

    Args:
        text: Duration text, case-insensitive
        default_unit: Unit name applied to a bare number

    Returns:
        Duration rounded to whole seconds

    Raises:
        ParseError: If the text contains anything that is not a valid token
    """
    if default_unit not in UNIT_SECONDS:
        raise ValueError(f"Unknown default unit: {default_unit}")

    normalized = (text or "").strip().lower()
    if not normalized:
        raise ParseError(ErrorKind.INVALID_DURATION, "Invalid duration: empty text", text)

    bare = _BARE_RE.fullmatch(normalized)
    if bare:
        seconds = _to_seconds(bare.group(1), UNIT_SECONDS[default_unit], text)
        return _to_timedelta(seconds, text)

    total = 0.0
    position = 0
    while position < len(normalized):
        match = _TOKEN_RE.match(normalized, position)
        if not match:
            raise ParseError(
                ErrorKind.INVALID_DURATION,
                f"Invalid duration '{text}': cannot parse '{normalized[position:]}'",
                text,
            )
        number, unit = match.groups()
        if unit not in UNIT_SECONDS:
            raise ParseError(
                ErrorKind.INVALID_DURATION,
                f"Invalid duration '{text}': unknown unit '{unit}'",
                text,
            )
        total += _to_seconds(number, UNIT_SECONDS[unit], text)
        position = match.end()

    duration = _to_timedelta(total, text)
    logger.debug("Parsed duration %r as %s", text, duration)
    return duration


def format_duration(duration: timedelta) -> str:
    """Format a duration in the canonical form accepted by parse_duration.

    Example:
        >>> format_duration(timedelta(hours=1, minutes=30))
        '1h30m'
    """
    seconds = int(duration.total_seconds())
    if seconds < 0:
        raise ValueError(f"Cannot format negative duration: {duration}")
    if seconds == 0:
        return "0s"

    parts = []
    for suffix, size in _FORMAT_UNITS:
        amount, seconds = divmod(seconds, size)
        if amount:
            parts.append(f"{amount}{suffix}")
    return "".join(parts)
