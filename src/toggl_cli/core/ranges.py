"""Resolution of range tokens (``today``, ``last-week``, ...) into time ranges."""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional

from toggl_cli.core.errors import ErrorKind, ParseError
from toggl_cli.core.models import TimeRange, midnight

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "today"
DATE_FORMAT = "%Y-%m-%d"


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _first_of_previous_month(day: date) -> date:
    if day.month == 1:
        return date(day.year - 1, 12, 1)
    return date(day.year, day.month - 1, 1)


def _today(today: date) -> tuple[date, date]:
    return today, today + timedelta(days=1)


def _yesterday(today: date) -> tuple[date, date]:
    return today - timedelta(days=1), today


def _this_week(today: date) -> tuple[date, date]:
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=7)


def _last_week(today: date) -> tuple[date, date]:
    monday = today - timedelta(days=today.weekday())
    return monday - timedelta(days=7), monday


def _this_month(today: date) -> tuple[date, date]:
    first = today.replace(day=1)
    return first, _first_of_next_month(first)


def _last_month(today: date) -> tuple[date, date]:
    first = today.replace(day=1)
    return _first_of_previous_month(first), first


# Each keyword maps "today" to a [first, last) pair of calendar dates
RANGE_KEYWORDS: dict[str, Callable[[date], tuple[date, date]]] = {
    "today": _today,
    "yesterday": _yesterday,
    "this-week": _this_week,
    "last-week": _last_week,
    "this-month": _this_month,
    "last-month": _last_month,
}


def _parse_date(value: str, token: str) -> date:
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ParseError(
            ErrorKind.INVALID_RANGE,
            f"Invalid range '{token}': '{value}' is not a YYYY-MM-DD date",
            token,
        )


def resolve_range(token: Optional[str], now: datetime, tz: Optional[tzinfo] = None) -> TimeRange:
    """Resolve a range token into a half-open time range.

    Args:
        token: Keyword (see RANGE_KEYWORDS), ``YYYY-MM-DD`` date or
            ``YYYY-MM-DD|YYYY-MM-DD`` pair (end date inclusive). None means today.
        now: Current instant, must be timezone-aware
        tz: Reference timezone. Defaults to the timezone of ``now``.

    Returns:
        Range from the first day's midnight up to (excluding) the midnight
        after the last day

    Raises:
        ParseError: If the token is not recognized
        ValueError: If ``now`` is naive
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    reference = tz or now.tzinfo
    today = now.astimezone(reference).date()

    if token is None:
        token = DEFAULT_RANGE

    keyword = token.strip().lower()
    if keyword in RANGE_KEYWORDS:
        first, last = RANGE_KEYWORDS[keyword](today)
    elif "|" in keyword:
        left, _, right = keyword.partition("|")
        first = _parse_date(left, token)
        end_day = _parse_date(right, token)
        if end_day < first:
            first, end_day = end_day, first
        last = end_day + timedelta(days=1)
    elif keyword:
        first = _parse_date(keyword, token)
        last = first + timedelta(days=1)
    else:
        raise ParseError(ErrorKind.INVALID_RANGE, "Invalid range: empty token", token)

    resolved = TimeRange(start=midnight(first, reference), end=midnight(last, reference))
    logger.debug("Resolved range %r to %s - %s", token, resolved.start, resolved.end)
    return resolved
