"""Detection of business days without logged time."""

import logging
from collections.abc import Iterable
from datetime import date, timedelta, tzinfo
from typing import Optional

from toggl_cli.core.models import TimeEntry, TimeRange

logger = logging.getLogger(__name__)

WEEKEND = (5, 6)  # Saturday, Sunday


def covered_dates(entries: Iterable[TimeEntry], tz: tzinfo) -> set[date]:
    """Dates (in ``tz``) that have a running entry or one with positive duration."""
    covered = set()
    for entry in entries:
        duration = entry.duration
        if entry.is_running or (duration is not None and duration > timedelta(0)):
            covered.add(entry.local_date(tz))
    return covered


def missing_workdays(
    time_range: TimeRange,
    entries: Iterable[TimeEntry],
    tz: tzinfo,
    weekend: Iterable[int] = WEEKEND,
    until: Optional[date] = None,
) -> list[date]:
    """Find business days in a range with no logged time.

    Args:
        time_range: Range to inspect
        entries: Entries already fetched for the range
        tz: Reference timezone for calendar dates
        weekend: Weekday numbers (Monday=0) that are not business days
        until: Ignore dates on or after this one (e.g. the future part of
            this week)

    Returns:
        Uncovered business days, ascending
    """
    weekend_days = frozenset(weekend)
    covered = covered_dates(entries, tz)

    missing = [
        day
        for day in time_range.dates(tz)
        if day.weekday() not in weekend_days
        and day not in covered
        and (until is None or day < until)
    ]
    logger.debug("Found %d missing workdays in %s - %s", len(missing), time_range.start, time_range.end)
    return missing
