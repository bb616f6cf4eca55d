"""Creation of draft time entries from user input."""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Optional

from toggl_cli.core.errors import ErrorKind, ValidationError
from toggl_cli.core.models import TimeEntry

logger = logging.getLogger(__name__)

DEFAULT_LUNCH_BREAK = timedelta(hours=1)


def resolve_span(
    start: datetime,
    end: Optional[datetime] = None,
    duration: Optional[timedelta] = None,
) -> timedelta:
    """Work out the gross span of an entry from its end or duration.

    Raises:
        ValidationError: If neither or two disagreeing values are given, or
            the span is not positive
    """
    if end is None and duration is None:
        raise ValidationError(
            ErrorKind.INCONSISTENT_SPAN,
            "Either end or duration is required",
        )

    if end is not None:
        span = end - start
        if duration is not None and duration != span:
            raise ValidationError(
                ErrorKind.INCONSISTENT_SPAN,
                f"end={end.isoformat()} and duration={duration} disagree "
                f"for start={start.isoformat()}",
                (end, duration),
            )
    else:
        span = duration  # type: ignore[assignment]

    if span <= timedelta(0):
        raise ValidationError(
            ErrorKind.NON_POSITIVE_SPAN,
            f"start={start.isoformat()} leaves a span of {span}, which is not positive",
            span,
        )
    return span


def split_lunch_break(
    span: timedelta, break_length: timedelta = DEFAULT_LUNCH_BREAK
) -> tuple[timedelta, timedelta]:
    """Split a gross span into two working parts around a break.

    Returns:
        Durations of the part before and after the break. They differ by at
        most one second and sum to ``span - break_length``.

    Raises:
        ValidationError: If nothing is left once the break is removed
    """
    net_seconds = int((span - break_length).total_seconds())
    if net_seconds <= 0:
        raise ValidationError(
            ErrorKind.NON_POSITIVE_SPAN,
            f"Span of {span} minus lunch break of {break_length} is not positive",
            span,
        )
    first = net_seconds // 2
    return timedelta(seconds=first), timedelta(seconds=net_seconds - first)


def synthesize_entry(
    description: str,
    project: Optional[str],
    start: datetime,
    end: Optional[datetime] = None,
    duration: Optional[timedelta] = None,
    billable: bool = True,
    tags: Iterable[str] = (),
    lunch_break: bool = False,
    break_length: timedelta = DEFAULT_LUNCH_BREAK,
) -> list[TimeEntry]:
    """Build draft entries for a span of work.

    Args:
        description: Entry description
        project: Project reference (optional)
        start: Start instant
        end: End instant (optional if duration is given)
        duration: Duration (optional if end is given)
        billable: Billable flag for the drafts
        tags: Tags for the drafts
        lunch_break: Split the span into two entries around a break
        break_length: Length of the lunch break

    Returns:
        One draft, or two drafts when ``lunch_break`` is set

    Raises:
        ValidationError: If the span is missing, inconsistent or not positive
    """
    span = resolve_span(start, end, duration)
    tag_set = frozenset(tags)

    def draft(entry_start: datetime, entry_end: datetime) -> TimeEntry:
        return TimeEntry(
            description=description,
            project=project,
            start=entry_start,
            end=entry_end,
            billable=billable,
            tags=tag_set,
        )

    if not lunch_break:
        return [draft(start, start + span)]

    before, after = split_lunch_break(span, break_length)
    resume = start + before + break_length
    logger.debug(
        "Split %s starting %s into %s + %s around a %s break",
        span,
        start,
        before,
        after,
        break_length,
    )
    return [draft(start, start + before), draft(resume, resume + after)]
