"""Aggregation of time entries into report summaries and violations."""

import dataclasses
import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Optional

from toggl_cli.core.config import ConfigManager
from toggl_cli.core.durations import format_duration
from toggl_cli.core.models import (
    DaySummary,
    ReportSummary,
    TimeEntry,
    TimeRange,
    Violation,
    ViolationKind,
    id_sort_key,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportPolicy:
    """Thresholds for the daily checks.

    Attributes:
        daily_limit: Days above this total exceed the healthy workday
        break_threshold: Days above this total need a break
        min_break: Shortest gap that counts as a break
    """

    daily_limit: timedelta = timedelta(hours=10)
    break_threshold: timedelta = timedelta(hours=6)
    min_break: timedelta = timedelta(minutes=30)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ReportPolicy":
        """Build a policy from the ``report`` section of the configuration."""
        return cls(
            daily_limit=config.duration("report.daily_limit"),
            break_threshold=config.duration("report.break_threshold"),
            min_break=config.duration("report.min_break"),
        )


def _sort_key(entry: TimeEntry) -> tuple:
    return (entry.start, entry.end, id_sort_key(entry.id))


def find_overlaps(day: date, entries: list[TimeEntry]) -> list[Violation]:
    """Report consecutive entries (sorted by start) whose spans intersect.

    Entries with identical start and end are always reported, even when
    they are empty.
    """
    ordered = sorted(entries, key=_sort_key)
    violations = []
    for current, following in zip(ordered, ordered[1:]):
        duplicate = current.start == following.start and current.end == following.end
        if duplicate or following.start < current.end:  # type: ignore[operator]
            violations.append(
                Violation(
                    kind=ViolationKind.OVERLAP_CONFLICT,
                    day=day,
                    detail=(
                        f"{current.start:%H:%M}-{current.end:%H:%M} overlaps "
                        f"{following.start:%H:%M}-{following.end:%H:%M}"
                    ),
                    entry_ids=(current.id, following.id),
                )
            )
    return violations


def longest_break(entries: list[TimeEntry]) -> timedelta:
    """Longest gap between entries of a day, measured from the furthest end so far."""
    ordered = sorted(entries, key=_sort_key)
    longest = timedelta(0)
    if not ordered:
        return longest
    reached = ordered[0].end
    for entry in ordered[1:]:
        gap = entry.start - reached  # type: ignore[operator]
        if gap > longest:
            longest = gap
        if entry.end > reached:  # type: ignore[operator]
            reached = entry.end
    return longest


def _summarize_day(day: date, entries: list[TimeEntry]) -> DaySummary:
    total = sum((e.duration for e in entries), timedelta(0))  # type: ignore[misc]
    return DaySummary(
        day=day,
        total=total,
        entries=len(entries),
        first_start=min(e.start for e in entries),
        last_end=max(e.end for e in entries),  # type: ignore[type-var]
        longest_break=longest_break(entries),
    )


def check_day(summary: DaySummary, entries: list[TimeEntry], policy: ReportPolicy) -> list[Violation]:
    """Run the overlap, break and daily limit checks for one day."""
    ids = tuple(e.id for e in sorted(entries, key=_sort_key))
    violations = find_overlaps(summary.day, entries)

    if summary.total > policy.break_threshold and summary.longest_break < policy.min_break:
        violations.append(
            Violation(
                kind=ViolationKind.MISSING_BREAK,
                day=summary.day,
                detail=(
                    f"Worked {format_duration(summary.total)} => break should be at least "
                    f"{format_duration(policy.min_break)}, longest was "
                    f"{format_duration(summary.longest_break)}"
                ),
                entry_ids=ids,
            )
        )

    if summary.total > policy.daily_limit:
        violations.append(
            Violation(
                kind=ViolationKind.EXCEEDS_DAILY_LIMIT,
                day=summary.day,
                detail=(
                    f"Worked {format_duration(summary.total)}, more than "
                    f"{format_duration(policy.daily_limit)}"
                ),
                entry_ids=ids,
            )
        )
    return violations


def build_report(
    time_range: TimeRange,
    entries: Iterable[TimeEntry],
    tz: tzinfo,
    policy: Optional[ReportPolicy] = None,
) -> ReportSummary:
    """Aggregate entries into totals and violations.

    Args:
        time_range: Range the report covers; entries starting outside are ignored
        entries: Entries fetched for the range
        tz: Reference timezone for calendar days
        policy: Thresholds for the daily checks

    Returns:
        Summary with running entries set aside and violations in stable order
    """
    policy = policy or ReportPolicy()

    running: list[TimeEntry] = []
    by_day: dict[date, list[TimeEntry]] = defaultdict(list)
    by_project: dict[Optional[str], timedelta] = defaultdict(timedelta)

    for entry in entries:
        if not time_range.contains(entry.start):
            logger.debug("Ignoring entry %s starting %s outside of range", entry.id, entry.start)
            continue
        if entry.is_running:
            running.append(entry)
            continue
        by_day[entry.local_date(tz)].append(entry)
        by_project[entry.project] += entry.duration  # type: ignore[operator]

    days = []
    violations: list[Violation] = []
    for day in sorted(by_day):
        summary = _summarize_day(day, by_day[day])
        days.append(summary)
        violations.extend(check_day(summary, by_day[day], policy))

    violations.sort(key=Violation.sort_key)
    per_day_totals = {summary.day: summary.total for summary in days}

    logger.debug(
        "Report over %d days: %d violations, %d running entries",
        len(days),
        len(violations),
        len(running),
    )

    return ReportSummary(
        range=time_range,
        per_project_totals=dict(by_project),
        per_day_totals=per_day_totals,
        grand_total=sum(per_day_totals.values(), timedelta(0)),
        violations=tuple(violations),
        running=tuple(sorted(running, key=lambda e: e.start)),
        days=tuple(days),
    )


def merge_violations(summary: ReportSummary, missing_days: Iterable[date]) -> ReportSummary:
    """Add one MissingWorkday violation per date to a summary, keeping the order stable."""
    missing = [
        Violation(
            kind=ViolationKind.MISSING_WORKDAY,
            day=day,
            detail=f"No time logged on {day:%A}",
        )
        for day in missing_days
    ]
    merged = sorted(summary.violations + tuple(missing), key=Violation.sort_key)
    return dataclasses.replace(summary, violations=tuple(merged))
