"""Core data models for time entries, ranges and reports."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Any, Optional, Union

EntryId = Union[int, str]


def _parse_instant(value: str) -> datetime:
    """Parse an ISO 8601 instant, requiring an explicit offset."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        raise ValueError(f"Instant has no timezone offset: {value}")
    return instant


def midnight(day: date, tz: tzinfo) -> datetime:
    """Return 00:00 of a calendar date in the given timezone."""
    return datetime(day.year, day.month, day.day, tzinfo=tz)


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)`` between two aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        """Check whether an instant falls inside the range."""
        return self.start <= instant < self.end

    def dates(self, tz: tzinfo) -> list[date]:
        """List the calendar dates covered by the range in ``tz``.

        The start date is always included (for a non-empty range); every
        following date is included while its midnight lies before ``end``.
        """
        if self.start == self.end:
            return []
        current = self.start.astimezone(tz).date()
        days = [current]
        current += timedelta(days=1)
        while midnight(current, tz) < self.end:
            days.append(current)
            current += timedelta(days=1)
        return days

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class TimeEntry:
    """Time entry, either fetched from the service or a draft awaiting creation.

    Attributes:
        description: Free text describing the work
        start: When the entry started (timezone-aware)
        id: Identifier assigned by the service (None for drafts)
        project: Project reference (optional)
        end: When the entry ended (None while running)
        billable: Whether the time is billable
        tags: Tags attached to the entry
    """

    description: str
    start: datetime
    id: Optional[EntryId] = None
    project: Optional[str] = None
    end: Optional[datetime] = None
    billable: bool = True
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Entry {self.id} ends at {self.end} before it starts at {self.start}")

    @property
    def duration(self) -> Optional[timedelta]:
        """Elapsed time. Returns None if the entry is still running."""
        if self.end is None:
            return None
        return self.end - self.start

    @property
    def is_running(self) -> bool:
        """Check if this entry is currently running."""
        return self.end is None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def local_date(self, tz: tzinfo) -> date:
        """Calendar date of the start instant in the reference timezone."""
        return self.start.astimezone(tz).date()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a service-style record for JSON serialization.

        Running entries carry a negative duration, like the service does.
        """
        duration = self.duration
        return {
            "id": self.id,
            "description": self.description,
            "project": self.project,
            "start": self.start.isoformat(),
            "stop": self.end.isoformat() if self.end else None,
            "duration": int(duration.total_seconds()) if duration is not None else -1,
            "billable": self.billable,
            "tags": sorted(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from a service record.

        Accepts ``project_id``, ``pid`` or ``project`` for the project and
        ``stop`` or ``end`` for the end instant. A record without an end is
        running when its duration is negative (or missing); otherwise the
        end is derived from the duration.
        """
        start = _parse_instant(data["start"])

        stop = data.get("stop") or data.get("end")
        end: Optional[datetime] = None
        if stop:
            end = _parse_instant(stop)
        else:
            seconds = data.get("duration")
            if seconds is not None and int(seconds) >= 0:
                end = start + timedelta(seconds=int(seconds))

        project = data.get("project_id", data.get("pid", data.get("project")))

        return cls(
            id=data.get("id"),
            description=data.get("description") or "",
            project=str(project) if project is not None else None,
            start=start,
            end=end,
            billable=bool(data.get("billable", True)),
            tags=frozenset(data.get("tags") or ()),
        )



def id_sort_key(entry_id: Optional[EntryId]) -> tuple[int, Any]:
    """Order ids: missing first, then numeric ids by value, then the rest as text."""
    if entry_id is None:
        return (0, 0)
    if isinstance(entry_id, int) and not isinstance(entry_id, bool):
        return (1, entry_id)
    return (2, str(entry_id))

class ViolationKind(Enum):
    """Closed set of anomalies, declared in reporting order."""

    OVERLAP_CONFLICT = "OverlapConflict"
    MISSING_BREAK = "MissingBreak"
    EXCEEDS_DAILY_LIMIT = "ExceedsDailyLimit"
    MISSING_WORKDAY = "MissingWorkday"

    @property
    def order(self) -> int:
        return list(ViolationKind).index(self)


@dataclass(frozen=True)
class Violation:
    """Anomaly detected in a set of time entries.

    Attributes:
        kind: Which rule was broken
        day: Calendar date the violation belongs to
        detail: Human-readable explanation
        entry_ids: Ids of the entries involved, in order
    """

    kind: ViolationKind
    day: date
    detail: str
    entry_ids: tuple[Optional[EntryId], ...] = ()

    def sort_key(self) -> tuple[date, int, tuple[int, Any]]:
        first = self.entry_ids[0] if self.entry_ids else None
        return (self.day, self.kind.order, id_sort_key(first))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "day": self.day.isoformat(),
            "detail": self.detail,
            "entry_ids": list(self.entry_ids),
        }


@dataclass(frozen=True)
class DaySummary:
    """Worked time and breaks for one calendar day."""

    day: date
    total: timedelta
    entries: int
    first_start: datetime
    last_end: datetime
    longest_break: timedelta


@dataclass(frozen=True)
class ReportSummary:
    """Aggregated statistics over a range of entries.

    Attributes:
        range: The range the report covers
        per_project_totals: Duration per project (None = no project)
        per_day_totals: Duration per date, ascending
        grand_total: Sum of all completed entries
        violations: Detected anomalies in stable order
        running: Entries without an end, excluded from totals
        days: Per-day details, ascending
    """

    range: TimeRange
    per_project_totals: dict[Optional[str], timedelta]
    per_day_totals: dict[date, timedelta]
    grand_total: timedelta
    violations: tuple[Violation, ...] = ()
    running: tuple[TimeEntry, ...] = ()
    days: tuple[DaySummary, ...] = ()
