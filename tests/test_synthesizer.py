"""Tests for draft entry synthesis."""

from datetime import datetime, timedelta, timezone

import pytest  # type: ignore[import-not-found]

from toggl_cli.core.errors import ErrorKind, ValidationError
from toggl_cli.core.synthesizer import resolve_span, split_lunch_break, synthesize_entry

TZ = timezone(timedelta(hours=1))
NINE = datetime(2021, 11, 3, 9, 0, tzinfo=TZ)
FIVE = datetime(2021, 11, 3, 17, 0, tzinfo=TZ)


class TestSynthesizeEntry:
    """Test synthesize_entry."""

    def test_from_end(self) -> None:
        """Test the duration is derived from the end."""
        (entry,) = synthesize_entry("Development", "api", NINE, end=FIVE)

        assert entry.start == NINE
        assert entry.end == FIVE
        assert entry.duration == timedelta(hours=8)
        assert entry.id is None
        assert entry.is_draft is True

    def test_from_duration(self) -> None:
        """Test the end is derived from the duration."""
        (entry,) = synthesize_entry("Standup", None, NINE, duration=timedelta(minutes=15))

        assert entry.end == NINE + timedelta(minutes=15)
        assert entry.project is None

    def test_fields_are_copied(self) -> None:
        """Test billable flag and tags end up on the draft."""
        (entry,) = synthesize_entry(
            "Review", "api", NINE, end=FIVE, billable=False, tags=["backend", "review"]
        )

        assert entry.description == "Review"
        assert entry.billable is False
        assert entry.tags == frozenset({"backend", "review"})

    def test_consistent_end_and_duration(self) -> None:
        """Test agreeing end and duration are accepted."""
        (entry,) = synthesize_entry("Work", "api", NINE, end=FIVE, duration=timedelta(hours=8))

        assert entry.end == FIVE

    def test_inconsistent_end_and_duration(self) -> None:
        """Test disagreeing end and duration fail."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", NINE, end=FIVE, duration=timedelta(hours=7))

        assert exc_info.value.kind == ErrorKind.INCONSISTENT_SPAN

    def test_missing_end_and_duration(self) -> None:
        """Test one of end or duration is required."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", NINE)

        assert exc_info.value.kind == ErrorKind.INCONSISTENT_SPAN

    def test_end_equal_to_start(self) -> None:
        """Test an empty span fails."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", NINE, end=NINE)

        assert exc_info.value.kind == ErrorKind.NON_POSITIVE_SPAN

    def test_end_before_start(self) -> None:
        """Test a negative span fails."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", FIVE, end=NINE)

        assert exc_info.value.kind == ErrorKind.NON_POSITIVE_SPAN

    def test_zero_duration(self) -> None:
        """Test a zero duration fails."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", NINE, duration=timedelta(0))

        assert exc_info.value.kind == ErrorKind.NON_POSITIVE_SPAN


class TestLunchBreak:
    """Test splitting around a lunch break."""

    def test_workday_split(self) -> None:
        """Test 09:00-17:00 becomes 7h of work around a 1h break centered at 13:00."""
        first, second = synthesize_entry(
            "Development", "api", NINE, end=FIVE, tags=["dev"], lunch_break=True
        )

        assert first.start == NINE
        assert first.end == datetime(2021, 11, 3, 12, 30, tzinfo=TZ)
        assert second.start == datetime(2021, 11, 3, 13, 30, tzinfo=TZ)
        assert second.end == FIVE
        assert first.duration + second.duration == timedelta(hours=7)  # type: ignore[operator]

        gap_middle = first.end + (second.start - first.end) / 2  # type: ignore[operator]
        assert gap_middle == datetime(2021, 11, 3, 13, 0, tzinfo=TZ)

    def test_shared_fields(self) -> None:
        """Test both drafts share description, project, billable and tags."""
        first, second = synthesize_entry(
            "Development", "api", NINE, end=FIVE, billable=False, tags=["dev"], lunch_break=True
        )

        for entry in (first, second):
            assert entry.description == "Development"
            assert entry.project == "api"
            assert entry.billable is False
            assert entry.tags == frozenset({"dev"})

    def test_split_from_duration(self) -> None:
        """Test the gross span can come from a duration."""
        first, second = synthesize_entry(
            "Work", None, NINE, duration=timedelta(hours=8), lunch_break=True
        )

        assert second.end == FIVE

    def test_custom_break_length(self) -> None:
        """Test a 30 minute break."""
        first, second = synthesize_entry(
            "Work", None, NINE, end=FIVE, lunch_break=True, break_length=timedelta(minutes=30)
        )

        assert first.end == datetime(2021, 11, 3, 12, 45, tzinfo=TZ)
        assert second.start == datetime(2021, 11, 3, 13, 15, tzinfo=TZ)

    def test_deterministic(self) -> None:
        """Test the same input always gives the same drafts."""
        a = synthesize_entry("Work", "api", NINE, end=FIVE, lunch_break=True)
        b = synthesize_entry("Work", "api", NINE, end=FIVE, lunch_break=True)

        assert a == b

    def test_span_not_longer_than_break(self) -> None:
        """Test a span that the break would consume entirely fails."""
        with pytest.raises(ValidationError) as exc_info:
            synthesize_entry("Work", "api", NINE, duration=timedelta(hours=1), lunch_break=True)

        assert exc_info.value.kind == ErrorKind.NON_POSITIVE_SPAN


class TestHelpers:
    """Test span helpers."""

    def test_resolve_span(self) -> None:
        """Test the gross span from start and end."""
        assert resolve_span(NINE, end=FIVE) == timedelta(hours=8)

    def test_uneven_split(self) -> None:
        """Test an odd number of seconds splits with a one second difference."""
        before, after = split_lunch_break(timedelta(hours=1, seconds=3), timedelta(hours=1))

        assert (before, after) == (timedelta(seconds=1), timedelta(seconds=2))
