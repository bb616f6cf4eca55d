"""Tests for missing workday detection."""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable

from toggl_cli.analysis.workdays import covered_dates, missing_workdays
from toggl_cli.core.models import TimeEntry, TimeRange
from toggl_cli.core.ranges import resolve_range

NOW = datetime(2021, 11, 3, 12, 0, tzinfo=timezone(timedelta(hours=1)))


def week(tz: tzinfo) -> TimeRange:
    return resolve_range("2021-11-01|2021-11-07", NOW, tz)


class TestMissingWorkdays:
    """Test missing_workdays."""

    def test_uncovered_weekdays(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test only uncovered weekdays are returned, weekends excluded."""
        entries = [
            make_entry(1, "2021-11-01 09:00", "2021-11-01 17:00"),
            make_entry(2, "2021-11-02 09:00", "2021-11-02 17:00"),
            make_entry(3, "2021-11-04 09:00", "2021-11-04 17:00"),
        ]

        assert missing_workdays(week(tz), entries, tz) == [date(2021, 11, 3), date(2021, 11, 5)]

    def test_full_coverage(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test the result is empty when every weekday has time."""
        entries = [
            make_entry(day, f"2021-11-0{day} 09:00", f"2021-11-0{day} 09:05") for day in range(1, 6)
        ]

        assert missing_workdays(week(tz), entries, tz) == []

    def test_no_entries(self, tz: tzinfo) -> None:
        """Test all five weekdays are missing without entries."""
        result = missing_workdays(week(tz), [], tz)

        assert result == [date(2021, 11, d) for d in range(1, 6)]

    def test_running_entry_covers_day(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test a running entry counts as logged time."""
        entries = [make_entry(1, "2021-11-03 09:00", None)]

        assert date(2021, 11, 3) not in missing_workdays(week(tz), entries, tz)

    def test_zero_duration_does_not_cover(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test an empty entry does not count as logged time."""
        entries = [make_entry(1, "2021-11-03 09:00", "2021-11-03 09:00")]

        assert date(2021, 11, 3) in missing_workdays(week(tz), entries, tz)

    def test_weekend_entries_ignored(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test weekend days are never reported, logged or not."""
        entries = [make_entry(1, "2021-11-06 09:00", "2021-11-06 12:00")]
        result = missing_workdays(week(tz), entries, tz)

        assert date(2021, 11, 6) not in result
        assert date(2021, 11, 7) not in result
        assert len(result) == 5

    def test_custom_weekend(self, tz: tzinfo) -> None:
        """Test the weekend days can be configured."""
        result = missing_workdays(week(tz), [], tz, weekend=(4, 5, 6))

        assert result == [date(2021, 11, d) for d in range(1, 5)]

    def test_until_cuts_off_future_days(self, tz: tzinfo) -> None:
        """Test days on or after 'until' are ignored."""
        result = missing_workdays(week(tz), [], tz, until=date(2021, 11, 4))

        assert result == [date(2021, 11, 1), date(2021, 11, 2), date(2021, 11, 3)]

    def test_dates_in_reference_timezone(self, tz: tzinfo) -> None:
        """Test entries are assigned to the date of their start in the reference timezone."""
        # 23:30 UTC on Nov 2 is 00:30 on Nov 3 in UTC+1
        entry = TimeEntry(
            id=1,
            description="Late",
            start=datetime(2021, 11, 2, 23, 30, tzinfo=timezone.utc),
            end=datetime(2021, 11, 3, 1, 0, tzinfo=timezone.utc),
        )
        result = missing_workdays(week(tz), [entry], tz)

        assert date(2021, 11, 3) not in result
        assert date(2021, 11, 2) in result


class TestCoveredDates:
    """Test covered_dates."""

    def test_covered_dates(self, tz: tzinfo, make_entry: Callable[..., TimeEntry]) -> None:
        """Test dates with positive or running entries are covered."""
        entries = [
            make_entry(1, "2021-11-01 09:00", "2021-11-01 10:00"),
            make_entry(2, "2021-11-02 09:00", None),
            make_entry(3, "2021-11-03 09:00", "2021-11-03 09:00"),
        ]

        assert covered_dates(entries, tz) == {date(2021, 11, 1), date(2021, 11, 2)}
