"""Tests for report rendering."""

from datetime import timezone, tzinfo
from typing import Callable

import pytest  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]

from toggl_cli.analysis.reports import ReportGenerator
from toggl_cli.core.models import TimeEntry


@pytest.fixture
def console() -> Console:
    """Wide recording console so rows are not wrapped."""
    return Console(record=True, width=200, color_system=None)


class TestEntriesReport:
    """Test the entry table."""

    def test_subtotal_per_date_and_total(
        self, console: Console, tz: tzinfo, make_entry: Callable[..., TimeEntry]
    ) -> None:
        """Test every date gets a subtotal and the table ends with a total."""
        entries = [
            make_entry(3, "2021-11-03 08:00", "2021-11-03 19:30"),
            make_entry(1, "2021-11-01 09:00", "2021-11-01 11:00"),
            make_entry(2, "2021-11-01 10:00", "2021-11-01 12:00"),
            make_entry(4, "2021-11-03 20:00", None),
        ]

        ReportGenerator(console).entries_report(entries, tz)

        lines = console.export_text().splitlines()
        monday = next(i for i, line in enumerate(lines) if "Monday" in line)
        wednesday = next(i for i, line in enumerate(lines) if "Wednesday" in line)
        total = next(i for i, line in enumerate(lines) if "Total" in line)
        assert monday < wednesday < total
        assert "4h 0m" in lines[monday]
        assert "11h 30m" in lines[wednesday]
        assert "15h 30m" in lines[total]

    def test_empty(self, console: Console) -> None:
        """Test an empty list prints a notice."""
        ReportGenerator(console).entries_report([], timezone.utc)

        assert "No entries found" in console.export_text()


class TestRawEntries:
    """Test the tab-separated output."""

    def test_tabs_preserved(self, capsys: pytest.CaptureFixture[str], make_entry: Callable[..., TimeEntry]) -> None:
        """Test fields are separated by literal tabs."""
        ReportGenerator(Console()).raw_entries([make_entry(7, "2021-11-01 09:00", None, description="Deploy")])

        line = capsys.readouterr().out.strip()
        assert line.split("\t")[0] == "7"
        assert line.split("\t")[2] == "running"
        assert line.split("\t")[3] == "Deploy"
