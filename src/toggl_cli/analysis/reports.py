"""Report rendering for time tracking data."""

from collections import defaultdict
from datetime import date, timedelta, tzinfo
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from toggl_cli.core.models import ReportSummary, TimeEntry, ViolationKind

_VIOLATION_STYLES = {
    ViolationKind.OVERLAP_CONFLICT: "red",
    ViolationKind.MISSING_BREAK: "yellow",
    ViolationKind.EXCEEDS_DAILY_LIMIT: "red",
    ViolationKind.MISSING_WORKDAY: "magenta",
}


def format_hours(duration: Optional[timedelta]) -> str:
    """Format a duration for display ("7h 30m", "45m 10s", "running")."""
    if duration is None:
        return "running"

    seconds = int(duration.total_seconds())
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"


class ReportGenerator:
    """Render summaries and entry lists as rich tables or raw text."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def summary_report(self, summary: ReportSummary, period_label: str = "Summary") -> None:
        """Display totals per day and project, running entries and violations.

        Args:
            summary: Aggregated report
            period_label: Label for the report period
        """
        self.console.print(f"\n[bold cyan]Time Report - {period_label}[/bold cyan]\n")

        overview_table = Table(show_header=False, box=None, padding=(0, 2))
        overview_table.add_column(style="dim")
        overview_table.add_column(style="bold")
        overview_table.add_row("Total Time:", format_hours(summary.grand_total))
        overview_table.add_row("Days Logged:", str(len(summary.days)))
        overview_table.add_row("Running Entries:", str(len(summary.running)))
        overview_table.add_row("Violations:", str(len(summary.violations)))
        self.console.print(overview_table)
        self.console.print()

        if summary.days:
            day_table = Table(title="Time by Day")
            day_table.add_column("Date", style="cyan")
            day_table.add_column("Start", style="dim")
            day_table.add_column("End", style="dim")
            day_table.add_column("Work", style="magenta", justify="right")
            day_table.add_column("Longest Break", style="green", justify="right")

            for day in summary.days:
                day_table.add_row(
                    day.day.isoformat(),
                    day.first_start.strftime("%H:%M"),
                    day.last_end.strftime("%H:%M"),
                    format_hours(day.total),
                    format_hours(day.longest_break),
                )

            self.console.print(day_table)
            self.console.print()

        if summary.per_project_totals:
            total_seconds = summary.grand_total.total_seconds()
            project_table = Table(title="Time by Project")
            project_table.add_column("Project", style="cyan")
            project_table.add_column("Duration", style="magenta", justify="right")
            project_table.add_column("% Total", style="green", justify="right")
            project_table.add_column("Bar", style="blue")

            sorted_projects = sorted(
                summary.per_project_totals.items(), key=lambda x: x[1], reverse=True
            )
            for project, duration in sorted_projects:
                pct = (duration.total_seconds() / total_seconds) * 100 if total_seconds > 0 else 0
                project_table.add_row(
                    project or "(no project)",
                    format_hours(duration),
                    f"{pct:.1f}%",
                    self._create_bar(pct),
                )

            self.console.print(project_table)
            self.console.print()

        if summary.running:
            names = ", ".join(f"▶ {e.description or '-'}" for e in summary.running)
            self.console.print(f"[yellow]Still running (not counted):[/yellow] {names}\n")

        if summary.violations:
            violation_table = Table(title="Violations")
            violation_table.add_column("Date", style="cyan")
            violation_table.add_column("Kind")
            violation_table.add_column("Detail")
            violation_table.add_column("Entries", style="dim")

            for violation in summary.violations:
                style = _VIOLATION_STYLES[violation.kind]
                violation_table.add_row(
                    violation.day.isoformat(),
                    f"[{style}]{violation.kind.value}[/{style}]",
                    violation.detail,
                    ", ".join(str(i) for i in violation.entry_ids if i is not None) or "-",
                )

            self.console.print(violation_table)
        elif summary.days:
            self.console.print("[green]✓[/green] No violations")

    def entries_report(self, entries: list[TimeEntry], tz: tzinfo, title: str = "Time Entries") -> None:
        """Display entries grouped by date, with a subtotal per date and a total.

        Running entries are listed but do not count towards the totals.
        """
        if not entries:
            self.console.print("[yellow]No entries found[/yellow]")
            return

        table = Table(title=f"{title} (showing {len(entries)})")
        table.add_column("Id", style="dim")
        table.add_column("Date", style="cyan")
        table.add_column("Time", style="cyan")
        table.add_column("Duration", style="magenta", justify="right")
        table.add_column("Description", style="bold")
        table.add_column("Project", style="blue")
        table.add_column("Billable", style="green")

        by_day: dict[date, list[TimeEntry]] = defaultdict(list)
        for entry in sorted(entries, key=lambda e: e.start):
            by_day[entry.local_date(tz)].append(entry)

        grand_total = timedelta(0)
        for day, day_entries in by_day.items():
            for entry in day_entries:
                start = entry.start.astimezone(tz)
                end = entry.end.astimezone(tz).strftime("%H:%M") if entry.end else "ongoing"
                status_icon = "▶" if entry.is_running else "■"
                table.add_row(
                    "-" if entry.id is None else str(entry.id),
                    day.isoformat(),
                    f"{start:%H:%M} → {end}",
                    format_hours(entry.duration),
                    f"{status_icon} {entry.description}",
                    entry.project or "-",
                    "yes" if entry.billable else "no",
                )

            subtotal = sum((e.duration for e in day_entries if e.duration is not None), timedelta(0))
            grand_total += subtotal
            table.add_row("", f"{day:%A}", "", f"[bold]{format_hours(subtotal)}[/bold]", end_section=True)

        table.add_row("", "[bold]Total[/bold]", "", f"[bold]{format_hours(grand_total)}[/bold]")
        self.console.print(table)

    def missing_days_report(self, days: list[date]) -> None:
        """Display business days without logged time."""
        if not days:
            self.console.print("[green]✓[/green] No missing workdays")
            return

        table = Table(title="Missing Workdays")
        table.add_column("Date", style="cyan")
        table.add_column("Weekday", style="magenta")
        for day in days:
            table.add_row(day.isoformat(), day.strftime("%A"))
        self.console.print(table)

    def raw_entries(self, entries: list[TimeEntry]) -> None:
        """Print one tab-separated line per entry."""
        for entry in sorted(entries, key=lambda e: e.start):
            fields = [
                "-" if entry.id is None else str(entry.id),
                entry.start.isoformat(),
                entry.end.isoformat() if entry.end else "running",
                entry.description,
                ",".join(sorted(entry.tags)),
            ]
            print("\t".join(fields), file=self.console.file)

    def _create_bar(self, percentage: float, width: int = 25) -> Text:
        """Create a visual bar for percentage display."""
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
