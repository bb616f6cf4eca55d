"""Main CLI application."""

import json
import logging
import sys
from datetime import datetime, timedelta, tzinfo
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from toggl_cli import __version__
from toggl_cli.analysis.aggregator import ReportPolicy, build_report, merge_violations
from toggl_cli.analysis.reports import ReportGenerator
from toggl_cli.analysis.workdays import WEEKEND, missing_workdays
from toggl_cli.cli.config_commands import config
from toggl_cli.core.config import ConfigManager
from toggl_cli.core.durations import format_duration, parse_duration
from toggl_cli.core.models import TimeEntry, TimeRange
from toggl_cli.core.ranges import DEFAULT_RANGE, RANGE_KEYWORDS, resolve_range
from toggl_cli.core.synthesizer import synthesize_entry
from toggl_cli.export_import import JSONExporter, JSONImporter, summary_to_dict

console = Console()
error_console = Console(stderr=True)

logger = logging.getLogger(__name__)

RANGE_HELP = (
    f"Range ({', '.join(RANGE_KEYWORDS)}, a date '2021-11-01' "
    "or an inclusive date range '2021-11-01|2021-11-07')"
)


def setup_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    for handler in list(root_logger.handlers):
        if isinstance(handler, RichHandler):
            root_logger.removeHandler(handler)
    handler = RichHandler(console=error_console, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)


def fail(message: Any) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def parse_instant(value: str, now: datetime, tz: tzinfo) -> datetime:
    """Parse 'now', an ISO 8601 instant, 'YYYY-MM-DD HH:MM' or 'HH:MM' (today).

    Values without an offset are interpreted in the reference timezone.
    """
    if value.strip().lower() == "now":
        return now

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            time_part = datetime.strptime(text, "%H:%M").time()
        except ValueError:
            raise ValueError(
                f"Invalid time format: {value}. Use 'now', 'HH:MM', "
                "'YYYY-MM-DD HH:MM' or an ISO 8601 instant"
            )
        parsed = datetime.combine(now.astimezone(tz).date(), time_part)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def resolve(ctx: click.Context, token: Optional[str]) -> TimeRange:
    return resolve_range(token, ctx.obj["now"], ctx.obj["tz"])


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def print_entries(ctx: click.Context, entries: list[TimeEntry], title: str = "Time Entries") -> None:
    output_format = ctx.obj["format"]
    if output_format == "json":
        print_json([entry.to_dict() for entry in sorted(entries, key=lambda e: e.start)])
    elif output_format == "raw":
        ReportGenerator(console).raw_entries(entries)
    else:
        ReportGenerator(console).entries_report(entries, ctx.obj["tz"], title)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file")
@click.option("--timezone", "tz_name", help="Reference timezone (IANA name or 'local')")
@click.option("--now", "now_text", help="Current instant (ISO 8601), defaults to the clock")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "raw"]),
    help="Output format (default from config)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    tz_name: Optional[str],
    now_text: Optional[str],
    output_format: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """toggl-cli - Terminal client for time tracking.

    Resolve ranges, draft entries and report on logged time.
    """
    ctx.ensure_object(dict)

    if no_color:
        console.no_color = True

    try:
        config_mgr = ConfigManager(config_path)
        tz = config_mgr.timezone(tz_name)
    except ValueError as e:
        fail(e)

    setup_logging("DEBUG" if verbose else config_mgr.get("advanced.log_level", "WARNING"))

    now = datetime.now(tz)
    if now_text:
        try:
            now = parse_instant(now_text, now, tz)
        except ValueError as e:
            fail(e)

    ctx.obj["config"] = config_mgr
    ctx.obj["tz"] = tz
    ctx.obj["now"] = now
    ctx.obj["format"] = output_format or config_mgr.get("display.format", "table")
    logger.debug("Reference timezone %s, now %s", tz, now.isoformat())


cli.add_command(config)


@cli.command("range")
@click.argument("token", required=False, default=DEFAULT_RANGE)
@click.pass_context
def range_command(ctx: click.Context, token: str) -> None:
    """Show the time range a range token resolves to.

    Example:
        toggl-cli range this-week
        toggl-cli range "2021-11-01|2021-11-07"
    """
    try:
        time_range = resolve(ctx, token)
    except ValueError as e:
        fail(e)

    if ctx.obj["format"] == "json":
        print_json(time_range.to_dict())
    elif ctx.obj["format"] == "raw":
        print(f"{time_range.start.isoformat()}\t{time_range.end.isoformat()}")
    else:
        console.print(f"[cyan]{token}[/cyan]: {time_range.start.isoformat()} → {time_range.end.isoformat()}")


@cli.command("duration")
@click.argument("text")
@click.option(
    "--unit",
    type=click.Choice(["seconds", "minutes", "hours"]),
    help="Unit of a bare number (default from config)",
)
@click.pass_context
def duration_command(ctx: click.Context, text: str, unit: Optional[str]) -> None:
    """Parse duration text.

    Example:
        toggl-cli duration "1h 30min"
        toggl-cli duration 45 --unit minutes
    """
    unit = unit or ctx.obj["config"].get("entries.default_duration_unit", "minutes")
    try:
        duration = parse_duration(text, unit)
    except ValueError as e:
        fail(e)

    seconds = int(duration.total_seconds())
    if ctx.obj["format"] == "json":
        print_json({"input": text, "seconds": seconds, "canonical": format_duration(duration)})
    elif ctx.obj["format"] == "raw":
        print(seconds)
    else:
        console.print(f"{format_duration(duration)} ({seconds} seconds)")


@cli.group()
def entries() -> None:
    """Draft and inspect time entries."""


@entries.command("create")
@click.argument("description")
@click.option("-p", "--project", help="Project identifier")
@click.option("--start", default="now", show_default=True, help="Start ('now', 'HH:MM', ISO 8601)")
@click.option("--end", help="End ('HH:MM', ISO 8601)")
@click.option("--duration", "duration_text", help="Duration ('8h', '90m', bare number)")
@click.option("--non-billable", is_flag=True, help="Mark the entry as not billable")
@click.option("-t", "--tags", help="Comma-separated tags")
@click.option("--lunch-break", is_flag=True, help="Split into two entries around a lunch break")
@click.option("--break-length", help="Lunch break length (default from config)")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write drafts to a JSON file")
@click.pass_context
def create(
    ctx: click.Context,
    description: str,
    project: Optional[str],
    start: str,
    end: Optional[str],
    duration_text: Optional[str],
    non_billable: bool,
    tags: Optional[str],
    lunch_break: bool,
    break_length: Optional[str],
    output: Optional[Path],
) -> None:
    """Draft time entries ready to be sent to the service.

    Example:
        toggl-cli entries create "Development" -p api --start 09:00 --end 17:00 --lunch-break
        toggl-cli entries create "Standup" --start 09:00 --duration 15m
    """
    config_mgr: ConfigManager = ctx.obj["config"]
    now, tz = ctx.obj["now"], ctx.obj["tz"]
    unit = config_mgr.get("entries.default_duration_unit", "minutes")

    try:
        start_time = parse_instant(start, now, tz)
        end_time = parse_instant(end, now, tz) if end else None
        duration = parse_duration(duration_text, unit) if duration_text else None
        lunch = parse_duration(break_length) if break_length else config_mgr.duration("entries.lunch_break")
        billable = config_mgr.get("entries.billable", True) and not non_billable

        tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else []
        drafts = synthesize_entry(
            description,
            project,
            start_time,
            end=end_time,
            duration=duration,
            billable=billable,
            tags=tag_list,
            lunch_break=lunch_break,
            break_length=lunch,
        )
    except ValueError as e:
        fail(e)

    if output:
        try:
            written = JSONExporter(output).export_entries(drafts)
        except (OSError, ValueError) as e:
            fail(e)
        error_console.print(f"[green]✓[/green] Wrote {written} draft(s) to {output}")

    print_entries(ctx, drafts, "Draft Entries")


@entries.command("list")
@click.option("-r", "--range", "token", default=DEFAULT_RANGE, show_default=True, help=RANGE_HELP)
@click.option("-i", "--input", "source", default="-", show_default=True, help="JSON records file (- for stdin)")
@click.option("--skip-invalid", is_flag=True, help="Skip malformed records instead of failing")
@click.pass_context
def list_entries(ctx: click.Context, token: str, source: str, skip_invalid: bool) -> None:
    """List fetched entries that start inside a range.

    Example:
        toggl-cli entries list --range yesterday --input entries.json
    """
    try:
        time_range = resolve(ctx, token)
        fetched = JSONImporter(source).import_entries(validate=not skip_invalid)
    except (FileNotFoundError, ValueError) as e:
        fail(e)

    print_entries(ctx, [e for e in fetched if time_range.contains(e.start)])


@entries.command("missing")
@click.option("-r", "--range", "token", default=DEFAULT_RANGE, show_default=True, help=RANGE_HELP)
@click.option("-i", "--input", "source", default="-", show_default=True, help="JSON records file (- for stdin)")
@click.option("--skip-invalid", is_flag=True, help="Skip malformed records instead of failing")
@click.pass_context
def missing(ctx: click.Context, token: str, source: str, skip_invalid: bool) -> None:
    """List workdays without any logged time (up to today).

    Example:
        toggl-cli entries missing --range last-month --input entries.json
    """
    config_mgr: ConfigManager = ctx.obj["config"]
    now, tz = ctx.obj["now"], ctx.obj["tz"]
    try:
        time_range = resolve(ctx, token)
        fetched = JSONImporter(source).import_entries(validate=not skip_invalid)
    except (FileNotFoundError, ValueError) as e:
        fail(e)

    days = missing_workdays(
        time_range,
        fetched,
        tz,
        weekend=config_mgr.get("report.weekend", WEEKEND),
        until=now.astimezone(tz).date() + timedelta(days=1),
    )

    output_format = ctx.obj["format"]
    if output_format == "json":
        print_json([day.isoformat() for day in days])
    elif output_format == "raw":
        for day in days:
            print(day.isoformat())
    else:
        ReportGenerator(console).missing_days_report(days)


@cli.command()
@click.option("-r", "--range", "token", default=DEFAULT_RANGE, show_default=True, help=RANGE_HELP)
@click.option("-i", "--input", "source", default="-", show_default=True, help="JSON records file (- for stdin)")
@click.option("--skip-invalid", is_flag=True, help="Skip malformed records instead of failing")
@click.option("--skip-missing", is_flag=True, help="Do not check for missing workdays")
@click.pass_context
def report(ctx: click.Context, token: str, source: str, skip_invalid: bool, skip_missing: bool) -> None:
    """Summarize entries per day and project and flag violations.

    Checks overlapping entries, missing breaks, days above the daily limit
    and workdays without logged time.

    Example:
        toggl-cli report --range last-week --input entries.json
    """
    config_mgr: ConfigManager = ctx.obj["config"]
    now, tz = ctx.obj["now"], ctx.obj["tz"]
    try:
        time_range = resolve(ctx, token)
        fetched = JSONImporter(source).import_entries(validate=not skip_invalid)
        policy = ReportPolicy.from_config(config_mgr)
    except (FileNotFoundError, ValueError) as e:
        fail(e)

    summary = build_report(time_range, fetched, tz, policy)
    if not skip_missing:
        days = missing_workdays(
            time_range,
            fetched,
            tz,
            weekend=config_mgr.get("report.weekend", WEEKEND),
            until=now.astimezone(tz).date() + timedelta(days=1),
        )
        summary = merge_violations(summary, days)

    output_format = ctx.obj["format"]
    if output_format == "json":
        print_json(summary_to_dict(summary))
    elif output_format == "raw":
        for day, total in summary.per_day_totals.items():
            print(f"{day.isoformat()}\t{format_duration(total)}")
        for violation in summary.violations:
            print(f"{violation.day.isoformat()}\t{violation.kind.value}\t{violation.detail}")
    else:
        label = f"{time_range.start:%Y-%m-%d} to {(time_range.end - timedelta(days=1)):%Y-%m-%d}"
        ReportGenerator(console).summary_report(summary, label)


if __name__ == "__main__":
    cli(obj={})
