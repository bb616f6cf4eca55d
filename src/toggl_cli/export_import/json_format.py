"""JSON reading of service records and writing of entries and reports."""

import json
import logging
from datetime import datetime, timezone
from typing import IO, Any, Optional

from toggl_cli.core.models import ReportSummary, TimeEntry, TimeRange
from toggl_cli.export_import.base import Exporter, Importer

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


def _entries_from_data(data: Any, validate: bool = True) -> list[TimeEntry]:
    """Convert decoded JSON (array or ``{"entries": [...]}``) to entries."""
    if isinstance(data, dict) and "entries" in data:
        records = data["entries"]
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError("JSON must contain 'entries' array or be an array itself")

    entries = []
    for index, record in enumerate(records):
        try:
            entries.append(TimeEntry.from_dict(record))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            if validate:
                raise ValueError(f"Invalid entry data at index {index}: {e}")
            logger.warning("Skipping invalid record at index %d: %s", index, e)
    return entries


def load_entries(stream: IO[str], validate: bool = True) -> list[TimeEntry]:
    """Read service records from an open text stream.

    Raises:
        ValueError: If the JSON or one of the records is malformed
    """
    try:
        data = json.load(stream)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON input: {e}")
    return _entries_from_data(data, validate)


def summary_to_dict(summary: ReportSummary) -> dict[str, Any]:
    """Convert a report summary to JSON-safe data (durations in seconds)."""

    def seconds(value: Any) -> int:
        return int(value.total_seconds())

    return {
        "range": summary.range.to_dict(),
        "grand_total": seconds(summary.grand_total),
        "per_project_totals": [
            {"project": project, "seconds": seconds(total)}
            for project, total in summary.per_project_totals.items()
        ],
        "per_day_totals": {
            day.isoformat(): seconds(total) for day, total in summary.per_day_totals.items()
        },
        "days": [
            {
                "day": day.day.isoformat(),
                "seconds": seconds(day.total),
                "entries": day.entries,
                "first_start": day.first_start.isoformat(),
                "last_end": day.last_end.isoformat(),
                "longest_break": seconds(day.longest_break),
            }
            for day in summary.days
        ],
        "violations": [violation.to_dict() for violation in summary.violations],
        "running": [entry.to_dict() for entry in summary.running],
    }


class JSONExporter(Exporter):
    """Write entries as service-style JSON records."""

    def get_file_extension(self) -> str:
        return ".json"

    def write_entries(
        self,
        stream: IO[str],
        entries: list[TimeEntry],
        time_range: Optional[TimeRange] = None,
        **kwargs: Any,
    ) -> None:
        """Dump ``{"entries": [...], "metadata": {...}}``.

        Args:
            stream: Destination
            entries: Entries to write
            time_range: Range the entries were filtered by, recorded in the metadata
            **kwargs: Additional options
                - indent (int): JSON indentation level (default: 2)
                - include_metadata (bool): Include export metadata (default: True)
        """
        export_data: dict[str, Any] = {"entries": [entry.to_dict() for entry in entries]}

        if kwargs.get("include_metadata", True):
            export_data["metadata"] = {
                "export_date": datetime.now(timezone.utc).isoformat(),
                "entry_count": len(entries),
                "range": time_range.to_dict() if time_range else None,
                "format_version": FORMAT_VERSION,
            }

        json.dump(export_data, stream, indent=kwargs.get("indent", 2), ensure_ascii=False)
        stream.write("\n")


class JSONImporter(Importer):
    """Read service records from JSON."""

    def get_file_extension(self) -> str:
        return ".json"

    def read_entries(self, stream: IO[str], **kwargs: Any) -> list[TimeEntry]:
        """Parse records from a stream.

        Args:
            stream: Source
            **kwargs: Additional options
                - validate (bool): Fail on invalid records (default: True)
        """
        entries = load_entries(stream, kwargs.get("validate", True))
        logger.debug("Read %d entries from %s", len(entries), self.input_path)
        return entries
