"""Reading service records and writing entries and reports as JSON."""

from toggl_cli.export_import.base import Exporter, Importer
from toggl_cli.export_import.json_format import (
    JSONExporter,
    JSONImporter,
    load_entries,
    summary_to_dict,
)

__all__ = [
    "Exporter",
    "Importer",
    "JSONExporter",
    "JSONImporter",
    "load_entries",
    "summary_to_dict",
]
