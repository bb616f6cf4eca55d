"""Base classes for reading service records and writing entries."""

import sys
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Optional, Union

from toggl_cli.core.models import TimeEntry, TimeRange

STDIO = "-"


def _as_target(path: Union[Path, str]) -> Union[Path, str]:
    return STDIO if str(path) == STDIO else Path(path)


class Exporter(ABC):
    """Write entries to a file, or to stdout for ``-``."""

    def __init__(self, output_path: Union[Path, str]):
        """Initialize exporter.

        Args:
            output_path: File to write, or ``-`` for stdout
        """
        self.output_path = _as_target(output_path)

    @abstractmethod
    def write_entries(
        self,
        stream: IO[str],
        entries: list[TimeEntry],
        time_range: Optional[TimeRange] = None,
        **kwargs: Any,
    ) -> None:
        """Serialize already filtered entries to an open stream."""

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.json')."""

    def export_entries(
        self,
        entries: list[TimeEntry],
        time_range: Optional[TimeRange] = None,
        **kwargs: Any,
    ) -> int:
        """Export entries starting inside ``time_range`` (all when None).

        Args:
            entries: Entries to export
            time_range: Optional range filter
            **kwargs: Format-specific options

        Returns:
            Number of entries written
        """
        selected = self.filter_entries(entries, time_range)
        with self.open_output() as stream:
            self.write_entries(stream, selected, time_range, **kwargs)
        return len(selected)

    @contextmanager
    def open_output(self) -> Iterator[IO[str]]:
        if self.output_path == STDIO:
            yield sys.stdout
            return
        self.validate_output_path()
        self.output_path.parent.mkdir(parents=True, exist_ok=True)  # type: ignore[union-attr]
        with open(self.output_path, "w", encoding="utf-8") as f:
            yield f

    def validate_output_path(self) -> None:
        """Check that the output file has this format's extension.

        Raises:
            ValueError: If file has wrong extension
        """
        path = Path(self.output_path)
        expected_ext = self.get_file_extension()
        if path.suffix.lower() != expected_ext.lower():
            raise ValueError(f"Expected {expected_ext} file, got '{path.suffix or path.name}'")

    @staticmethod
    def filter_entries(
        entries: list[TimeEntry],
        time_range: Optional[TimeRange] = None,
    ) -> list[TimeEntry]:
        """Keep entries whose start lies inside the half-open range."""
        if time_range is None:
            return list(entries)
        return [e for e in entries if time_range.contains(e.start)]


class Importer(ABC):
    """Read service records from a file, or from stdin for ``-``."""

    def __init__(self, input_path: Union[Path, str]):
        """Initialize importer.

        Args:
            input_path: File to read, or ``-`` for stdin
        """
        self.input_path = _as_target(input_path)

    @abstractmethod
    def read_entries(self, stream: IO[str], **kwargs: Any) -> list[TimeEntry]:
        """Parse entries from an open stream.

        Raises:
            ValueError: If the input is malformed
        """

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the expected file extension (e.g., '.json')."""

    def import_entries(self, **kwargs: Any) -> list[TimeEntry]:
        """Import entries from the input.

        Raises:
            FileNotFoundError: If the input file doesn't exist
            ValueError: If the input is malformed or has the wrong extension
        """
        if self.input_path == STDIO:
            return self.read_entries(sys.stdin, **kwargs)

        self.validate_input_path()
        with open(self.input_path, encoding="utf-8") as f:
            return self.read_entries(f, **kwargs)

    def validate_input_path(self) -> None:
        """Check that the input file exists and has the expected extension.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file has wrong extension
        """
        path = Path(self.input_path)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        expected_ext = self.get_file_extension()
        if path.suffix.lower() != expected_ext.lower():
            raise ValueError(f"Expected {expected_ext} file, got '{path.suffix or path.name}'")
