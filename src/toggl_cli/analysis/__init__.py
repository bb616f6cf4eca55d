"""Analysis of fetched entries: missing workdays, report aggregation and rendering."""

from toggl_cli.analysis.aggregator import ReportPolicy, build_report, merge_violations
from toggl_cli.analysis.workdays import missing_workdays

__all__ = ["ReportPolicy", "build_report", "merge_violations", "missing_workdays"]
