"""Command line interface."""

from toggl_cli.cli.main import cli

__all__ = ["cli"]
