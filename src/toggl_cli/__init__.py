"""toggl-cli - Terminal client for hosted time tracking."""

__version__ = "0.3.0"
