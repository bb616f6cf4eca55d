"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

import pytest  # type: ignore[import-not-found]

from toggl_cli.core.models import TimeEntry

CET = timezone(timedelta(hours=1), "CET")


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture
def tz() -> tzinfo:
    """Fixed reference timezone (UTC+1) so results do not depend on the host."""
    return CET


@pytest.fixture
def make_entry(tz: tzinfo) -> Callable[..., TimeEntry]:
    """Build completed or running entries from 'YYYY-MM-DD HH:MM' strings."""

    def _make(
        entry_id: Optional[int],
        start: str,
        end: Optional[str],
        project: Optional[str] = "api",
        description: str = "Work",
    ) -> TimeEntry:
        return TimeEntry(
            id=entry_id,
            description=description,
            project=project,
            start=datetime.strptime(start, "%Y-%m-%d %H:%M").replace(tzinfo=tz),
            end=datetime.strptime(end, "%Y-%m-%d %H:%M").replace(tzinfo=tz) if end else None,
        )

    return _make
