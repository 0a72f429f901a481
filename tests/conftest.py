"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fakes import NOW, FakeCalendar  # noqa: E402
from models.events import Event  # noqa: E402


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_event():
    """Factory for events starting 30 seconds after NOW and lasting an hour."""

    def _make(event_id="e1", title="🏃 Run", start=None, minutes=60):
        start = start or NOW + timedelta(seconds=30)
        return Event(id=event_id, title=title, start=start, end=start + timedelta(minutes=minutes))

    return _make


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def presence():
    """Presence sink mock that accepts every call."""
    sink = AsyncMock()
    sink.test_connection.return_value = True
    return sink
