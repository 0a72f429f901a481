"""
Data models for calendar events and presence statuses.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Event:
    """Calendar event eligible for status derivation (has a title and a start)."""

    id: str
    title: str
    start: datetime
    end: datetime

    @property
    def expires_at(self) -> int:
        """Event end as epoch seconds, used as the status expiration."""
        return int(self.end.timestamp())


@dataclass(frozen=True)
class ParsedStatus:
    """Presence icon and label decoded from an event title."""

    icon: str
    label: str
