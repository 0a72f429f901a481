"""
Event fetching from an MS Graph calendar.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient

from models.events import Event

logger = logging.getLogger(__name__)

# Graph returns naive local times unless asked for a zone explicitly
PREFER_UTC_HEADER = 'outlook.timezone="UTC"'

# Width of the calendarView window used for the "happening now" query
CURRENT_PROBE = timedelta(seconds=1)

MAX_EVENTS = 50


def format_graph_datetime(value: datetime) -> str:
    """Format an aware datetime as the UTC ISO string Graph expects."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_graph_datetime(value: str, time_zone: str | None = None) -> datetime:
    """
    Parse a Graph dateTime string into an aware datetime.

    Graph uses 7 fractional digits ("2025-11-01T09:00:00.0000000") and puts the
    zone in a separate field, so the fraction is cut to microseconds and the
    zone attached afterwards. Unknown zone names fall back to UTC.
    """
    text = re.sub(r"(\.\d{6})\d+", r"\1", value.strip().replace("Z", "+00:00"))
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        try:
            zone = ZoneInfo(time_zone) if time_zone else timezone.utc
        except (ZoneInfoNotFoundError, ValueError):
            zone = timezone.utc
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def parse_event(event) -> Event | None:
    """
    Convert an MS Graph event into our Event model.

    Returns None for events that cannot carry a status: no title, no start
    time, all-day or cancelled.
    """
    if not event.subject or not event.subject.strip():
        return None
    if not event.start or not event.start.date_time:
        return None
    if event.is_all_day or event.is_cancelled:
        return None

    start = parse_graph_datetime(event.start.date_time, event.start.time_zone)
    end = start
    if event.end and event.end.date_time:
        end = parse_graph_datetime(event.end.date_time, event.end.time_zone)
    if end < start:
        end = start

    return Event(id=event.id, title=event.subject, start=start, end=end)


class GraphCalendarSource:
    """Reads one user's calendar through the calendarView endpoint."""

    def __init__(self, graph: GraphServiceClient, user_id: str, calendar_id: str | None = None):
        self._graph = graph
        self._user_id = user_id
        self._calendar_id = calendar_id

    def _calendar_view(self):
        user = self._graph.users.by_user_id(self._user_id)
        if self._calendar_id:
            return user.calendars.by_calendar_id(self._calendar_id).calendar_view
        return user.calendar.calendar_view

    async def _fetch(self, window_start: datetime, window_end: datetime) -> list[Event]:
        """Fetch events overlapping the window, recurring series expanded."""
        view = self._calendar_view()
        # Both calendar_view builders define the same nested parameter class
        query_params = view.CalendarViewRequestBuilderGetQueryParameters(
            start_date_time=format_graph_datetime(window_start),
            end_date_time=format_graph_datetime(window_end),
            orderby=["start/dateTime"],
            top=MAX_EVENTS,
        )
        config = RequestConfiguration(query_parameters=query_params)
        config.headers.add("Prefer", PREFER_UTC_HEADER)

        response = await view.get(request_configuration=config)
        raw_events = response.value if response and response.value else []

        events = []
        for raw in raw_events:
            parsed = parse_event(raw)
            if parsed is not None:
                events.append(parsed)
        return events

    async def list_upcoming(self, window_start: datetime, window_end: datetime) -> list[Event]:
        """Events starting in [window_start, window_end), earliest first."""
        events = await self._fetch(window_start, window_end)
        upcoming = [e for e in events if window_start <= e.start < window_end]
        upcoming.sort(key=lambda e: e.start)
        logger.debug("Fetched %d upcoming events", len(upcoming))
        return upcoming

    async def list_current(self, now: datetime) -> list[Event]:
        """Events whose interval contains now."""
        events = await self._fetch(now, now + CURRENT_PROBE)
        return [e for e in events if e.start <= now < e.end]
