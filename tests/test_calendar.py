"""
Tests for MS Graph event parsing and the calendar source.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

from fakes import NOW
from services.calendar import (
    GraphCalendarSource,
    format_graph_datetime,
    parse_event,
    parse_graph_datetime,
)


def graph_event(
    event_id="AAMk1",
    subject="🏃 Run",
    start="2025-11-03T10:00:00.0000000",
    end="2025-11-03T11:00:00.0000000",
    time_zone="UTC",
    is_all_day=False,
    is_cancelled=False,
):
    """Minimal stand-in for msgraph's Event model."""
    return SimpleNamespace(
        id=event_id,
        subject=subject,
        start=SimpleNamespace(date_time=start, time_zone=time_zone) if start else None,
        end=SimpleNamespace(date_time=end, time_zone=time_zone) if end else None,
        is_all_day=is_all_day,
        is_cancelled=is_cancelled,
    )


class TestParseGraphDatetime:
    def test_seven_digit_fraction(self):
        parsed = parse_graph_datetime("2025-11-03T10:00:00.1234567", "UTC")
        assert parsed == datetime(2025, 11, 3, 10, 0, 0, 123456, tzinfo=timezone.utc)

    def test_z_suffix(self):
        assert parse_graph_datetime("2025-11-03T10:00:00Z") == datetime(
            2025, 11, 3, 10, tzinfo=timezone.utc
        )

    def test_named_zone(self):
        parsed = parse_graph_datetime("2025-11-03T10:00:00", "Europe/Paris")
        assert parsed.tzinfo == ZoneInfo("Europe/Paris")
        assert parsed.astimezone(timezone.utc).hour == 9

    def test_unknown_zone_falls_back_to_utc(self):
        parsed = parse_graph_datetime("2025-11-03T10:00:00", "Pacific Standard Time")
        assert parsed.tzinfo == timezone.utc

    def test_format(self):
        paris = datetime(2025, 11, 3, 10, 0, 0, tzinfo=ZoneInfo("Europe/Paris"))
        assert format_graph_datetime(paris) == "2025-11-03T09:00:00Z"


class TestParseEvent:
    def test_basic(self):
        event = parse_event(graph_event())
        assert event.id == "AAMk1"
        assert event.title == "🏃 Run"
        assert event.start == datetime(2025, 11, 3, 10, tzinfo=timezone.utc)
        assert event.end == datetime(2025, 11, 3, 11, tzinfo=timezone.utc)

    @pytest.mark.parametrize("subject", [None, "", "   "])
    def test_missing_title_filtered(self, subject):
        assert parse_event(graph_event(subject=subject)) is None

    def test_missing_start_filtered(self):
        assert parse_event(graph_event(start=None)) is None

    def test_all_day_filtered(self):
        assert parse_event(graph_event(is_all_day=True)) is None

    def test_cancelled_filtered(self):
        assert parse_event(graph_event(is_cancelled=True)) is None

    def test_missing_end_uses_start(self):
        event = parse_event(graph_event(end=None))
        assert event.end == event.start

    def test_expires_at_is_end_epoch(self):
        event = parse_event(graph_event())
        assert event.expires_at == int(datetime(2025, 11, 3, 11, tzinfo=timezone.utc).timestamp())


def mock_graph(raw_events, calendar_id=None):
    """Graph client mock whose calendar_view returns raw_events."""
    graph = MagicMock()
    user = graph.users.by_user_id.return_value
    if calendar_id:
        view = user.calendars.by_calendar_id.return_value.calendar_view
    else:
        view = user.calendar.calendar_view
    view.get = AsyncMock(return_value=SimpleNamespace(value=raw_events))
    return graph, view


def iso(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%S.0000000")


@pytest.mark.asyncio
class TestGraphCalendarSource:
    async def test_upcoming_filters_to_window_and_sorts(self):
        window_end = NOW + timedelta(seconds=60)
        raw = [
            graph_event("later", "🎧 Focus", iso(NOW + timedelta(seconds=50)), iso(NOW + timedelta(hours=1))),
            graph_event("ongoing", "🍕 Lunch", iso(NOW - timedelta(minutes=10)), iso(NOW + timedelta(minutes=20))),
            graph_event("soon", "🏃 Run", iso(NOW + timedelta(seconds=20)), iso(NOW + timedelta(hours=1))),
            graph_event("untitled", "", iso(NOW + timedelta(seconds=5)), iso(NOW + timedelta(hours=1))),
        ]
        graph, view = mock_graph(raw)
        source = GraphCalendarSource(graph, user_id="me@example.com")

        events = await source.list_upcoming(NOW, window_end)

        assert [e.id for e in events] == ["soon", "later"]
        graph.users.by_user_id.assert_called_with("me@example.com")
        view.CalendarViewRequestBuilderGetQueryParameters.assert_called_once_with(
            start_date_time="2025-11-03T09:59:30Z",
            end_date_time="2025-11-03T10:00:30Z",
            orderby=["start/dateTime"],
            top=50,
        )

    async def test_requests_utc_times(self):
        graph, view = mock_graph([])
        source = GraphCalendarSource(graph, user_id="me@example.com")

        await source.list_upcoming(NOW, NOW + timedelta(seconds=60))

        config = view.get.await_args.kwargs["request_configuration"]
        assert 'outlook.timezone="UTC"' in config.headers.get("Prefer")

    async def test_named_calendar(self):
        graph, view = mock_graph([], calendar_id="cal-123")
        source = GraphCalendarSource(graph, user_id="me@example.com", calendar_id="cal-123")

        await source.list_upcoming(NOW, NOW + timedelta(seconds=60))

        graph.users.by_user_id.return_value.calendars.by_calendar_id.assert_called_with("cal-123")
        view.get.assert_awaited_once()

    async def test_current_requires_containment(self):
        raw = [
            graph_event("ongoing", "🍕 Lunch", iso(NOW - timedelta(minutes=10)), iso(NOW + timedelta(minutes=20))),
            graph_event("ended", "Standup", iso(NOW - timedelta(minutes=30)), iso(NOW)),
            graph_event("future", "Review", iso(NOW + timedelta(seconds=1)), iso(NOW + timedelta(hours=1))),
        ]
        graph, _ = mock_graph(raw)
        source = GraphCalendarSource(graph, user_id="me@example.com")

        events = await source.list_current(NOW)

        assert [e.id for e in events] == ["ongoing"]

    async def test_empty_response(self):
        graph, view = mock_graph(None)
        source = GraphCalendarSource(graph, user_id="me@example.com")

        assert await source.list_current(NOW) == []

    async def test_errors_propagate(self):
        graph, view = mock_graph([])
        view.get.side_effect = RuntimeError("401 Unauthorized")
        source = GraphCalendarSource(graph, user_id="me@example.com")

        with pytest.raises(RuntimeError):
            await source.list_upcoming(NOW, NOW + timedelta(seconds=60))
