"""
Calendar to Slack status reconciliation.

StatusSync polls the calendar on a fixed interval and mirrors the next event's
title onto the presence status, clearing it once nothing is happening.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Protocol

from core.config import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_UPCOMING_WINDOW_SECONDS,
    FALLBACK_ICON,
)
from core.emoji_parser import parse_event_title
from models.events import Event, ParsedStatus

logger = logging.getLogger(__name__)


class CalendarSource(Protocol):
    async def list_upcoming(self, window_start: datetime, window_end: datetime) -> Sequence[Event]: ...

    async def list_current(self, now: datetime) -> Sequence[Event]: ...


class PresenceSink(Protocol):
    async def apply_status(self, icon: str, label: str, expires_at: int | None = None) -> None: ...

    async def clear_status(self) -> None: ...

    async def test_connection(self) -> bool: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def status_for_event(event: Event) -> ParsedStatus:
    """Parsed title status, or the calendar fallback with the raw title."""
    parsed = parse_event_title(event.title)
    if parsed is None:
        logger.info('Event "%s" does not start with an emoji, using calendar fallback', event.title)
        return ParsedStatus(icon=FALLBACK_ICON, label=event.title)
    return parsed


class StatusSync:
    """
    Owns the reconciliation state: the id of the event currently shown.

    last_event_id is None while idle. It only changes after Slack accepted
    an update, so a failed tick leaves it untouched.
    """

    def __init__(
        self,
        calendar: CalendarSource,
        presence: PresenceSink,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        upcoming_window_seconds: int = DEFAULT_UPCOMING_WINDOW_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.calendar = calendar
        self.presence = presence
        self.poll_interval = poll_interval_ms / 1000
        self.upcoming_window = timedelta(seconds=upcoming_window_seconds)
        self.clock = clock
        self.last_event_id: str | None = None
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def reconcile(self) -> None:
        """
        Run one tick of the algorithm. Collaborator errors propagate.
        """
        now = self.clock()
        upcoming = await self.calendar.list_upcoming(now, now + self.upcoming_window)

        if not upcoming:
            current = await self.calendar.list_current(now)
            if not current and self.last_event_id is not None:
                logger.info("No active events, clearing status")
                await self.presence.clear_status()
                self.last_event_id = None
            return

        event = upcoming[0]
        if event.id == self.last_event_id:
            return

        logger.info('Found upcoming event: "%s"', event.title)
        status = status_for_event(event)
        await self.presence.apply_status(status.icon, status.label, event.expires_at)
        self.last_event_id = event.id
        logger.info("Status will expire at %s", event.end.isoformat())

    async def tick(self) -> bool:
        """
        Run one tick, logging instead of raising on failure.

        Returns:
            True if the tick completed
        """
        try:
            await self.reconcile()
        except Exception:
            logger.exception("Error during poll cycle")
            return False
        return True

    async def run(self) -> None:
        """Tick now, then on every interval until stop() is called."""
        loop = asyncio.get_running_loop()
        next_fire = loop.time()

        while not self._stop.is_set():
            await self.tick()

            next_fire += self.poll_interval
            now = loop.time()
            if next_fire < now:
                # Firings missed while the tick ran collapse into one immediate tick
                logger.warning("Poll cycle overran the %.0fs interval", self.poll_interval)
                next_fire = now

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=next_fire - now)
            except asyncio.TimeoutError:
                pass

    def start(self) -> asyncio.Task:
        if self.is_running:
            raise RuntimeError("StatusSync is already running")
        self._stop.clear()
        self._task = asyncio.create_task(self.run(), name="status-sync")
        return self._task

    async def stop(self) -> None:
        """Stop the timer. A tick already in flight is allowed to finish."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
