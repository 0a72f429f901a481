#!/usr/bin/env python3
"""
Show upcoming and current calendar events with the Slack status each would set.

Read-only: queries the calendar but never touches Slack.

Usage:
    uv run python src/scripts/preview_status.py
    uv run python src/scripts/preview_status.py --window 3600
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ConfigError, load_settings
from core.graph_client import build_graph_client
from services.calendar import GraphCalendarSource
from services.sync import status_for_event, utc_now


def print_events(heading: str, events) -> None:
    print(f"\n{heading} ({len(events)}):")
    if not events:
        print("  None")
    for event in events:
        status = status_for_event(event)
        print(f"  {event.start.isoformat()} - {event.end.isoformat()}  {event.title}")
        print(f"    ID: {event.id}")
        print(f"    Status: {status.icon} {status.label} (expires {event.expires_at})")


def positive_seconds(value: str) -> int:
    """argparse type for a window length: an integer greater than zero."""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer, got '{value}'")
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {seconds}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preview the Slack status derived from calendar events"
    )
    parser.add_argument(
        "--window",
        type=positive_seconds,
        default=None,
        help="Lookahead window in seconds (default: UPCOMING_WINDOW_SECONDS)",
    )
    return parser


async def main():
    """Print the events the poll loop would see right now."""
    args = build_parser().parse_args()

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    window = timedelta(
        seconds=args.window if args.window is not None else settings.upcoming_window_seconds
    )
    source = GraphCalendarSource(
        build_graph_client(settings),
        user_id=settings.calendar_user_id,
        calendar_id=settings.calendar_id,
    )

    now = utc_now()
    print(f"Calendar of {settings.calendar_user_id}, now {now.isoformat()}")
    print("=" * 80)

    upcoming = await source.list_upcoming(now, now + window)
    current = await source.list_current(now)

    print_events(f"Starting in the next {int(window.total_seconds())}s", upcoming)
    print_events("Happening now", current)

    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
