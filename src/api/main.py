"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import health_router
from core.config import API_VERSION, ConfigError, Settings, load_settings
from core.graph_client import build_graph_client
from core.logging_config import setup_logging
from services.calendar import GraphCalendarSource
from services.slack import PresenceConnectionError, SlackPresence
from services.sync import CalendarSource, PresenceSink, StatusSync

logger = logging.getLogger(__name__)


def build_collaborators(settings: Settings) -> tuple[CalendarSource, PresenceSink]:
    """Create the Graph calendar source and the Slack presence sink."""
    calendar = GraphCalendarSource(
        build_graph_client(settings),
        user_id=settings.calendar_user_id,
        calendar_id=settings.calendar_id,
    )
    presence = SlackPresence(settings.slack_user_token)
    return calendar, presence


def create_app(
    settings: Settings | None = None,
    calendar: CalendarSource | None = None,
    presence: PresenceSink | None = None,
) -> FastAPI:
    """
    Build the app. Collaborators not passed in are built from settings.

    Settings are loaded from the environment at startup when not given, so a
    missing variable aborts startup before any poll runs.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        app_settings = settings or load_settings()
        setup_logging(app_settings.log_level, app_settings.log_json)
        logger.info("Starting Slack calendar status sync")
        logger.info("Poll interval: %dms", app_settings.poll_interval_ms)

        app_calendar, app_presence = calendar, presence
        if app_calendar is None or app_presence is None:
            built_calendar, built_presence = build_collaborators(app_settings)
            app_calendar = app_calendar or built_calendar
            app_presence = app_presence or built_presence

        if not await app_presence.test_connection():
            raise PresenceConnectionError("Failed to connect to Slack. Check your SLACK_USER_TOKEN.")

        sync = StatusSync(
            app_calendar,
            app_presence,
            poll_interval_ms=app_settings.poll_interval_ms,
            upcoming_window_seconds=app_settings.upcoming_window_seconds,
        )
        app.state.sync = sync
        logger.info("All systems ready, starting poll loop")
        sync.start()

        yield

        logger.info("Shutting down gracefully")
        await sync.stop()

    app = FastAPI(
        title="Slack Calendar Status Sync",
        description="Mirrors upcoming calendar events onto a Slack status",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # Global exception handler for unexpected errors
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with standard error format."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                code=ErrorCodes.INTERNAL_ERROR,
                details=[],
            ).model_dump(),
        )

    app.include_router(health_router)
    return app


app = create_app()


# Entry point for uvicorn (run from src/: python -m api.main)
if __name__ == "__main__":
    import sys

    import uvicorn

    try:
        run_settings = load_settings()
    except ConfigError as e:
        print(f"Fatal error: {e}")
        sys.exit(1)

    uvicorn.run(
        "api.main:app",
        host=run_settings.api_host,
        port=run_settings.port,
    )
