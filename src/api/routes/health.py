"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse, include_in_schema=False)
@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check endpoint for monitoring.

    Reports the event currently mirrored to Slack. Returns 503 while the
    poll loop is not running.
    """
    sync = getattr(request.app.state, "sync", None)
    timestamp = datetime.now(timezone.utc).isoformat()

    if sync is not None and sync.is_running:
        return HealthResponse(
            status="healthy",
            last_event_id=sync.last_event_id,
            timestamp=timestamp,
        )

    return JSONResponse(
        status_code=503,
        content=HealthResponse(
            status="unhealthy",
            last_event_id=sync.last_event_id if sync is not None else None,
            timestamp=timestamp,
        ).model_dump(by_alias=True),
    )
