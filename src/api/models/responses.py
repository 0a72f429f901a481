"""Pydantic response models for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(populate_by_name=True)

    status: str  # "healthy" or "unhealthy"
    last_event_id: str | None = Field(default=None, alias="lastTrackedEventId")
    timestamp: str  # ISO 8601 UTC


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
