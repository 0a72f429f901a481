"""API Pydantic models."""

from .responses import ErrorCodes, ErrorResponse, HealthResponse

__all__ = ["HealthResponse", "ErrorResponse", "ErrorCodes"]
