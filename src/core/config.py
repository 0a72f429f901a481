"""
Configuration constants and environment setup.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent.parent

load_dotenv(PROJECT_ROOT / ".env")

# =============================================================================
# STATUS DEFAULTS
# =============================================================================

FALLBACK_ICON = "📅"  # Used when an event title has no leading emoji
PLACEHOLDER_LABEL = "Busy"  # Used when the title is only an emoji

# =============================================================================
# POLLING
# =============================================================================

DEFAULT_POLL_INTERVAL_MS = 60_000
DEFAULT_UPCOMING_WINDOW_SECONDS = 60

# =============================================================================
# API CONFIGURATION
# =============================================================================

DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
API_VERSION = "1.0.0"

REQUIRED_VARIABLES = (
    "MICROSOFT_GRAPH_TENANT_ID",
    "MICROSOFT_GRAPH_APP_ID",
    "MICROSOFT_GRAPH_CLIENT_SECRET",
    "CALENDAR_USER_ID",
    "SLACK_USER_TOKEN",
)


class ConfigError(Exception):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read once at startup."""

    graph_tenant_id: str
    graph_app_id: str
    graph_client_secret: str = field(repr=False)
    calendar_user_id: str
    slack_user_token: str = field(repr=False)
    calendar_id: str | None = None
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    upcoming_window_seconds: int = DEFAULT_UPCOMING_WINDOW_SECONDS
    log_level: str = "info"
    log_json: bool = False
    api_host: str = DEFAULT_API_HOST
    port: int = DEFAULT_PORT


def _positive_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got '{raw}'")
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ConfigError: if a required variable is missing or a number is invalid
    """
    if environ is None:
        environ = os.environ

    missing = [key for key in REQUIRED_VARIABLES if not environ.get(key, "").strip()]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        graph_tenant_id=environ["MICROSOFT_GRAPH_TENANT_ID"].strip(),
        graph_app_id=environ["MICROSOFT_GRAPH_APP_ID"].strip(),
        graph_client_secret=environ["MICROSOFT_GRAPH_CLIENT_SECRET"].strip(),
        calendar_user_id=environ["CALENDAR_USER_ID"].strip(),
        slack_user_token=environ["SLACK_USER_TOKEN"].strip(),
        calendar_id=environ.get("CALENDAR_ID", "").strip() or None,
        poll_interval_ms=_positive_int(environ, "POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
        upcoming_window_seconds=_positive_int(
            environ, "UPCOMING_WINDOW_SECONDS", DEFAULT_UPCOMING_WINDOW_SECONDS
        ),
        log_level=environ.get("LOG_LEVEL", "info").strip() or "info",
        log_json=environ.get("LOG_FORMAT", "").strip().lower() == "json",
        api_host=environ.get("API_HOST", DEFAULT_API_HOST).strip() or DEFAULT_API_HOST,
        port=_positive_int(environ, "PORT", DEFAULT_PORT),
    )
