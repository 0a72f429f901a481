"""
Slack profile status updates.
"""

import logging

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

logger = logging.getLogger(__name__)


class PresenceConnectionError(RuntimeError):
    """Raised at startup when the Slack token cannot authenticate."""


class SlackPresence:
    """Sets and clears the status of the Slack user owning the token."""

    def __init__(self, token: str, client: AsyncWebClient | None = None):
        self._client = client or AsyncWebClient(token=token)

    async def _set_profile(self, text: str, emoji: str, expiration: int) -> None:
        await self._client.users_profile_set(
            profile={
                "status_text": text,
                "status_emoji": emoji,
                "status_expiration": expiration,
            }
        )

    async def apply_status(self, icon: str, label: str, expires_at: int | None = None) -> None:
        """
        Set the status. expires_at is epoch seconds; 0 or None never expires.

        Raises:
            SlackApiError: if Slack rejects the update
        """
        await self._set_profile(label, icon, expires_at or 0)
        logger.info("Slack status updated: %s %s", icon, label)

    async def clear_status(self) -> None:
        """Clear status text, emoji and expiration."""
        await self._set_profile("", "", 0)
        logger.info("Slack status cleared")

    async def test_connection(self) -> bool:
        """Check the token with auth.test. Never raises."""
        try:
            result = await self._client.auth_test()
        except SlackApiError as e:
            logger.error("Failed to connect to Slack: %s", e.response.get("error", e))
            return False
        except Exception:
            logger.exception("Failed to connect to Slack")
            return False

        logger.info("Connected to Slack as %s", result.get("user"))
        return True
