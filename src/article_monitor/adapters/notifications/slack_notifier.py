"""Slack notification adapter."""

import logging
from typing import Any, Optional

import httpx

from article_monitor.core import DeliveryFailed, NotificationService

logger = logging.getLogger(__name__)


class SlackNotifier(NotificationService):
    """Post Block Kit messages to a Slack channel with a bot token."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        channel_id: Optional[str] = None,
        api_base: str = "https://slack.com/api",
    ) -> None:
        """Initialize Slack notifier.

        Args:
            bot_token: Slack bot token. If None, notifications are skipped.
            channel_id: Destination channel. If None, notifications are skipped.
        """
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.api_base = api_base
        if not self.enabled:
            logger.warning("SLACK_BOT_TOKEN or SLACK_CHANNEL_ID is not set, notifications will be skipped")

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.channel_id)

    async def post_message(self, blocks: list[dict[str, Any]], text: str) -> None:
        """Send one message to the configured channel.

        Raises:
            DeliveryFailed: if the request fails or Slack answers ``ok: false``
        """
        if not self.enabled:
            logger.warning("Slack client not configured, skipping notification: %s", text)
            return

        payload = {
            "channel": self.channel_id,
            "blocks": blocks,
            "text": text,
            "mrkdwn": True,
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.post(
                    f"{self.api_base}/chat.postMessage",
                    headers={"Authorization": f"Bearer {self.bot_token}"},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                raise DeliveryFailed(f"Slack request failed: {e}") from e

        if not data.get("ok"):
            raise DeliveryFailed(f"Slack rejected message: {data.get('error', 'unknown error')}")

        logger.info("Slack notification sent: %s", text)
