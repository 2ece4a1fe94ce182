"""Slack notification adapter."""

import logging
from typing import Any, Optional

import httpx

from menu_notifier.adapters.notifications.slack_blocks import (
    DEFAULT_CHANNEL_LINK,
    build_fallback_text,
    build_item_blocks,
)
from menu_notifier.core import DeliveryReceipt, Item, Notifier, SendError

logger = logging.getLogger(__name__)


class SlackNotifier(Notifier):
    """Send menu posts to Slack through the Web API with a bot token."""

    api_url = "https://slack.com/api"

    def __init__(
        self,
        bot_token: Optional[str],
        channel_link: str = DEFAULT_CHANNEL_LINK,
        timeout: float = 30.0,
    ) -> None:
        """Initialize Slack notifier.

        Args:
            bot_token: Slack bot token (``xoxb-...``).
            channel_link: Link to the source channel shown under each post.
            timeout: HTTP timeout in seconds.
        """
        self.bot_token = bot_token
        self.channel_link = channel_link
        self.timeout = timeout

    async def send(self, item: Item, destination: str) -> DeliveryReceipt:
        """Post the menu to a channel."""
        payload = {
            "channel": destination,
            "blocks": build_item_blocks(item, channel_link=self.channel_link),
            "text": build_fallback_text(item),
        }
        data = await self._call("chat.postMessage", payload)

        message_ts = data.get("ts")
        if not message_ts:
            raise SendError("Slack did not return a message timestamp")

        logger.info("Posted %s to %s (ts=%s)", item.id, destination, message_ts)
        return DeliveryReceipt(destination=data.get("channel") or destination, message_ts=message_ts)

    async def send_private(self, item: Item, destination: str, requester: str) -> DeliveryReceipt:
        """Post the menu as an ephemeral message only ``requester`` can see."""
        payload = {
            "channel": destination,
            "user": requester,
            "blocks": build_item_blocks(item, channel_link=self.channel_link),
            "text": build_fallback_text(item),
        }
        data = await self._call("chat.postEphemeral", payload)

        logger.info("Posted %s privately to %s in %s", item.id, requester, destination)
        return DeliveryReceipt(destination=destination, message_ts=data.get("message_ts") or "")

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.bot_token:
            raise SendError("Slack bot token is not configured")

        headers = {"Authorization": f"Bearer {self.bot_token}"}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.api_url}/{method}", json=payload, headers=headers
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                raise SendError(f"Slack {method} request failed: {e}", e) from e
            except ValueError as e:
                raise SendError(f"Slack {method} returned invalid JSON: {e}", e) from e

        if not data.get("ok"):
            raise SendError(f"Slack API error: {data.get('error') or 'unknown'}")
        return data
