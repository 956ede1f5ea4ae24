"""
Membership event log delivered through a Discord webhook.

Every grant, revoke and expiry is written to the logger and, when a webhook
URL is configured, posted as an embed. Webhook failures never reach the
caller.
"""

from __future__ import annotations

import aiohttp
import discord

from rolekeeper.ui.membership_embed import build_log_embed
from rolekeeper.util.logger import get_logger

logger = get_logger("event_log")


class WebhookEventLog:
    """Posts membership events to a webhook.

    Args:
        webhook_url: Discord webhook URL, or None to log locally only.
        username: Display name used for webhook posts.
        color: Embed colour as an integer.
    """

    def __init__(self, webhook_url: str | None, username: str, color: int) -> None:
        self.webhook_url = webhook_url
        self.username = username
        self.color = color
        self.avatar_url: str | None = None
        self._session: aiohttp.ClientSession | None = None
        self._webhook: discord.Webhook | None = None

    def set_avatar_url(self, avatar_url: str | None) -> None:
        self.avatar_url = avatar_url

    def _get_webhook(self) -> discord.Webhook | None:
        if not self.webhook_url:
            return None
        if self._webhook is None or self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._webhook = discord.Webhook.from_url(self.webhook_url, session=self._session)
        return self._webhook

    async def log_event(self, title: str, description: str) -> None:
        """Record an event. Never raises on delivery failure."""
        logger.info("[EVENT_LOG] %s: %s", title, description)

        try:
            webhook = self._get_webhook()
            if webhook is None:
                return
            await webhook.send(
                username=self.username,
                avatar_url=self.avatar_url,
                embed=build_log_embed(title, description, self.color),
            )
        except Exception as exc:
            logger.warning("[EVENT_LOG] Failed to post %r to webhook: %s", title, exc)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._webhook = None
