"""
Live statistics message for the membership role.

A single embed in the stats channel shows how many members hold the role and
the estimated monthly revenue. Its message ID is persisted so the same message
is edited across restarts; if it was deleted a new one is posted.
"""

from __future__ import annotations

import asyncio

import discord

from rolekeeper.configuration.app_configuration import AppConfig
from rolekeeper.repositories.state_repo import BotStateRepo
from rolekeeper.ui.membership_embed import build_stats_embed
from rolekeeper.util.logger import get_logger

logger = get_logger("stats_service")


class StatsPublisher:
    """Sends or updates the statistics message."""

    def __init__(self, bot: discord.Bot, guild_id: int, state: BotStateRepo, config: AppConfig) -> None:
        self.bot = bot
        self.guild_id = guild_id
        self.state = state
        self.config = config
        self._lock = asyncio.Lock()

    async def _resolve_channel(self) -> discord.abc.Messageable | None:
        channel_id = self.config.stats_channel_id
        if channel_id is None:
            return None
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            channel = await self.bot.fetch_channel(channel_id)
        return channel

    async def _count_members(self) -> int | None:
        guild = self.bot.get_guild(self.guild_id)
        role_id = self.config.membership_role_id
        if guild is None or role_id is None:
            return None
        if not guild.chunked:
            await guild.chunk()
        role = guild.get_role(role_id)
        if role is None:
            return None
        return len(role.members)

    async def publish(self) -> None:
        """Send or edit the stats message. All failures are logged, never raised."""
        async with self._lock:
            try:
                await self._publish()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("[STATS] Failed to send or update the stats message: %s", exc)

    async def _publish(self) -> None:
        channel = await self._resolve_channel()
        if channel is None:
            logger.debug("[STATS] No stats channel configured")
            return

        count = await self._count_members()
        if count is None:
            logger.error("[STATS] Membership role not found")
            return

        embed = build_stats_embed(
            role_name=self.config.membership_role_name,
            member_count=count,
            price=self.config.membership_price,
            currency=self.config.currency,
            color=self.config.embed_color,
        )

        message_id = self.state.stats_message_id
        if message_id is not None:
            try:
                message = await channel.fetch_message(message_id)
                await message.edit(embed=embed)
                logger.debug("[STATS] Stats message updated")
                return
            except (discord.NotFound, discord.Forbidden):
                logger.info("[STATS] Stats message %s not found, sending a new one", message_id)

        message = await channel.send(embed=embed)
        self.state.set_stats_message_id(message.id)
        logger.info("[STATS] Stats message sent (id=%s)", message.id)
