"""
Role and DM operations against the configured guild.

``GuildGateway`` is the only place that mutates member roles. The expiry
sweeper and the membership service call it through the small interface
below, which tests replace with ``AsyncMock`` fakes.
"""

from __future__ import annotations

import discord

from rolekeeper.util.discord_utils import send_dm_safely
from rolekeeper.util.logger import get_logger

logger = get_logger("guild_gateway")


class GuildGateway:
    """Role mutation and direct-message access for one guild.

    Args:
        bot: Connected py-cord bot.
        guild_id: ID of the guild whose roles are managed.
    """

    def __init__(self, bot: discord.Bot, guild_id: int) -> None:
        self.bot = bot
        self.guild_id = guild_id

    @property
    def guild(self) -> discord.Guild | None:
        return self.bot.get_guild(self.guild_id)

    def get_role(self, role_id: int | str) -> discord.Role | None:
        guild = self.guild
        if guild is None:
            return None
        try:
            return guild.get_role(int(role_id))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric role ID %r", role_id)
            return None

    async def fetch_member(self, user_id: int | str) -> discord.Member | None:
        """Return the guild member for ``user_id``, or None if they left the guild."""
        guild = self.guild
        if guild is None:
            return None
        member = guild.get_member(int(user_id))
        if member is not None:
            return member
        try:
            return await guild.fetch_member(int(user_id))
        except discord.NotFound:
            return None

    async def add_role(self, user_id: int | str, role_id: int | str, *, reason: str | None = None) -> None:
        """Give ``role_id`` to ``user_id``.

        Raises:
            LookupError: If the guild, member or role cannot be found.
            discord.Forbidden: If the bot lacks permission.
            discord.HTTPException: On other API failures.
        """
        role = self.get_role(role_id)
        member = await self.fetch_member(user_id)
        if role is None or member is None:
            raise LookupError(f"Cannot resolve member {user_id} or role {role_id}")
        await member.add_roles(role, reason=reason)
        logger.debug("Added role %s to %s", role_id, user_id)

    async def remove_role(self, user_id: int | str, role_id: int | str, *, reason: str | None = None) -> bool:
        """Take ``role_id`` away from ``user_id``.

        Idempotent: a departed member, a deleted role or a member who no longer
        holds the role is a no-op.

        Returns:
            bool: True if a role was actually removed.

        Raises:
            discord.Forbidden: If the bot lacks permission.
            discord.HTTPException: On other API failures.
        """
        role = self.get_role(role_id)
        if role is None:
            logger.warning("Role %s no longer exists; nothing to remove from %s", role_id, user_id)
            return False

        member = await self.fetch_member(user_id)
        if member is None:
            logger.info("User %s is no longer in the guild; nothing to remove", user_id)
            return False

        if all(r.id != role.id for r in member.roles):
            logger.debug("User %s does not hold role %s", user_id, role_id)
            return False

        await member.remove_roles(role, reason=reason)
        logger.debug("Removed role %s from %s", role_id, user_id)
        return True

    async def send_direct_message(self, user_id: int | str, embed: discord.Embed) -> bool:
        """Best-effort DM; returns False on any failure without raising."""
        try:
            user = self.bot.get_user(int(user_id)) or await self.bot.fetch_user(int(user_id))
        except Exception as exc:
            logger.warning("Could not resolve user %s for DM: %s", user_id, exc)
            return False
        return await send_dm_safely(user, embed)
