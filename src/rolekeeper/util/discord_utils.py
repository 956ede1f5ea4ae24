"""
discord_utils.py
================

Stateless Discord helpers: role-based command access and best-effort DMs.
"""

from typing import Iterable

import discord

from rolekeeper.util.logger import get_logger

logger = get_logger("discord_utils")


def has_any_role(member: discord.abc.User, allowed_role_ids: Iterable[int]) -> bool:
    """
    Check whether a guild member holds at least one of the given roles.

    Args:
        member: The command invoker. Plain users (outside a guild) never match.
        allowed_role_ids: Role IDs that grant access.

    Returns:
        bool: True if any of the member's roles is in ``allowed_role_ids``.
    """
    if not isinstance(member, discord.Member):
        return False
    allowed = {int(role_id) for role_id in allowed_role_ids}
    return any(role.id in allowed for role in member.roles)


async def send_dm_safely(user: discord.abc.Messageable, embed: discord.Embed) -> bool:
    """
    Send an embed as a direct message, swallowing delivery failures.

    Returns:
        bool: True if the message was delivered, False otherwise.
    """
    try:
        await user.send(embed=embed)
        return True
    except discord.Forbidden:
        logger.info("Could not DM %s: direct messages are closed.", getattr(user, "id", user))
    except Exception as exc:
        logger.warning("Could not DM %s: %s", getattr(user, "id", user), exc)
    return False
