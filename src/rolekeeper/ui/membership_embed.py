"""
Embed builders for membership notifications, log entries and statistics.
"""

import datetime

import discord

from rolekeeper.datatypes.membership_datatypes import MembershipEvent
from rolekeeper.util.duration import format_discord_timestamp


EVENT_TITLES = {
    MembershipEvent.GRANTED: "Membership added",
    MembershipEvent.REVOKED: "Membership removed",
    MembershipEvent.EXPIRED: "Membership expired",
}


def build_member_notice(
    event: MembershipEvent,
    user_id: int | str,
    role_name: str,
    color: int,
    expire_at: datetime.datetime | None = None,
) -> discord.Embed:
    """
    Build the direct message sent to a member when their membership changes.

    Args:
        event: Which lifecycle event happened.
        user_id: ID of the member receiving the message.
        role_name: Display name of the membership role.
        color: Embed colour as an integer.
        expire_at: Expiry instant, shown for ``GRANTED`` notices.

    Returns:
        discord.Embed: The notice embed.
    """
    if event is MembershipEvent.GRANTED:
        lines = [
            f"## <@{user_id}> you are now a **{role_name}** member!",
            "- 💎 Your benefits are now unlocked.",
        ]
        if expire_at is not None:
            lines.append(f"- 📅 The role is active until {format_discord_timestamp(expire_at)}.")
        lines += [
            "- 📱 You will be **notified automatically** when your membership ends.",
            "",
            "> **Thank you for your support!**",
        ]
    elif event is MembershipEvent.EXPIRED:
        lines = [
            f"## <@{user_id}> your {role_name} membership has expired.",
            "- 🔒 Your benefits have been deactivated.",
            "- 📅 To unlock them again, repeat the purchase process.",
            "",
            f"> **We would be glad to welcome you back as a {role_name} member!**",
        ]
    else:
        lines = [
            f"## <@{user_id}> your {role_name} membership has been removed.",
            "- 🔒 Your benefits have been deactivated.",
            "",
            f"> **We would be glad to welcome you back as a {role_name} member!**",
        ]

    return discord.Embed(description="\n".join(lines), color=color)


def build_log_embed(title: str, description: str, color: int) -> discord.Embed:
    """Build the embed posted to the membership log webhook."""
    return discord.Embed(
        title=title,
        description=description,
        color=color,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )


def build_stats_embed(
    role_name: str,
    member_count: int,
    price: float,
    currency: str,
    color: int,
) -> discord.Embed:
    """Build the live statistics embed with member count and revenue estimate."""
    revenue = member_count * price
    revenue_text = f"{revenue:g} {currency}"

    embed = discord.Embed(
        title=f"💎 {role_name} membership statistics",
        color=color,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    embed.add_field(name=f"Current {role_name} members", value=str(member_count), inline=True)
    embed.add_field(name="Estimated monthly revenue", value=revenue_text, inline=True)
    return embed
