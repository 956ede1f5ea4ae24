"""
Membership cog: slash commands for granting and revoking the membership role.

Every command checks, in order, that the invoker holds one of the configured
allowed roles, that it runs in the managed guild and that commands are not
locked. Failures are reported to the invoker with ephemeral replies.

Commands
- ``/addmembership user time``: grant the role for ``time`` (``1d``, ``12h``, ``30m``...).
- ``/removemembership user``: end a membership early.
- ``/lockcommands locked``: lock or unlock the membership commands.
"""

import discord
from discord import Option
from discord.ext import commands

from rolekeeper.datatypes.membership_datatypes import (
    AlreadyMember,
    InvalidFormat,
    NotMember,
    RoleMissing,
    RoleUpdateFailed,
)
from rolekeeper.runtime import BotServices
from rolekeeper.util.discord_utils import has_any_role
from rolekeeper.util.duration import format_discord_timestamp
from rolekeeper.util.logger import get_logger

logger = get_logger("membership_cog")


class MembershipCog(commands.Cog):
    """Slash commands that manage the time-limited membership role."""

    def __init__(self, discord_bot_instance, services: BotServices):
        self.discord_bot_instance = discord_bot_instance
        self.services = services
        logger.info("Membership cog loaded")

    async def check_access(self, ctx: discord.ApplicationContext, *, ignore_lock: bool = False) -> bool:
        """Run the shared pre-checks.

        Returns
        -------
        bool
            ``True`` when the command may proceed; ``False`` if a reply was already sent.
        """
        if not has_any_role(ctx.author, self.services.config.allowed_role_ids):
            await ctx.respond("You do not have permission to use this command.", ephemeral=True)
            return False

        if ctx.guild is None or ctx.guild.id != self.services.guild_id:
            await ctx.respond("Server not found.", ephemeral=True)
            return False

        if self.services.state.commands_locked and not ignore_lock:
            await ctx.respond("Commands are currently locked.", ephemeral=True)
            return False

        return True

    @commands.slash_command(name="addmembership", description="Gives a user the membership role for a limited time.")
    async def addmembership(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user receiving the membership.", required=True),  # type: ignore
        time: Option(str, "Duration, e.g. 1d, 12h, 30m", required=True),  # type: ignore
    ) -> None:
        """Grant a membership."""
        if not await self.check_access(ctx):
            return

        await ctx.defer(ephemeral=True)

        try:
            expire_at = await self.services.membership.grant(user, time, ctx.author)
        except InvalidFormat:
            await ctx.send_followup("Invalid time format. Example: 1d, 12h, 30m", ephemeral=True)
            return
        except RoleMissing:
            await ctx.send_followup("Membership role not found.", ephemeral=True)
            return
        except AlreadyMember:
            await ctx.send_followup("This user already has a membership.", ephemeral=True)
            return
        except RoleUpdateFailed:
            await ctx.send_followup("Failed to add the role.", ephemeral=True)
            return

        await ctx.send_followup(
            f"Membership added. It expires {format_discord_timestamp(expire_at, 'R')}.",
            ephemeral=True,
        )

    @commands.slash_command(name="removemembership", description="Removes a user's membership.")
    async def removemembership(
        self,
        ctx: discord.ApplicationContext,
        user: Option(discord.Member, "The user losing the membership.", required=True),  # type: ignore
    ) -> None:
        """Revoke a membership early."""
        if not await self.check_access(ctx):
            return

        await ctx.defer(ephemeral=True)

        try:
            await self.services.membership.revoke(user, ctx.author)
        except NotMember:
            await ctx.send_followup("This user has no membership.", ephemeral=True)
            return
        except RoleMissing:
            await ctx.send_followup("The role no longer exists.", ephemeral=True)
            return
        except RoleUpdateFailed:
            await ctx.send_followup("Failed to remove the role.", ephemeral=True)
            return

        await ctx.send_followup("Membership removed.", ephemeral=True)

    @commands.slash_command(name="lockcommands", description="Locks or unlocks the membership commands.")
    async def lockcommands(
        self,
        ctx: discord.ApplicationContext,
        locked: Option(bool, "Whether membership commands should be locked.", required=True),  # type: ignore
    ) -> None:
        if not await self.check_access(ctx, ignore_lock=True):
            return

        self.services.state.set_commands_locked(locked)
        await ctx.respond(
            "Commands are now locked." if locked else "Commands are now unlocked.",
            ephemeral=True,
        )


def setup(discord_bot_instance, services: BotServices):
    discord_bot_instance.add_cog(MembershipCog(discord_bot_instance, services))
