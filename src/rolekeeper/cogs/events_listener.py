"""Event listener Cog for Rolekeeper.

Handles the bot lifecycle (on_ready) and unhandled slash command errors.
"""

import discord
from discord.ext import commands

from rolekeeper.runtime import BotServices
from rolekeeper.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and command error handlers."""

    def __init__(self, discord_bot_instance, services: BotServices):
        self.bot = discord_bot_instance
        self.services = services
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        if self.bot.user:
            self.services.event_log.set_avatar_url(self.bot.user.display_avatar.url)
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        if self.bot.get_guild(self.services.guild_id) is None:
            logger.error("Configured guild %s is not available to the bot.", self.services.guild_id)

        logger.info("Tracking %d active membership(s).", len(self.services.store))

    @commands.Cog.listener(name="on_application_command_error")
    async def on_application_command_error(
        self,
        ctx: discord.ApplicationContext,
        error: discord.DiscordException,
    ) -> None:
        command_name = ctx.command.qualified_name if ctx.command else "unknown"
        logger.error("Unhandled error in /%s: %s", command_name, error, exc_info=error)
        try:
            await ctx.respond("An error occurred while processing the command.", ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send error response to user.")


def setup(discord_bot_instance, services: BotServices):
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, services))
