"""
Rolekeeper
==========

A Discord bot that grants a membership role for a limited time, revokes it on
request and removes it automatically once it expires.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. ROLEKEEPER_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("ROLEKEEPER_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from rolekeeper.runtime import BotServices, Secrets, build_services
from rolekeeper.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> Secrets:
    """Load ``.env`` and return the bot token, guild ID and log webhook URL.

    Raises
    ------
    SystemExit
        If ``DISCORD_BOT_TOKEN`` or ``GUILD_ID`` is missing or invalid.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)

    raw_guild_id = os.getenv("GUILD_ID", "")
    try:
        guild_id = int(raw_guild_id)
    except ValueError:
        logger.critical("'GUILD_ID' environment variable missing or not a number (%r).", raw_guild_id)
        sys.exit(1)

    webhook_url = os.getenv("LOG_WEBHOOK_URL") or None
    if webhook_url is None:
        logger.warning("'LOG_WEBHOOK_URL' not set; membership events will only be logged locally.")

    return Secrets(token=token, guild_id=guild_id, webhook_url=webhook_url)


def build_intents() -> discord.Intents:
    """Intents for guild and member events; member lists feed the stats message."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, services: BotServices) -> None:
    """Register all operational cogs with the provided Discord bot instance."""
    from rolekeeper.cogs import events_listener, membership_cmds, scheduler_cog

    events_listener.setup(discord_bot_instance, services)
    membership_cmds.setup(discord_bot_instance, services)
    scheduler_cog.setup(discord_bot_instance, services)

    logger.info("All cogs loaded successfully.")


def create_bot(secrets: Secrets) -> tuple[discord.Bot, BotServices]:
    """Instantiate the bot, its services and cogs. Slash commands are scoped to the configured guild."""
    from rolekeeper.configuration.app_configuration import app_config

    bot = discord.Bot(intents=build_intents(), debug_guilds=[secrets.guild_id])
    services = build_services(bot, secrets, app_config)
    load_cogs(bot, services)
    return bot, services


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot, services: BotServices) -> None:
    """Close the Discord connection and the webhook session."""
    if not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    try:
        await services.close()
    except Exception as exc:
        logger.exception("Error while closing services: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the bot and run it until disconnect, returning an exit code."""
    secrets = load_environment()

    try:
        bot, services = create_bot(secrets)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, secrets.token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, services)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Rolekeeper…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
