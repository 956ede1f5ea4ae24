"""Background scheduler cogs for Rolekeeper.

Contains two cogs:
- ExpirySweeperCog – expires memberships every minute
- StatsRefreshCog  – refreshes the statistics message every few minutes
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import discord
from discord.ext import commands, tasks

from rolekeeper.runtime import BotServices
from rolekeeper.util.logger import get_logger

logger = get_logger("scheduler_cog")


class _IntervalCog(commands.Cog):
    """
    Reusable base for cogs that run one async job on a fixed interval.

    Subclasses supply:
        _name          – human-readable tag used in log messages
        _get_interval  – returns the configured interval in seconds
        _run_once      – async job executed on every tick
    """

    _name: str
    _get_interval: Callable[["_IntervalCog"], float]
    _run_once: Callable[["_IntervalCog"], Awaitable[None]]

    def __init__(self, bot: discord.Bot, services: BotServices) -> None:
        self.bot = bot
        self.services = services

    @tasks.loop(seconds=60)  # real interval set in on_ready
    async def _interval_task(self) -> None:
        try:
            await self._run_once()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[%s] Unexpected error: %s", self._name, exc)

    @_interval_task.before_loop
    async def _before_interval(self) -> None:
        await self.bot.wait_until_ready()

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        interval = self._get_interval()
        self._interval_task.change_interval(seconds=interval)
        if not self._interval_task.is_running():
            self._interval_task.start()
            logger.info("[%s] Started (interval=%.1fs)", self._name, interval)

    def cog_unload(self) -> None:
        self._interval_task.cancel()
        logger.info("[%s] Stopped", self._name)


class ExpirySweeperCog(_IntervalCog):
    """Runs the expiry sweep on its configured cadence."""

    _name = "EXPIRY_SWEEPER"

    def _get_interval(self) -> float:
        return self.services.config.sweep_interval

    async def _run_once(self) -> None:
        if self.bot.get_guild(self.services.guild_id) is None:
            logger.warning("[%s] Guild %s not available; skipping sweep", self._name, self.services.guild_id)
            return
        await self.services.sweeper.sweep()


class StatsRefreshCog(_IntervalCog):
    """Keeps the statistics message current."""

    _name = "STATS_REFRESH"

    def _get_interval(self) -> float:
        return self.services.config.stats_refresh_interval

    async def _run_once(self) -> None:
        await self.services.stats.publish()


def setup(bot: discord.Bot, services: BotServices) -> None:
    bot.add_cog(ExpirySweeperCog(bot, services))
    bot.add_cog(StatsRefreshCog(bot, services))
