"""
Construction of the long-lived objects shared by the cogs.

``build_services`` wires the membership store, bot state, Discord gateway,
event log, stats publisher, membership service and expiry sweeper together
for one bot instance.
"""

from __future__ import annotations

from dataclasses import dataclass

import discord

from rolekeeper.configuration.app_configuration import AppConfig
from rolekeeper.repositories.membership_repo import MembershipStore
from rolekeeper.repositories.state_repo import BotStateRepo
from rolekeeper.scheduler.expiry_sweeper import ExpirySweeper
from rolekeeper.services.event_log import WebhookEventLog
from rolekeeper.services.guild_gateway import GuildGateway
from rolekeeper.services.membership_service import MembershipService
from rolekeeper.services.stats_service import StatsPublisher

MEMBERSHIP_FILE = "data.json"
STATE_FILE = "state.json"
STATS_FILE = "statsMessage.json"


@dataclass(slots=True)
class Secrets:
    """Values read from the environment."""
    token: str
    guild_id: int
    webhook_url: str | None = None


@dataclass(slots=True)
class BotServices:
    config: AppConfig
    guild_id: int
    store: MembershipStore
    state: BotStateRepo
    gateway: GuildGateway
    event_log: WebhookEventLog
    stats: StatsPublisher
    membership: MembershipService
    sweeper: ExpirySweeper

    async def close(self) -> None:
        await self.event_log.close()


def build_services(bot: discord.Bot, secrets: Secrets, config: AppConfig) -> BotServices:
    data_dir = config.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    store = MembershipStore(data_dir / MEMBERSHIP_FILE)
    state = BotStateRepo(data_dir / STATE_FILE, data_dir / STATS_FILE)
    gateway = GuildGateway(bot, secrets.guild_id)
    event_log = WebhookEventLog(secrets.webhook_url, config.log_webhook_username, config.embed_color)
    stats = StatsPublisher(bot, secrets.guild_id, state, config)

    membership = MembershipService(
        store=store,
        gateway=gateway,
        event_log=event_log,
        refresh_stats=stats.publish,
        role_id=config.membership_role_id,
        color=config.embed_color,
    )
    sweeper = ExpirySweeper(
        store=store,
        gateway=gateway,
        event_log=event_log,
        refresh_stats=stats.publish,
        role_name=config.membership_role_name,
        color=config.embed_color,
    )

    return BotServices(
        config=config,
        guild_id=secrets.guild_id,
        store=store,
        state=state,
        gateway=gateway,
        event_log=event_log,
        stats=stats,
        membership=membership,
        sweeper=sweeper,
    )
