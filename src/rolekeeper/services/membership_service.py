"""
Grant and revoke memberships on behalf of the slash commands.

Each operation keeps the store, the member's roles, the member's DMs, the
event log and the stats message in step:

- grant: validate, add the role, record the grant, DM, log, refresh stats.
- revoke: look up, remove the role, DM, drop the record, log, refresh stats.

The role is mutated before the store so a refused role change leaves the
store untouched. Validation failures are raised as ``MembershipError``
subclasses for the command layer to report.
"""

from __future__ import annotations

import datetime
from typing import Awaitable, Callable

import discord

from rolekeeper.datatypes.membership_datatypes import (
    AlreadyMember,
    InvalidFormat,
    MembershipEvent,
    MembershipRecord,
    NotMember,
    RoleMissing,
    RoleUpdateFailed,
)
from rolekeeper.repositories.membership_repo import MembershipStore
from rolekeeper.services.event_log import WebhookEventLog
from rolekeeper.services.guild_gateway import GuildGateway
from rolekeeper.ui.membership_embed import EVENT_TITLES, build_member_notice
from rolekeeper.util.duration import format_duration, parse_duration
from rolekeeper.util.logger import get_logger

logger = get_logger("membership_service")

StatsRefresh = Callable[[], Awaitable[None]]


class MembershipService:
    """Coordinates membership changes requested by moderators."""

    def __init__(
        self,
        store: MembershipStore,
        gateway: GuildGateway,
        event_log: WebhookEventLog,
        refresh_stats: StatsRefresh,
        role_id: int | None,
        color: int,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.event_log = event_log
        self.refresh_stats = refresh_stats
        self.role_id = role_id
        self.color = color

    async def grant(
        self,
        user: discord.abc.User,
        duration_text: str,
        issuer: discord.abc.User,
    ) -> datetime.datetime:
        """Give ``user`` the membership role for ``duration_text``.

        Returns:
            datetime.datetime: When the membership will expire.

        Raises:
            InvalidFormat: ``duration_text`` is malformed or zero.
            RoleMissing: The membership role does not exist.
            AlreadyMember: ``user`` already has a membership.
            RoleUpdateFailed: Discord refused to add the role.
        """
        duration_ms = parse_duration(duration_text)
        if duration_ms <= 0:
            raise InvalidFormat(duration_text)

        role = self.gateway.get_role(self.role_id) if self.role_id is not None else None
        if role is None:
            raise RoleMissing("Membership role not found")

        if self.store.is_member(str(user.id)):
            raise AlreadyMember(str(user.id))

        try:
            await self.gateway.add_role(user.id, role.id, reason=f"Membership granted by {issuer}")
        except (LookupError, discord.HTTPException) as exc:
            logger.warning("Failed to add role %s to %s: %s", role.id, user.id, exc)
            raise RoleUpdateFailed(str(exc)) from exc

        expire_at = self.store.grant(str(user.id), str(role.id), duration_ms)
        logger.info("Granted %s to %s for %s", role.name, user.id, format_duration(duration_ms))

        await self.gateway.send_direct_message(
            user.id,
            build_member_notice(MembershipEvent.GRANTED, user.id, role.name, self.color, expire_at),
        )
        await self.event_log.log_event(
            EVENT_TITLES[MembershipEvent.GRANTED],
            f"{role.name} was assigned to <@{user.id}> for {duration_text} by <@{issuer.id}>.",
        )
        await self.refresh_stats()
        return expire_at

    async def revoke(self, user: discord.abc.User, issuer: discord.abc.User) -> MembershipRecord:
        """End ``user``'s membership early.

        Returns:
            MembershipRecord: The record that was removed.

        Raises:
            NotMember: ``user`` has no membership.
            RoleMissing: The recorded role no longer exists; the record is dropped.
            RoleUpdateFailed: Discord refused to remove the role; the record is kept.
        """
        record = self.store.get(str(user.id))
        if record is None:
            raise NotMember(str(user.id))

        role = self.gateway.get_role(record.role_id)
        if role is None:
            self.store.revoke(str(user.id))
            raise RoleMissing("The role no longer exists")

        try:
            await self.gateway.remove_role(user.id, role.id, reason=f"Membership removed by {issuer}")
        except discord.HTTPException as exc:
            logger.warning("Failed to remove role %s from %s: %s", role.id, user.id, exc)
            raise RoleUpdateFailed(str(exc)) from exc

        await self.gateway.send_direct_message(
            user.id,
            build_member_notice(MembershipEvent.REVOKED, user.id, role.name, self.color),
        )
        try:
            removed = self.store.revoke(str(user.id))
        except NotMember:
            # The expiry sweeper got there first while we were awaiting Discord.
            removed = record

        await self.event_log.log_event(
            EVENT_TITLES[MembershipEvent.REVOKED],
            f"{role.name} was removed from <@{user.id}> by <@{issuer.id}>.",
        )
        await self.refresh_stats()
        return removed
