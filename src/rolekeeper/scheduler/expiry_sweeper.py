"""
Periodic removal of expired memberships.

Each sweep pulls every expired record out of the store and, per user:

1. removes the role (a no-op when the member or role is already gone),
2. sends a best-effort DM,
3. writes a log event.

A failure for one user is logged and the sweep moves on to the next. Records
are dropped from the store before any Discord call, so a failed role removal
is not retried on the next sweep.
"""

from __future__ import annotations

import asyncio
import datetime
from typing import Awaitable, Callable

from rolekeeper.datatypes.membership_datatypes import MembershipEvent, MembershipRecord
from rolekeeper.repositories.membership_repo import Clock, MembershipStore
from rolekeeper.services.event_log import WebhookEventLog
from rolekeeper.services.guild_gateway import GuildGateway
from rolekeeper.ui.membership_embed import EVENT_TITLES, build_member_notice
from rolekeeper.util.duration import utcnow
from rolekeeper.util.logger import get_logger

logger = get_logger("expiry_sweeper")


class ExpirySweeper:
    """Expires memberships whose ``expire_at`` has passed.

    Args:
        store: Membership store to sweep.
        gateway: Role and DM access for the guild.
        event_log: Destination for expiry events.
        refresh_stats: Awaited once after a sweep that expired anyone.
        role_name: Display name of the membership role for messages.
        color: Embed colour as an integer.
        clock: Time source, UTC wall clock by default.
    """

    def __init__(
        self,
        store: MembershipStore,
        gateway: GuildGateway,
        event_log: WebhookEventLog,
        refresh_stats: Callable[[], Awaitable[None]],
        role_name: str,
        color: int,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.event_log = event_log
        self.refresh_stats = refresh_stats
        self.role_name = role_name
        self.color = color
        self._clock = clock
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def sweep(self, now: datetime.datetime | None = None) -> list[str]:
        """Expire every due membership.

        Returns:
            list[str]: User IDs whose memberships were expired. Empty when a
            previous sweep is still in progress and this one was skipped.
        """
        if self._running:
            logger.warning("[EXPIRY_SWEEPER] Previous sweep still running; skipping this tick")
            return []

        self._running = True
        expired: list[str] = []
        try:
            now = now or self._clock()
            for user_id, record in self.store.sweep_expired(now):
                expired.append(user_id)
                try:
                    await self._expire(user_id, record)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[EXPIRY_SWEEPER] Failed to expire membership of %s: %s", user_id, exc)
        finally:
            self._running = False

        if expired:
            logger.info("[EXPIRY_SWEEPER] Expired %d membership(s)", len(expired))
            await self.refresh_stats()
        return expired

    async def _expire(self, user_id: str, record: MembershipRecord) -> None:
        await self.gateway.remove_role(user_id, record.role_id, reason="Membership expired")

        try:
            await self.gateway.send_direct_message(
                user_id,
                build_member_notice(MembershipEvent.EXPIRED, user_id, self.role_name, self.color),
            )
        except Exception as exc:
            logger.info("[EXPIRY_SWEEPER] Could not notify %s: %s", user_id, exc)

        await self.event_log.log_event(
            EVENT_TITLES[MembershipEvent.EXPIRED],
            f"{self.role_name} membership of <@{user_id}> was removed automatically.",
        )
