"""
Membership records, lifecycle events and the errors raised by the membership layer.

Timestamps are timezone-aware UTC datetimes truncated to whole milliseconds,
which is the precision of the ``expireDate`` strings stored on disk.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum


class MembershipEvent(Enum):
    """Lifecycle events reported to the event log and to the member."""

    GRANTED = "granted"
    REVOKED = "revoked"
    EXPIRED = "expired"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MembershipRecord:
    """An active, bot-managed membership grant.

    Attributes:
        role_id: ID of the granted role, kept as a string for JSON parity.
        expire_at: Absolute UTC instant at which the grant lapses.
    """
    role_id: str
    expire_at: datetime.datetime

    def is_expired(self, now: datetime.datetime) -> bool:
        return self.expire_at <= now


class MembershipError(Exception):
    """Base class for validation failures surfaced to the command layer."""


class AlreadyMember(MembershipError):
    """Raised when granting a membership to a user who already has one."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} already has a membership.")
        self.user_id = user_id


class NotMember(MembershipError):
    """Raised when revoking a membership from a user who has none."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} has no membership.")
        self.user_id = user_id


class RoleMissing(MembershipError):
    """Raised when the membership role no longer exists in the guild."""


class RoleUpdateFailed(MembershipError):
    """Raised when Discord refuses to add or remove the membership role."""


class InvalidFormat(MembershipError, ValueError):
    """Raised when a duration string is not ``<digits><s|m|h|d>``."""

    def __init__(self, text: object) -> None:
        super().__init__(f"Invalid duration format: {text!r}")
        self.text = text
