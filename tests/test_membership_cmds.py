import datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from rolekeeper.cogs import membership_cmds
from rolekeeper.datatypes.membership_datatypes import (
    AlreadyMember,
    InvalidFormat,
    NotMember,
    RoleMissing,
    RoleUpdateFailed,
)

GUILD_ID = 4242


def make_services(locked: bool = False) -> Any:
    membership = MagicMock()
    membership.grant = AsyncMock(
        return_value=datetime.datetime(2025, 6, 2, 12, 0, tzinfo=datetime.timezone.utc)
    )
    membership.revoke = AsyncMock()
    state = MagicMock()
    state.commands_locked = locked
    return SimpleNamespace(
        config=SimpleNamespace(allowed_role_ids=[1]),
        guild_id=GUILD_ID,
        state=state,
        membership=membership,
    )


def make_ctx(guild_id: int | None = GUILD_ID) -> Any:
    return SimpleNamespace(
        author=SimpleNamespace(id=5),
        guild=SimpleNamespace(id=guild_id) if guild_id is not None else None,
        respond=AsyncMock(),
        defer=AsyncMock(),
        send_followup=AsyncMock(),
    )


@pytest.fixture()
def allowed(monkeypatch):
    monkeypatch.setattr(membership_cmds, "has_any_role", lambda member, roles: True)


def test_setup_registers_cog():
    captured = {}

    fake_bot = SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog))
    membership_cmds.setup(fake_bot, make_services())

    assert isinstance(captured["cog"], membership_cmds.MembershipCog)


class TestAccessChecks:

    @pytest.mark.asyncio
    async def test_denied_without_allowed_role(self, monkeypatch):
        monkeypatch.setattr(membership_cmds, "has_any_role", lambda member, roles: False)
        services = make_services()
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()

        await membership_cmds.MembershipCog.addmembership.callback(cog, ctx, SimpleNamespace(id=111), "1d")

        ctx.respond.assert_awaited_once_with("You do not have permission to use this command.", ephemeral=True)
        services.membership.grant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_guild(self, allowed):
        cog = membership_cmds.MembershipCog(SimpleNamespace(), make_services())
        ctx = make_ctx(guild_id=1)

        assert await cog.check_access(ctx) is False
        ctx.respond.assert_awaited_once_with("Server not found.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_outside_guild(self, allowed):
        cog = membership_cmds.MembershipCog(SimpleNamespace(), make_services())
        ctx = make_ctx(guild_id=None)

        assert await cog.check_access(ctx) is False

    @pytest.mark.asyncio
    async def test_locked_commands(self, allowed):
        services = make_services(locked=True)
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()

        await membership_cmds.MembershipCog.removemembership.callback(cog, ctx, SimpleNamespace(id=111))

        ctx.respond.assert_awaited_once_with("Commands are currently locked.", ephemeral=True)
        services.membership.revoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_command_works_while_locked(self, allowed):
        services = make_services(locked=True)
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()

        await membership_cmds.MembershipCog.lockcommands.callback(cog, ctx, False)

        services.state.set_commands_locked.assert_called_once_with(False)
        ctx.respond.assert_awaited_once_with("Commands are now unlocked.", ephemeral=True)


class TestAddMembership:

    @pytest.mark.asyncio
    async def test_success(self, allowed):
        services = make_services()
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()
        user = SimpleNamespace(id=111)

        await membership_cmds.MembershipCog.addmembership.callback(cog, ctx, user, "1d")

        services.membership.grant.assert_awaited_once_with(user, "1d", ctx.author)
        ctx.defer.assert_awaited_once_with(ephemeral=True)
        message = ctx.send_followup.await_args.args[0]
        assert message.startswith("Membership added.")
        assert ":R>" in message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, reply",
        [
            (InvalidFormat("1x"), "Invalid time format. Example: 1d, 12h, 30m"),
            (RoleMissing("gone"), "Membership role not found."),
            (AlreadyMember("111"), "This user already has a membership."),
            (RoleUpdateFailed("403"), "Failed to add the role."),
        ],
    )
    async def test_errors_are_reported(self, allowed, error, reply):
        services = make_services()
        services.membership.grant.side_effect = error
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()

        await membership_cmds.MembershipCog.addmembership.callback(cog, ctx, SimpleNamespace(id=111), "1x")

        ctx.send_followup.assert_awaited_once_with(reply, ephemeral=True)


class TestRemoveMembership:

    @pytest.mark.asyncio
    async def test_success(self, allowed):
        services = make_services()
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()
        user = SimpleNamespace(id=111)

        await membership_cmds.MembershipCog.removemembership.callback(cog, ctx, user)

        services.membership.revoke.assert_awaited_once_with(user, ctx.author)
        ctx.send_followup.assert_awaited_once_with("Membership removed.", ephemeral=True)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, reply",
        [
            (NotMember("111"), "This user has no membership."),
            (RoleMissing("gone"), "The role no longer exists."),
            (RoleUpdateFailed("403"), "Failed to remove the role."),
        ],
    )
    async def test_errors_are_reported(self, allowed, error, reply):
        services = make_services()
        services.membership.revoke.side_effect = error
        cog = membership_cmds.MembershipCog(SimpleNamespace(), services)
        ctx = make_ctx()

        await membership_cmds.MembershipCog.removemembership.callback(cog, ctx, SimpleNamespace(id=111))

        ctx.send_followup.assert_awaited_once_with(reply, ephemeral=True)
