"""Tests for environment loading, service wiring and shutdown."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from rolekeeper import main
from rolekeeper.repositories.membership_repo import MembershipStore
from rolekeeper.runtime import Secrets, build_services


class TestLoadEnvironment:

    def test_reads_all_values(self, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "token-123")
        monkeypatch.setenv("GUILD_ID", "1284273923118207000")
        monkeypatch.setenv("LOG_WEBHOOK_URL", "https://discord.com/api/webhooks/1/abc")

        secrets = main.load_environment()

        assert secrets == Secrets("token-123", 1284273923118207000, "https://discord.com/api/webhooks/1/abc")

    def test_webhook_is_optional(self, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "token-123")
        monkeypatch.setenv("GUILD_ID", "42")
        monkeypatch.setenv("LOG_WEBHOOK_URL", "")

        assert main.load_environment().webhook_url is None

    def test_missing_token_exits(self, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "")
        monkeypatch.setenv("GUILD_ID", "42")

        with pytest.raises(SystemExit) as excinfo:
            main.load_environment()
        assert excinfo.value.code == 1

    def test_non_numeric_guild_exits(self, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "token-123")
        monkeypatch.setenv("GUILD_ID", "my-server")

        with pytest.raises(SystemExit):
            main.load_environment()


def test_resolve_base_dir_honours_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ROLEKEEPER_HOME", str(tmp_path))

    assert main.resolve_base_dir() == tmp_path.resolve()


def test_intents_include_members():
    intents = main.build_intents()

    assert intents.members is True
    assert intents.guilds is True


def test_build_services_wires_shared_store(tmp_path):
    config = SimpleNamespace(
        data_dir=tmp_path / "data",
        log_webhook_username="Membership Log",
        embed_color=0xE5AA74,
        membership_role_id=900,
        membership_role_name="Elite",
    )

    services = build_services(MagicMock(), Secrets("t", 4242), config)

    assert isinstance(services.store, MembershipStore)
    assert services.membership.store is services.store
    assert services.sweeper.store is services.store
    assert (tmp_path / "data" / "state.json").exists()
    assert services.guild_id == 4242


@pytest.mark.asyncio
async def test_shutdown_closes_bot_and_services():
    bot = MagicMock()
    bot.is_closed = MagicMock(return_value=False)
    bot.close = AsyncMock()
    services = SimpleNamespace(close=AsyncMock())

    await main.shutdown_runtime(bot, services)

    bot.close.assert_awaited_once()
    services.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_shutdown_survives_close_errors():
    bot = MagicMock()
    bot.is_closed = MagicMock(return_value=False)
    bot.close = AsyncMock(side_effect=RuntimeError("already gone"))
    services = SimpleNamespace(close=AsyncMock())

    await main.shutdown_runtime(bot, services)

    services.close.assert_awaited_once()


def test_main_maps_system_exit_to_code(monkeypatch):
    def fake_run(coro):
        coro.close()
        raise SystemExit(1)

    monkeypatch.setattr(main.asyncio, "run", fake_run)

    assert main.main() == 1
