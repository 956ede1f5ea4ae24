from pathlib import Path

import pytest
import yaml

from rolekeeper.configuration.app_configuration import (
    DEFAULT_EMBED_COLOR,
    AppConfig,
)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path) -> None:
    config_payload = {
        "allowed_roles": [1284878277399548016, "1340284399580872795"],
        "membership": {"role_id": "1284273923118207057", "role_name": "Elite", "price": 50, "currency": "€"},
        "stats": {"channel_id": 1387033918540218510, "refresh_interval_seconds": 120},
        "expiry": {"sweep_interval_seconds": 30},
        "storage": {"data_dir": "state"},
        "embed_color": "#e5aa74",
        "log_webhook": {"username": "Elite Log"},
    }
    config_path.write_text(yaml.safe_dump(config_payload, allow_unicode=True), encoding="utf-8")

    config = AppConfig(config_path)

    assert config.allowed_role_ids == [1284878277399548016, 1340284399580872795]
    assert config.membership_role_id == 1284273923118207057
    assert config.membership_role_name == "Elite"
    assert config.membership_price == pytest.approx(50.0)
    assert config.currency == "€"
    assert config.stats_channel_id == 1387033918540218510
    assert config.stats_refresh_interval == pytest.approx(120.0)
    assert config.sweep_interval == pytest.approx(30.0)
    assert config.data_dir == Path("state")
    assert config.embed_color == 0xE5AA74
    assert config.log_webhook_username == "Elite Log"


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.allowed_role_ids == []
    assert config.membership_role_id is None
    assert config.membership_role_name == "Membership"
    assert config.stats_channel_id is None
    assert config.sweep_interval == pytest.approx(60.0)
    assert config.stats_refresh_interval == pytest.approx(300.0)
    assert config.data_dir == Path("data")
    assert config.embed_color == DEFAULT_EMBED_COLOR
    assert config.log_webhook_username == "Membership Log"


def test_app_config_non_mapping_is_ignored(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    config = AppConfig(config_path)

    assert config.data == {}


def test_invalid_values_fall_back(config_path: Path) -> None:
    config_path.write_text(
        yaml.safe_dump({
            "allowed_roles": ["abc", 42],
            "membership": {"role_id": "not-a-number", "price": "free"},
            "embed_color": "#zzzzzz",
        }),
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.allowed_role_ids == [42]
    assert config.membership_role_id is None
    assert config.membership_price == 0.0
    assert config.embed_color == DEFAULT_EMBED_COLOR


def test_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text(yaml.safe_dump({"expiry": {"sweep_interval_seconds": 10}}), encoding="utf-8")
    config = AppConfig(config_path)
    assert config.sweep_interval == pytest.approx(10.0)

    config_path.write_text(yaml.safe_dump({"expiry": {"sweep_interval_seconds": 20}}), encoding="utf-8")
    config.reload()

    assert config.sweep_interval == pytest.approx(20.0)


@pytest.mark.parametrize("bad_value", ["soon", None, [5], 0, -30])
def test_invalid_intervals_fall_back_to_defaults(config_path: Path, bad_value) -> None:
    config_path.write_text(
        yaml.safe_dump({
            "stats": {"refresh_interval_seconds": bad_value},
            "expiry": {"sweep_interval_seconds": bad_value},
        }),
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.stats_refresh_interval == pytest.approx(300.0)
    assert config.sweep_interval == pytest.approx(60.0)
