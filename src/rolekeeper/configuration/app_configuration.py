from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List
import yaml

from rolekeeper.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_EMBED_COLOR = 0xE5AA74
DEFAULT_SWEEP_INTERVAL = 60.0
DEFAULT_STATS_INTERVAL = 300.0


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml`` and exposes typed
    properties with defaults for every setting the bot reads. A missing or
    malformed file behaves like an empty one.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    def _interval(self, section: str, key: str, default: float) -> float:
        value = self._section(section).get(key, default)
        try:
            interval = float(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid %s.%s %r; using %.0fs", section, key, value, default)
            return default
        if interval <= 0:
            logger.warning("[APP CONFIGURATION] Non-positive %s.%s %r; using %.0fs", section, key, value, default)
            return default
        return interval

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping (do not mutate)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def allowed_role_ids(self) -> List[int]:
        """Role IDs whose holders may run membership commands."""
        roles = self._data.get("allowed_roles") or []
        if not isinstance(roles, list):
            return []
        result = []
        for role_id in roles:
            try:
                result.append(int(role_id))
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Ignoring invalid allowed role %r", role_id)
        return result

    @property
    def membership_role_id(self) -> int | None:
        value = self._section("membership").get("role_id")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid membership.role_id %r", value)
            return None

    @property
    def membership_role_name(self) -> str:
        return str(self._section("membership").get("role_name") or "Membership")

    @property
    def membership_price(self) -> float:
        """Monthly price of one membership, used for the revenue estimate."""
        try:
            return float(self._section("membership").get("price", 0))
        except (TypeError, ValueError):
            return 0.0

    @property
    def currency(self) -> str:
        return str(self._section("membership").get("currency") or "€")

    @property
    def stats_channel_id(self) -> int | None:
        value = self._section("stats").get("channel_id")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid stats.channel_id %r", value)
            return None

    @property
    def stats_refresh_interval(self) -> float:
        """Seconds between periodic stats message refreshes. Default is 300 (5 minutes)."""
        return self._interval("stats", "refresh_interval_seconds", DEFAULT_STATS_INTERVAL)

    @property
    def sweep_interval(self) -> float:
        """Seconds between expiry sweeps. Default is 60 (1 minute)."""
        return self._interval("expiry", "sweep_interval_seconds", DEFAULT_SWEEP_INTERVAL)

    @property
    def data_dir(self) -> Path:
        return Path(self._section("storage").get("data_dir") or "data")

    @property
    def embed_color(self) -> int:
        """Embed colour as an integer; accepts ``"#e5aa74"`` strings or plain ints."""
        value = self._data.get("embed_color", DEFAULT_EMBED_COLOR)
        if isinstance(value, int):
            return value
        try:
            return int(str(value).lstrip("#"), 16)
        except ValueError:
            logger.warning("[APP CONFIGURATION] Invalid embed_color %r", value)
            return DEFAULT_EMBED_COLOR

    @property
    def log_webhook_username(self) -> str:
        return str(self._section("log_webhook").get("username") or "Membership Log")


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
