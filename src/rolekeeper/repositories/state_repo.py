"""
Small pieces of bot state that survive restarts.

- ``state.json`` holds ``{"commandsLocked": bool}`` and is created with
  ``false`` when missing.
- ``statsMessage.json`` holds ``{"messageId": "..."}`` for the live statistics
  message so it is edited instead of re-posted after a restart.
"""

from __future__ import annotations

from pathlib import Path

from rolekeeper.repositories.json_storage import read_json, write_json_atomic
from rolekeeper.util.logger import get_logger

logger = get_logger("state_repo")


class BotStateRepo:
    """Accessor for the persisted command lock and stats message ID."""

    def __init__(self, state_path: Path, stats_path: Path) -> None:
        self.state_path = Path(state_path)
        self.stats_path = Path(stats_path)

        state = read_json(self.state_path)
        self._commands_locked = bool(state.get("commandsLocked", False))
        if not self.state_path.exists():
            write_json_atomic(self.state_path, {"commandsLocked": self._commands_locked})

        message_id = read_json(self.stats_path).get("messageId")
        self._stats_message_id: int | None = None
        if message_id:
            try:
                self._stats_message_id = int(message_id)
            except (TypeError, ValueError):
                logger.warning("[BOT_STATE] Ignoring invalid stats message ID %r", message_id)

    @property
    def commands_locked(self) -> bool:
        return self._commands_locked

    def set_commands_locked(self, locked: bool) -> None:
        self._commands_locked = bool(locked)
        write_json_atomic(self.state_path, {"commandsLocked": self._commands_locked})
        logger.info("[BOT_STATE] Commands %s", "locked" if locked else "unlocked")

    @property
    def stats_message_id(self) -> int | None:
        return self._stats_message_id

    def set_stats_message_id(self, message_id: int | None) -> None:
        self._stats_message_id = message_id
        write_json_atomic(self.stats_path, {"messageId": str(message_id) if message_id else None})
