"""
Shared helpers for Rolekeeper.

- **logger.py**: Console and session-file logging used by every module.
- **duration.py**: Parsing of ``<number><unit>`` duration strings and Discord
  timestamp formatting.
- **discord_utils.py**: Stateless Discord helpers (role checks, best-effort DMs).
"""
