"""
Configuration management for Rolekeeper.

- **app_configuration.py**: YAML configuration loader for global settings:
  allowed command roles, the managed membership role, stats channel and
  intervals, storage directory and embed styling. Falls back to defaults on
  missing or malformed config files.

Secrets (bot token, guild ID, log webhook URL) come from ``.env`` and are read
in :mod:`rolekeeper.main`.
"""
