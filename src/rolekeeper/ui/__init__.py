"""
User-facing presentation for Rolekeeper.

- **membership_embed.py**: Embeds for member DMs, log webhook entries and the
  live statistics message.
"""
