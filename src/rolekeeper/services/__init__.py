"""
Services that connect the membership store to Discord.

- **guild_gateway.py**: Role mutation and best-effort DMs for the managed guild.
- **membership_service.py**: Grant and revoke flows used by the slash commands.
- **event_log.py**: Webhook-backed membership event log.
- **stats_service.py**: Sends or edits the live statistics message.
"""
