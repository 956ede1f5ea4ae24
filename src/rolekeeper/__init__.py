"""
Rolekeeper - time-limited membership roles for a Discord server

Rolekeeper grants a membership role for a fixed duration, revokes it on
request and removes it automatically when it runs out.

Core Components:

- **Membership Store**: JSON-backed map of user ID to active membership,
  rewritten atomically after every change
- **Expiry Sweeper**: Minute-by-minute sweep that removes expired roles,
  notifies members and logs the event
- **Slash Commands**: ``/addmembership``, ``/removemembership`` and
  ``/lockcommands``, restricted to configured roles
- **Event Log & Stats**: Webhook log of every change and a live statistics
  message with member count and revenue estimate

Usage:
    from rolekeeper.main import main
    main()
"""
