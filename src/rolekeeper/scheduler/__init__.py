"""
Time-driven membership maintenance.

- **expiry_sweeper.py**: ``ExpirySweeper`` pulls expired records out of the
  membership store and removes the role, notifies the member and logs the
  event for each one. A failure for one member never stops the sweep, and a
  tick that fires while a sweep is still running is skipped.

The sweeper is driven by ``ExpirySweeperCog`` in :mod:`rolekeeper.cogs.scheduler_cog`.
"""
