"""
Persistence for Rolekeeper.

- **json_storage.py**: Atomic whole-document JSON reads and writes.
- **membership_repo.py**: ``MembershipStore``, the file-backed map of active
  memberships with grant, revoke and expiry sweep operations.
- **state_repo.py**: The command lock flag and the live stats message ID.
"""
