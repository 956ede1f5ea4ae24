"""
Data types shared across Rolekeeper.

- **membership_datatypes.py**: ``MembershipRecord``, ``MembershipEvent`` and the
  ``MembershipError`` hierarchy (``AlreadyMember``, ``NotMember``,
  ``InvalidFormat``).
"""
