"""
Persistent store of active membership grants.

The store maps user IDs to :class:`MembershipRecord` and is backed by a single
JSON document of the form::

    {"<user id>": {"roleId": "<role id>", "expireDate": "2025-06-01T12:00:00.000Z"}}

The document is loaded once when the store is created and rewritten in full
after every mutation. A coarse lock serializes each load-mutate-persist cycle
so the store may be shared between command handlers and the expiry sweeper.
"""

from __future__ import annotations

import datetime
import threading
from pathlib import Path
from typing import Callable, Dict, Iterator, Tuple

from rolekeeper.datatypes.membership_datatypes import AlreadyMember, MembershipRecord, NotMember
from rolekeeper.repositories.json_storage import read_json, write_json_atomic
from rolekeeper.util.duration import add_milliseconds, from_iso_string, to_iso_string, utcnow
from rolekeeper.util.logger import get_logger

logger = get_logger("membership_store")

Clock = Callable[[], datetime.datetime]


class MembershipStore:
    """Owned, file-backed mapping of user ID to active membership.

    Args:
        path: Location of the backing JSON document. Created on first save.
        clock: Time source used by :meth:`grant`. Defaults to the UTC wall clock.
    """

    def __init__(self, path: Path, clock: Clock = utcnow) -> None:
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, MembershipRecord] = self._load()
        logger.info("[MEMBERSHIP_STORE] Loaded %d membership(s) from %s", len(self._records), self.path)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> Dict[str, MembershipRecord]:
        records: Dict[str, MembershipRecord] = {}
        for user_id, entry in read_json(self.path).items():
            if not isinstance(entry, dict):
                logger.warning("[MEMBERSHIP_STORE] Skipping malformed entry for %s", user_id)
                continue
            try:
                expire_at = from_iso_string(entry["expireDate"])
            except (KeyError, TypeError, ValueError):
                logger.warning("[MEMBERSHIP_STORE] Skipping entry for %s without a valid expireDate", user_id)
                continue
            role_id = entry.get("roleId")
            try:
                int(role_id)
            except (TypeError, ValueError):
                logger.warning("[MEMBERSHIP_STORE] Skipping entry for %s without a valid roleId", user_id)
                continue
            records[str(user_id)] = MembershipRecord(role_id=str(role_id), expire_at=expire_at)
        return records

    def _save(self) -> None:
        """Rewrite the whole document. Caller must hold ``self._lock``."""
        document = {
            user_id: {"roleId": record.role_id, "expireDate": to_iso_string(record.expire_at)}
            for user_id, record in self._records.items()
        }
        write_json_atomic(self.path, document)

    def _persist(self, user_id: str, previous: MembershipRecord | None) -> None:
        """Save, undoing the in-memory change to ``user_id`` if the write fails."""
        try:
            self._save()
        except Exception:
            if previous is None:
                self._records.pop(user_id, None)
            else:
                self._records[user_id] = previous
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, user_id: str) -> MembershipRecord | None:
        with self._lock:
            return self._records.get(str(user_id))

    def is_member(self, user_id: str) -> bool:
        return self.get(user_id) is not None

    def snapshot(self) -> Dict[str, MembershipRecord]:
        """Return a copy of the current mapping."""
        with self._lock:
            return dict(self._records)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return str(user_id) in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def grant(self, user_id: str, role_id: str, duration_ms: int) -> datetime.datetime:
        """Record a new membership lasting ``duration_ms`` from now.

        Returns:
            datetime.datetime: The expiry instant that was stored.

        Raises:
            ValueError: If ``duration_ms`` is not positive.
            AlreadyMember: If ``user_id`` already has a membership.
        """
        if duration_ms <= 0:
            raise ValueError("Membership duration must be positive")

        user_id = str(user_id)
        with self._lock:
            if user_id in self._records:
                raise AlreadyMember(user_id)
            expire_at = add_milliseconds(self._clock(), duration_ms)
            self._records[user_id] = MembershipRecord(role_id=str(role_id), expire_at=expire_at)
            self._persist(user_id, previous=None)

        logger.debug("[MEMBERSHIP_STORE] Granted %s role %s until %s", user_id, role_id, expire_at)
        return expire_at

    def revoke(self, user_id: str) -> MembershipRecord:
        """Remove and return the membership of ``user_id``.

        Raises:
            NotMember: If ``user_id`` has no membership. The store is left untouched.
        """
        user_id = str(user_id)
        with self._lock:
            record = self._records.pop(user_id, None)
            if record is None:
                raise NotMember(user_id)
            self._persist(user_id, previous=record)

        logger.debug("[MEMBERSHIP_STORE] Revoked membership of %s", user_id)
        return record

    def sweep_expired(self, now: datetime.datetime) -> Iterator[Tuple[str, MembershipRecord]]:
        """Yield every membership with ``expire_at <= now``, removing each one first.

        The generator is lazy: each record is popped and the removal persisted
        right before it is yielded. Records removed by someone else between
        two steps are skipped, so every expired user ID is yielded at most once.
        """
        with self._lock:
            candidates = [user_id for user_id, record in self._records.items() if record.is_expired(now)]

        for user_id in candidates:
            with self._lock:
                record = self._records.get(user_id)
                if record is None or not record.is_expired(now):
                    continue
                del self._records[user_id]
                self._persist(user_id, previous=record)
            yield user_id, record
