from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class LedgerRecord:
    """
    Read-model for the live refresh token of one user.

    :ivar user_id: Owner user id.
    :ivar token: Refresh token value, stored verbatim.
    :ivar created_at: When the record was written (UTC).
    :ivar expires_at: Expiry of the token (UTC).
    """

    user_id: str
    token: str
    created_at: datetime
    expires_at: datetime


class RefreshTokenLedger(Protocol):
    """
    Durable single-session-per-user bookkeeping.

    ``replace`` is the only operation that can change which token is live for a
    user. It MUST be atomic: after any settled sequence of concurrent calls a
    user has exactly one record (or none, after ``revoke``).
    """

    def replace(self, user_id: str, token: str, expires_at: datetime) -> LedgerRecord:
        """Delete every record of ``user_id`` and insert ``token``."""

    def find(self, user_id: str, token: str) -> LedgerRecord | None:
        """Return the record matching both fields exactly, else ``None``."""

    def revoke(self, token: str) -> int:
        """Delete records whose value equals ``token``; 0 when nothing matched."""

    def purge_expired(self, now: datetime) -> int:
        """Delete records with ``expires_at <= now``; return how many."""

    def list_for_user(self, user_id: str) -> list[LedgerRecord]:
        """Return the records of ``user_id`` (at most one)."""


class InMemoryRefreshTokenLedger(RefreshTokenLedger):
    """
    In-memory ledger for unit tests.

    .. note::
       A single lock makes every operation atomic.
    """

    def __init__(self) -> None:
        self._by_user: dict[str, LedgerRecord] = {}
        self._lock = threading.Lock()

    def replace(self, user_id: str, token: str, expires_at: datetime) -> LedgerRecord:
        record = LedgerRecord(
            user_id=user_id,
            token=token,
            created_at=datetime.now(UTC),
            expires_at=expires_at,
        )
        with self._lock:
            self._by_user[user_id] = record
        return record

    def find(self, user_id: str, token: str) -> LedgerRecord | None:
        with self._lock:
            record = self._by_user.get(user_id)
        if record is None or record.token != token:
            return None
        return record

    def revoke(self, token: str) -> int:
        with self._lock:
            owners = [uid for uid, rec in self._by_user.items() if rec.token == token]
            for uid in owners:
                del self._by_user[uid]
        return len(owners)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            stale = [uid for uid, rec in self._by_user.items() if rec.expires_at <= now]
            for uid in stale:
                del self._by_user[uid]
        return len(stale)

    def list_for_user(self, user_id: str) -> list[LedgerRecord]:
        with self._lock:
            record = self._by_user.get(user_id)
        return [record] if record else []
