# comments in English; reST docstrings
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from bandsync.services._shared.errors import StorageError
from bandsync.services._shared.ports import LedgerRecord, RefreshTokenLedger


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenLedger(RefreshTokenLedger):
    """
    Redis-backed ledger.

    Layout:

    - ``rt:u:<user_id>`` hash ``{token, created_at, expires_at}``, the live record.
    - ``rt:t:<sha256(token)>`` string holding the owner id, used by ``revoke``.

    Both keys expire with the token. Mutations use WATCH/MULTI/EXEC on the
    user key and retry on :class:`redis.WatchError`, so concurrent replaces
    for one user settle on exactly one record (last writer wins).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _kt(token: str) -> str:
        return "rt:t:" + hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def _record(user_id: str, h: dict) -> LedgerRecord:
        return LedgerRecord(
            user_id=user_id,
            token=_b(h.get(b"token", h.get("token"))),
            created_at=datetime.fromtimestamp(
                int(_b(h.get(b"created_at", h.get("created_at")), "0")), tz=UTC
            ),
            expires_at=datetime.fromtimestamp(
                int(_b(h.get(b"expires_at", h.get("expires_at")), "0")), tz=UTC
            ),
        )

    # -------------------- API ------------------------

    def replace(self, user_id: str, token: str, expires_at: datetime) -> LedgerRecord:
        now = datetime.now(UTC)
        now_ts = self._to_ts(now)
        exp_ts = self._to_ts(expires_at)
        ttl = max(1, exp_ts - now_ts)
        k_user = self._ku(user_id)

        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(k_user)
                        previous = p.hget(k_user, "token")

                        p.multi()
                        if previous is not None:
                            p.delete(self._kt(_b(previous)))
                        p.delete(k_user)
                        p.hset(
                            k_user,
                            mapping={
                                "token": token,
                                "created_at": str(now_ts),
                                "expires_at": str(exp_ts),
                            },
                        )
                        p.expire(k_user, ttl)
                        p.set(self._kt(token), user_id, ex=ttl)
                        p.execute()
                    break
                except redis.WatchError:
                    # Concurrent modification detected; retry loop
                    continue
        except RedisError as exc:
            raise StorageError("refresh ledger: replace failed") from exc

        return LedgerRecord(
            user_id=user_id,
            token=token,
            created_at=datetime.fromtimestamp(now_ts, tz=UTC),
            expires_at=datetime.fromtimestamp(exp_ts, tz=UTC),
        )

    def find(self, user_id: str, token: str) -> LedgerRecord | None:
        try:
            h = self.r.hgetall(self._ku(user_id))
        except RedisError as exc:
            raise StorageError("refresh ledger: lookup failed") from exc
        if not h:
            return None
        record = self._record(user_id, h)
        return record if record.token == token else None

    def revoke(self, token: str) -> int:
        k_token = self._kt(token)
        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(k_token)
                        owner = p.get(k_token)
                        if owner is None:
                            p.unwatch()
                            return 0
                        k_user = self._ku(_b(owner))
                        p.watch(k_user)
                        live = p.hget(k_user, "token")

                        p.multi()
                        p.delete(k_token)
                        if live is not None and _b(live) == token:
                            p.delete(k_user)
                        out = p.execute()
                    return int(out[-1]) if len(out) > 1 else 0
                except redis.WatchError:
                    continue
        except RedisError as exc:
            raise StorageError("refresh ledger: revoke failed") from exc

    def purge_expired(self, now: datetime) -> int:
        """Delete records whose ``expires_at`` has passed.

        Redis TTLs already drop most of them; this catches clock skew and
        records written with a longer TTL than their token.
        """
        now_ts = self._to_ts(now)
        removed = 0
        try:
            for key in self.r.scan_iter(match="rt:u:*"):
                h = self.r.hgetall(key)
                if not h:
                    continue
                user_id = _b(key)[len("rt:u:") :]
                record = self._record(user_id, h)
                if self._to_ts(record.expires_at) > now_ts:
                    continue
                with self.r.pipeline(transaction=True) as p:
                    p.delete(self._kt(record.token))
                    p.delete(key)
                    out = p.execute()
                removed += int(out[-1])
        except RedisError as exc:
            raise StorageError("refresh ledger: purge failed") from exc
        return removed

    def list_for_user(self, user_id: str) -> list[LedgerRecord]:
        try:
            h = self.r.hgetall(self._ku(user_id))
        except RedisError as exc:
            raise StorageError("refresh ledger: list failed") from exc
        return [self._record(user_id, h)] if h else []
