# bandsync/infra/sql/sql_refresh_token_ledger.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from bandsync.models.refresh_token import RefreshToken
from bandsync.services._shared.errors import StorageError
from bandsync.services._shared.ports import LedgerRecord, RefreshTokenLedger
from bandsync.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_record(row: RefreshToken) -> LedgerRecord:
    return LedgerRecord(
        user_id=row.user_id,
        token=row.token,
        created_at=_as_utc(row.created_at),
        expires_at=_as_utc(row.expires_at),
    )


@dataclass(slots=True)
class SQLRefreshTokenLedger(RefreshTokenLedger):
    """
    Ledger stored in the ``refresh_tokens`` table.

    Every mutator runs in a read-write Unit of Work. When called inside an
    outer Unit of Work (registration) it joins that transaction instead of
    committing on its own.

    ``replace`` locks the owning ``users`` row first, so concurrent replaces
    for one user serialize; ``uq_refresh_tokens_user_id`` rejects a second row
    should a dialect ignore the lock.
    """

    rw_uow: Callable[[], SQLAlchemyUnitOfWork] = field(default=SQLAlchemyUnitOfWork)
    ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = field(
        default=SQLAlchemyReadOnlyUnitOfWork
    )

    def replace(self, user_id: str, token: str, expires_at: datetime) -> LedgerRecord:
        created_at = datetime.now(UTC)
        try:
            with self.rw_uow() as uow:
                uow.users.get_for_update(user_id)
                uow.refresh_tokens.delete_for_user(user_id)
                uow.refresh_tokens.add(
                    RefreshToken(
                        user_id=user_id,
                        token=token,
                        created_at=created_at,
                        expires_at=expires_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise StorageError("refresh ledger: replace failed") from exc
        return LedgerRecord(
            user_id=user_id,
            token=token,
            created_at=created_at,
            expires_at=_as_utc(expires_at),
        )

    def find(self, user_id: str, token: str) -> LedgerRecord | None:
        try:
            with self.ro_uow() as uow:
                row = uow.refresh_tokens.find(user_id, token)
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError("refresh ledger: lookup failed") from exc

    def revoke(self, token: str) -> int:
        try:
            with self.rw_uow() as uow:
                return uow.refresh_tokens.delete_by_token(token)
        except SQLAlchemyError as exc:
            raise StorageError("refresh ledger: revoke failed") from exc

    def purge_expired(self, now: datetime) -> int:
        try:
            with self.rw_uow() as uow:
                return uow.refresh_tokens.delete_expired(now)
        except SQLAlchemyError as exc:
            raise StorageError("refresh ledger: purge failed") from exc

    def list_for_user(self, user_id: str) -> list[LedgerRecord]:
        try:
            with self.ro_uow() as uow:
                return [_to_record(row) for row in uow.refresh_tokens.list_for_user(user_id)]
        except SQLAlchemyError as exc:
            raise StorageError("refresh ledger: list failed") from exc
