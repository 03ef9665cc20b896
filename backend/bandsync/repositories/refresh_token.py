"""Refresh token repository: row-level operations behind the SQL ledger."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from bandsync.models.refresh_token import RefreshToken
from bandsync.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Bulk statements use Core ``DELETE`` so they do not depend on objects being
    loaded in the session.
    """

    model = RefreshToken

    def delete_for_user(self, user_id: str) -> int:
        """Delete every row owned by ``user_id``; return the number removed."""
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return int(result.rowcount or 0)

    def delete_by_token(self, token: str) -> int:
        """Delete rows whose stored value equals ``token``."""
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return int(result.rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        """Delete rows with ``expires_at <= now``."""
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return int(result.rowcount or 0)

    def find(self, user_id: str, token: str) -> RefreshToken | None:
        """Return the row matching both ``user_id`` and ``token`` exactly."""
        stmt = select(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.token == token,
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def list_for_user(self, user_id: str) -> list[RefreshToken]:
        """Return every row owned by ``user_id`` (at most one when healthy)."""
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        return list(self.session.execute(stmt).scalars())
