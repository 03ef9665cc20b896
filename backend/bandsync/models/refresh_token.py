"""Refresh token ledger rows (one live session grant per user)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bandsync.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Currently sanctioned refresh token for a user.

    ``uq_refresh_tokens_user_id`` backs the single-session rule: the ledger
    deletes a user's row before inserting the replacement, and the database
    refuses a second live row.

    Fields
    ------
    user_id : str
        Owning user.
    token : str
        Signed refresh token, stored by value.
    created_at : datetime
        Issue time (from mixin; the ledger sets it explicitly).
    expires_at : datetime
        Expiry mirrored from the token payload.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_refresh_tokens_user_id"),
        Index("ix_refresh_tokens_token", "token"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )
