"""Persistence repositories bound to a SQLAlchemy session."""

from bandsync.repositories.base import BaseRepository
from bandsync.repositories.refresh_token import RefreshTokenRepository
from bandsync.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
