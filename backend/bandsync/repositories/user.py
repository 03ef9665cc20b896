"""User repository: credential lookups for registration and login."""

from __future__ import annotations

from functools import lru_cache
from typing import cast

from sqlalchemy import select
from werkzeug.security import check_password_hash, generate_password_hash

from bandsync.models.user import User
from bandsync.repositories.base import BaseRepository


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    """Digest compared against when the email is unknown, to equalize timing."""
    return generate_password_hash("bandsync-no-such-account")


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never issues tokens or touches the refresh ledger.
    """

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email, exact match as stored.

        :param email: Email address to search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == email)
        return self.session.execute(stmt).first() is not None

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        Unknown emails still run one hash comparison so both failure paths
        cost the same.

        :returns: Authenticated user or ``None`` when credentials fail.
        """
        user = self.get_by_email(email)
        if user is None:
            check_password_hash(_dummy_password_hash(), password)
            return None
        if not user.verify_password(password):
            return None
        return user
