"""
Unit of Work contract shared by the read-write and read-only scopes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bandsync.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary around one auth use-case.

    Implementations expose the credential store and the refresh-token rows
    through repositories bound to a single session, so a registration and the
    ledger write it triggers land (or vanish) together.

    Attributes
    ----------
    users : UserRepository
        Credential lookups and inserts.
    refresh_tokens : RefreshTokenRepository
        Row-level access for the SQL ledger.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None:
        """Commit on a clean exit of the outermost scope, roll back otherwise."""

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
