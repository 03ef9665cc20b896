"""
Service-level exceptions.

These exceptions are framework-agnostic: nothing here knows about Flask or
HTTP. The API boundary (``bandsync.api.auth``) is the only place that maps an
:class:`AuthFailure` to a status code.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').
    column : str | None
        Qualified ``table.column`` fallback for dialects that omit constraint
        names from their messages (SQLite: "UNIQUE constraint failed: users.email").

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, ledgers or services.
    """


class AuthFailure(Enum):
    """Closed set of expected authentication outcomes other than success."""

    DUPLICATE_ACCOUNT = "duplicate_account"
    INVALID_CREDENTIALS = "invalid_credentials"
    MISSING_TOKEN = "missing_token"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"


class AuthError(ServiceError):
    """
    Expected authentication failure carrying one :class:`AuthFailure`.

    :param failure: Failure kind.
    :param reason: Internal detail for logs; never shown to clients.
    """

    failure: AuthFailure

    def __init__(self, failure: AuthFailure, reason: str | None = None) -> None:
        super().__init__(failure.value)
        self.failure = failure
        self.reason = reason


class DuplicateAccountError(AuthError):
    def __init__(self, reason: str | None = None) -> None:
        super().__init__(AuthFailure.DUPLICATE_ACCOUNT, reason)


class InvalidCredentialsError(AuthError):
    def __init__(self, reason: str | None = None) -> None:
        super().__init__(AuthFailure.INVALID_CREDENTIALS, reason)


class MissingTokenError(AuthError):
    def __init__(self, reason: str | None = None) -> None:
        super().__init__(AuthFailure.MISSING_TOKEN, reason)


class InvalidRefreshTokenError(AuthError):
    def __init__(self, reason: str | None = None) -> None:
        super().__init__(AuthFailure.INVALID_REFRESH_TOKEN, reason)


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :param key: Identifier or search key.
    """

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class StorageError(ServiceError):
    """Credential store or ledger I/O failed; surfaced as an opaque 500."""
