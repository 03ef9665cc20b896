"""Service layer public API.

Re-exports
----------
- :class:`BaseService` (from ``bandsync.services._shared.base``)
- :class:`SessionManager` (from ``bandsync.services.auth``)
- Service errors (from ``bandsync.services._shared.errors``)
"""

from bandsync.services._shared.base import BaseService
from bandsync.services._shared.errors import (
    AuthError,
    AuthFailure,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MissingTokenError,
    NotFoundError,
    ServiceError,
    StorageError,
)
from bandsync.services.auth import SessionManager

__all__ = [
    "BaseService",
    "SessionManager",
    "ServiceError",
    "AuthError",
    "AuthFailure",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "MissingTokenError",
    "InvalidRefreshTokenError",
    "NotFoundError",
    "StorageError",
]
