# bandsync/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from bandsync.models.user import User

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Email, kept exactly as typed.
    :type email: str
    :param password: Raw password (hashed before persisting).
    :type password: str
    :param first_name: Given name.
    :param last_name: Family name.
    :param phone: Optional phone number.
    :param instrument: Optional default instrument.
    """

    email: str
    password: str
    first_name: str
    last_name: str
    phone: str | None = None
    instrument: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (exact match).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Non-secret user fields returned to clients."""

    id: str
    email: str
    first_name: str
    last_name: str
    instrument: str | None

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            instrument=user.default_instrument,
        )


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of register/login.

    :param user: Public profile of the authenticated user.
    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT, also recorded in the ledger.
    """

    user: UserPublicOut
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """Result of a refresh: a new access token only."""

    access_token: str
