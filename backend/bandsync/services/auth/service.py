# bandsync/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bandsync.core.config import AuthSettings
from bandsync.models.user import User
from bandsync.services._shared.base import BaseService
from bandsync.services._shared.errors import (
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    MissingTokenError,
    NotFoundError,
    StorageError,
    violates,
)
from bandsync.services._shared.ports.refresh_token_ledger import RefreshTokenLedger
from bandsync.services._shared.ports.token_codec import (
    TokenCodec,
    TokenPurpose,
    VerificationFailure,
)
from bandsync.services.auth.dto import (
    AccessTokenOut,
    LoginIn,
    RegisterIn,
    SessionOut,
    UserPublicOut,
)

log = logging.getLogger(__name__)


def _is_missing(token: object) -> bool:
    return token is None or (isinstance(token, str) and not token)


class SessionManager(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Tokens come from a pluggable :class:`TokenCodec`; the single live refresh
    token of each user is kept in a :class:`RefreshTokenLedger`. A refresh only
    mints a new access token: the refresh token and its ledger record change
    exclusively on register/login, so signing in elsewhere ends every other
    session at its next refresh.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        codec: TokenCodec,
        ledger: RefreshTokenLedger,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param settings: Token lifetimes (and secret, owned by the codec).
        :param codec: Adapter issuing/verifying signed tokens.
        :param ledger: Store of the live refresh token per user.
        """
        super().__init__()
        self.settings = settings
        self.codec = codec
        self.ledger = ledger

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create an account and open its first session.

        The user insert and the ledger write share one transaction when the
        ledger is SQL-backed; with any ledger, a failed ledger write rolls the
        user back and no tokens are returned.

        :raises DuplicateAccountError: When the email is already registered.
        :raises StorageError: When the database or ledger fails.
        """
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(dto.email):
                    raise DuplicateAccountError("email already registered")
                user = User(
                    email=dto.email,
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    phone=dto.phone,
                    default_instrument=dto.instrument,
                )
                user.password = dto.password
                uow.users.add(user)
                session = self._open_session(UserPublicOut.from_model(user))
        except IntegrityError as exc:
            if violates(exc, "uq_users_email", column="users.email"):
                raise DuplicateAccountError("email registered concurrently") from exc
            raise StorageError("register: integrity failure") from exc
        except SQLAlchemyError as exc:
            raise StorageError("register: database failure") from exc

        log.info(
            "User registered",
            extra={"event": "auth.register", "user_id": session.user.id},
        )
        return session

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password fail the same way.

        :raises InvalidCredentialsError: If credentials are invalid.
        :raises StorageError: When the database or ledger fails.
        """
        try:
            with self.ro_uow() as uow:
                user = uow.users.authenticate(dto.email, dto.password)
                profile = UserPublicOut.from_model(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise StorageError("login: database failure") from exc

        if profile is None:
            log.info("Login failed", extra={"event": "auth.login_failed"})
            raise InvalidCredentialsError()

        session = self._open_session(profile)
        log.info("User logged in", extra={"event": "auth.login", "user_id": profile.id})
        return session

    # ------------------------------------------------------------------ #
    # Refresh (access token only)
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: object) -> AccessTokenOut:
        """
        Exchange a sanctioned refresh token for a new access token.

        The token must verify, carry the ``refresh`` purpose, and be the live
        ledger record of its subject. Every rejection is the same
        :class:`InvalidRefreshTokenError`; the reason is logged at DEBUG only.
        A value that is not a string is rejected like any other bad token.

        :raises MissingTokenError: When no token was presented.
        :raises InvalidRefreshTokenError: When the token is not accepted.
        """
        if _is_missing(refresh_token):
            raise MissingTokenError()
        if not isinstance(refresh_token, str):
            self._reject_refresh("not a string")
            raise InvalidRefreshTokenError("not a string")

        try:
            claims = self.codec.verify(refresh_token)
        except VerificationFailure as exc:
            self._reject_refresh(type(exc).__name__)
            raise InvalidRefreshTokenError(type(exc).__name__) from exc

        if claims.purpose is not TokenPurpose.REFRESH:
            self._reject_refresh("wrong purpose")
            raise InvalidRefreshTokenError("wrong purpose")

        if self.ledger.find(claims.subject, refresh_token) is None:
            self._reject_refresh("not in ledger", user_id=claims.subject)
            raise InvalidRefreshTokenError("not in ledger")

        access = self.codec.issue(claims.subject, TokenPurpose.ACCESS, self.settings.access_ttl)
        return AccessTokenOut(access_token=access)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, refresh_token: object) -> None:
        """
        Revoke a refresh token by value.

        Idempotent: an unknown, expired or already revoked token succeeds too.
        A value that is not a string cannot match a record and is a no-op.

        :raises MissingTokenError: When no token was presented.
        """
        if _is_missing(refresh_token):
            raise MissingTokenError()
        removed = self.ledger.revoke(refresh_token) if isinstance(refresh_token, str) else 0
        log.info("User logged out", extra={"event": "auth.logout", "status": removed})

    # ------------------------------------------------------------------ #
    # Current user
    # ------------------------------------------------------------------ #

    def current_user(self, user_id: str) -> UserPublicOut:
        """
        Load the public profile for the subject of a verified access token.

        :raises NotFoundError: When the user no longer exists.
        """
        try:
            with self.ro_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                return UserPublicOut.from_model(user)
        except SQLAlchemyError as exc:
            raise StorageError("current_user: database failure") from exc

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _open_session(self, user: UserPublicOut) -> SessionOut:
        """Issue an access/refresh pair and make the refresh token the live one."""
        access = self.codec.issue(user.id, TokenPurpose.ACCESS, self.settings.access_ttl)
        refresh = self.codec.issue(user.id, TokenPurpose.REFRESH, self.settings.refresh_ttl)
        self.ledger.replace(user.id, refresh, self.now_utc() + self.settings.refresh_ttl)
        return SessionOut(user=user, access_token=access, refresh_token=refresh)

    @staticmethod
    def _reject_refresh(reason: str, *, user_id: str | None = None) -> None:
        log.debug(
            "Refresh rejected: %s",
            reason,
            extra={"event": "auth.refresh_rejected", "user_id": user_id},
        )
