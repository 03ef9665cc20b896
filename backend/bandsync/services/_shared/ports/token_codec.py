from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Protocol


class TokenPurpose(str, Enum):
    """Purpose tag embedded in every token (``type`` claim)."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified token payload.

    :ivar subject: User id the token was issued for.
    :ivar purpose: Access or refresh.
    :ivar issued_at: Issue instant (UTC).
    :ivar expires_at: Expiry instant (UTC).
    """

    subject: str
    purpose: TokenPurpose
    issued_at: datetime
    expires_at: datetime


class VerificationFailure(Exception):
    """Base class for every reason a token is refused."""


class BadSignature(VerificationFailure):
    """Signature does not match the payload (forged or corrupted)."""


class Expired(VerificationFailure):
    """Signature is valid but the token is past its expiry."""


class Malformed(VerificationFailure):
    """Token cannot be parsed or lacks required claims."""


class TokenCodec(Protocol):
    """Port for issuing and verifying signed, expiring bearer tokens."""

    def issue(
        self, subject: str, purpose: TokenPurpose, ttl: timedelta | None = None
    ) -> str: ...

    def verify(self, token: str) -> TokenClaims: ...


class StubTokenCodec(TokenCodec):
    """Deterministic codec used in unit tests.

    Tokens look like ``<purpose>.<subject>.<seq>``; anything not issued by this
    instance verifies as :class:`BadSignature` when it has that shape and as
    :class:`Malformed` otherwise. Expiry is checked against ``datetime.now``,
    so ``freezegun`` controls it.
    """

    def __init__(
        self,
        *,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._ttls = {TokenPurpose.ACCESS: access_ttl, TokenPurpose.REFRESH: refresh_ttl}
        self._seq = 0
        self._issued: dict[str, TokenClaims] = {}

    def issue(self, subject: str, purpose: TokenPurpose, ttl: timedelta | None = None) -> str:
        self._seq += 1
        now = datetime.now(UTC)
        token = f"{purpose.value}.{subject}.{self._seq}"
        self._issued[token] = TokenClaims(
            subject=subject,
            purpose=purpose,
            issued_at=now,
            expires_at=now + (ttl if ttl is not None else self._ttls[purpose]),
        )
        return token

    def verify(self, token: str) -> TokenClaims:
        claims = self._issued.get(token)
        if claims is None:
            if token.count(".") == 2:
                raise BadSignature(token)
            raise Malformed(token)
        if datetime.now(UTC) >= claims.expires_at:
            raise Expired(token)
        return claims
