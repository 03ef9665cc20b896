# bandsync/infra/jwt/jwt_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTDecodeError

from bandsync.core.config import AuthSettings
from bandsync.services._shared.ports import (
    BadSignature,
    Expired,
    Malformed,
    TokenClaims,
    TokenCodec,
    TokenPurpose,
)


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    Adapter for Flask-JWT-Extended.

    Lifetimes come from ``settings``; the secret is mirrored into
    ``JWT_SECRET_KEY`` by ``bandsync.core.extensions.init_app`` so tokens minted
    here are accepted by the bearer middleware and vice versa.

    .. note::
       Requires an active Flask app context.
    """

    settings: AuthSettings

    def _ttl(self, purpose: TokenPurpose) -> timedelta:
        if purpose is TokenPurpose.REFRESH:
            return self.settings.refresh_ttl
        return self.settings.access_ttl

    def issue(self, subject: str, purpose: TokenPurpose, ttl: timedelta | None = None) -> str:
        expires_delta = ttl if ttl is not None else self._ttl(purpose)
        if purpose is TokenPurpose.REFRESH:
            return cast(str, create_refresh_token(identity=subject, expires_delta=expires_delta))
        return cast(str, create_access_token(identity=subject, expires_delta=expires_delta))

    def verify(self, token: str) -> TokenClaims:
        """
        Validate signature and expiry, then read the claims.

        :raises Expired: Valid signature, past ``exp``.
        :raises BadSignature: Signature mismatch.
        :raises Malformed: Anything that cannot be parsed or lacks claims.
        """
        try:
            payload = cast(dict[str, Any], decode_token(token))
        except pyjwt.ExpiredSignatureError as exc:
            raise Expired(str(exc)) from exc
        except pyjwt.InvalidSignatureError as exc:
            raise BadSignature(str(exc)) from exc
        except (pyjwt.InvalidTokenError, JWTDecodeError) as exc:
            raise Malformed(str(exc)) from exc

        try:
            return TokenClaims(
                subject=str(payload["sub"]),
                purpose=TokenPurpose(payload["type"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise Malformed(f"Unusable claims: {exc}") from exc
