"""Tiny helpers shared across test modules."""

from __future__ import annotations

from typing import Any

REGISTER_URL = "/api/auth/register"
LOGIN_URL = "/api/auth/login"
REFRESH_URL = "/api/auth/refresh-token"
LOGOUT_URL = "/api/auth/logout"
ME_URL = "/api/auth/me"


def register_payload(email: str = "a@x.com", password: str = "secret123", **extra: Any) -> dict:
    """Build a registration body in the client's camelCase shape."""
    payload = {"email": email, "password": password, "firstName": "A", "lastName": "B"}
    payload.update(extra)
    return payload


def bearer(token: str) -> dict[str, str]:
    """Authorization header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def ledger_tokens(session, user_id: str) -> list[str]:
    """Return the raw token values stored for ``user_id``."""
    from sqlalchemy import select

    from bandsync.models.refresh_token import RefreshToken

    stmt = select(RefreshToken.token).where(RefreshToken.user_id == user_id)
    return list(session.execute(stmt).scalars())
