"""
bandsync.services._shared.ports
===============================

Ports (hexagonal interfaces) for token handling.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec`: issue and verify signed, expiring tokens
    tagged with a :class:`~.TokenPurpose`.

- :mod:`refresh_token_ledger`:
    Defines :class:`~.RefreshTokenLedger` and :class:`~.LedgerRecord`: the
    single live refresh token per user.

Concrete adapters (JWT, SQL, Redis) live under ``bandsync.infra``; the
in-memory/stub doubles here back the unit tests.
"""

from __future__ import annotations

from .refresh_token_ledger import (
    InMemoryRefreshTokenLedger,
    LedgerRecord,
    RefreshTokenLedger,
)
from .token_codec import (
    BadSignature,
    Expired,
    Malformed,
    StubTokenCodec,
    TokenClaims,
    TokenCodec,
    TokenPurpose,
    VerificationFailure,
)

__all__ = [
    "TokenCodec",
    "TokenPurpose",
    "TokenClaims",
    "VerificationFailure",
    "BadSignature",
    "Expired",
    "Malformed",
    "StubTokenCodec",
    "RefreshTokenLedger",
    "LedgerRecord",
    "InMemoryRefreshTokenLedger",
]
