"""Concrete adapters for the service-layer ports."""

from __future__ import annotations

from flask import Flask

from bandsync.core.config import ConfigurationError
from bandsync.services._shared.ports import RefreshTokenLedger


def build_ledger(app: Flask) -> RefreshTokenLedger:
    """
    Return the refresh-token ledger selected by ``REFRESH_LEDGER_BACKEND``.

    :param app: Application whose extensions are already initialized.
    :raises ConfigurationError: For an unknown backend name.
    """
    backend = str(app.config.get("REFRESH_LEDGER_BACKEND", "sql")).lower()
    if backend == "sql":
        from bandsync.infra.sql.sql_refresh_token_ledger import SQLRefreshTokenLedger

        return SQLRefreshTokenLedger()
    if backend == "redis":
        from bandsync.core.extensions import get_redis
        from bandsync.infra.redis.redis_refresh_token_ledger import RedisRefreshTokenLedger

        return RedisRefreshTokenLedger(get_redis())
    raise ConfigurationError(f"Unknown REFRESH_LEDGER_BACKEND: {backend!r}")
