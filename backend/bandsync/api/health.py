"""Liveness check reporting the credential store and the refresh-token ledger."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from bandsync.api.deps import json_response, timing
from bandsync.uow import SQLAlchemyReadOnlyUnitOfWork

bp = Blueprint("health", __name__)

log = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        with SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=False) as uow:
            uow.session.execute(select(1))
    except SQLAlchemyError:
        log.exception("Health check: database unreachable", extra={"event": "health.db"})
        return False
    return True


def _ledger_ok(backend: str) -> bool:
    if backend != "redis":
        return True
    from bandsync.core.extensions import get_redis

    try:
        return bool(get_redis().ping())
    except RedisError:
        log.exception("Health check: redis unreachable", extra={"event": "health.ledger"})
        return False


@bp.get("/health")
@timing
def healthcheck():
    """``{status, db, ledger, version}``; ``status`` is ``ok`` even when a backend is degraded."""

    backend = str(current_app.config.get("REFRESH_LEDGER_BACKEND", "sql")).lower()
    return json_response(
        {
            "status": "ok",
            "db": "ok" if _database_ok() else "fail",
            "ledger": f"{backend}:{'ok' if _ledger_ok(backend) else 'fail'}",
            "version": current_app.config.get("APP_VERSION", "dev"),
        }
    )
