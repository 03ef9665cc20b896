"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from bandsync.core.config import AuthSettings, ConfigurationError

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None


def init_app(app: Flask, settings: AuthSettings) -> None:
    """Initialize SQLAlchemy, migrations, JWT and (optionally) Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances.
    settings: AuthSettings
        Validated token settings; mirrored into the ``JWT_*`` keys read by
        ``flask-jwt-extended`` so the codec and the bearer middleware sign
        and verify with the same secret and lifetimes.
    """
    app.config["JWT_SECRET_KEY"] = settings.secret
    app.config["JWT_ALGORITHM"] = settings.algorithm
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = settings.access_ttl
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = settings.refresh_ttl
    app.config.setdefault("JWT_TOKEN_LOCATION", ["headers"])
    app.extensions["auth_settings"] = settings

    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from bandsync import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    global redis_client
    backend = app.config.get("REFRESH_LEDGER_BACKEND", "sql")
    if backend != "redis":
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise ConfigurationError("REFRESH_LEDGER_BACKEND=redis requires REDIS_URL.")
    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise ConfigurationError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
