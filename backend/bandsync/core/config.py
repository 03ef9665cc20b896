"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

DEFAULT_ACCESS_TTL: Final[str] = "1h"
DEFAULT_REFRESH_TTL: Final[str] = "7d"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}

# Load .env during development (no-op when the file is absent)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when mandatory settings are missing or invalid."""


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert ``"30s"``, ``"15m"``, ``"1h"``, ``"7d"`` or plain seconds to a delta.

    :param value: Raw setting value.
    :returns: Positive duration.
    :raises ConfigurationError: When the value is not a positive duration.
    """
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    elif isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ConfigurationError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        seconds = int(amount) * _UNIT_SECONDS[unit.lower()]
    if seconds <= 0:
        raise ConfigurationError(f"Duration must be positive: {value!r}")
    return timedelta(seconds=seconds)


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Immutable token settings injected into the codec and the session manager.

    :param secret: Process-wide signing secret.
    :param algorithm: JWS algorithm used for signing.
    :param access_ttl: Default access token lifetime.
    :param refresh_ttl: Default refresh token lifetime.
    """

    secret: str
    algorithm: str
    access_ttl: timedelta
    refresh_ttl: timedelta

    def __repr__(self) -> str:
        return (
            f"AuthSettings(algorithm={self.algorithm!r}, access_ttl={self.access_ttl!r}, "
            f"refresh_ttl={self.refresh_ttl!r})"
        )


def load_auth_settings(config: Mapping[str, Any]) -> AuthSettings:
    """Validate token settings from a Flask config mapping.

    :param config: Application config (``app.config`` or any mapping).
    :returns: Validated settings.
    :raises ConfigurationError: When the signing secret is absent or blank, or a
        TTL cannot be parsed.
    """
    secret = config.get("JWT_SECRET") or config.get("JWT_SECRET_KEY")
    if not isinstance(secret, str) or not secret.strip():
        raise ConfigurationError(
            "JWT_SECRET is not set; refusing to start without a token signing secret."
        )
    return AuthSettings(
        secret=secret,
        algorithm=str(config.get("JWT_ALGORITHM") or "HS256"),
        access_ttl=parse_duration(config.get("JWT_EXPIRY") or DEFAULT_ACCESS_TTL),
        refresh_ttl=parse_duration(config.get("REFRESH_TOKEN_EXPIRY") or DEFAULT_REFRESH_TTL),
    )


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET: str | None
        Token signing secret. Required; there is no fallback value.
    JWT_ALGORITHM: str
        JWS algorithm for access and refresh tokens.
    JWT_EXPIRY: str
        Access token lifetime (``"1h"`` by default).
    REFRESH_TOKEN_EXPIRY: str
        Refresh token lifetime (``"7d"`` by default).
    REFRESH_LEDGER_BACKEND: str
        ``"sql"`` (``refresh_tokens`` table) or ``"redis"``.
    REDIS_URL: str | None
        Connection string used when the ledger backend is ``"redis"``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET = os.getenv("JWT_SECRET") or os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRY = os.getenv("JWT_EXPIRY", DEFAULT_ACCESS_TTL)
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", DEFAULT_REFRESH_TTL)

    # Ledger
    REFRESH_LEDGER_BACKEND = os.getenv("REFRESH_LEDGER_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Ships a throwaway signing secret so the suite runs without a ``.env``.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET = os.getenv("TEST_JWT_SECRET", "testing-only-signing-secret-not-for-production")
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REFRESH_LEDGER_BACKEND = "sql"
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
