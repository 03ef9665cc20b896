"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database; the session commits only SAVEPOINTs, so data never leaks between
cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from bandsync.core.config import AuthSettings, TestingConfig
from bandsync.core.extensions import db as _db  # Flask-SQLAlchemy instance
from bandsync.factory import create_app  # application factory under test
from bandsync.services._shared.ports import InMemoryRefreshTokenLedger, StubTokenCodec
from bandsync.services.auth import SessionManager


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Ships a fixed signing secret and the default lifetimes.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET = "tests-signing-secret-0123456789abcdef"
    JWT_EXPIRY = "1h"
    REFRESH_TOKEN_EXPIRY = "7d"
    CORS_ORIGINS = "http://localhost:3000"
    LOG_LEVEL = "WARNING"


def _enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite honour SAVEPOINT by emitting BEGIN ourselves."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        if _db.engine.url.get_backend_name() == "sqlite":
            _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session joined to a per-test outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; ``commit()`` releases a
        SAVEPOINT and the outer transaction is rolled back after the test.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture(scope="session")
def settings(app) -> AuthSettings:
    """Token settings the app was built with."""
    return app.extensions["auth_settings"]


@pytest.fixture()
def stub_manager(settings) -> SessionManager:
    """Build a SessionManager wired to in-memory doubles."""
    return SessionManager(
        settings=settings,
        codec=StubTokenCodec(access_ttl=settings.access_ttl, refresh_ttl=settings.refresh_ttl),
        ledger=InMemoryRefreshTokenLedger(),
    )


@pytest.fixture()
def manager(app) -> SessionManager:
    """The SessionManager wired by the app factory (JWT codec + SQL ledger)."""
    return app.extensions["session_manager"]


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[..., Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2026-01-01") as frozen:
    ...         frozen.tick(timedelta(hours=2))
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None, **kwargs: Any) -> Any:
        return _freeze_time(target or "2026-01-01 12:00:00", **kwargs)

    return _factory


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
