"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from bandsync.core.extensions import db
from bandsync.repositories import RefreshTokenRepository, UserRepository
from bandsync.uow.base import UnitOfWork

log = logging.getLogger(__name__)

# Session.info key counting the writer scopes currently open on a session.
_DEPTH_KEY = "bandsync.uow_depth"


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW on the Flask-scoped session.

    Scopes nest: only the outermost scope commits or rolls back. An inner scope
    that fails re-raises and leaves the decision to the outer one, so a user
    insert and the ledger write made on its behalf share one transaction.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._outermost = False

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        depth = int(self.session.info.get(_DEPTH_KEY, 0))
        self._outermost = depth == 0
        self.session.info[_DEPTH_KEY] = depth + 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.session.info[_DEPTH_KEY] = int(self.session.info.get(_DEPTH_KEY, 1)) - 1
        if not self._outermost:
            return
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    - Owns a fresh transaction when the session is idle, and then applies
      ``SET TRANSACTION READ ONLY`` on PostgreSQL/MySQL.
    - Attaches to an already-running transaction otherwise (outer writer scope,
      test fixtures) without touching it on exit.
    - Always blocks ORM flushes while open; ``commit()`` is refused.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._txn_ctx: SessionTransaction | None = None
        self._guard_installed = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # A transaction is already begun on this session; inherit it.
            pass

        self._install_guard()

        if self._txn_ctx is not None and self.enforce_db_readonly:
            dialect = self.session.connection().dialect.name
            if dialect in ("postgresql", "mysql", "mariadb"):
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_guard()

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards -------------------------------------

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    def _install_guard(self) -> None:
        if not self._guard_installed:
            event.listen(self.session, "before_flush", self._before_flush)
            self._guard_installed = True

    def _remove_guard(self) -> None:
        if self._guard_installed:
            with suppress(InvalidRequestError):
                event.remove(self.session, "before_flush", self._before_flush)
            self._guard_installed = False
