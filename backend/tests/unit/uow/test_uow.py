import pytest
from sqlalchemy import func, select

from bandsync.models.user import User
from bandsync.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from bandsync.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


def _user_count(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build(email="ok@example.com"))

        assert session.execute(select(User).where(User.email == "ok@example.com")).first()

    def test_rolls_back_on_exception(self, session):
        before = _user_count(session)

        with pytest.raises(RuntimeError, match="boom"), RWuow() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert _user_count(session) == before

    def test_nested_scopes_commit_once(self, session, monkeypatch):
        """Only the outermost scope talks to the session transaction."""
        calls = []
        real_commit = session().commit
        monkeypatch.setattr(session(), "commit", lambda: (calls.append(1), real_commit())[1])

        with RWuow() as outer:
            outer.users.add(UserFactory.build())
            with RWuow() as inner:
                inner.users.add(UserFactory.build())
            assert calls == []

        assert calls == [1]

    def test_inner_failure_rolls_back_the_outer_scope(self, session):
        before = _user_count(session)

        with pytest.raises(ValueError), RWuow() as outer:
            outer.users.add(UserFactory.build())
            with RWuow() as inner:
                inner.users.add(UserFactory.build())
                raise ValueError("inner")

        assert _user_count(session) == before

    def test_depth_counter_resets_after_exit(self, session):
        with RWuow():
            with RWuow():
                pass

        assert session.info.get("bandsync.uow_depth") == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """Flushing pending changes inside the RO UoW raises."""
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()
        session.rollback()

    def test_allows_reads(self, session):
        UserFactory(email="reader@example.com")

        with ROuow() as uow:
            assert uow.users.get_by_email("reader@example.com") is not None

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guard_is_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build(email="after@example.com"))

        assert _user_count(session) >= 1
