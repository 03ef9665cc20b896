"""Unit tests for RefreshTokenRepository."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from bandsync.repositories.refresh_token import RefreshTokenRepository
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


class TestRefreshTokenRepository:
    """Row-level operations used by the SQL ledger."""

    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository(session=session)

    def test_find_matches_user_and_token(self, repo):
        row = RefreshTokenFactory(token="rt-1")
        other = UserFactory()

        assert repo.find(row.user_id, "rt-1") is row
        assert repo.find(other.id, "rt-1") is None
        assert repo.find(row.user_id, "rt-2") is None

    def test_list_for_user(self, repo):
        row = RefreshTokenFactory()
        RefreshTokenFactory()

        assert [r.id for r in repo.list_for_user(row.user_id)] == [row.id]

    def test_delete_for_user_only_touches_that_user(self, repo):
        mine = RefreshTokenFactory()
        theirs = RefreshTokenFactory()
        my_user, their_user = mine.user_id, theirs.user_id

        assert repo.delete_for_user(my_user) == 1
        assert repo.list_for_user(my_user) == []
        assert len(repo.list_for_user(their_user)) == 1

    def test_delete_by_token_reports_rowcount(self, repo):
        RefreshTokenFactory(token="rt-gone")

        assert repo.delete_by_token("rt-gone") == 1
        assert repo.delete_by_token("rt-gone") == 0

    def test_delete_expired(self, repo):
        now = datetime.now(UTC)
        stale = RefreshTokenFactory(created_at=now - timedelta(days=8), expires_at=now - timedelta(days=1))
        live = RefreshTokenFactory(created_at=now, expires_at=now + timedelta(days=1))
        stale_user, live_user = stale.user_id, live.user_id

        assert repo.delete_expired(now) == 1
        assert repo.list_for_user(stale_user) == []
        assert len(repo.list_for_user(live_user)) == 1

    def test_second_row_for_user_is_refused(self, repo):
        row = RefreshTokenFactory()

        with pytest.raises(IntegrityError):
            RefreshTokenFactory(user=row.user)
