"""Tests for the ``flask ledger`` command group."""

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory
from tests.helpers.utils import ledger_tokens


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def test_purge_expired_removes_only_stale_rows(runner, session):
    now = datetime.now(UTC)
    stale = RefreshTokenFactory(created_at=now - timedelta(days=8), expires_at=now - timedelta(days=1))
    live = RefreshTokenFactory(created_at=now, expires_at=now + timedelta(days=1))
    stale_user, live_user, live_token = stale.user_id, live.user_id, live.token

    result = runner.invoke(args=["ledger", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 expired refresh token(s)." in result.output
    assert ledger_tokens(session, stale_user) == []
    assert ledger_tokens(session, live_user) == [live_token]


def test_show_masks_the_token(runner):
    user = UserFactory(email="show@example.com")
    RefreshTokenFactory(user=user, token="secret-prefix-abcd1234")

    result = runner.invoke(args=["ledger", "show", "show@example.com"])

    assert result.exit_code == 0, result.output
    assert "token=...abcd1234" in result.output
    assert "secret-prefix" not in result.output


def test_show_without_session(runner):
    UserFactory(email="idle@example.com")

    result = runner.invoke(args=["ledger", "show", "idle@example.com"])

    assert result.exit_code == 0
    assert "idle@example.com: no live session" in result.output


def test_show_unknown_email_fails(runner):
    result = runner.invoke(args=["ledger", "show", "ghost@example.com"])

    assert result.exit_code != 0
    assert "No user with email" in result.output
