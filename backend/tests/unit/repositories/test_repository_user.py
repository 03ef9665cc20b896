"""Unit tests for UserRepository."""

import pytest

from bandsync.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs credential lookups."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_create_and_get_user(self, repo, session):
        """Create a user and fetch it by email to verify retrieval."""
        u = UserFactory(email="alice@example.com", first_name="Alice")
        session.commit()

        fetched = repo.get_by_email("alice@example.com")
        assert fetched is not None
        assert fetched.id == u.id
        assert fetched.first_name == "Alice"

    def test_email_lookup_is_exact(self, repo, session):
        """Emails are matched as stored; no case folding or trimming."""
        UserFactory(email="Bob@Example.com")

        assert repo.get_by_email("Bob@Example.com") is not None
        assert repo.get_by_email("bob@example.com") is None
        assert repo.get_by_email(" Bob@Example.com") is None

    def test_exists_by_email(self, repo, session):
        """Return existence flags for known and unknown email addresses."""
        UserFactory(email="carol@example.com")

        assert repo.exists_by_email("carol@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_add_materializes_primary_key(self, repo):
        u = UserFactory.build(email="dave@example.com")
        u.password = "secret123"

        repo.add(u)

        assert u.id
        assert repo.get(u.id) is u

    def test_authenticate_valid_and_invalid(self, repo, session):
        """Authenticate with correct credentials and reject invalid attempts."""
        UserFactory(email="auth@example.com", password="strongpass")

        # valid
        assert repo.authenticate("auth@example.com", "strongpass") is not None
        # wrong password
        assert repo.authenticate("auth@example.com", "wrongpass") is None
        # unknown user
        assert repo.authenticate("nope@example.com", "strongpass") is None
