"""Unit tests for the :class:`bandsync.models.user.User` model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from bandsync.models.user import User
from tests.factories.user import UserFactory


def test_password_is_hashed_and_verifiable(session):
    user = UserFactory(password="secret123")

    assert user.password_hash
    assert "secret123" not in user.password_hash
    assert user.verify_password("secret123") is True
    assert user.verify_password("wrong") is False


def test_password_is_write_only(session):
    user = UserFactory()

    with pytest.raises(AttributeError):
        _ = user.password


def test_same_password_hashes_differently(session):
    a = UserFactory(password="same-password")
    b = UserFactory(password="same-password")

    assert a.password_hash != b.password_hash


def test_email_is_stored_exactly_as_given(session):
    user = UserFactory(email="Mixed.Case@Example.com")

    assert user.email == "Mixed.Case@Example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "a@b"])
def test_invalid_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(email=email, first_name="A", last_name="B")


def test_blank_names_are_rejected():
    with pytest.raises(ValueError):
        User(email="a@x.com", first_name="   ", last_name="B")


def test_email_uniqueness_is_enforced_by_the_database(session):
    UserFactory(email="dup@example.com")

    with pytest.raises(IntegrityError):
        UserFactory(email="dup@example.com")


def test_new_users_get_distinct_uuid_ids_and_member_role(session):
    a, b = UserFactory(), UserFactory()

    assert a.id != b.id
    assert len(a.id) == 36
    assert a.is_admin is False


def test_persisted_hash_survives_session_expiry(session):
    user = UserFactory(password="pw-after-expire")

    session.expire_all()

    assert user.verify_password("pw-after-expire")


def test_password_setter_hashes_on_assignment():
    user = User(email="setter@example.com", first_name="A", last_name="B")

    user.password = "raw-secret"

    assert user.password_hash != "raw-secret"
    assert user.verify_password("raw-secret")
