"""Unit tests for the Flask-JWT-Extended token codec."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bandsync.infra.jwt.jwt_token_codec import JWTTokenCodec
from bandsync.services._shared.ports import (
    BadSignature,
    Expired,
    Malformed,
    TokenPurpose,
    VerificationFailure,
)


@pytest.fixture()
def codec(app, settings) -> JWTTokenCodec:
    return JWTTokenCodec(settings)


def test_issue_then_verify_round_trips_subject_and_purpose(codec):
    token = codec.issue("user-1", TokenPurpose.REFRESH)

    claims = codec.verify(token)

    assert claims.subject == "user-1"
    assert claims.purpose is TokenPurpose.REFRESH
    assert claims.expires_at > claims.issued_at


def test_default_lifetimes_follow_settings(codec, settings):
    access = codec.verify(codec.issue("u", TokenPurpose.ACCESS))
    refresh = codec.verify(codec.issue("u", TokenPurpose.REFRESH))

    assert access.expires_at - access.issued_at == settings.access_ttl
    assert refresh.expires_at - refresh.issued_at == settings.refresh_ttl


def test_tokens_are_unique_even_within_one_second(codec):
    assert codec.issue("u", TokenPurpose.REFRESH) != codec.issue("u", TokenPurpose.REFRESH)


def test_expired_token_raises_expired(codec, freeze_time):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue("u", TokenPurpose.ACCESS, timedelta(minutes=5))
        frozen.tick(timedelta(minutes=6))
        with pytest.raises(Expired):
            codec.verify(token)


def test_token_is_valid_until_expiry(codec, freeze_time):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue("u", TokenPurpose.ACCESS, timedelta(minutes=5))
        frozen.tick(timedelta(minutes=4))
        assert codec.verify(token).subject == "u"


def test_tampered_payload_raises_bad_signature(codec):
    header, payload, signature = codec.issue("u", TokenPurpose.ACCESS).split(".")
    # Flip one character of the signature
    forged = f"{header}.{payload}.{signature[:-2]}{'A' if signature[-2] != 'A' else 'B'}{signature[-1]}"

    with pytest.raises(BadSignature):
        codec.verify(forged)


def test_token_signed_with_other_secret_raises_bad_signature(app, codec):
    previous = app.config["JWT_SECRET_KEY"]
    app.config["JWT_SECRET_KEY"] = "a-completely-different-signing-secret"
    try:
        other_token = codec.issue("u", TokenPurpose.ACCESS)
    finally:
        app.config["JWT_SECRET_KEY"] = previous

    with pytest.raises(BadSignature):
        codec.verify(other_token)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "x" * 40])
def test_garbage_raises_malformed(codec, garbage):
    with pytest.raises(Malformed):
        codec.verify(garbage)


def test_all_failures_share_a_base_class():
    assert issubclass(BadSignature, VerificationFailure)
    assert issubclass(Expired, VerificationFailure)
    assert issubclass(Malformed, VerificationFailure)
