"""Authentication endpoints using the service layer.

This module is the only place that knows how an :class:`AuthFailure` maps to
an HTTP status. ``MISSING_TOKEN`` is a 401 on ``/refresh-token`` but a 400 on
``/logout``.
"""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus

from flask import Blueprint
from flask_jwt_extended import get_jwt_identity

from bandsync.api.deps import (
    ACCESS_TOKEN_INVALID,
    get_session_manager,
    json_body,
    json_response,
    require_auth,
    timing,
)
from bandsync.core.errors import APIError, Unauthorized
from bandsync.schemas import (
    AccessTokenResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    SessionResponseSchema,
    UserSchema,
)
from bandsync.services._shared.errors import AuthError, AuthFailure, NotFoundError
from bandsync.services.auth.dto import LoginIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
session_schema = SessionResponseSchema()
access_token_schema = AccessTokenResponseSchema()
user_schema = UserSchema()

FAILURE_MESSAGES: Mapping[AuthFailure, str] = {
    AuthFailure.DUPLICATE_ACCOUNT: "User with this email already exists",
    AuthFailure.INVALID_CREDENTIALS: "Invalid credentials",
    AuthFailure.MISSING_TOKEN: "Refresh token required",
    AuthFailure.INVALID_REFRESH_TOKEN: "Invalid refresh token",
}

FAILURE_STATUS: Mapping[AuthFailure, int] = {
    AuthFailure.DUPLICATE_ACCOUNT: HTTPStatus.BAD_REQUEST,
    AuthFailure.INVALID_CREDENTIALS: HTTPStatus.UNAUTHORIZED,
    AuthFailure.MISSING_TOKEN: HTTPStatus.BAD_REQUEST,
    AuthFailure.INVALID_REFRESH_TOKEN: HTTPStatus.FORBIDDEN,
}


def to_api_error(err: AuthError, *, status_overrides: Mapping[AuthFailure, int] | None = None) -> APIError:
    """Translate a service failure into a client-safe API error."""

    status = (status_overrides or {}).get(err.failure, FAILURE_STATUS[err.failure])
    return APIError(FAILURE_MESSAGES[err.failure], status_code=status, code=err.failure.value)


@bp.post("/register")
@timing
def register():
    """Register a new user and open their first session."""

    data = register_schema.load(json_body())
    try:
        session = get_session_manager().register(RegisterIn(**data))
    except AuthError as err:
        raise to_api_error(err) from err
    body = session_schema.dump(
        {
            "message": "User registered successfully",
            "user": session.user,
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
        }
    )
    return json_response(body, status=HTTPStatus.CREATED)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a new token pair."""

    data = login_schema.load(json_body())
    try:
        session = get_session_manager().login(LoginIn(**data))
    except AuthError as err:
        raise to_api_error(err) from err
    body = session_schema.dump(
        {
            "message": "Login successful",
            "user": session.user,
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
        }
    )
    return json_response(body)


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Exchange the live refresh token for a new access token."""

    data = refresh_token_schema.load(json_body())
    try:
        out = get_session_manager().refresh(data["refresh_token"])
    except AuthError as err:
        raise to_api_error(
            err, status_overrides={AuthFailure.MISSING_TOKEN: HTTPStatus.UNAUTHORIZED}
        ) from err
    return json_response(access_token_schema.dump(out))


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token; succeeds for unknown tokens too."""

    data = refresh_token_schema.load(json_body())
    try:
        get_session_manager().logout(data["refresh_token"])
    except AuthError as err:
        raise to_api_error(err) from err
    return json_response({"message": "Logged out successfully"})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    try:
        user = get_session_manager().current_user(str(get_jwt_identity()))
    except NotFoundError as err:
        raise Unauthorized(ACCESS_TOKEN_INVALID) from err
    return json_response({"user": user_schema.dump(user)})
