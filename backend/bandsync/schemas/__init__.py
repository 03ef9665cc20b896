"""Marshmallow schemas for request validation and response shaping."""

from bandsync.schemas.auth import (
    AccessTokenResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    SessionResponseSchema,
    UserSchema,
)

__all__ = [
    "AccessTokenResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "SessionResponseSchema",
    "UserSchema",
]
