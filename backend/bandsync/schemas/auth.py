"""Authentication-related Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates

from bandsync.models.user import has_dotted_domain


class _Input(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_Input):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    first_name = fields.String(
        required=True, data_key="firstName", validate=validate.Length(max=100)
    )
    last_name = fields.String(required=True, data_key="lastName", validate=validate.Length(max=100))
    phone = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=32))
    instrument = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=100)
    )

    @validates("email")
    def _email_has_dotted_domain(self, value: str, **kwargs) -> None:
        if not has_dotted_domain(value):
            raise ValidationError("Not a valid email address.")

    @validates("first_name")
    def _first_name_not_blank(self, value: str, **kwargs) -> None:
        if not value.strip():
            raise ValidationError("Must not be blank.")

    @validates("last_name")
    def _last_name_not_blank(self, value: str, **kwargs) -> None:
        if not value.strip():
            raise ValidationError("Must not be blank.")


class LoginSchema(_Input):
    """Input payload for authenticating a user.

    ``email`` is a plain string: a malformed address is just an unknown account.
    """

    email = fields.String(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=128))


class RefreshTokenSchema(_Input):
    """Body of refresh-token and logout.

    The value is loaded untyped: a missing token and a token of the wrong type
    are both decided by the service, not rejected here.
    """

    refresh_token = fields.Raw(data_key="refreshToken", load_default=None, allow_none=True)


class UserSchema(Schema):
    """Public user fields."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    instrument = fields.String(allow_none=True)


class SessionResponseSchema(Schema):
    """Register/login response."""

    message = fields.String()
    user = fields.Nested(UserSchema)
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class AccessTokenResponseSchema(Schema):
    """Refresh response: a new access token only."""

    access_token = fields.String(data_key="accessToken")
