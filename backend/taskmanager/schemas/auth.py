"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    full_name = fields.String(
        load_default=None, allow_none=True, data_key="fullName", validate=validate.Length(max=100)
    )


class LoginSchema(Schema):
    """Input payload for authenticating a user (username or email)."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token.

    Blank values pass validation on purpose; the service reports them as a
    bad request.
    """

    refresh_token = fields.String(required=True, data_key="refreshToken")


class ResendVerificationSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    token_type = fields.Constant("Bearer", data_key="tokenType", dump_only=True)
