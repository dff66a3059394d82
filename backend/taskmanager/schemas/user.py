"""User Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class UserSchema(Schema):
    """Public user representation."""

    id = fields.Integer(dump_only=True)
    email = fields.Email(required=True)
    username = fields.String(required=True)
    full_name = fields.String(allow_none=True, data_key="fullName")
    is_verified = fields.Boolean(data_key="isVerified")


class ProfileUpdateSchema(Schema):
    """Partial profile update; absent keys are left untouched."""

    username = fields.String(validate=validate.Length(min=3, max=50))
    email = fields.Email(validate=validate.Length(max=254))
    full_name = fields.String(data_key="fullName", validate=validate.Length(max=100))


class PasswordChangeSchema(Schema):
    current_password = fields.String(
        required=True, data_key="currentPassword", validate=validate.Length(min=1, max=128)
    )
    new_password = fields.String(
        required=True, data_key="newPassword", validate=validate.Length(min=8, max=128)
    )
    confirm_new_password = fields.String(load_default=None, data_key="confirmNewPassword")

    @validates_schema
    def confirmation_matches(self, data, **kwargs):
        confirm = data.get("confirm_new_password")
        if confirm is not None and confirm != data.get("new_password"):
            raise ValidationError("Passwords do not match", field_name="confirmNewPassword")
