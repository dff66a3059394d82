"""Team and membership Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from taskmanager.models.enums import TeamRole

from .user import UserSchema


class TeamSchema(Schema):
    """Serialized team representation."""

    id = fields.Integer(dump_only=True)
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    created_at = fields.DateTime(dump_only=True, data_key="createdAt")


class TeamCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class MemberAddSchema(Schema):
    """Add a user by username or email.

    An empty identifier is accepted here and rejected by the service as a
    conflict.
    """

    identifier = fields.String(required=True)
    role = fields.Enum(TeamRole, load_default=TeamRole.MEMBER)


class MemberRoleSchema(Schema):
    # ``None`` reaches the service, which reports it as a conflict
    role = fields.Enum(TeamRole, required=True, allow_none=True)


class MemberSchema(Schema):
    """Serialized membership."""

    team_id = fields.Integer(data_key="teamId")
    user = fields.Nested(UserSchema)
    role = fields.Enum(TeamRole)
    joined_at = fields.DateTime(data_key="joinedAt")
