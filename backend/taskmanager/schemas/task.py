"""Task Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, post_load, validate

from taskmanager.models.enums import TaskStatus


class TaskSchema(Schema):
    """Serialized task representation."""

    id = fields.Integer(dump_only=True)
    title = fields.String(required=True)
    description = fields.String(allow_none=True)
    status = fields.Enum(TaskStatus)
    deadline = fields.DateTime(allow_none=True)
    created_by = fields.Integer(data_key="createdBy")
    team_id = fields.Integer(allow_none=True, data_key="teamId")
    created_at = fields.DateTime(data_key="createdAt")


class TaskCreateSchema(Schema):
    """Input payload for creating a task."""

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(load_default=None, allow_none=True)
    status = fields.Enum(TaskStatus, load_default=TaskStatus.TODO)
    deadline = fields.AwareDateTime(load_default=None, allow_none=True)
    team_id = fields.Integer(load_default=None, allow_none=True, data_key="teamId")


class TaskUpdateSchema(Schema):
    """Partial update; absent keys are left untouched."""

    title = fields.String(validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)
    status = fields.Enum(TaskStatus)
    deadline = fields.AwareDateTime(allow_none=True)


class TaskQuerySchema(Schema):
    """Filters for ``GET /tasks``."""

    title = fields.String(load_default=None)
    status = fields.Enum(TaskStatus, load_default=None)
    sort = fields.String(load_default=None)
    limit = fields.Integer(load_default=None, validate=validate.Range(min=1, max=100))
    offset = fields.Integer(load_default=None, validate=validate.Range(min=0))

    @post_load
    def split_sort(self, data, **kwargs):
        # "-deadline,title" -> ("-deadline", "title")
        raw = data.get("sort") or ""
        data["sort"] = tuple(t.strip() for t in raw.split(",") if t.strip())
        return data
