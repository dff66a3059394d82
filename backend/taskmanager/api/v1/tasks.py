"""Task endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, request, url_for

from taskmanager.api.deps import (
    json_body,
    json_response,
    no_content,
    require_auth,
    task_service,
    timing,
)
from taskmanager.schemas import TaskCreateSchema, TaskQuerySchema, TaskSchema, TaskUpdateSchema
from taskmanager.services._shared.context import AuthContext
from taskmanager.services.tasks.dto import TaskCreateIn, TaskListIn, TaskUpdateIn

bp = Blueprint("tasks", __name__)

task_schema = TaskSchema()
tasks_schema = TaskSchema(many=True)
task_create_schema = TaskCreateSchema()
task_update_schema = TaskUpdateSchema()
task_query_schema = TaskQuerySchema()


@bp.get("")
@require_auth
@timing
def list_my_tasks(ctx: AuthContext):
    """List the caller's own tasks, filtered by ``title`` and ``status``."""

    query = task_query_schema.load(request.args)
    tasks = task_service().list_my_tasks(ctx, TaskListIn(**query))
    return json_response({"items": tasks_schema.dump(tasks)})


@bp.post("")
@require_auth
@timing
def create_task(ctx: AuthContext):
    data = task_create_schema.load(json_body())
    task = task_service().create_task(ctx, TaskCreateIn(**data))
    response = json_response(task_schema.dump(task), status=HTTPStatus.CREATED)
    response.headers["Location"] = url_for("tasks.get_task", task_id=task.id)
    return response


@bp.get("/<int:task_id>")
@require_auth
@timing
def get_task(task_id: int, ctx: AuthContext):
    return json_response(task_schema.dump(task_service().get_task(ctx, task_id)))


@bp.patch("/<int:task_id>")
@require_auth
@timing
def update_task(task_id: int, ctx: AuthContext):
    """Partially update a task."""

    fields = task_update_schema.load(json_body())
    task = task_service().update_task(ctx, TaskUpdateIn(task_id=task_id, fields=fields))
    return json_response(task_schema.dump(task))


@bp.delete("/<int:task_id>")
@require_auth
@timing
def delete_task(task_id: int, ctx: AuthContext):
    task_service().delete_task(ctx, task_id)
    return no_content()
