"""
DTOs for TaskService.

Framework-agnostic contracts between the API layer and the task service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskmanager.models.enums import TaskStatus

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskCreateIn:
    """
    Input DTO for creating a task.

    :param title: Required title.
    :type title: str
    :param description: Optional free text.
    :type description: str | None
    :param status: Initial status (``TODO`` by default).
    :type status: TaskStatus
    :param deadline: Optional due date.
    :type deadline: datetime | None
    :param team_id: Owning team; ``None`` creates a personal task.
    :type team_id: int | None
    """

    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    deadline: datetime | None = None
    team_id: int | None = None


@dataclass(frozen=True, slots=True)
class TaskUpdateIn:
    """
    Partial update; only keys present in ``fields`` are assigned.

    :param task_id: Task identifier.
    :type task_id: int
    :param fields: Subset of ``title``, ``description``, ``status``, ``deadline``.
    :type fields: dict[str, Any]
    """

    task_id: int
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TaskListIn:
    """
    Filters for the caller's own tasks.

    :param title: Case-insensitive title substring.
    :type title: str | None
    :param status: Exact status.
    :type status: TaskStatus | None
    :param sort: Sort tokens such as ``"-deadline"``; unknown fields are ignored.
    :type sort: tuple[str, ...]
    :param limit: Page size.
    :type limit: int | None
    :param offset: Rows to skip.
    :type offset: int | None
    """

    title: str | None = None
    status: TaskStatus | None = None
    sort: tuple[str, ...] = ()
    limit: int | None = None
    offset: int | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskOut:
    """Task payload."""

    id: int
    title: str
    description: str | None
    status: TaskStatus
    deadline: datetime | None
    created_by: int
    team_id: int | None
    created_at: datetime | None = None


def to_task_out(task) -> TaskOut:
    """Map an ORM ``Task`` to :class:`TaskOut`."""
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        deadline=task.deadline,
        created_by=task.created_by,
        team_id=task.team_id,
        created_at=task.created_at,
    )
