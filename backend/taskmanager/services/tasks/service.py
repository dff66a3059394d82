"""
TaskService
===========

CRUD over tasks with visibility and mutation rules delegated to
:class:`~taskmanager.services._shared.policies.access_guard.AccessGuard`.

Notes
-----
- Every method takes the caller's :class:`AuthContext` explicitly.
- Read operations use ``ro_uow()``; write operations use ``rw_uow()``.
"""

from __future__ import annotations

import logging

from taskmanager.models.task import Task
from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import BadRequestError, NotFoundError
from taskmanager.services._shared.policies.access_guard import AccessGuard
from taskmanager.services.tasks.dto import (
    TaskCreateIn,
    TaskListIn,
    TaskOut,
    TaskUpdateIn,
    to_task_out,
)

logger = logging.getLogger(__name__)


class TaskService(BaseService):
    """Application service for tasks."""

    @staticmethod
    def _guard(uow) -> AccessGuard:
        return AccessGuard(teams=uow.teams, memberships=uow.memberships)

    @staticmethod
    def _require_task(uow, task_id: int) -> Task:
        task = uow.tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def create_task(self, ctx: AuthContext, dto: TaskCreateIn) -> TaskOut:
        """
        Create a personal task, or a team task when ``team_id`` is given.

        :raises NotFoundError: If the team does not exist.
        :raises AuthorizationError: If the caller is not a member of the team.
        """
        if not (dto.title or "").strip():
            raise BadRequestError("Title is required")
        with self.rw_uow() as uow:
            if dto.team_id is not None:
                guard = self._guard(uow)
                guard.require_team(dto.team_id)
                guard.require_membership(dto.team_id, ctx.subject_id)

            task = Task(
                title=dto.title,
                description=dto.description,
                status=dto.status,
                deadline=dto.deadline,
                created_by=ctx.subject_id,
                team_id=dto.team_id,
            )
            uow.tasks.add(task)
            out = to_task_out(task)

        logger.info(
            "Task created",
            extra={"task_id": out.id, "team_id": out.team_id, "actor_id": ctx.subject_id},
        )
        return out

    def get_task(self, ctx: AuthContext, task_id: int) -> TaskOut:
        with self.ro_uow() as uow:
            task = self._require_task(uow, task_id)
            self._guard(uow).require_task_visible(task, ctx)
            return to_task_out(task)

    def list_my_tasks(self, ctx: AuthContext, dto: TaskListIn | None = None) -> list[TaskOut]:
        """List tasks the caller created, filtered by title and status, sorted and paged."""
        dto = dto or TaskListIn()
        with self.ro_uow() as uow:
            tasks = uow.tasks.list_created_by(
                ctx.subject_id,
                title=dto.title,
                status=dto.status,
                sort=dto.sort,
                limit=dto.limit,
                offset=dto.offset,
            )
            return [to_task_out(t) for t in tasks]

    def list_team_tasks(self, ctx: AuthContext, team_id: int) -> list[TaskOut]:
        """
        List every task of a team.

        :raises NotFoundError: Unknown team.
        :raises AuthorizationError: Caller is not a member.
        """
        with self.ro_uow() as uow:
            guard = self._guard(uow)
            guard.require_team(team_id)
            guard.require_membership(team_id, ctx.subject_id)
            return [to_task_out(t) for t in uow.tasks.list_for_team(team_id)]

    def update_task(self, ctx: AuthContext, dto: TaskUpdateIn) -> TaskOut:
        """
        Apply a partial update.

        :raises NotFoundError: Unknown task.
        :raises AuthorizationError: Caller may not modify the task.
        """
        if "title" in dto.fields and not (dto.fields["title"] or "").strip():
            raise BadRequestError("Title is required")
        with self.rw_uow() as uow:
            task = self._require_task(uow, dto.task_id)
            self._guard(uow).require_task_mutable(task, ctx)
            uow.tasks.assign_updates(task, dto.fields)
            out = to_task_out(task)
        return out

    def delete_task(self, ctx: AuthContext, task_id: int) -> None:
        with self.rw_uow() as uow:
            task = self._require_task(uow, task_id)
            self._guard(uow).require_task_mutable(task, ctx)
            uow.tasks.delete(task)
        logger.info("Task deleted", extra={"task_id": task_id, "actor_id": ctx.subject_id})
