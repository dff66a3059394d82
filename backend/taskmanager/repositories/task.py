"""Task repository with visibility-aware listing helpers."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from sqlalchemy import delete, select

from taskmanager.models.enums import TaskStatus
from taskmanager.models.task import Task
from taskmanager.repositories.base import BaseRepository, apply_sorting


class TaskRepository(BaseRepository[Task]):
    """Persistence-only repository for :class:`Task`."""

    model = Task

    def _sortable_fields(self):
        return {
            "id": Task.id,
            "title": Task.title,
            "status": Task.status,
            "deadline": Task.deadline,
            "created_at": Task.created_at,
        }

    def _filterable_fields(self):
        return {
            "status": Task.status,
            "team_id": Task.team_id,
            "created_by": Task.created_by,
        }

    def _updatable_fields(self):
        return {"title", "description", "status", "deadline"}

    def list_created_by(
        self,
        user_id: int,
        *,
        title: str | None = None,
        status: TaskStatus | None = None,
        sort: Iterable[str] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Task]:
        """List tasks created by ``user_id`` with optional title/status filters.

        :param user_id: Creator id.
        :type user_id: int
        :param title: Case-insensitive substring of the title.
        :type title: str | None
        :param status: Exact status.
        :type status: TaskStatus | None
        :param sort: Public sort tokens; ``id`` ascending breaks ties.
        :type sort: Iterable[str]
        :param limit: Page size.
        :type limit: int | None
        :param offset: Rows to skip.
        :type offset: int | None
        :returns: Matching tasks, by id unless ``sort`` says otherwise.
        :rtype: list[Task]
        """
        stmt = select(Task).where(Task.created_by == user_id)
        if title:
            stmt = stmt.where(Task.title.ilike(f"%{title.strip()}%"))
        if status is not None:
            stmt = stmt.where(Task.status == status)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort, pk_attr=Task.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return cast(list[Task], list(self.session.execute(stmt).scalars().all()))

    def list_for_team(self, team_id: int) -> list[Task]:
        """Return a team's tasks, newest first."""
        return self.list(filters={"team_id": team_id}, sort=["-created_at"])

    def delete_created_by(self, user_id: int) -> int:
        """Bulk-delete every task created by ``user_id``; returns the row count."""
        stmt = (
            delete(Task)
            .where(Task.created_by == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
