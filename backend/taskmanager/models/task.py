"""Task model: a unit of work owned by its creator and optionally by a team."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from taskmanager.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .enums import TaskStatus

if TYPE_CHECKING:
    from .team import Team


class Task(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A task.

    Fields
    ------
    title : str
        Required, trimmed.
    status : TaskStatus
        Defaults to ``TODO``.
    created_by : int
        Creator user id; personal tasks are visible to the creator only.
    team_id : int | None
        Owning team; ``None`` for personal tasks.
    """

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        SAEnum(TaskStatus, name="task_status", native_enum=False, length=16),
        nullable=False,
        default=TaskStatus.TODO,
    )
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=True
    )

    team: Mapped[Team | None] = relationship(back_populates="tasks")

    __table_args__ = (
        Index("ix_tasks_created_by", "created_by"),
        Index("ix_tasks_team_id", "team_id"),
    )

    @validates("title")
    def _normalize_title(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Title is required.")
        return value.strip()
