"""Team aggregate: teams and the role-bearing memberships that join users to them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskmanager.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin
from .enums import TeamRole

if TYPE_CHECKING:
    from .task import Task
    from .user import User


class Team(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Named group of users sharing tasks.

    Deleting a team deletes its memberships and its tasks.
    """

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    memberships: Mapped[list[TeamMembership]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )
    tasks: Mapped[list[Task]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("name", name="uq_teams_name"),)


class TeamMembership(CreatedAtMixin, db.Model):
    """
    Association (team, user, role).

    The composite primary key guarantees at most one role per user per team;
    concurrent "double join" attempts end as an integrity violation.
    """

    __tablename__ = "team_memberships"

    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[TeamRole] = mapped_column(
        SAEnum(TeamRole, name="team_role", native_enum=False, length=16),
        nullable=False,
        default=TeamRole.MEMBER,
    )

    team: Mapped[Team] = relationship(back_populates="memberships")
    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (Index("ix_team_memberships_user_id", "user_id"),)

    def is_owner(self) -> bool:
        """Return ``True`` when this membership carries the owner role."""
        return self.role.is_owner()

    def can_manage_members(self) -> bool:
        """Return ``True`` when this membership may manage other members."""
        return self.role.can_manage_members()

    def __repr__(self) -> str:
        return f"<TeamMembership team_id={self.team_id} user_id={self.user_id} role={self.role}>"
