"""Team membership repository keyed by the composite (team_id, user_id)."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, select

from taskmanager.models.team import TeamMembership
from taskmanager.repositories.base import BaseRepository


class TeamMembershipRepository(BaseRepository[TeamMembership]):
    """SQL adapter of the membership lookup port.

    The table's composite primary key turns concurrent inserts of the same
    (team, user) pair into an ``IntegrityError`` at flush time.
    """

    model = TeamMembership

    def _pk_attr(self):
        return TeamMembership.team_id

    def _sortable_fields(self):
        return {"team_id": TeamMembership.team_id, "created_at": TeamMembership.created_at}

    def _filterable_fields(self):
        return {
            "team_id": TeamMembership.team_id,
            "user_id": TeamMembership.user_id,
            "role": TeamMembership.role,
        }

    def _updatable_fields(self):
        return {"role"}

    def find(self, team_id: int, user_id: int) -> TeamMembership | None:
        """Return the membership of ``user_id`` in ``team_id`` if any."""
        return self.session.get(TeamMembership, (team_id, user_id))

    def is_member(self, team_id: int, user_id: int) -> bool:
        return self.exists(team_id=team_id, user_id=user_id)

    def save(self, membership: TeamMembership) -> TeamMembership:
        return self.add(membership)

    def list_for_team(self, team_id: int) -> list[TeamMembership]:
        """Return all memberships of a team ordered by join time then user id."""
        stmt = (
            select(TeamMembership)
            .where(TeamMembership.team_id == team_id)
            .order_by(TeamMembership.created_at.asc(), TeamMembership.user_id.asc())
        )
        return cast(list[TeamMembership], list(self.session.execute(stmt).scalars().all()))

    def list_for_user(self, user_id: int) -> list[TeamMembership]:
        """Return every membership held by ``user_id``, ordered by team id."""
        return self.list(filters={"user_id": user_id}, sort=["team_id"])

    def count_for_team(self, team_id: int) -> int:
        stmt = select(func.count()).select_from(TeamMembership).where(
            TeamMembership.team_id == team_id
        )
        return int(self.session.execute(stmt).scalar_one())
