"""Team repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from taskmanager.models.team import Team, TeamMembership
from taskmanager.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Persistence-only repository for :class:`Team`."""

    model = Team

    def _sortable_fields(self):
        return {"id": Team.id, "name": Team.name, "created_at": Team.created_at}

    def _updatable_fields(self):
        return {"name"}

    def exists_by_name(self, name: str, *, exclude_id: int | None = None) -> bool:
        """Return ``True`` when another team already uses ``name``."""
        stmt = select(Team.id).where(Team.name == name.strip())
        if exclude_id is not None:
            stmt = stmt.where(Team.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    def list_for_user(self, user_id: int) -> list[Team]:
        """Return the teams the user belongs to, ordered by id.

        :param user_id: Member user id.
        :type user_id: int
        :returns: Teams with a membership row for ``user_id``.
        :rtype: list[Team]
        """
        stmt = (
            select(Team)
            .join(TeamMembership, TeamMembership.team_id == Team.id)
            .where(TeamMembership.user_id == user_id)
            .order_by(Team.id.asc())
        )
        return cast(list[Team], list(self.session.execute(stmt).scalars().all()))
