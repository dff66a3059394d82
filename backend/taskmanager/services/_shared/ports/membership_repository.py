from __future__ import annotations

import threading
from typing import Protocol

from taskmanager.models.team import Team, TeamMembership


class TeamLookup(Protocol):
    """Read port for teams."""

    def get(self, team_id: int) -> Team | None: ...


class MembershipRepository(Protocol):
    """
    Port for membership records keyed by (team_id, user_id).

    The SQL adapter is :class:`taskmanager.repositories.membership.TeamMembershipRepository`.
    """

    def find(self, team_id: int, user_id: int) -> TeamMembership | None: ...
    def is_member(self, team_id: int, user_id: int) -> bool: ...
    def save(self, membership: TeamMembership) -> TeamMembership: ...
    def delete(self, membership: TeamMembership) -> None: ...


class InMemoryTeamLookup(TeamLookup):
    """Dictionary-backed team lookup for unit tests."""

    def __init__(self, teams: list[Team] | None = None) -> None:
        self._teams = {t.id: t for t in teams or []}

    def add(self, team: Team) -> Team:
        self._teams[team.id] = team
        return team

    def get(self, team_id: int) -> Team | None:
        return self._teams.get(team_id)


class InMemoryMembershipRepository(MembershipRepository):
    """Dictionary-backed membership store for unit tests (unique per pair)."""

    def __init__(self) -> None:
        self._rows: dict[tuple[int, int], TeamMembership] = {}
        self._lock = threading.Lock()

    def find(self, team_id: int, user_id: int) -> TeamMembership | None:
        return self._rows.get((team_id, user_id))

    def is_member(self, team_id: int, user_id: int) -> bool:
        return (team_id, user_id) in self._rows

    def save(self, membership: TeamMembership) -> TeamMembership:
        with self._lock:
            self._rows[(membership.team_id, membership.user_id)] = membership
        return membership

    def delete(self, membership: TeamMembership) -> None:
        with self._lock:
            self._rows.pop((membership.team_id, membership.user_id), None)
