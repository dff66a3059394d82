"""
DTOs for TeamService.

These dataclasses are framework-agnostic; the API layer maps them to and
from marshmallow schemas.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from taskmanager.models.enums import TeamRole
from taskmanager.services.identity.dto import UserPublicOut, to_user_public

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TeamCreateIn:
    """
    Input DTO for creating a team.

    :param name: Unique, non-blank team name.
    :type name: str
    """

    name: str


@dataclass(frozen=True, slots=True)
class TeamUpdateIn:
    """
    Input DTO for renaming a team.

    :param team_id: Team identifier.
    :type team_id: int
    :param name: New unique name.
    :type name: str
    """

    team_id: int
    name: str


@dataclass(frozen=True, slots=True)
class MemberAddIn:
    """
    Input DTO for adding a member.

    :param team_id: Team identifier.
    :type team_id: int
    :param identifier: Username or email of the user to add.
    :type identifier: str
    :param role: Role granted on join.
    :type role: TeamRole
    """

    team_id: int
    identifier: str
    role: TeamRole = TeamRole.MEMBER


@dataclass(frozen=True, slots=True)
class MemberRoleUpdateIn:
    """
    Input DTO for changing a member's role.

    ``role`` may be ``None`` when the client omitted it; the service rejects
    that case.
    """

    team_id: int
    user_id: int
    role: TeamRole | None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TeamOut:
    id: int
    name: str
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class MemberOut:
    """Member of a team with its role."""

    team_id: int
    user: UserPublicOut
    role: TeamRole
    joined_at: datetime | None = None


def to_team_out(team) -> TeamOut:
    return TeamOut(id=team.id, name=team.name, created_at=team.created_at)


def to_member_out(membership) -> MemberOut:
    return MemberOut(
        team_id=membership.team_id,
        user=to_user_public(membership.user),
        role=membership.role,
        joined_at=membership.created_at,
    )
