"""
AccessGuard: membership-aware authorization for team and task operations.

Not-found and denial are distinct outcomes: a missing team raises
:class:`NotFoundError` (404), a missing membership raises
:class:`AuthorizationError` (403).
"""

from __future__ import annotations

import logging

from taskmanager.models.task import Task
from taskmanager.models.team import Team, TeamMembership
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import AuthorizationError, NotFoundError
from taskmanager.services._shared.ports.membership_repository import (
    MembershipRepository,
    TeamLookup,
)

logger = logging.getLogger(__name__)

NOT_A_MEMBER = "You are not a member of this team"
TASK_NOT_VISIBLE = "You do not have access to this task"
TASK_NOT_MUTABLE = "Only the task creator or a team owner/admin can modify this task"


class AccessGuard:
    """
    Compose membership lookups with the role policy.

    Task rules
    ----------
    - Personal task (no team): visible and mutable by its creator only.
    - Team task: visible to every member; a MEMBER may mutate only tasks
      they created, ADMIN/OWNER may mutate any task of the team.

    :param teams: Team lookup port.
    :param memberships: Membership lookup port.
    """

    def __init__(self, *, teams: TeamLookup, memberships: MembershipRepository) -> None:
        self.teams = teams
        self.memberships = memberships

    def require_team(self, team_id: int) -> Team:
        """:raises NotFoundError: If the team does not exist."""
        team = self.teams.get(team_id)
        if team is None:
            raise NotFoundError("Team", team_id)
        return team

    def require_membership(self, team_id: int, user_id: int) -> TeamMembership:
        """:raises AuthorizationError: If ``user_id`` is not in the team."""
        membership = self.memberships.find(team_id, user_id)
        if membership is None:
            logger.info(
                "Membership required",
                extra={"team_id": team_id, "actor_id": user_id, "reason": "not_member"},
            )
            raise AuthorizationError(NOT_A_MEMBER)
        return membership

    def is_member(self, team_id: int, user_id: int) -> bool:
        """Non-throwing membership check."""
        return self.memberships.is_member(team_id, user_id)

    # ---------------------------- Tasks ----------------------------

    def require_task_visible(self, task: Task, ctx: AuthContext) -> None:
        """:raises AuthorizationError: If ``ctx`` may not see ``task``."""
        if task.team_id is None:
            if task.created_by != ctx.subject_id:
                raise AuthorizationError(TASK_NOT_VISIBLE)
            return
        self.require_membership(task.team_id, ctx.subject_id)

    def require_task_mutable(self, task: Task, ctx: AuthContext) -> None:
        """:raises AuthorizationError: If ``ctx`` may not modify or delete ``task``."""
        if task.team_id is None:
            if task.created_by != ctx.subject_id:
                raise AuthorizationError(TASK_NOT_MUTABLE)
            return

        membership = self.require_membership(task.team_id, ctx.subject_id)
        if membership.role.can_manage_members():
            return
        if task.created_by != ctx.subject_id:
            logger.info(
                "Task mutation denied",
                extra={
                    "task_id": task.id,
                    "team_id": task.team_id,
                    "actor_id": ctx.subject_id,
                    "role": membership.role.value,
                },
            )
            raise AuthorizationError(TASK_NOT_MUTABLE)
