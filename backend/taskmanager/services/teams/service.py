"""
TeamService
===========

Team lifecycle and membership management.

Notes
-----
- Role decisions live in
  :mod:`taskmanager.services._shared.policies.team_roles`; this service only
  loads the memberships the policy needs.
- Membership rows are keyed by (team_id, user_id), so a concurrent duplicate
  add ends as an ``IntegrityError`` which is reported as a conflict.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from taskmanager.models.enums import TeamRole
from taskmanager.models.team import Team, TeamMembership
from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)
from taskmanager.services._shared.policies.access_guard import AccessGuard
from taskmanager.services._shared.policies.team_roles import (
    require_can_manage_members,
    validate_member_removal,
    validate_new_member_role,
    validate_role_change,
)
from taskmanager.services.tasks.dto import TaskOut, to_task_out
from taskmanager.services.teams.dto import (
    MemberAddIn,
    MemberOut,
    MemberRoleUpdateIn,
    TeamCreateIn,
    TeamOut,
    TeamUpdateIn,
    to_member_out,
    to_team_out,
)

logger = logging.getLogger(__name__)

TEAM_OWNER_ONLY_UPDATE = "Only the owner can update the team"
TEAM_OWNER_ONLY_DELETE = "Only the owner can delete the team"


class TeamService(BaseService):
    """Application service for teams and memberships."""

    @staticmethod
    def _guard(uow) -> AccessGuard:
        return AccessGuard(teams=uow.teams, memberships=uow.memberships)

    @staticmethod
    def _clean_name(name: str | None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise BadRequestError("Team name is required")
        return cleaned

    # ------------------------------------------------------------------ #
    # Teams
    # ------------------------------------------------------------------ #

    def create_team(self, ctx: AuthContext, dto: TeamCreateIn) -> TeamOut:
        """
        Create a team; the caller becomes its OWNER.

        :raises BadRequestError: Blank name.
        :raises ConflictError: Name already taken.
        """
        name = self._clean_name(dto.name)
        try:
            with self.rw_uow() as uow:
                if uow.teams.exists_by_name(name):
                    raise ConflictError("Team", "Team name already exists")
                team = Team(name=name)
                uow.teams.add(team)
                uow.memberships.save(
                    TeamMembership(team_id=team.id, user_id=ctx.subject_id, role=TeamRole.OWNER)
                )
                out = to_team_out(team)
        except IntegrityError as exc:
            raise ConflictError("Team", "Team name already exists") from exc

        logger.info("Team created", extra={"team_id": out.id, "actor_id": ctx.subject_id})
        return out

    def list_teams(self, ctx: AuthContext) -> list[TeamOut]:
        """List the teams the caller belongs to."""
        with self.ro_uow() as uow:
            return [to_team_out(t) for t in uow.teams.list_for_user(ctx.subject_id)]

    def get_team(self, ctx: AuthContext, team_id: int) -> TeamOut:
        with self.ro_uow() as uow:
            guard = self._guard(uow)
            team = guard.require_team(team_id)
            guard.require_membership(team_id, ctx.subject_id)
            return to_team_out(team)

    def update_team(self, ctx: AuthContext, dto: TeamUpdateIn) -> TeamOut:
        """
        Rename a team. Owner only.

        :raises NotFoundError: Unknown team.
        :raises AuthorizationError: Caller is not a member or not the owner.
        :raises ConflictError: Name already taken by another team.
        """
        name = self._clean_name(dto.name)
        try:
            with self.rw_uow() as uow:
                guard = self._guard(uow)
                team = guard.require_team(dto.team_id)
                membership = guard.require_membership(dto.team_id, ctx.subject_id)
                if not membership.is_owner():
                    raise AuthorizationError(TEAM_OWNER_ONLY_UPDATE)
                if uow.teams.exists_by_name(name, exclude_id=team.id):
                    raise ConflictError("Team", "Team name already exists")
                uow.teams.assign_updates(team, {"name": name})
                out = to_team_out(team)
        except IntegrityError as exc:
            raise ConflictError("Team", "Team name already exists") from exc
        return out

    def delete_team(self, ctx: AuthContext, team_id: int) -> None:
        """
        Delete a team with its memberships and tasks. Owner only.

        :raises NotFoundError: Unknown team.
        :raises AuthorizationError: Caller is not a member or not the owner.
        """
        with self.rw_uow() as uow:
            guard = self._guard(uow)
            team = guard.require_team(team_id)
            membership = guard.require_membership(team_id, ctx.subject_id)
            if not membership.is_owner():
                raise AuthorizationError(TEAM_OWNER_ONLY_DELETE)
            uow.teams.delete(team)
        logger.info("Team deleted", extra={"team_id": team_id, "actor_id": ctx.subject_id})

    # ------------------------------------------------------------------ #
    # Members
    # ------------------------------------------------------------------ #

    def list_members(self, ctx: AuthContext, team_id: int) -> list[MemberOut]:
        """List the members of a team; caller must be a member."""
        with self.ro_uow() as uow:
            guard = self._guard(uow)
            guard.require_team(team_id)
            guard.require_membership(team_id, ctx.subject_id)
            return [to_member_out(m) for m in uow.memberships.list_for_team(team_id)]

    def add_member(self, ctx: AuthContext, dto: MemberAddIn) -> MemberOut:
        """
        Add a user, found by username or email, to a team.

        :raises ConflictError: Blank identifier, or the user is already a member.
        :raises NotFoundError: Unknown team or user.
        :raises AuthorizationError: Caller is not OWNER/ADMIN, or a non-owner
            tries to add an OWNER.
        """
        identifier = (dto.identifier or "").strip()
        if not identifier:
            raise ConflictError("User", "identifier cannot be empty")

        try:
            with self.rw_uow() as uow:
                guard = self._guard(uow)
                guard.require_team(dto.team_id)
                actor = guard.require_membership(dto.team_id, ctx.subject_id)
                require_can_manage_members(actor)
                validate_new_member_role(actor, dto.role)

                user = uow.users.get_by_identifier(identifier)
                if user is None:
                    raise NotFoundError("User", identifier)
                if uow.memberships.is_member(dto.team_id, user.id):
                    raise ConflictError("TeamMembership", "User is already in the team")

                membership = uow.memberships.save(
                    TeamMembership(team_id=dto.team_id, user_id=user.id, role=dto.role)
                )
                membership.user = user
                out = to_member_out(membership)
        except IntegrityError as exc:
            raise ConflictError("TeamMembership", "User is already in the team") from exc

        logger.info(
            "Member added",
            extra={
                "team_id": dto.team_id,
                "actor_id": ctx.subject_id,
                "target_id": out.user.id,
                "role": out.role.value,
            },
        )
        return out

    def update_member_role(self, ctx: AuthContext, dto: MemberRoleUpdateIn) -> MemberOut:
        """
        Change the role of a member.

        :raises ConflictError: ``role`` is missing.
        :raises NotFoundError: Unknown team or target membership.
        :raises AuthorizationError: Denied by the role policy.
        """
        if dto.role is None:
            raise ConflictError("TeamMembership", "New role cannot be null")

        with self.rw_uow() as uow:
            guard = self._guard(uow)
            guard.require_team(dto.team_id)
            actor = guard.require_membership(dto.team_id, ctx.subject_id)
            require_can_manage_members(actor)

            target = uow.memberships.find(dto.team_id, dto.user_id)
            if target is None:
                raise NotFoundError("TeamMembership", dto.user_id)

            validate_role_change(ctx.subject_id, actor, dto.user_id, target, dto.role)
            uow.memberships.assign_updates(target, {"role": dto.role})
            out = to_member_out(target)

        logger.info(
            "Member role changed",
            extra={
                "team_id": dto.team_id,
                "actor_id": ctx.subject_id,
                "target_id": dto.user_id,
                "role": dto.role.value,
            },
        )
        return out

    def remove_member(self, ctx: AuthContext, team_id: int, user_id: int) -> None:
        """
        Remove a member from a team.

        :raises NotFoundError: Unknown team or target membership.
        :raises AuthorizationError: Caller is not OWNER/ADMIN, or the target is the owner.
        """
        with self.rw_uow() as uow:
            guard = self._guard(uow)
            guard.require_team(team_id)
            actor = guard.require_membership(team_id, ctx.subject_id)
            require_can_manage_members(actor)

            target = uow.memberships.find(team_id, user_id)
            if target is None:
                raise NotFoundError("TeamMembership", user_id)
            validate_member_removal(target)
            uow.memberships.delete(target)

        logger.info(
            "Member removed",
            extra={"team_id": team_id, "actor_id": ctx.subject_id, "target_id": user_id},
        )

    def list_team_tasks(self, ctx: AuthContext, team_id: int) -> list[TaskOut]:
        """List the tasks of a team; caller must be a member."""
        with self.ro_uow() as uow:
            guard = self._guard(uow)
            guard.require_team(team_id)
            guard.require_membership(team_id, ctx.subject_id)
            return [to_task_out(t) for t in uow.tasks.list_for_team(team_id)]
