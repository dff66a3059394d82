"""
Team role policy.

Pure decision functions over :class:`~taskmanager.models.enums.TeamRole`; no
I/O. Each ``require_*``/``validate_*`` function returns ``None`` when the
action is allowed and raises :class:`AuthorizationError` otherwise.

Invariant protected here: every team has exactly one OWNER. Ownership can
neither be granted nor touched by a non-owner, and the owner cannot demote
themselves.
"""

from __future__ import annotations

from taskmanager.models.enums import TeamRole
from taskmanager.models.team import TeamMembership
from taskmanager.services._shared.errors import AuthorizationError

OWNER_ROLE_RESERVED = "Only the owner can modify ownership role"
OWNER_SELF_DEMOTION = "Owner cannot demote themselves"
OWNER_ASSIGNMENT_RESERVED = "Only the owner can assign a new owner"
OWNER_REMOVAL = "You cannot remove the team owner"
MANAGE_MEMBERS_REQUIRED = "Only team owners or admins can manage members"
OWNER_REQUIRED = "Only the team owner can perform this action"


def can_manage_members(role: TeamRole) -> bool:
    return role.can_manage_members()


def require_can_manage_members(membership: TeamMembership) -> None:
    """:raises AuthorizationError: If the membership is a plain MEMBER."""
    if not can_manage_members(membership.role):
        raise AuthorizationError(MANAGE_MEMBERS_REQUIRED)


def require_owner(membership: TeamMembership) -> None:
    """:raises AuthorizationError: If the membership is not the owner's."""
    if not membership.role.is_owner():
        raise AuthorizationError(OWNER_REQUIRED)


def validate_role_change(
    actor_id: int,
    actor_membership: TeamMembership,
    target_id: int,
    target_membership: TeamMembership,
    new_role: TeamRole,
) -> None:
    """
    Decide whether ``actor`` may set ``target``'s role to ``new_role``.

    Rules, checked in order:

    1. A non-owner may not grant OWNER.
    2. A non-owner may not modify the owner's membership.
    3. The owner may not demote themselves.

    Any other combination is permitted (including ADMIN/OWNER turning a
    MEMBER into an ADMIN).

    :param actor_id: User performing the change.
    :param actor_membership: Actor's membership in the team.
    :param target_id: User whose role changes.
    :param target_membership: Target's membership in the team.
    :param new_role: Requested role.
    :raises AuthorizationError: When one of the rules denies the change.
    """
    actor_is_owner = actor_membership.role.is_owner()

    if not actor_is_owner and new_role.is_owner():
        raise AuthorizationError(OWNER_ROLE_RESERVED)

    if target_membership.role.is_owner() and not actor_is_owner:
        raise AuthorizationError(OWNER_ROLE_RESERVED)

    if actor_is_owner and actor_id == target_id and not new_role.is_owner():
        raise AuthorizationError(OWNER_SELF_DEMOTION)


def validate_new_member_role(actor_membership: TeamMembership, role: TeamRole) -> None:
    """:raises AuthorizationError: If a non-owner tries to add someone as OWNER."""
    if role.is_owner() and not actor_membership.role.is_owner():
        raise AuthorizationError(OWNER_ASSIGNMENT_RESERVED)


def validate_member_removal(target_membership: TeamMembership) -> None:
    """:raises AuthorizationError: If the target is the team owner."""
    if target_membership.role.is_owner():
        raise AuthorizationError(OWNER_REMOVAL)
