"""Pure tests for the team role policy (no database)."""

from __future__ import annotations

import pytest

from taskmanager.models.enums import TeamRole
from taskmanager.models.team import TeamMembership
from taskmanager.services._shared.errors import AuthorizationError
from taskmanager.services._shared.policies.team_roles import (
    OWNER_ASSIGNMENT_RESERVED,
    OWNER_REMOVAL,
    OWNER_ROLE_RESERVED,
    OWNER_SELF_DEMOTION,
    can_manage_members,
    require_can_manage_members,
    require_owner,
    validate_member_removal,
    validate_new_member_role,
    validate_role_change,
)
from tests.helpers.utils import not_raises

TEAM_ID = 1


def _m(user_id: int, role: TeamRole) -> TeamMembership:
    return TeamMembership(team_id=TEAM_ID, user_id=user_id, role=role)


OWNER = _m(1, TeamRole.OWNER)
ADMIN = _m(2, TeamRole.ADMIN)
OTHER_ADMIN = _m(4, TeamRole.ADMIN)
MEMBER = _m(3, TeamRole.MEMBER)


@pytest.mark.parametrize(
    ("role", "expected"),
    [(TeamRole.OWNER, True), (TeamRole.ADMIN, True), (TeamRole.MEMBER, False)],
)
def test_can_manage_members(role, expected):
    assert can_manage_members(role) is expected


def test_require_can_manage_members_rejects_plain_member():
    with not_raises(AuthorizationError):
        require_can_manage_members(OWNER)
        require_can_manage_members(ADMIN)
    with pytest.raises(AuthorizationError):
        require_can_manage_members(MEMBER)


def test_require_owner():
    with not_raises(AuthorizationError):
        require_owner(OWNER)
    with pytest.raises(AuthorizationError):
        require_owner(ADMIN)


class TestValidateRoleChange:
    def test_admin_cannot_grant_owner(self):
        with pytest.raises(AuthorizationError, match=OWNER_ROLE_RESERVED):
            validate_role_change(2, ADMIN, 3, MEMBER, TeamRole.OWNER)

    def test_admin_cannot_touch_the_owner(self):
        with pytest.raises(AuthorizationError, match=OWNER_ROLE_RESERVED):
            validate_role_change(2, ADMIN, 1, OWNER, TeamRole.MEMBER)

    def test_owner_cannot_demote_themselves(self):
        with pytest.raises(AuthorizationError, match=OWNER_SELF_DEMOTION):
            validate_role_change(1, OWNER, 1, OWNER, TeamRole.ADMIN)

    def test_owner_reasserting_own_role_is_allowed(self):
        with not_raises(AuthorizationError):
            validate_role_change(1, OWNER, 1, OWNER, TeamRole.OWNER)

    @pytest.mark.parametrize(
        ("actor_id", "actor", "target_id", "target", "new_role"),
        [
            (2, ADMIN, 3, MEMBER, TeamRole.ADMIN),
            (1, OWNER, 3, MEMBER, TeamRole.ADMIN),
            (1, OWNER, 2, ADMIN, TeamRole.MEMBER),
            (2, ADMIN, 4, OTHER_ADMIN, TeamRole.MEMBER),
            (1, OWNER, 2, ADMIN, TeamRole.OWNER),
        ],
    )
    def test_permitted_changes(self, actor_id, actor, target_id, target, new_role):
        with not_raises(AuthorizationError):
            validate_role_change(actor_id, actor, target_id, target, new_role)


def test_only_owner_adds_owner():
    with pytest.raises(AuthorizationError, match=OWNER_ASSIGNMENT_RESERVED):
        validate_new_member_role(ADMIN, TeamRole.OWNER)
    with not_raises(AuthorizationError):
        validate_new_member_role(ADMIN, TeamRole.ADMIN)
        validate_new_member_role(OWNER, TeamRole.OWNER)


def test_owner_cannot_be_removed():
    with pytest.raises(AuthorizationError, match=OWNER_REMOVAL):
        validate_member_removal(OWNER)
    with not_raises(AuthorizationError):
        validate_member_removal(ADMIN)
