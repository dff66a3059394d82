"""TeamService tests: team CRUD, membership management and role rules."""

from __future__ import annotations

import pytest

from taskmanager.models.enums import TeamRole
from taskmanager.models.team import Team, TeamMembership
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)
from taskmanager.services._shared.policies.access_guard import NOT_A_MEMBER
from taskmanager.services._shared.policies.team_roles import (
    MANAGE_MEMBERS_REQUIRED,
    OWNER_ASSIGNMENT_RESERVED,
    OWNER_REMOVAL,
    OWNER_ROLE_RESERVED,
    OWNER_SELF_DEMOTION,
)
from taskmanager.services.teams.dto import (
    MemberAddIn,
    MemberRoleUpdateIn,
    TeamCreateIn,
    TeamUpdateIn,
)
from taskmanager.services.teams.service import TeamService
from tests.factories.task import TaskFactory
from tests.factories.team import MembershipFactory, TeamFactory, team_with_owner
from tests.factories.user import UserFactory


@pytest.fixture()
def svc() -> TeamService:
    return TeamService()


def ctx(user) -> AuthContext:
    return AuthContext(subject_id=user.id)


@pytest.fixture()
def crew():
    """A team with an owner, an admin, a member and an outsider."""
    team, owner = team_with_owner(name="core")
    admin = UserFactory(username="adam")
    member = UserFactory(username="mia")
    MembershipFactory(team=team, user=admin, role=TeamRole.ADMIN)
    MembershipFactory(team=team, user=member, role=TeamRole.MEMBER)
    outsider = UserFactory(username="olga", email="olga@example.com")
    return {"team": team, "owner": owner, "admin": admin, "member": member, "outsider": outsider}


class TestTeams:
    def test_creator_becomes_owner(self, svc, session):
        user = UserFactory()
        out = svc.create_team(ctx(user), TeamCreateIn(name="  Platform  "))

        assert out.name == "Platform"
        membership = session.get(TeamMembership, (out.id, user.id))
        assert membership.role is TeamRole.OWNER

    def test_blank_name_is_rejected(self, svc):
        with pytest.raises(BadRequestError):
            svc.create_team(ctx(UserFactory()), TeamCreateIn(name="   "))

    def test_duplicate_name_conflicts(self, svc):
        TeamFactory(name="Platform")
        with pytest.raises(ConflictError, match="Team name already exists"):
            svc.create_team(ctx(UserFactory()), TeamCreateIn(name="Platform"))

    def test_list_only_returns_my_teams(self, svc, crew):
        TeamFactory(name="elsewhere")
        assert [t.name for t in svc.list_teams(ctx(crew["member"]))] == ["core"]
        assert svc.list_teams(ctx(crew["outsider"])) == []

    def test_get_requires_membership(self, svc, crew):
        team_id = crew["team"].id
        assert svc.get_team(ctx(crew["member"]), team_id).name == "core"
        with pytest.raises(AuthorizationError, match=NOT_A_MEMBER):
            svc.get_team(ctx(crew["outsider"]), team_id)
        with pytest.raises(NotFoundError):
            svc.get_team(ctx(crew["member"]), 999_999)

    def test_only_owner_renames(self, svc, crew):
        team_id = crew["team"].id
        with pytest.raises(AuthorizationError):
            svc.update_team(ctx(crew["admin"]), TeamUpdateIn(team_id=team_id, name="x"))
        out = svc.update_team(ctx(crew["owner"]), TeamUpdateIn(team_id=team_id, name="renamed"))
        assert out.name == "renamed"

    def test_rename_keeping_own_name_is_allowed(self, svc, crew):
        team_id = crew["team"].id
        out = svc.update_team(ctx(crew["owner"]), TeamUpdateIn(team_id=team_id, name="core"))
        assert out.name == "core"

    def test_rename_to_taken_name_conflicts(self, svc, crew):
        TeamFactory(name="taken")
        with pytest.raises(ConflictError):
            svc.update_team(
                ctx(crew["owner"]), TeamUpdateIn(team_id=crew["team"].id, name="taken")
            )

    def test_delete_is_owner_only_and_cascades(self, svc, session, crew):
        team_id = crew["team"].id
        TaskFactory(created_by=crew["member"].id, team_id=team_id)

        with pytest.raises(AuthorizationError):
            svc.delete_team(ctx(crew["admin"]), team_id)

        svc.delete_team(ctx(crew["owner"]), team_id)
        session.expire_all()
        assert session.get(Team, team_id) is None
        assert session.query(TeamMembership).filter_by(team_id=team_id).count() == 0


class TestMembers:
    def test_list_members(self, svc, crew):
        members = svc.list_members(ctx(crew["member"]), crew["team"].id)
        roles = {m.user.username: m.role for m in members}
        assert roles["adam"] is TeamRole.ADMIN
        assert roles["mia"] is TeamRole.MEMBER
        assert len(roles) == 3

    @pytest.mark.parametrize("actor", ["owner", "admin"])
    def test_owner_or_admin_adds_by_username_or_email(self, svc, crew, actor):
        out = svc.add_member(
            ctx(crew[actor]),
            MemberAddIn(team_id=crew["team"].id, identifier="olga@example.com"),
        )
        assert out.user.id == crew["outsider"].id
        assert out.role is TeamRole.MEMBER

    def test_add_by_username_with_role(self, svc, crew):
        out = svc.add_member(
            ctx(crew["owner"]),
            MemberAddIn(team_id=crew["team"].id, identifier="olga", role=TeamRole.ADMIN),
        )
        assert out.role is TeamRole.ADMIN

    def test_plain_member_cannot_add(self, svc, crew):
        with pytest.raises(AuthorizationError, match=MANAGE_MEMBERS_REQUIRED):
            svc.add_member(
                ctx(crew["member"]), MemberAddIn(team_id=crew["team"].id, identifier="olga")
            )

    def test_admin_cannot_add_an_owner(self, svc, crew):
        with pytest.raises(AuthorizationError, match=OWNER_ASSIGNMENT_RESERVED):
            svc.add_member(
                ctx(crew["admin"]),
                MemberAddIn(team_id=crew["team"].id, identifier="olga", role=TeamRole.OWNER),
            )

    def test_blank_identifier_conflicts(self, svc, crew):
        with pytest.raises(ConflictError, match="identifier cannot be empty"):
            svc.add_member(ctx(crew["owner"]), MemberAddIn(team_id=crew["team"].id, identifier=" "))

    def test_unknown_user(self, svc, crew):
        with pytest.raises(NotFoundError):
            svc.add_member(
                ctx(crew["owner"]), MemberAddIn(team_id=crew["team"].id, identifier="ghost")
            )

    def test_existing_member_conflicts(self, svc, crew):
        with pytest.raises(ConflictError, match="already in the team"):
            svc.add_member(
                ctx(crew["owner"]), MemberAddIn(team_id=crew["team"].id, identifier="mia")
            )

    def test_outsider_cannot_add(self, svc, crew):
        with pytest.raises(AuthorizationError, match=NOT_A_MEMBER):
            svc.add_member(
                ctx(crew["outsider"]), MemberAddIn(team_id=crew["team"].id, identifier="olga")
            )


class TestRoleChanges:
    def _change(self, svc, crew, actor, target, role):
        return svc.update_member_role(
            ctx(crew[actor]),
            MemberRoleUpdateIn(team_id=crew["team"].id, user_id=crew[target].id, role=role),
        )

    def test_owner_promotes_member(self, svc, crew):
        out = self._change(svc, crew, "owner", "member", TeamRole.ADMIN)
        assert out.role is TeamRole.ADMIN

    def test_admin_changes_member(self, svc, crew):
        out = self._change(svc, crew, "admin", "member", TeamRole.ADMIN)
        assert out.role is TeamRole.ADMIN

    def test_admin_cannot_grant_owner(self, svc, crew):
        with pytest.raises(AuthorizationError, match=OWNER_ROLE_RESERVED):
            self._change(svc, crew, "admin", "member", TeamRole.OWNER)

    def test_admin_cannot_touch_owner(self, svc, crew):
        with pytest.raises(AuthorizationError, match=OWNER_ROLE_RESERVED):
            self._change(svc, crew, "admin", "owner", TeamRole.MEMBER)

    def test_owner_cannot_demote_self(self, svc, crew):
        with pytest.raises(AuthorizationError, match=OWNER_SELF_DEMOTION):
            self._change(svc, crew, "owner", "owner", TeamRole.ADMIN)

    def test_member_cannot_change_roles(self, svc, crew):
        with pytest.raises(AuthorizationError, match=MANAGE_MEMBERS_REQUIRED):
            self._change(svc, crew, "member", "admin", TeamRole.MEMBER)

    def test_missing_role_conflicts(self, svc, crew):
        with pytest.raises(ConflictError, match="New role cannot be null"):
            self._change(svc, crew, "owner", "member", None)

    def test_target_must_be_a_member(self, svc, crew):
        with pytest.raises(NotFoundError):
            self._change(svc, crew, "owner", "outsider", TeamRole.ADMIN)


class TestRemoval:
    def test_admin_removes_member(self, svc, session, crew):
        team_id = crew["team"].id
        svc.remove_member(ctx(crew["admin"]), team_id, crew["member"].id)
        session.expire_all()
        assert session.get(TeamMembership, (team_id, crew["member"].id)) is None

    def test_owner_cannot_be_removed(self, svc, crew):
        with pytest.raises(AuthorizationError, match=OWNER_REMOVAL):
            svc.remove_member(ctx(crew["admin"]), crew["team"].id, crew["owner"].id)

    def test_member_cannot_remove(self, svc, crew):
        with pytest.raises(AuthorizationError):
            svc.remove_member(ctx(crew["member"]), crew["team"].id, crew["admin"].id)

    def test_unknown_target(self, svc, crew):
        with pytest.raises(NotFoundError):
            svc.remove_member(ctx(crew["owner"]), crew["team"].id, crew["outsider"].id)


def test_team_tasks_are_visible_to_members_only(svc, crew):
    team_id = crew["team"].id
    TaskFactory(title="shared", created_by=crew["admin"].id, team_id=team_id)
    TaskFactory(title="private", created_by=crew["admin"].id)

    titles = [t.title for t in svc.list_team_tasks(ctx(crew["member"]), team_id)]
    assert titles == ["shared"]
    with pytest.raises(AuthorizationError):
        svc.list_team_tasks(ctx(crew["outsider"]), team_id)
