"""Tests for Team, TeamMembership and Task models."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from taskmanager.models import Task, Team, TeamMembership, TeamRole
from taskmanager.models.enums import TaskStatus
from tests.factories.task import TaskFactory
from tests.factories.team import MembershipFactory, TeamFactory, team_with_owner
from tests.factories.user import UserFactory


class TestTeamRole:
    @pytest.mark.parametrize(
        ("role", "manages", "owner"),
        [
            (TeamRole.OWNER, True, True),
            (TeamRole.ADMIN, True, False),
            (TeamRole.MEMBER, False, False),
        ],
    )
    def test_capabilities(self, role, manages, owner):
        assert role.can_manage_members() is manages
        assert role.is_owner() is owner

    def test_roles_round_trip_from_strings(self):
        assert TeamRole("ADMIN") is TeamRole.ADMIN


class TestTeamMembership:
    def test_composite_key_rejects_second_membership(self, session):
        team, owner = team_with_owner()
        team_id, owner_id = team.id, owner.id
        session.expunge_all()
        session.add(TeamMembership(team_id=team_id, user_id=owner_id, role=TeamRole.MEMBER))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_team_name_unique(self, session):
        TeamFactory(name="alpha")
        session.add(Team(name="alpha"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_role_persists_as_enum(self, session):
        m = MembershipFactory(role=TeamRole.ADMIN)
        session.expire_all()
        fetched = session.get(TeamMembership, (m.team_id, m.user_id))
        assert fetched.role is TeamRole.ADMIN
        assert fetched.can_manage_members() is True
        assert fetched.is_owner() is False

    def test_deleting_team_removes_memberships_and_tasks(self, session):
        team, owner = team_with_owner()
        TaskFactory(created_by=owner.id, team_id=team.id)
        team_id = team.id

        session.delete(session.get(Team, team_id))
        session.commit()

        assert session.query(TeamMembership).filter_by(team_id=team_id).count() == 0
        assert session.query(Task).filter_by(team_id=team_id).count() == 0


class TestTask:
    def test_defaults_and_trim(self, session):
        user = UserFactory()
        task = Task(title="  Write docs  ", created_by=user.id)
        session.add(task)
        session.commit()
        assert task.title == "Write docs"
        assert task.status is TaskStatus.TODO
        assert task.team_id is None

    def test_blank_title_rejected(self):
        with pytest.raises(ValueError):
            Task(title="   ", created_by=1)
