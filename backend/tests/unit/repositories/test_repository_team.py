"""Unit tests for team, membership and task repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from taskmanager.models.enums import TaskStatus, TeamRole
from taskmanager.models.team import TeamMembership
from taskmanager.repositories import TaskRepository, TeamMembershipRepository, TeamRepository
from tests.factories.task import TaskFactory
from tests.factories.team import MembershipFactory, TeamFactory, team_with_owner
from tests.factories.user import UserFactory


class TestTeamRepository:
    @pytest.fixture()
    def repo(self, session):
        return TeamRepository()

    def test_exists_by_name_with_exclusion(self, repo):
        team = TeamFactory(name="Platform")

        assert repo.exists_by_name(" Platform ")
        assert not repo.exists_by_name("Platform", exclude_id=team.id)
        assert not repo.exists_by_name("Other")

    def test_list_for_user_only_returns_joined_teams(self, repo):
        user = UserFactory()
        joined, _ = team_with_owner(owner=user)
        also = TeamFactory()
        MembershipFactory(team=also, user=user, role=TeamRole.MEMBER)
        TeamFactory()  # not a member

        assert [t.id for t in repo.list_for_user(user.id)] == sorted([joined.id, also.id])


class TestTeamMembershipRepository:
    @pytest.fixture()
    def repo(self, session):
        return TeamMembershipRepository()

    def test_find_and_is_member(self, repo):
        team, owner = team_with_owner()
        stranger = UserFactory()

        found = repo.find(team.id, owner.id)
        assert found is not None and found.role is TeamRole.OWNER
        assert repo.is_member(team.id, owner.id)
        assert repo.find(team.id, stranger.id) is None
        assert not repo.is_member(team.id, stranger.id)

    def test_save_and_delete(self, repo, session):
        team, _ = team_with_owner()
        user = UserFactory()

        repo.save(TeamMembership(team_id=team.id, user_id=user.id, role=TeamRole.ADMIN))
        assert repo.is_member(team.id, user.id)

        repo.delete(repo.find(team.id, user.id))
        assert not repo.is_member(team.id, user.id)

    def test_list_for_team(self, repo):
        team, owner = team_with_owner()
        member = UserFactory()
        MembershipFactory(team=team, user=member)

        rows = repo.list_for_team(team.id)
        assert {m.user_id for m in rows} == {owner.id, member.id}
        assert all(m.user is not None for m in rows)

    def test_role_is_the_only_updatable_field(self, repo):
        team, owner = team_with_owner()
        m = repo.find(team.id, owner.id)
        with pytest.raises(ValueError):
            repo.assign_updates(m, {"user_id": 99})


class TestTaskRepository:
    @pytest.fixture()
    def repo(self, session):
        return TaskRepository()

    def test_list_created_by_filters(self, repo):
        user = UserFactory()
        t1 = TaskFactory(created_by=user.id, title="Write report", status=TaskStatus.TODO)
        t2 = TaskFactory(created_by=user.id, title="Review REPORT", status=TaskStatus.DONE)
        TaskFactory(created_by=user.id, title="Something else")
        TaskFactory(title="Write report")  # someone else

        assert [t.id for t in repo.list_created_by(user.id, title="report")] == [t1.id, t2.id]
        assert [t.id for t in repo.list_created_by(user.id, status=TaskStatus.DONE)] == [t2.id]
        assert len(repo.list_created_by(user.id)) == 3

    def test_list_for_team(self, repo):
        team, owner = team_with_owner()
        team_task = TaskFactory(created_by=owner.id, team_id=team.id)
        TaskFactory(created_by=owner.id)

        assert [t.id for t in repo.list_for_team(team.id)] == [team_task.id]

    def test_list_created_by_sorts_and_pages(self, repo):
        user = UserFactory()
        base = datetime(2030, 1, 1, tzinfo=UTC)
        early = TaskFactory(created_by=user.id, title="b", deadline=base)
        late = TaskFactory(created_by=user.id, title="a", deadline=base + timedelta(days=2))
        middle = TaskFactory(created_by=user.id, title="c", deadline=base + timedelta(days=1))

        by_deadline = repo.list_created_by(user.id, sort=["-deadline"])
        assert [t.id for t in by_deadline] == [late.id, middle.id, early.id]
        assert [t.id for t in repo.list_created_by(user.id, sort=["title"])] == [
            late.id,
            early.id,
            middle.id,
        ]
        page = repo.list_created_by(user.id, sort=["-deadline"], limit=1, offset=1)
        assert [t.id for t in page] == [middle.id]
        # unknown fields fall back to id order
        unknown = repo.list_created_by(user.id, sort=["password"])
        assert [t.id for t in unknown] == [early.id, late.id, middle.id]

    def test_list_for_team_is_newest_first(self, repo):
        team, owner = team_with_owner()
        base = datetime(2030, 1, 1, tzinfo=UTC)
        older = TaskFactory(created_by=owner.id, team_id=team.id, created_at=base)
        newer = TaskFactory(
            created_by=owner.id, team_id=team.id, created_at=base + timedelta(hours=1)
        )

        assert [t.id for t in repo.list_for_team(team.id)] == [newer.id, older.id]
