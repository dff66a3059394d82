"""Factory Boy definitions for teams and memberships."""

from __future__ import annotations

import factory

from taskmanager.models.enums import TeamRole
from taskmanager.models.team import Team, TeamMembership
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class TeamFactory(BaseFactory):
    class Meta:
        model = Team

    id = None
    name = factory.Sequence(lambda n: f"team-{n}")


class MembershipFactory(BaseFactory):
    """Membership row; ``team`` and ``user`` are created when not given."""

    class Meta:
        model = TeamMembership

    team = factory.SubFactory(TeamFactory)
    user = factory.SubFactory(UserFactory)
    role = TeamRole.MEMBER


def team_with_owner(owner=None, **team_kwargs):
    """Create a team whose OWNER is ``owner`` (a fresh user when omitted)."""
    owner = owner or UserFactory()
    team = TeamFactory(**team_kwargs)
    MembershipFactory(team=team, user=owner, role=TeamRole.OWNER)
    return team, owner
