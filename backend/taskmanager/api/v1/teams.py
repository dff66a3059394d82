"""Team and membership endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, url_for

from taskmanager.api.deps import (
    json_body,
    json_response,
    no_content,
    require_auth,
    team_service,
    timing,
)
from taskmanager.schemas import (
    MemberAddSchema,
    MemberRoleSchema,
    MemberSchema,
    TaskSchema,
    TeamCreateSchema,
    TeamSchema,
)
from taskmanager.services._shared.context import AuthContext
from taskmanager.services.teams.dto import (
    MemberAddIn,
    MemberRoleUpdateIn,
    TeamCreateIn,
    TeamUpdateIn,
)

bp = Blueprint("teams", __name__)

team_schema = TeamSchema()
teams_schema = TeamSchema(many=True)
team_create_schema = TeamCreateSchema()
member_schema = MemberSchema()
members_schema = MemberSchema(many=True)
member_add_schema = MemberAddSchema()
member_role_schema = MemberRoleSchema()
tasks_schema = TaskSchema(many=True)


@bp.get("")
@require_auth
@timing
def list_teams(ctx: AuthContext):
    """List the teams the caller belongs to."""

    return json_response({"items": teams_schema.dump(team_service().list_teams(ctx))})


@bp.post("")
@require_auth
@timing
def create_team(ctx: AuthContext):
    """Create a team owned by the caller."""

    data = team_create_schema.load(json_body())
    team = team_service().create_team(ctx, TeamCreateIn(name=data["name"]))
    response = json_response(team_schema.dump(team), status=HTTPStatus.CREATED)
    response.headers["Location"] = url_for("teams.get_team", team_id=team.id)
    return response


@bp.get("/<int:team_id>")
@require_auth
@timing
def get_team(team_id: int, ctx: AuthContext):
    return json_response(team_schema.dump(team_service().get_team(ctx, team_id)))


@bp.put("/<int:team_id>")
@require_auth
@timing
def update_team(team_id: int, ctx: AuthContext):
    """Rename a team (owner only)."""

    data = team_create_schema.load(json_body())
    team = team_service().update_team(ctx, TeamUpdateIn(team_id=team_id, name=data["name"]))
    return json_response(team_schema.dump(team))


@bp.delete("/<int:team_id>")
@require_auth
@timing
def delete_team(team_id: int, ctx: AuthContext):
    team_service().delete_team(ctx, team_id)
    return no_content()


@bp.get("/<int:team_id>/members")
@require_auth
@timing
def list_members(team_id: int, ctx: AuthContext):
    members = team_service().list_members(ctx, team_id)
    return json_response({"items": members_schema.dump(members)})


@bp.post("/<int:team_id>/members")
@require_auth
@timing
def add_member(team_id: int, ctx: AuthContext):
    """Add a user, by username or email, to the team."""

    data = member_add_schema.load(json_body())
    member = team_service().add_member(
        ctx, MemberAddIn(team_id=team_id, identifier=data["identifier"], role=data["role"])
    )
    return json_response(member_schema.dump(member), status=HTTPStatus.CREATED)


@bp.put("/<int:team_id>/users/<int:user_id>/role")
@require_auth
@timing
def update_member_role(team_id: int, user_id: int, ctx: AuthContext):
    """Change a member's role, subject to the ownership rules."""

    data = member_role_schema.load(json_body())
    member = team_service().update_member_role(
        ctx, MemberRoleUpdateIn(team_id=team_id, user_id=user_id, role=data["role"])
    )
    return json_response(member_schema.dump(member))


@bp.delete("/<int:team_id>/users/<int:user_id>")
@require_auth
@timing
def remove_member(team_id: int, user_id: int, ctx: AuthContext):
    team_service().remove_member(ctx, team_id, user_id)
    return no_content()


@bp.get("/<int:team_id>/tasks")
@require_auth
@timing
def list_team_tasks(team_id: int, ctx: AuthContext):
    tasks = team_service().list_team_tasks(ctx, team_id)
    return json_response({"items": tasks_schema.dump(tasks)})
