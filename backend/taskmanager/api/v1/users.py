"""User account and lookup endpoints."""

from __future__ import annotations

from flask import Blueprint

from taskmanager.api.deps import (
    json_body,
    json_response,
    no_content,
    require_auth,
    timing,
    user_service,
)
from taskmanager.schemas import PasswordChangeSchema, ProfileUpdateSchema, TeamSchema, UserSchema
from taskmanager.services._shared.context import AuthContext
from taskmanager.services.users.dto import PasswordChangeIn, ProfileUpdateIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
teams_schema = TeamSchema(many=True)
profile_update_schema = ProfileUpdateSchema()
password_change_schema = PasswordChangeSchema()


@bp.get("/profile")
@require_auth
@timing
def get_profile(ctx: AuthContext):
    return json_response(user_schema.dump(user_service().get_profile(ctx)))


@bp.put("/profile")
@require_auth
@timing
def update_profile(ctx: AuthContext):
    """Change the caller's username, email or display name."""

    data = profile_update_schema.load(json_body())
    user = user_service().update_profile(ctx, ProfileUpdateIn(**data))
    return json_response(user_schema.dump(user))


@bp.put("/profile/password")
@require_auth
@timing
def change_password(ctx: AuthContext):
    """Change the caller's password; every refresh session is ended."""

    data = password_change_schema.load(json_body())
    user_service().change_password(
        ctx,
        PasswordChangeIn(
            current_password=data["current_password"], new_password=data["new_password"]
        ),
    )
    return no_content()


@bp.delete("/profile")
@require_auth
@timing
def delete_account(ctx: AuthContext):
    user_service().delete_account(ctx)
    return no_content()


@bp.get("/profile/teams")
@require_auth
@timing
def list_my_teams(ctx: AuthContext):
    teams = user_service().list_user_teams(ctx, ctx.subject_id)
    return json_response({"items": teams_schema.dump(teams)})


@bp.get("/<int:user_id>")
@require_auth
@timing
def get_user(user_id: int, ctx: AuthContext):
    return json_response(user_schema.dump(user_service().get_user(ctx, user_id)))


@bp.get("/<int:user_id>/teams")
@require_auth
@timing
def list_user_teams(user_id: int, ctx: AuthContext):
    """List the user's teams that the caller also belongs to."""

    teams = user_service().list_user_teams(ctx, user_id)
    return json_response({"items": teams_schema.dump(teams)})


@bp.get("/username/<string:username>")
@require_auth
@timing
def get_by_username(username: str, ctx: AuthContext):
    return json_response(user_schema.dump(user_service().get_by_username(ctx, username)))


@bp.get("/email/<string:email>")
@require_auth
@timing
def get_by_email(email: str, ctx: AuthContext):
    return json_response(user_schema.dump(user_service().get_by_email(ctx, email)))
