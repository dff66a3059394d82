"""Authentication endpoints: registration, verification and token sessions."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, request

from taskmanager.api.deps import (
    json_body,
    json_response,
    no_content,
    registration_service,
    require_auth,
    session_service,
    timing,
)
from taskmanager.schemas import (
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    ResendVerificationSchema,
    TokenPairSchema,
    UserSchema,
)
from taskmanager.services._shared.context import AuthContext
from taskmanager.services.auth.dto import LoginIn, RefreshIn
from taskmanager.services.registration.dto import RegistrationIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
resend_schema = ResendVerificationSchema()
token_pair_schema = TokenPairSchema()
user_schema = UserSchema()


@bp.post("/register")
@timing
def register():
    """Register an unverified account and send its verification link."""

    data = register_schema.load(json_body())
    out = registration_service().register(RegistrationIn(**data))
    return json_response({"data": user_schema.dump(out.user)}, status=HTTPStatus.CREATED)


@bp.get("/verify")
@timing
def verify():
    """Consume a verification token from the ``token`` query parameter."""

    user = registration_service().verify_account(request.args.get("token", ""))
    return json_response({"data": user_schema.dump(user)})


@bp.post("/resend-verification")
@timing
def resend_verification():
    data = resend_schema.load(json_body())
    registration_service().resend_verification(data["email"])
    return json_response({"message": "Verification email sent"}, status=HTTPStatus.ACCEPTED)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(json_body())
    pair = session_service().login(LoginIn(username=data["username"], password=data["password"]))
    return json_response(token_pair_schema.dump(pair))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token; the presented token becomes unusable."""

    data = refresh_schema.load(json_body())
    pair = session_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(token_pair_schema.dump(pair))


@bp.post("/logout")
@require_auth
@timing
def logout(ctx: AuthContext):
    """Delete every refresh session of the caller."""

    session_service().logout(ctx.subject_id)
    return no_content()
