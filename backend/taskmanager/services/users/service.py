"""
UserService
===========

Account self-service and user lookups.

Notes
-----
- Profile, password and account deletion act on the caller only; the
  target is always ``ctx.subject_id``.
- Lookups return the public projection; password hashes never leave the
  service.
- Refresh sessions are removed through the configured
  :class:`RefreshTokenStore` after the database work commits, so the Redis
  backend is covered as well as the SQL one.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from taskmanager.models.enums import TeamRole
from taskmanager.models.user import User
from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)
from taskmanager.services._shared.ports.refresh_token_store import RefreshTokenStore
from taskmanager.services.identity.dto import UserPublicOut, to_user_public
from taskmanager.services.teams.dto import TeamOut, to_team_out
from taskmanager.services.users.dto import PasswordChangeIn, ProfileUpdateIn

logger = logging.getLogger(__name__)

CURRENT_PASSWORD_MISMATCH = "Current password does not match"
PASSWORD_UNCHANGED = "New password must differ from the current one"


class UserService(BaseService):
    """
    Application service for user accounts.

    :param refresh_store: Store whose sessions are dropped on password change
        and account deletion.
    """

    def __init__(self, *, refresh_store: RefreshTokenStore) -> None:
        self.refresh_store = refresh_store

    @staticmethod
    def _require_user(uow, user_id: int) -> User:
        user = uow.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    # ------------------------------------------------------------------ #
    # Own profile
    # ------------------------------------------------------------------ #

    def get_profile(self, ctx: AuthContext) -> UserPublicOut:
        """:raises NotFoundError: The caller's account no longer exists."""
        with self.ro_uow() as uow:
            return to_user_public(self._require_user(uow, ctx.subject_id))

    def update_profile(self, ctx: AuthContext, dto: ProfileUpdateIn) -> UserPublicOut:
        """
        Change the caller's username, email or display name.

        :param ctx: Authenticated caller.
        :param dto: Fields to change; ``None`` keeps the current value.
        :returns: The updated profile.
        :raises BadRequestError: Blank username or email.
        :raises ConflictError: Username or email used by another account.
        """
        updates: dict[str, str | None] = {}
        if dto.username is not None:
            username = dto.username.strip()
            if not username:
                raise BadRequestError("Username is required")
            updates["username"] = username
        if dto.email is not None:
            email = dto.email.strip().lower()
            if not email:
                raise BadRequestError("Email is required")
            updates["email"] = email
        if dto.full_name is not None:
            updates["full_name"] = dto.full_name.strip() or None

        try:
            with self.rw_uow() as uow:
                user = self._require_user(uow, ctx.subject_id)
                if "username" in updates and uow.users.exists_by_username(
                    updates["username"], exclude_id=user.id
                ):
                    raise ConflictError("User", "Username already exists")
                if "email" in updates and uow.users.exists_by_email(
                    updates["email"], exclude_id=user.id
                ):
                    raise ConflictError("User", "Email already exists")
                try:
                    uow.users.assign_updates(user, updates)
                except ValueError as exc:
                    raise BadRequestError(str(exc)) from exc
                out = to_user_public(user)
        except IntegrityError as exc:
            raise ConflictError("User", "Username or email already exists") from exc

        logger.info("Profile updated", extra={"subject_id": ctx.subject_id})
        return out

    def change_password(self, ctx: AuthContext, dto: PasswordChangeIn) -> int:
        """
        Replace the caller's password and end every refresh session.

        Access tokens already issued stay valid until they expire.

        :returns: Number of refresh sessions removed.
        :raises BadRequestError: A blank password, or the new one equals the current one.
        :raises AuthorizationError: The current password is wrong.
        """
        if not dto.current_password or not dto.new_password:
            raise BadRequestError("Current and new password are required")

        with self.rw_uow() as uow:
            user = self._require_user(uow, ctx.subject_id)
            if not user.verify_password(dto.current_password):
                raise AuthorizationError(CURRENT_PASSWORD_MISMATCH)
            if user.verify_password(dto.new_password):
                raise BadRequestError(PASSWORD_UNCHANGED)
            user.password = dto.new_password
            uow.users.flush()

        deleted = self.refresh_store.delete_all_for_subject(ctx.subject_id)
        logger.info("Password changed", extra={"subject_id": ctx.subject_id, "deleted": deleted})
        return deleted

    def delete_account(self, ctx: AuthContext) -> None:
        """
        Delete the caller's account.

        Teams the caller owns alone are deleted with their tasks. The caller's
        own tasks, memberships, verification tokens and refresh sessions go too.

        :raises NotFoundError: The account no longer exists.
        :raises ConflictError: The caller owns a team that still has other members.
        """
        with self.rw_uow() as uow:
            user = self._require_user(uow, ctx.subject_id)
            memberships = uow.memberships.list_for_user(user.id)

            solo_teams = []
            for membership in memberships:
                if membership.role is not TeamRole.OWNER:
                    continue
                if uow.memberships.count_for_team(membership.team_id) > 1:
                    raise ConflictError(
                        "User",
                        f"Transfer ownership of team {membership.team.name!r} or delete it first",
                    )
                solo_teams.append(membership.team)

            solo_ids = {team.id for team in solo_teams}
            for membership in memberships:
                if membership.team_id not in solo_ids:
                    uow.memberships.delete(membership)
            for team in solo_teams:
                uow.teams.delete(team)
            uow.tasks.delete_created_by(user.id)
            uow.verification_tokens.delete_for_user(user.id)
            uow.refresh_tokens.delete_for_user(user.id)
            uow.users.delete(user)

        self.refresh_store.delete_all_for_subject(ctx.subject_id)
        logger.info("Account deleted", extra={"subject_id": ctx.subject_id})

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def get_user(self, ctx: AuthContext, user_id: int) -> UserPublicOut:
        with self.ro_uow() as uow:
            return to_user_public(self._require_user(uow, user_id))

    def get_by_username(self, ctx: AuthContext, username: str) -> UserPublicOut:
        """:raises NotFoundError: No user with that (trimmed) username."""
        with self.ro_uow() as uow:
            user = uow.users.get_by_username(username or "")
            if user is None:
                raise NotFoundError("User", username)
            return to_user_public(user)

    def get_by_email(self, ctx: AuthContext, email: str) -> UserPublicOut:
        """:raises NotFoundError: No user with that email (case-insensitive)."""
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email or "")
            if user is None:
                raise NotFoundError("User", email)
            return to_user_public(user)

    def list_user_teams(self, ctx: AuthContext, user_id: int) -> list[TeamOut]:
        """
        List the teams of ``user_id`` that the caller can see.

        Callers see all of their own teams; for another user only the teams
        both belong to are returned.

        :raises NotFoundError: Unknown user.
        """
        with self.ro_uow() as uow:
            self._require_user(uow, user_id)
            teams = uow.teams.list_for_user(user_id)
            if user_id != ctx.subject_id:
                visible = {t.id for t in uow.teams.list_for_user(ctx.subject_id)}
                teams = [t for t in teams if t.id in visible]
            return [to_team_out(t) for t in teams]
