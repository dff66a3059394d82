"""
RegistrationService
===================

Self-registration and email verification:

- Creates an unverified ``User`` and a single live ``VerificationToken``.
- Hands the verification link to an :class:`EmailSender` after commit.
- Verifies accounts and re-issues tokens on request.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from taskmanager.models.base import as_utc
from taskmanager.models.tokens import VerificationToken
from taskmanager.models.user import User
from taskmanager.repositories.user import UserRepository
from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.errors import BadRequestError, ConflictError, NotFoundError
from taskmanager.services._shared.ports.email_sender import EmailSender
from taskmanager.services.identity.dto import UserPublicOut, to_user_public
from taskmanager.services.registration.dto import RegistrationIn, RegistrationOut

logger = logging.getLogger(__name__)


class RegistrationService(BaseService):
    """
    Orchestrates registration and account verification.

    :param email_sender: Outbound mail port.
    :param token_ttl: Lifetime of a verification token.
    :param public_base_url: Base URL used to build verification links.
    """

    VERIFY_PATH = "/api/v1/auth/verify"

    def __init__(
        self,
        *,
        email_sender: EmailSender,
        token_ttl: timedelta = timedelta(hours=24),
        public_base_url: str = "http://localhost:8000",
    ) -> None:
        self.email_sender = email_sender
        self.token_ttl = token_ttl
        self.public_base_url = public_base_url.rstrip("/")

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegistrationIn) -> RegistrationOut:
        """
        Register an unverified user and send the verification link.

        :param dto: Registration input.
        :type dto: :class:`RegistrationIn`
        :returns: Created user.
        :rtype: :class:`RegistrationOut`
        :raises BadRequestError: Blank username, email or password.
        :raises ConflictError: Username or email already in use.
        """
        username = (dto.username or "").strip()
        email = (dto.email or "").strip().lower()
        if not username:
            raise BadRequestError("Username is required")
        if not email:
            raise BadRequestError("Email is required")
        if not dto.password:
            raise BadRequestError("Password is required")

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_username(username):
                    raise ConflictError("User", "Username already exists")
                if repo.exists_by_email(email):
                    raise ConflictError("User", "Email already exists")

                user = User(
                    username=username,
                    email=email,
                    full_name=dto.full_name,
                    is_verified=False,
                )
                user.password = dto.password
                repo.add(user)
                token = self._issue_token(uow, user.id)
                out = RegistrationOut(user=to_user_public(user))
        except IntegrityError as exc:
            raise ConflictError("User", "Username or email already exists") from exc

        self._send(out.user, token)
        logger.info("User registered", extra={"subject_id": out.user.id})
        return out

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify_account(self, token: str) -> UserPublicOut:
        """
        Mark the token's user as verified.

        :param token: Token value from the verification link.
        :returns: The verified user.
        :raises BadRequestError: Blank, expired or used token; already verified user.
        :raises NotFoundError: Unknown token.
        """
        value = (token or "").strip()
        if not value:
            raise BadRequestError("Verification token is required")

        expired = False
        with self.rw_uow() as uow:
            record = uow.verification_tokens.get_by_token(value)
            if record is None:
                raise NotFoundError("VerificationToken", "token")
            if record.used:
                raise BadRequestError("Verification token has already been used")
            if as_utc(record.expires_at) <= self.now_utc():
                # deletion must commit, so raise after the UoW closes
                uow.verification_tokens.delete(record)
                expired = True
            else:
                user = uow.users.get(record.user_id)
                if user is None:
                    raise NotFoundError("User", record.user_id)
                if user.is_verified:
                    raise BadRequestError("User is already verified")
                uow.users.update(user, is_verified=True)
                record.used = True
                uow.verification_tokens.flush()
                out = to_user_public(user)

        if expired:
            raise BadRequestError("Verification token is expired")
        logger.info("Account verified", extra={"subject_id": out.id})
        return out

    def resend_verification(self, email: str) -> None:
        """
        Replace the user's verification token and send a new link.

        :raises BadRequestError: Blank email or already verified user.
        :raises NotFoundError: Unknown email.
        """
        normalized = (email or "").strip().lower()
        if not normalized:
            raise BadRequestError("Email is required")

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(normalized)
            if user is None:
                raise NotFoundError("User", normalized)
            if user.is_verified:
                raise BadRequestError("User is already verified")
            token = self._issue_token(uow, user.id)
            public = to_user_public(user)

        self._send(public, token)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_token(self, uow, user_id: int) -> str:
        # One live token per user
        uow.verification_tokens.delete_for_user(user_id)
        value = secrets.token_urlsafe(32)
        uow.verification_tokens.add(
            VerificationToken(
                user_id=user_id,
                token=value,
                expires_at=self.now_utc() + self.token_ttl,
            )
        )
        return value

    def _send(self, user: UserPublicOut, token: str) -> None:
        link = f"{self.public_base_url}{self.VERIFY_PATH}?token={token}"
        self.email_sender.send_verification(to=user.email, username=user.username, link=link)
