# taskmanager/services/auth/service.py
from __future__ import annotations

import logging
from functools import lru_cache

from werkzeug.security import check_password_hash, generate_password_hash

from taskmanager.repositories.user import UserRepository
from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.context import AuthContext
from taskmanager.services._shared.errors import (
    AccountNotVerifiedError,
    AuthenticationFailedError,
    BadRequestError,
    InvalidTokenError,
    TokenMismatchError,
    TokenRevokedOrExpiredError,
    UnrecognizedTokenError,
)
from taskmanager.services._shared.ports.refresh_token_store import (
    RefreshTokenStore,
    StoredRefreshToken,
    digest_matches,
    digest_token,
)
from taskmanager.services._shared.ports.token_codec import TokenCodec, TokenType
from taskmanager.services.auth.dto import AuthTokenConfig, LoginIn, RefreshIn, TokenPairOut

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    # Checked against when the user is unknown so both paths cost one hash
    return generate_password_hash("taskmanager-dummy-password")


class SessionService(BaseService):
    """
    Session lifecycle service (login / refresh / logout).

    Refresh token states: ``ISSUED -> ROTATED | REVOKED | EXPIRED``; every
    non-issued state is terminal. Rotation is strictly single-use: the old
    record is revoked with a conditional update and only the caller that
    wins that update receives a new pair.
    """

    def __init__(
        self,
        *,
        token_codec: TokenCodec,
        refresh_store: RefreshTokenStore,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_codec: Adapter for issuing/decoding signed tokens.
        :param refresh_store: Server-side refresh token records.
        :param token_cfg: Lifetimes and reuse policy.
        """
        self.tokens = token_codec
        self.refresh_store = refresh_store
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        The password is checked before the verification flag so an unverified
        account is only revealed to someone holding its password.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises AuthenticationFailedError: Unknown user or wrong password.
        :raises AccountNotVerifiedError: Correct password, unverified account.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_identifier(dto.username or "")
            if user is None:
                check_password_hash(_dummy_password_hash(), dto.password or "")
                logger.warning("Login failed", extra={"reason": "unknown_user"})
                raise AuthenticationFailedError()
            if not user.verify_password(dto.password or ""):
                logger.warning(
                    "Login failed", extra={"subject_id": user.id, "reason": "bad_password"}
                )
                raise AuthenticationFailedError()
            if not user.is_verified:
                raise AccountNotVerifiedError()
            subject_id = user.id

        pair, record = self._issue_pair(subject_id)
        self.refresh_store.save(record)
        logger.info("Login succeeded", extra={"subject_id": subject_id, "jti": record.jti})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Checks, in order: blank, decode/type, known jti, digest, revoked or
        expired, then the conditional revoke (a lost race is reported as
        revoked). After the successor is saved the predecessor is looked up
        again: if it is gone, a logout ran between the revoke and the save,
        so the subject's sessions are deleted once more and the rotation is
        reported as revoked. A sweep removing the revoked predecessor inside
        that same window is treated the same way.

        :param dto: Refresh input.
        :returns: New access/refresh pair.
        :raises BadRequestError: Blank token.
        :raises InvalidTokenError: Bad signature/shape, expired, or not a refresh token.
        :raises UnrecognizedTokenError: No record for the jti.
        :raises TokenMismatchError: Digest of the presented token differs from the record.
        :raises TokenRevokedOrExpiredError: Record revoked, rotated or expired.
        """
        raw = (dto.refresh_token or "").strip()
        if not raw:
            raise BadRequestError("Refresh token is required")

        try:
            claims = self.tokens.decode(raw)
        except InvalidTokenError as exc:
            raise InvalidTokenError("Invalid refresh token") from exc
        if claims.type is not TokenType.REFRESH:
            raise InvalidTokenError("Invalid refresh token")

        stored = self.refresh_store.find_by_jti(claims.jti)
        if stored is None:
            raise UnrecognizedTokenError()

        if not digest_matches(raw, stored.token_hash):
            logger.warning(
                "Refresh token digest mismatch",
                extra={"subject_id": stored.subject_id, "jti": stored.jti},
            )
            raise TokenMismatchError()

        now = self.now_utc()
        if stored.is_revoked:
            self._on_revoked_token_presented(stored)
            raise TokenRevokedOrExpiredError()
        if stored.is_expired(now):
            raise TokenRevokedOrExpiredError()

        pair, record = self._issue_pair(stored.subject_id)
        if not self.refresh_store.revoke_if_active(
            stored.jti, revoked_at=now, replaced_by_jti=record.jti
        ):
            logger.warning(
                "Concurrent refresh lost the rotation",
                extra={"subject_id": stored.subject_id, "jti": stored.jti},
            )
            raise TokenRevokedOrExpiredError()
        self.refresh_store.save(record)

        if self.refresh_store.find_by_jti(stored.jti) is None:
            self.refresh_store.delete_all_for_subject(stored.subject_id)
            logger.warning(
                "Logout interleaved with refresh; successor discarded",
                extra={"subject_id": stored.subject_id, "jti": stored.jti},
            )
            raise TokenRevokedOrExpiredError()
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, subject_id: int) -> int:
        """
        Delete every refresh session of ``subject_id``. Idempotent.

        Access tokens already issued stay valid until they expire.

        :returns: Number of refresh records deleted.
        """
        deleted = self.refresh_store.delete_all_for_subject(subject_id)
        logger.info("Logout", extra={"subject_id": subject_id, "deleted": deleted})
        return deleted

    # ------------------------------------------------------------------ #
    # Request authentication
    # ------------------------------------------------------------------ #

    def authenticate(self, raw_access_token: str, *, request_id: str | None = None) -> AuthContext:
        """
        Turn a bearer access token into an explicit :class:`AuthContext`.

        :raises InvalidTokenError: Invalid, expired, non-access token or bad subject.
        """
        raw = (raw_access_token or "").strip()
        if not raw:
            raise InvalidTokenError("Missing access token")
        claims = self.tokens.decode(raw)
        if claims.type is not TokenType.ACCESS:
            raise InvalidTokenError("Access token required")
        if not claims.subject_id.isdigit():
            raise InvalidTokenError("Invalid token subject")
        return AuthContext(subject_id=int(claims.subject_id), claims=claims, request_id=request_id)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_pair(self, subject_id: int) -> tuple[TokenPairOut, StoredRefreshToken]:
        access = self.tokens.issue(subject_id, TokenType.ACCESS, self.cfg.access_expires)
        refresh = self.tokens.issue(subject_id, TokenType.REFRESH, self.cfg.refresh_expires)
        refresh_claims = self.tokens.decode(refresh)
        record = StoredRefreshToken(
            subject_id=subject_id,
            jti=refresh_claims.jti,
            token_hash=digest_token(refresh),
            expires_at=refresh_claims.expires_at,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh), record

    def _on_revoked_token_presented(self, stored: StoredRefreshToken) -> None:
        if stored.replaced_by_jti is None:
            return
        # A rotated token came back: either a replay or a stolen copy
        logger.warning(
            "Refresh token reuse detected",
            extra={"subject_id": stored.subject_id, "jti": stored.jti},
        )
        if self.cfg.revoke_chain_on_reuse:
            deleted = self.refresh_store.delete_all_for_subject(stored.subject_id)
            logger.warning(
                "Refresh sessions revoked after reuse",
                extra={"subject_id": stored.subject_id, "deleted": deleted},
            )
