"""Refresh token rows: lookups plus the conditional revoke used by rotation."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select, update

from taskmanager.models.tokens import RefreshToken
from taskmanager.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def get_by_jti(self, jti: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.jti == jti)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke_if_active(self, jti: str, *, revoked_at: datetime, replaced_by_jti: str | None) -> int:
        """Revoke a row only if it is still active.

        Emits a single ``UPDATE ... WHERE jti = :jti AND revoked_at IS NULL``;
        two concurrent rotations of the same token cannot both see ``1``.

        :param jti: Token identifier to revoke.
        :type jti: str
        :param revoked_at: Revocation instant (UTC).
        :type revoked_at: datetime
        :param replaced_by_jti: jti of the successor token, if rotating.
        :type replaced_by_jti: str | None
        :returns: Number of rows changed (0 or 1).
        :rtype: int
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.jti == jti, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=revoked_at, replaced_by_jti=replaced_by_jti)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_for_user(self, user_id: int) -> int:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired_or_revoked(self, now: datetime) -> int:
        """Delete rows that can never be used again."""
        stmt = (
            delete(RefreshToken)
            .where(or_(RefreshToken.expires_at <= now, RefreshToken.revoked_at.is_not(None)))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
