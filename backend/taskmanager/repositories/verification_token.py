"""Verification token repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select

from taskmanager.models.tokens import VerificationToken
from taskmanager.repositories.base import BaseRepository


class VerificationTokenRepository(BaseRepository[VerificationToken]):
    """Persistence-only repository for :class:`VerificationToken`."""

    model = VerificationToken

    def get_by_token(self, token: str) -> VerificationToken | None:
        stmt = select(VerificationToken).where(VerificationToken.token == token)
        return cast(VerificationToken | None, self.session.execute(stmt).scalars().first())

    def delete_for_user(self, user_id: int) -> int:
        stmt = (
            delete(VerificationToken)
            .where(VerificationToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired_or_used(self, now: datetime) -> int:
        stmt = (
            delete(VerificationToken)
            .where(or_(VerificationToken.expires_at <= now, VerificationToken.used.is_(True)))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
