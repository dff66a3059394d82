from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from taskmanager.models.base import as_utc
from taskmanager.models.tokens import RefreshToken
from taskmanager.services._shared.errors import ConflictError
from taskmanager.services._shared.ports.refresh_token_store import (
    RefreshTokenStore,
    StoredRefreshToken,
)
from taskmanager.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store (default backend).

    Every call runs in its own write Unit of Work so a rotation's revoke is
    committed independently of anything the caller does afterwards. The
    unique constraints on ``jti`` and ``token_hash`` are the last line of
    defence against duplicate state.
    """

    @staticmethod
    def _to_record(row: RefreshToken) -> StoredRefreshToken:
        return StoredRefreshToken(
            id=row.id,
            subject_id=row.user_id,
            jti=row.jti,
            token_hash=row.token_hash,
            expires_at=as_utc(row.expires_at),
            revoked_at=as_utc(row.revoked_at) if row.revoked_at else None,
            replaced_by_jti=row.replaced_by_jti,
        )

    def save(self, record: StoredRefreshToken) -> None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                uow.refresh_tokens.add(
                    RefreshToken(
                        user_id=record.subject_id,
                        jti=record.jti,
                        token_hash=record.token_hash,
                        expires_at=record.expires_at,
                        revoked_at=record.revoked_at,
                        replaced_by_jti=record.replaced_by_jti,
                    )
                )
        except IntegrityError as exc:
            raise ConflictError("RefreshToken", "duplicate jti or token hash") from exc

    def find_by_jti(self, jti: str) -> StoredRefreshToken | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_jti(jti)
            return self._to_record(row) if row is not None else None

    def revoke_if_active(
        self, jti: str, *, revoked_at: datetime, replaced_by_jti: str | None = None
    ) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            changed = uow.refresh_tokens.revoke_if_active(
                jti, revoked_at=revoked_at, replaced_by_jti=replaced_by_jti
            )
        return changed == 1

    def delete_all_for_subject(self, subject_id: int) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_for_user(subject_id)

    def delete_expired(self, now: datetime) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_expired_or_revoked(now)
