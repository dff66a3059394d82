from __future__ import annotations

import hashlib
import hmac
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from taskmanager.services._shared.errors import ConflictError


def digest_token(raw: str) -> str:
    """Return the SHA-256 hex digest stored in place of a raw refresh token."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def digest_matches(raw: str, token_hash: str) -> bool:
    """Constant-time comparison of ``digest_token(raw)`` against a stored hash."""
    return hmac.compare_digest(digest_token(raw), token_hash)


@dataclass(frozen=True, slots=True)
class StoredRefreshToken:
    """
    Server-side record of an issued refresh token.

    :ivar subject_id: Owner user id.
    :ivar jti: Token identifier (lookup key, unique).
    :ivar token_hash: ``digest_token`` of the raw token (unique).
    :ivar expires_at: Absolute expiry (UTC).
    :ivar revoked_at: Set once on rotation or revocation.
    :ivar replaced_by_jti: Successor jti when the record was rotated.
    :ivar id: Storage identifier, when the backend has one.
    """

    subject_id: int
    jti: str
    token_hash: str
    expires_at: datetime
    revoked_at: datetime | None = None
    replaced_by_jti: str | None = None
    id: int | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh sessions.

    Only digests are persisted. ``revoke_if_active`` MUST be atomic: of two
    concurrent calls for the same jti at most one returns ``True``.
    """

    def save(self, record: StoredRefreshToken) -> None:
        """
        Insert a new record.

        :raises ConflictError: If the jti or token hash already exists.
        """

    def find_by_jti(self, jti: str) -> StoredRefreshToken | None:
        """Fetch a record by jti, or ``None``."""

    def revoke_if_active(
        self, jti: str, *, revoked_at: datetime, replaced_by_jti: str | None = None
    ) -> bool:
        """
        Conditionally mark a record revoked.

        :returns: ``True`` if the record was active and is now revoked;
            ``False`` if it was missing or already revoked.
        """

    def delete_all_for_subject(self, subject_id: int) -> int:
        """Delete every record of ``subject_id``. Idempotent. :returns: rows deleted."""

    def delete_expired(self, now: datetime) -> int:
        """Delete expired or revoked records. :returns: rows deleted."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock to make the conditional revoke atomic in unit tests.
    """

    def __init__(self) -> None:
        self._by_jti: dict[str, StoredRefreshToken] = {}
        self._lock = threading.Lock()

    def save(self, record: StoredRefreshToken) -> None:
        with self._lock:
            if record.jti in self._by_jti:
                raise ConflictError("RefreshToken", "duplicate jti")
            if any(r.token_hash == record.token_hash for r in self._by_jti.values()):
                raise ConflictError("RefreshToken", "duplicate token hash")
            self._by_jti[record.jti] = record

    def find_by_jti(self, jti: str) -> StoredRefreshToken | None:
        with self._lock:
            return self._by_jti.get(jti)

    def revoke_if_active(
        self, jti: str, *, revoked_at: datetime, replaced_by_jti: str | None = None
    ) -> bool:
        with self._lock:
            current = self._by_jti.get(jti)
            if current is None or current.is_revoked:
                return False
            self._by_jti[jti] = replace(
                current, revoked_at=revoked_at, replaced_by_jti=replaced_by_jti
            )
            return True

    def delete_all_for_subject(self, subject_id: int) -> int:
        with self._lock:
            doomed = [j for j, r in self._by_jti.items() if r.subject_id == subject_id]
            for jti in doomed:
                del self._by_jti[jti]
            return len(doomed)

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            doomed = [
                j for j, r in self._by_jti.items() if r.is_revoked or r.is_expired(now)
            ]
            for jti in doomed:
                del self._by_jti[jti]
            return len(doomed)

    def records_for_subject(self, subject_id: int) -> list[StoredRefreshToken]:
        """Test helper: snapshot of a subject's records."""
        with self._lock:
            return [r for r in self._by_jti.values() if r.subject_id == subject_id]
