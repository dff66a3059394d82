# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from taskmanager.services._shared.errors import ConflictError
from taskmanager.services._shared.ports.refresh_token_store import (
    RefreshTokenStore,
    StoredRefreshToken,
)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout
    ------
    - ``rt:{jti}``: hash with ``user_id``, ``token_hash``, ``expires_at``,
      ``revoked_at`` and ``replaced_by_jti`` (epoch seconds / strings).
    - ``rt:u:{user_id}``: set of the user's jtis.
    - ``rt:h:{token_hash}``: jti owning a digest (uniqueness guard).

    Record keys carry a TTL matching ``expires_at`` so Redis evicts them on
    its own. The per-user set carries the TTL of its longest-lived entry;
    :meth:`delete_expired` drops revoked records and prunes set members whose
    record was already evicted.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(jti: str) -> str:
        return f"rt:{jti}"

    @staticmethod
    def _ku(user_id: int | str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _kh(token_hash: str) -> str:
        return f"rt:h:{token_hash}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        # Naive datetimes are labelled UTC, not converted
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def _from_ts(raw: bytes | str | None) -> datetime | None:
        if raw is None:
            return None
        value = raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)
        if not value:
            return None
        return datetime.fromtimestamp(int(value), tz=UTC)

    @staticmethod
    def _s(raw: bytes | str | None) -> str | None:
        if raw is None:
            return None
        value = raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)
        return value or None

    def _record(self, jti: str, h: dict[bytes, bytes]) -> StoredRefreshToken:
        expires_at = self._from_ts(h.get(b"expires_at"))
        return StoredRefreshToken(
            subject_id=int(self._s(h.get(b"user_id")) or 0),
            jti=jti,
            token_hash=self._s(h.get(b"token_hash")) or "",
            expires_at=expires_at or datetime.fromtimestamp(0, tz=UTC),
            revoked_at=self._from_ts(h.get(b"revoked_at")),
            replaced_by_jti=self._s(h.get(b"replaced_by_jti")),
        )

    # -------------------- API ------------------------

    def save(self, record: StoredRefreshToken) -> None:
        """
        Insert the record and index it by subject and digest.

        :raises ConflictError: If the jti or digest is already present.
        """
        key = self._k(record.jti)
        key_h = self._kh(record.token_hash)
        key_u = self._ku(record.subject_id)
        ttl = max(1, self._to_ts(record.expires_at) - self._to_ts(datetime.now(UTC)))

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key, key_h, key_u)
                    if self.r.exists(key):
                        p.unwatch()
                        raise ConflictError("RefreshToken", "duplicate jti")
                    if self.r.exists(key_h):
                        p.unwatch()
                        raise ConflictError("RefreshToken", "duplicate token hash")
                    # -2: missing, -1: no expiry; the set outlives its longest-lived entry
                    extend_index = self.r.ttl(key_u) < ttl

                    p.multi()
                    p.hset(
                        key,
                        mapping={
                            "user_id": str(record.subject_id),
                            "token_hash": record.token_hash,
                            "expires_at": str(self._to_ts(record.expires_at)),
                            "revoked_at": (
                                str(self._to_ts(record.revoked_at)) if record.revoked_at else ""
                            ),
                            "replaced_by_jti": record.replaced_by_jti or "",
                        },
                    )
                    p.expire(key, ttl)
                    p.set(key_h, record.jti, ex=ttl)
                    p.sadd(key_u, record.jti)
                    if extend_index:
                        p.expire(key_u, ttl)
                    p.execute()
                return
            except redis.WatchError:
                # Concurrent modification detected; retry
                continue

    def find_by_jti(self, jti: str) -> StoredRefreshToken | None:
        h = self.r.hgetall(self._k(jti))
        if not h:
            return None
        return self._record(jti, h)

    def revoke_if_active(
        self, jti: str, *, revoked_at: datetime, replaced_by_jti: str | None = None
    ) -> bool:
        """
        Set ``revoked_at`` only if it is still empty.

        Uses WATCH/MULTI/EXEC; a concurrent writer aborts this transaction and
        the loop re-reads, so only one caller ever observes the empty field.
        """
        key = self._k(jti)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = self.r.hgetall(key)
                    if not h or self._s(h.get(b"revoked_at")):
                        p.unwatch()
                        return False

                    p.multi()
                    p.hset(
                        key,
                        mapping={
                            "revoked_at": str(self._to_ts(revoked_at)),
                            "replaced_by_jti": replaced_by_jti or "",
                        },
                    )
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def delete_all_for_subject(self, subject_id: int) -> int:
        key_u = self._ku(subject_id)
        jtis = [
            member.decode() if isinstance(member, bytes | bytearray) else str(member)
            for member in self.r.smembers(key_u)
        ]
        if not jtis:
            return 0

        deleted = 0
        for jti in jtis:
            deleted += self._delete_one(jti)
        self.r.delete(key_u)
        return deleted

    def delete_expired(self, now: datetime) -> int:
        now_ts = self._to_ts(now)
        deleted = 0
        index_keys: list[str] = []
        for raw_key in self.r.scan_iter(match="rt:*"):
            key = raw_key.decode() if isinstance(raw_key, bytes | bytearray) else str(raw_key)
            if key.startswith("rt:u:"):
                index_keys.append(key)
                continue
            if key.startswith("rt:h:"):
                continue
            jti = key[len("rt:") :]
            h = self.r.hgetall(key)
            if not h:
                continue
            record = self._record(jti, h)
            if record.is_revoked or self._to_ts(record.expires_at) <= now_ts:
                deleted += self._delete_one(jti, record)
        for key_u in index_keys:
            self._prune_index(key_u)
        return deleted

    # -------------------- internals ------------------

    def _delete_one(self, jti: str, record: StoredRefreshToken | None = None) -> int:
        record = record or self.find_by_jti(jti)
        if record is None:
            return 0
        with self.r.pipeline(transaction=True) as p:
            p.delete(self._k(jti))
            p.delete(self._kh(record.token_hash))
            p.srem(self._ku(record.subject_id), jti)
            out = p.execute()
        return int(out[0])

    def _prune_index(self, key_u: str) -> int:
        """
        Remove members of a per-user set whose record key no longer exists.

        :param key_u: The ``rt:u:{user_id}`` key to prune.
        :return: Number of members removed.
        """
        jtis = [
            member.decode() if isinstance(member, bytes | bytearray) else str(member)
            for member in self.r.smembers(key_u)
        ]
        stale = [jti for jti in jtis if not self.r.exists(self._k(jti))]
        if stale:
            self.r.srem(key_u, *stale)
        return len(stale)
