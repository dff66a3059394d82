from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Protocol

from taskmanager.services._shared.errors import InvalidTokenError


class TokenType(str, Enum):
    """Type tag carried in the ``typ`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Decoded, verified token claims. Never mutated after issuance.

    :ivar subject_id: Principal identifier (``sub``), as issued.
    :ivar type: Token type (``typ``).
    :ivar issued_at: Issue instant (``iat``), UTC.
    :ivar expires_at: Expiry instant (``exp``), UTC.
    :ivar jti: Unique token id (128-bit random, hex).
    """

    subject_id: str
    type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenCodec(Protocol):
    """Port for issuing and decoding signed, expiring tokens."""

    def issue(self, subject_id: int | str, token_type: TokenType, ttl: timedelta) -> str:
        """Return a raw token for ``subject_id``; every call gets a fresh jti."""
        ...

    def decode(self, raw: str) -> TokenClaims:
        """
        Verify and decode ``raw``.

        :raises InvalidTokenError: On signature mismatch, malformed structure,
            missing or unknown claims, or expiry.
        """
        ...


class StubTokenCodec(TokenCodec):
    """Deterministic, unsigned codec used in unit tests."""

    def __init__(self) -> None:
        self._seq = itertools.count(1)
        self._issued: dict[str, TokenClaims] = {}
        self._lock = threading.Lock()

    def issue(self, subject_id: int | str, token_type: TokenType, ttl: timedelta) -> str:
        now = datetime.now(UTC).replace(microsecond=0)
        with self._lock:
            seq = next(self._seq)
            jti = f"jti-{seq}"
            token = f"{token_type.value}.{subject_id}.{jti}"
            self._issued[token] = TokenClaims(
                subject_id=str(subject_id),
                type=token_type,
                issued_at=now,
                expires_at=now + ttl,
                jti=jti,
            )
        return token

    def decode(self, raw: str) -> TokenClaims:
        claims = self._issued.get(raw)
        if claims is None:
            raise InvalidTokenError()
        if claims.expires_at < datetime.now(UTC):
            raise InvalidTokenError("Token expired")
        return claims
