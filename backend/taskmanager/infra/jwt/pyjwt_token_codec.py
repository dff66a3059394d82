"""HS256 token codec."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from taskmanager.services._shared.errors import InvalidTokenError
from taskmanager.services._shared.ports.token_codec import TokenClaims, TokenCodec, TokenType

REQUIRED_CLAIMS = ("sub", "typ", "iat", "exp", "jti")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class PyJWTTokenCodec(TokenCodec):
    """
    HS256 compact JWS adapter built on PyJWT.

    Claims on the wire are exactly ``{sub, typ, iat, exp, jti}``. The jti is
    128 bits from :mod:`secrets`, drawn on every call.

    :param secret: Process-wide HMAC key, loaded once at startup.
    :param algorithm: Signing algorithm; only HS256 is expected.
    :param clock: Returns the current UTC time; used for both issue and expiry.
    """

    secret: str = field(repr=False)
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)

    def issue(self, subject_id: int | str, token_type: TokenType, ttl: timedelta) -> str:
        # JWT NumericDate has second precision
        now = self.clock().replace(microsecond=0)
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "typ": TokenType(token_type).value,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": secrets.token_hex(16),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, raw: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                raw,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "require": list(REQUIRED_CLAIMS),
                    # expiry is checked below against the same clock as issue()
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
            claims = TokenClaims(
                subject_id=str(payload["sub"]),
                type=TokenType(payload["typ"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), UTC),
                jti=str(payload["jti"]),
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc
        except (TypeError, ValueError, OverflowError) as exc:
            # unknown typ or non-numeric dates
            raise InvalidTokenError() from exc

        if claims.expires_at < self.clock():
            raise InvalidTokenError("Token expired")
        return claims
