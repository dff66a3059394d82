# taskmanager/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Username (an email is accepted as well).
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param revoke_chain_on_reuse: Delete every refresh session of a subject
        when an already-rotated token is presented again.
    :type revoke_chain_on_reuse: bool
    """

    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=14)
    revoke_chain_on_reuse: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from Flask config keys (``JWT_*_EXPIRES_SECONDS``, ``AUTH_REVOKE_CHAIN_ON_REUSE``)."""
        return cls(
            access_expires=timedelta(seconds=int(config["JWT_ACCESS_TOKEN_EXPIRES_SECONDS"])),
            refresh_expires=timedelta(seconds=int(config["JWT_REFRESH_TOKEN_EXPIRES_SECONDS"])),
            revoke_chain_on_reuse=bool(config.get("AUTH_REVOKE_CHAIN_ON_REUSE", False)),
        )
