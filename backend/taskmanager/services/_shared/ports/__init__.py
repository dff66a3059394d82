"""
taskmanager.services._shared.ports
==================================

Collection of *ports* (hexagonal interfaces) that the service layer depends
on for token signing, refresh-token persistence, membership lookup and mail.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, :class:`~.TokenClaims`, :class:`~.TokenType`.
- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.StoredRefreshToken` and digest helpers.
- :mod:`membership_repository`:
    :class:`~.MembershipRepository` and :class:`~.TeamLookup`.
- :mod:`email_sender`:
    :class:`~.EmailSender`.

Concrete adapters live under ``taskmanager.infra`` and ``taskmanager.repositories``;
the in-memory doubles defined next to each port are used by unit tests.
"""

from __future__ import annotations

from .email_sender import EmailSender, RecordingEmailSender
from .membership_repository import (
    InMemoryMembershipRepository,
    InMemoryTeamLookup,
    MembershipRepository,
    TeamLookup,
)
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    StoredRefreshToken,
    digest_matches,
    digest_token,
)
from .token_codec import StubTokenCodec, TokenClaims, TokenCodec, TokenType

__all__ = [
    "EmailSender",
    "RecordingEmailSender",
    "InMemoryMembershipRepository",
    "InMemoryTeamLookup",
    "MembershipRepository",
    "TeamLookup",
    "InMemoryRefreshTokenStore",
    "RefreshTokenStore",
    "StoredRefreshToken",
    "digest_matches",
    "digest_token",
    "StubTokenCodec",
    "TokenClaims",
    "TokenCodec",
    "TokenType",
]
