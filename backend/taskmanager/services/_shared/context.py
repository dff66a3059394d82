"""Explicit, request-scoped identity passed into authorization-sensitive calls."""

from __future__ import annotations

from dataclasses import dataclass

from taskmanager.services._shared.ports.token_codec import TokenClaims


@dataclass(frozen=True, slots=True)
class AuthContext:
    """
    Authenticated caller.

    :param subject_id: Authenticated user id (decoded from the access token).
    :type subject_id: int
    :param claims: Claims of the access token that authenticated the call.
    :type claims: TokenClaims | None
    :param request_id: Correlation id for logging.
    :type request_id: str | None
    """

    subject_id: int
    claims: TokenClaims | None = None
    request_id: str | None = None
