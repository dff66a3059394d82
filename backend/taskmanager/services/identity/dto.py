"""Public user representations shared by several services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user payload.

    :param id: User identifier.
    :type id: int
    :param email: Normalized email.
    :type email: str
    :param username: Login handle.
    :type username: str
    :param full_name: Optional display name.
    :type full_name: str | None
    :param is_verified: Whether the email has been confirmed.
    :type is_verified: bool
    """

    id: int
    email: str
    username: str
    full_name: str | None = None
    is_verified: bool = False


def to_user_public(user) -> UserPublicOut:
    """Map an ORM ``User`` to :class:`UserPublicOut`."""
    return UserPublicOut(
        id=user.id,
        email=user.email,
        username=user.username,
        full_name=user.full_name,
        is_verified=bool(user.is_verified),
    )
