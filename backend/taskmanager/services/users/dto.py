"""
DTOs for UserService.

Profile reads reuse :class:`~taskmanager.services.identity.dto.UserPublicOut`;
only the inputs live here.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Partial update of the caller's own profile.

    ``None`` leaves a field untouched.

    :param username: New login handle, unique across users.
    :type username: str | None
    :param email: New email, unique across users (stored lowercased).
    :type email: str | None
    :param full_name: New display name.
    :type full_name: str | None
    """

    username: str | None = None
    email: str | None = None
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Password change for the caller.

    :param current_password: Password currently on the account.
    :type current_password: str
    :param new_password: Replacement password.
    :type new_password: str
    """

    current_password: str
    new_password: str
