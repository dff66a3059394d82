"""
DTOs for RegistrationService.

Contracts for self-registration and email verification.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskmanager.services.identity.dto import UserPublicOut


@dataclass(frozen=True, slots=True)
class RegistrationIn:
    """
    Input payload for registration.

    :param username: Login handle (unique).
    :type username: str
    :param email: Email (will be normalized to lowercase+trim).
    :type email: str
    :param password: Raw password (the model setter hashes it).
    :type password: str
    :param full_name: Optional display name.
    :type full_name: str | None
    """

    username: str
    email: str
    password: str
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    """
    Registration result.

    :param user: Public-safe user payload (unverified).
    :type user: :class:`UserPublicOut`
    """

    user: UserPublicOut
