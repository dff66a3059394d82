"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories, policy
functions, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``taskmanager/core/errors.py`` via :func:`~taskmanager.services._shared.base.translate_exceptions`.

Taxonomy
--------
- :class:`BadRequestError` (400)
- :class:`AuthenticationError` (401) and its token/credential subclasses
- :class:`AuthorizationError` (403), policy denial
- :class:`NotFoundError` (404)
- :class:`ConflictError` (409)

None of these are retried anywhere; they are terminal for the request.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name to match (e.g. ``uq_teams_name``).
    :returns: True if the driver message mentions the constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to APIError.
    """


class BadRequestError(ServiceError):
    """Raised when a request is structurally unusable (e.g. a blank token)."""


class AuthenticationError(ServiceError):
    """Base class for credential and token failures (mapped to 401)."""

    code = "unauthorized"


# --------------------------------------------------------------------------- #
# Authentication failures
# --------------------------------------------------------------------------- #


class AuthenticationFailedError(AuthenticationError):
    """Unknown principal or password mismatch."""

    code = "authentication_failed"

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AccountNotVerifiedError(AuthenticationError):
    """The principal has not confirmed its email address yet."""

    code = "account_not_verified"

    def __init__(self, message: str = "Please verify your email before logging in.") -> None:
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Signature mismatch, malformed structure, wrong type, or expiry."""

    code = "invalid_token"

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class UnrecognizedTokenError(AuthenticationError):
    """Valid signature but no server-side record for its jti."""

    code = "unrecognized_token"

    def __init__(self, message: str = "Refresh token not recognized") -> None:
        super().__init__(message)


class TokenMismatchError(AuthenticationError):
    """Presented token digest differs from the stored one (possible forgery)."""

    code = "token_mismatch"

    def __init__(self, message: str = "Refresh token mismatch") -> None:
        super().__init__(message)


class TokenRevokedOrExpiredError(AuthenticationError):
    """Stored refresh record is revoked, rotated, or past its expiry."""

    code = "token_revoked_or_expired"

    def __init__(self, message: str = "Refresh token revoked or expired") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Authorization / resource errors
# --------------------------------------------------------------------------- #


class AuthorizationError(ServiceError):
    """
    Raised when a role policy or ownership rule denies the action.

    Distinct from :class:`NotFoundError`: the resource exists but the actor
    may not act on it.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Team").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "TeamMembership").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"
