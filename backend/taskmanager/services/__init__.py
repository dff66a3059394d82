"""Service layer public API.

This package exposes the application services so that callers can import
from :mod:`taskmanager.services` without knowing the internal structure.

Re-exports
----------
- Base primitives (from ``taskmanager.services._shared``)
    * :class:`BaseService`
    * :class:`AuthContext`

- Sessions (from ``taskmanager.services.auth``)
    * :class:`SessionService`, :class:`TokenSweeper`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`TokenPairOut`,
      :class:`AuthTokenConfig`

- Registration (from ``taskmanager.services.registration``)
    * :class:`RegistrationService`
    * DTOs: :class:`RegistrationIn`, :class:`RegistrationOut`, :class:`UserPublicOut`

- Teams and tasks
    * :class:`TeamService`, :class:`TaskService`

- User accounts (from ``taskmanager.services.users``)
    * :class:`UserService`
    * DTOs: :class:`ProfileUpdateIn`, :class:`PasswordChangeIn`
"""

from __future__ import annotations

# Base primitives (service base + explicit caller identity)
from ._shared.base import BaseService
from ._shared.context import AuthContext

# Sessions
from .auth.dto import AuthTokenConfig, LoginIn, RefreshIn, TokenPairOut
from .auth.service import SessionService
from .auth.sweep import SweepResult, TokenSweeper

# Registration
from .identity.dto import UserPublicOut
from .registration.dto import RegistrationIn, RegistrationOut
from .registration.service import RegistrationService

# Teams and tasks
from .tasks.service import TaskService
from .teams.service import TeamService

# User accounts
from .users.dto import PasswordChangeIn, ProfileUpdateIn
from .users.service import UserService

__all__ = [
    # Base
    "BaseService",
    "AuthContext",
    # Sessions
    "SessionService",
    "TokenSweeper",
    "SweepResult",
    "AuthTokenConfig",
    "LoginIn",
    "RefreshIn",
    "TokenPairOut",
    # Registration
    "RegistrationService",
    "RegistrationIn",
    "RegistrationOut",
    "UserPublicOut",
    # Teams and tasks
    "TeamService",
    "TaskService",
    # User accounts
    "UserService",
    "ProfileUpdateIn",
    "PasswordChangeIn",
]
