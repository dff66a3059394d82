"""Shared service plumbing: unit-of-work helpers and error translation."""

from __future__ import annotations

from datetime import UTC, datetime

from taskmanager.core import errors as api_errors
from taskmanager.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from taskmanager.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Provide a single UTC clock so tests can freeze time.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Identity is never looked up ambiently: callers pass an
      :class:`~taskmanager.services._shared.context.AuthContext` explicitly.
    """

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)


def translate_exceptions(exc: Exception) -> Exception:
    """
    Map service-level errors to API-level (HTTP) errors.

    :param exc: Exception raised within a service.
    :type exc: Exception
    :returns: Translated exception ready to be rendered, or ``exc`` untouched.
    :rtype: Exception
    """
    if isinstance(exc, AuthenticationError):
        # → 401, keeping the specific failure code for clients
        return api_errors.Unauthorized(str(exc), code=exc.code)

    if isinstance(exc, AuthorizationError):
        return api_errors.Forbidden(str(exc))

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    if isinstance(exc, BadRequestError | ServiceError):
        return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

    return exc
