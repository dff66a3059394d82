"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from taskmanager.core.extensions import db
from taskmanager.repositories import (
    RefreshTokenRepository,
    TaskRepository,
    TeamMembershipRepository,
    TeamRepository,
    UserRepository,
    VerificationTokenRepository,
)
from taskmanager.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.teams = TeamRepository(session=self.session)
        self.memberships = TeamMembershipRepository(session=self.session)
        self.tasks = TaskRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.verification_tokens = VerificationTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits on a clean exit, rolls back when the block raises.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL/MySQL when it owns
      the transaction.
    - Installs portable write guards (ORM flush and cursor level).
    - Always rolls back its own transaction on exit; ``commit()`` is refused.

    When a transaction is already open on the session (an outer fixture or a
    caller's write UoW) the scope attaches to it: guards are still installed
    but no ``SET TRANSACTION`` directive is issued.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        super().__init__(session=db.session)
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._listeners_installed = False
        self._pending_before: set[int] = set()

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        self._pending_before = {
            id(obj) for obj in (*self.session.new, *self.session.dirty, *self.session.deleted)
        }
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction; attach instead of failing.
            pass

        self._conn = self.session.connection()
        self._install_listeners()

        if self._txn_ctx is not None and self.enforce_db_readonly:
            if self._conn.dialect.name in ("postgresql", "mysql", "mariadb"):
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    current_app.logger.warning(
                        "SET TRANSACTION READ ONLY failed (%s); guards only.", exc
                    )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
            else:
                self._discard_own_changes()
        finally:
            self._pending_before = set()
            self._remove_listeners()
            self._conn = None

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _discard_own_changes(self) -> None:
        """
        Drop ORM changes made inside this scope when attached to an outer transaction.

        The outer transaction cannot be rolled back on our behalf. Objects
        added or deleted here are expunged; objects modified here are expired
        so their persisted state is reloaded on next access. Changes that were
        already pending when the scope opened are left alone.
        """
        before = self._pending_before
        for obj in list(self.session.new) + list(self.session.deleted):
            if id(obj) not in before:
                self.session.expunge(obj)
        for obj in list(self.session.dirty):
            if id(obj) not in before:
                self.session.expire(obj)

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self.session, "before_flush", _before_flush)
        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(target, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        if not self._listeners_installed:
            return

        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._ro_before_flush)
        with suppress(InvalidRequestError):
            target = self._conn if self._conn is not None else self.session.get_bind()
            event.remove(target, "before_cursor_execute", self._ro_before_cursor_execute)

        self._listeners_installed = False
