"""Periodic cleanup of refresh and verification token rows."""

from __future__ import annotations

import atexit
import logging
import threading
from dataclasses import dataclass

from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import SQLAlchemyError

from taskmanager.services._shared.base import BaseService
from taskmanager.services._shared.ports.refresh_token_store import RefreshTokenStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SweepResult:
    """
    Rows removed by one sweep pass.

    :param refresh_deleted: Expired or revoked refresh records.
    :param verification_deleted: Expired or used verification tokens.
    """

    refresh_deleted: int = 0
    verification_deleted: int = 0


class TokenSweeper(BaseService):
    """
    Fire-and-forget garbage collection of dead token rows.

    Not correctness-critical: failures are logged and swallowed so a broken
    sweep never affects request handling.

    :param refresh_store: Store whose expired/revoked records are purged.
    :param interval_seconds: Period for :meth:`start`; ``0`` disables it.
    :param app: Flask app whose context wraps each background pass.
    """

    def __init__(
        self,
        *,
        refresh_store: RefreshTokenStore,
        interval_seconds: int = 0,
        app=None,
    ) -> None:
        self.refresh_store = refresh_store
        self.interval_seconds = int(interval_seconds)
        self.app = app
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def sweep_once(self) -> SweepResult:
        """Run one pass. Database and Redis failures are logged, not raised."""
        now = self.now_utc()
        refresh_deleted = 0
        verification_deleted = 0
        try:
            refresh_deleted = self.refresh_store.delete_expired(now)
        except (SQLAlchemyError, RedisError):
            logger.exception("Refresh token sweep failed")
        try:
            with self.rw_uow() as uow:
                verification_deleted = uow.verification_tokens.delete_expired_or_used(now)
        except SQLAlchemyError:
            logger.exception("Verification token sweep failed")

        result = SweepResult(
            refresh_deleted=refresh_deleted, verification_deleted=verification_deleted
        )
        logger.info(
            "Token sweep finished",
            extra={
                "refresh_deleted": result.refresh_deleted,
                "verification_deleted": result.verification_deleted,
            },
        )
        return result

    # ------------------------------------------------------------------ #
    # Background loop
    # ------------------------------------------------------------------ #

    def start(self) -> bool:
        """
        Start the daemon thread. Returns ``False`` when disabled or already running.

        :meth:`stop` is registered with :mod:`atexit`.
        """
        if self.interval_seconds <= 0 or self._thread is not None:
            return False
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="token-sweeper", daemon=True)
        self._thread.start()
        atexit.register(self.stop)
        return True

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for the current pass to finish."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread.is_alive():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                if self.app is not None:
                    with self.app.app_context():
                        self.sweep_once()
                else:
                    self.sweep_once()
            except Exception:
                # Keep the thread alive; the next interval retries.
                logger.exception("Token sweep pass failed")
