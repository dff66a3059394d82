from __future__ import annotations

import logging

from taskmanager.services._shared.ports.email_sender import EmailSender

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSender):
    """Default mail adapter: records that a verification link was issued.

    The link itself is a bearer credential and is not written to the log.
    """

    def send_verification(self, *, to: str, username: str, link: str) -> None:
        logger.info(
            "Verification email queued",
            extra={"reason": "verification", "target_id": username},
        )
