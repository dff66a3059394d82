from __future__ import annotations

from typing import Protocol


class EmailSender(Protocol):
    """Port for delivering account verification links."""

    def send_verification(self, *, to: str, username: str, link: str) -> None: ...


class RecordingEmailSender(EmailSender):
    """Keeps sent messages in memory; used by tests."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    def send_verification(self, *, to: str, username: str, link: str) -> None:
        self.sent.append({"to": to, "username": username, "link": link})
