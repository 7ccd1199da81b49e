# poagov/ports/notify.py
from __future__ import annotations

from typing import Protocol
from ..domain.notification import Notification


class Notifier(Protocol):
    """Port for delivering one governance notification (log line, email, ...)."""

    async def notify(self, notification: Notification) -> None:
        """Deliver the notification; delivery failures are the notifier's concern."""
