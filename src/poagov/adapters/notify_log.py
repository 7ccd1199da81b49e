from __future__ import annotations
import logging

from ..domain.notification import Notification
from ..ports.notify import Notifier

log = logging.getLogger(__name__)


class LogNotifier(Notifier):
    def __init__(self, log_emails: bool = False) -> None:
        self.log_emails = log_emails

    async def notify(self, notification: Notification) -> None:
        log.info(
            "notification ballot=%s ballot_id=%d block_number=%d contract=%s",
            notification.contract_name, notification.log.ballot_id,
            notification.block_number, notification.contract.address,
        )
        if self.log_emails:
            log.info("email body:\n%s", notification.email_text())
