from __future__ import annotations
import asyncio, logging, smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Sequence

from ..domain.notification import Notification
from ..ports.notify import Notifier

log = logging.getLogger(__name__)

SUBJECT = "POA Network Governance Notification"

@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    username: str
    password: str = field(repr=False)
    sender: str
    timeout_s: float = 30.0


class SmtpNotifier(Notifier):
    """
    Emails each notification to every recipient over SMTP with STARTTLS.

    Sending is best-effort: a failure for one recipient is logged and the run
    continues. There is no retry.
    """

    def __init__(self, settings: SmtpSettings, recipients: Sequence[str]) -> None:
        self.settings = settings
        self.recipients = list(recipients)
        if not self.recipients:
            log.warning("email notifications enabled but no recipients are configured")

    def build_message(self, notification: Notification, recipient: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT
        msg["From"] = self.settings.sender
        msg["To"] = recipient
        msg.set_content(notification.email_text())
        return msg

    def _send(self, msg: EmailMessage) -> None:
        s = self.settings
        with smtplib.SMTP(s.host, s.port, timeout=s.timeout_s) as smtp:
            smtp.starttls()
            smtp.login(s.username, s.password)
            smtp.send_message(msg)

    async def notify(self, notification: Notification) -> None:
        for recipient in self.recipients:
            msg = self.build_message(notification, recipient)
            try:
                await asyncio.to_thread(self._send, msg)
            except (smtplib.SMTPException, OSError) as e:
                log.warning("failed to send email to %s (ballot %d): %s", recipient, notification.log.ballot_id, e)
            else:
                log.info("sent email to %s (ballot %d)", recipient, notification.log.ballot_id)
