import logging
import smtplib
from datetime import datetime, timezone

import pytest

from poagov.adapters import notify_smtp
from poagov.adapters.notify_log import LogNotifier
from poagov.adapters.notify_smtp import SUBJECT, SmtpNotifier, SmtpSettings
from poagov.domain.models import BallotCreatedLog, ThresholdVotingState
from poagov.domain.notification import Notification
from poagov.domain.value_types import BallotType, Network, QuorumState

from conftest import CREATOR

SETTINGS = SmtpSettings(host="smtp.test", port=587, username="bot", password="hunter2", sender="bot@poa.test")


@pytest.fixture
def notification(threshold_v1):
    state = ThresholdVotingState(
        start_time=datetime(2018, 5, 1, 12, 0, tzinfo=timezone.utc),
        end_time=datetime(2018, 5, 3, 12, 0, tzinfo=timezone.utc),
        total_voters=3, progress=2, is_finalized=False, quorum_state=QuorumState.IN_PROGRESS,
        index=0, min_threshold_of_voters=2, proposed_value=4, creator=CREATOR, memo="lower it",
    )
    log = BallotCreatedLog(block_number=2_000_001, ballot_id=7, ballot_type=BallotType.THRESHOLD, creator=CREATOR)
    return Notification(Network.CORE, "https://core.poa.test", threshold_v1, log, state)


def test_email_text(notification):
    text = notification.email_text()
    assert text.startswith("Network: core\nRPC Endpoint: https://core.poa.test\n")
    assert "Contract: VotingToChangeMinThreshold.sol (v1)\n" in text
    assert "Ballot ID: 7\n" in text
    assert "Ballot Type: Threshold\n" in text
    assert "Block Number: 2000001\n" in text
    assert "Voting Start Time: 2018-05-01 12:00:00 UTC\n" in text
    assert "Proposed New Min. Threshold: 4\n" in text
    assert f"Ballot Creator: {CREATOR}\n" in text
    assert "Voting has Finished: False\n" in text


@pytest.mark.asyncio
async def test_log_notifier(notification, caplog):
    caplog.set_level(logging.INFO, logger="poagov")
    await LogNotifier().notify(notification)
    [rec] = caplog.records
    assert "ballot_id=7" in rec.getMessage()
    assert "block_number=2000001" in rec.getMessage()
    assert "VotingToChangeMinThreshold.sol" in rec.getMessage()


@pytest.mark.asyncio
async def test_log_notifier_can_log_email_body(notification, caplog):
    caplog.set_level(logging.INFO, logger="poagov")
    await LogNotifier(log_emails=True).notify(notification)
    assert len(caplog.records) == 2
    assert "Proposed New Min. Threshold: 4" in caplog.records[1].getMessage()


class FakeSMTP:
    sent: list = []
    fail_for: set = set()

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.tls = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.tls = True

    def login(self, username, password):
        self.credentials = (username, password)

    def send_message(self, msg):
        if msg["To"] in self.fail_for:
            raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"no such user")})
        assert self.tls and self.credentials == ("bot", "hunter2")
        FakeSMTP.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.fail_for = set()
    monkeypatch.setattr(notify_smtp.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.mark.asyncio
async def test_smtp_sends_one_message_per_recipient(notification, fake_smtp):
    await SmtpNotifier(SETTINGS, ["a@poa.test", "b@poa.test"]).notify(notification)

    assert [m["To"] for m in fake_smtp.sent] == ["a@poa.test", "b@poa.test"]
    msg = fake_smtp.sent[0]
    assert msg["Subject"] == SUBJECT
    assert msg["From"] == "bot@poa.test"
    assert "Ballot ID: 7" in msg.get_content()


@pytest.mark.asyncio
async def test_smtp_failure_is_logged_not_raised(notification, fake_smtp, caplog):
    fake_smtp.fail_for = {"a@poa.test"}
    await SmtpNotifier(SETTINGS, ["a@poa.test", "b@poa.test"]).notify(notification)

    assert [m["To"] for m in fake_smtp.sent] == ["b@poa.test"]
    assert any(r.levelno == logging.WARNING and "a@poa.test" in r.getMessage() for r in caplog.records)


def test_smtp_without_recipients_warns(caplog):
    SmtpNotifier(SETTINGS, [])
    assert any(r.levelno == logging.WARNING and "no recipients" in r.getMessage() for r in caplog.records)


def test_smtp_settings_hide_password():
    assert "hunter2" not in repr(SETTINGS)
