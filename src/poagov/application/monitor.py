from __future__ import annotations
import logging
from typing import Iterable, Sequence

from ..domain.models import ContractDescriptor
from ..domain.notification import Notification
from ..domain.value_types import Network
from ..ports.notify import Notifier
from ..ports.rpc import RPCClient
from .ballots import BallotReader
from .block_windows import BlockWindowIterator, StartBlock
from .cancellation import CancellationToken

log = logging.getLogger(__name__)


def merge_by_block(notifications: Iterable[Notification]) -> list[Notification]:
    """Stable ascending sort by block number; ties keep contract order."""
    return sorted(notifications, key=lambda n: n.block_number)


async def run_monitor(
    *,
    rpc: RPCClient,
    contracts: Sequence[ContractDescriptor],
    start_block: StartBlock,
    poll_interval: float,
    token: CancellationToken,
    notifiers: Sequence[Notifier],
    network: Network,
    endpoint: str,
    notification_limit: int | None = None,
) -> int:
    """
    Poll for new `BallotCreated` logs on every contract and deliver one
    notification per ballot, oldest block first. Returns the number delivered.

    Ends normally on cancellation or when `notification_limit` is reached; any
    RPC or decode failure propagates.
    """
    reader = BallotReader(rpc)
    delivered = 0
    windows = await BlockWindowIterator.start(rpc, start_block, poll_interval, token)
    log.info("monitoring %d contract(s) on %s from block %d", len(contracts), network.value, windows.start_block)

    async for window in windows:
        batch: list[Notification] = []
        for contract in contracts:
            for ballot in await reader.ballot_created_logs(contract, window):
                state = await reader.ballot_state(contract, ballot)
                batch.append(Notification(network, endpoint, contract, ballot, state))

        for notification in merge_by_block(batch):
            if notification_limit is not None and delivered >= notification_limit:
                log.info("notification limit reached (%d)", notification_limit)
                return delivered
            for notifier in notifiers:
                await notifier.notify(notification)
            delivered += 1

        log.info("finished checking blocks %d..%d (%d blocks)", window.start, window.stop, window.span())
        if notification_limit is not None and delivered >= notification_limit:
            log.info("notification limit reached (%d)", notification_limit)
            return delivered

    log.info("monitor stopped after %d notification(s)", delivered)
    return delivered
