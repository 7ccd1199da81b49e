from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .models import (
    BallotCreatedLog, BallotState, ContractDescriptor, EmissionBallotInfo, KeysBallotInfo,
    KeysVotingState, ProxyBallotInfo, ProxyVotingState, ThresholdBallotInfo, ThresholdVotingState,
)
from .value_types import ContractKind, Network

CONTRACT_NAMES: dict[ContractKind, str] = {
    ContractKind.KEYS:      "VotingToChangeKeys.sol",
    ContractKind.THRESHOLD: "VotingToChangeMinThreshold.sol",
    ContractKind.PROXY:     "VotingToChangeProxyAddress.sol",
    ContractKind.EMISSION:  "VotingToManageEmissionFunds.sol",
}

# (label, attribute) rows of the email body, per record type.
_ROWS: dict[type, tuple[tuple[str, str], ...]] = {
    KeysVotingState: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Affected Key", "affected_key"),
        ("Affected Key Type", "affected_key_type"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Number of Votes Required to Make Change", "min_threshold_of_voters"),
        ("Mining Key", "mining_key"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    ThresholdVotingState: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Proposed New Min. Threshold", "proposed_value"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Number of Votes Required to Make Change", "min_threshold_of_voters"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    ProxyVotingState: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Proposed New Proxy Address", "proposed_value"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Number of Votes Required for Change", "min_threshold_of_voters"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    KeysBallotInfo: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Affected Key", "affected_key"),
        ("Affected Key Type", "affected_key_type"),
        ("New Voting Key", "new_voting_key"),
        ("New Payout Key", "new_payout_key"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Mining Key", "mining_key"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    ThresholdBallotInfo: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Proposed New Min. Threshold", "proposed_value"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    ProxyBallotInfo: (
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Proposed New Proxy Address", "proposed_value"),
        ("Voting has Finished", "is_finalized"),
        ("Number of Votes Made", "total_voters"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
    EmissionBallotInfo: (
        ("Creation Time", "creation_time"),
        ("Voting Start Time", "start_time"),
        ("Voting End Time", "end_time"),
        ("Amount", "amount"),
        ("Burn Votes", "burn_votes"),
        ("Freeze Votes", "freeze_votes"),
        ("Send Votes", "send_votes"),
        ("Receiver", "receiver"),
        ("Voting was Canceled", "is_canceled"),
        ("Voting has Finished", "is_finalized"),
        ("Ballot Creator", "creator"),
        ("Memo", "memo"),
    ),
}


def _fmt(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S UTC")
    if isinstance(value, Enum):
        return value.name.replace("_", " ").title().replace(" ", "")
    return str(value)


@dataclass(slots=True, frozen=True)
class Notification:
    """One decoded ballot paired with the log that announced it."""
    network: Network
    endpoint: str
    contract: ContractDescriptor
    log: BallotCreatedLog
    state: BallotState

    @property
    def block_number(self) -> int:
        return self.log.block_number

    @property
    def contract_name(self) -> str:
        return CONTRACT_NAMES[self.contract.kind]

    def email_text(self) -> str:
        rows = [
            ("Network", self.network.value),
            ("RPC Endpoint", self.endpoint),
            ("Contract", f"{self.contract_name} ({self.contract.version.value})"),
            ("Contract Address", self.contract.address),
            ("Ballot ID", self.log.ballot_id),
            ("Ballot Type", self.log.ballot_type),
            ("Block Number", self.log.block_number),
        ]
        rows += [(label, getattr(self.state, attr)) for label, attr in _ROWS[type(self.state)]]
        return "".join(f"{label}: {_fmt(value)}\n" for label, value in rows)
