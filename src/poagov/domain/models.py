from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Union

from .errors import EmissionV1NotSupported, InvalidAbi
from .value_types import (
    Address, BallotType, ContractKind, ContractVersion, KeyType, QuorumState, Topic0,
)

@dataclass(slots=True, frozen=True)
class BlockWindow:
    start: int
    stop: int
    def span(self) -> int: return self.stop - self.start + 1

@dataclass(slots=True, frozen=True)
class RawLog:
    address: Address
    topics: tuple[str, ...]        # lowercased with 0x, topics[0] is the event signature
    data_hex: str
    block_number: int
    tx_hash: str
    log_index: int

    @property
    def topic0(self) -> Topic0 | None:
        return Topic0(self.topics[0]) if self.topics else None

@dataclass(frozen=True)
class ContractDescriptor:
    kind: ContractKind
    version: ContractVersion
    address: Address
    abi: list[dict[str, Any]] = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind is ContractKind.EMISSION and self.version is ContractVersion.V1:
            raise EmissionV1NotSupported()

    def _entry(self, type_: str, name: str) -> dict[str, Any]:
        for entry in self.abi:
            if entry.get("type") == type_ and entry.get("name") == name:
                return entry
        raise InvalidAbi(f"{self.kind.value} {self.version.value} ABI has no {type_} named {name!r}")

    def event(self, name: str) -> dict[str, Any]:
        return self._entry("event", name)

    def function(self, name: str) -> dict[str, Any]:
        return self._entry("function", name)

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.version.value}@{self.address}"

@dataclass(slots=True, frozen=True)
class BallotCreatedLog:
    block_number: int
    ballot_id: int
    ballot_type: BallotType
    creator: Address


# ---------------------------- V1: votingState --------------------------------

@dataclass(slots=True, frozen=True)
class KeysVotingState:
    kind: ClassVar[ContractKind] = ContractKind.KEYS
    start_time: datetime
    end_time: datetime
    affected_key: Address
    affected_key_type: KeyType
    mining_key: Address
    total_voters: int
    progress: int
    is_finalized: bool
    quorum_state: QuorumState
    ballot_type: BallotType
    index: int
    min_threshold_of_voters: int
    creator: Address
    memo: str

@dataclass(slots=True, frozen=True)
class ThresholdVotingState:
    kind: ClassVar[ContractKind] = ContractKind.THRESHOLD
    start_time: datetime
    end_time: datetime
    total_voters: int
    progress: int
    is_finalized: bool
    quorum_state: QuorumState
    index: int
    min_threshold_of_voters: int
    proposed_value: int
    creator: Address
    memo: str

@dataclass(slots=True, frozen=True)
class ProxyVotingState:
    kind: ClassVar[ContractKind] = ContractKind.PROXY
    start_time: datetime
    end_time: datetime
    total_voters: int
    progress: int
    is_finalized: bool
    quorum_state: QuorumState
    index: int
    min_threshold_of_voters: int
    proposed_value: Address
    contract_type: int
    creator: Address
    memo: str

VotingState = Union[KeysVotingState, ThresholdVotingState, ProxyVotingState]


# ---------------------------- V2: getBallotInfo ------------------------------

@dataclass(slots=True, frozen=True)
class KeysBallotInfo:
    kind: ClassVar[ContractKind] = ContractKind.KEYS
    start_time: datetime
    end_time: datetime
    affected_key: Address
    affected_key_type: KeyType
    new_voting_key: Address
    new_payout_key: Address
    mining_key: Address
    total_voters: int
    progress: int
    is_finalized: bool
    ballot_type: BallotType
    creator: Address
    memo: str
    can_be_finalized_now: bool

@dataclass(slots=True, frozen=True)
class ThresholdBallotInfo:
    kind: ClassVar[ContractKind] = ContractKind.THRESHOLD
    start_time: datetime
    end_time: datetime
    total_voters: int
    progress: int
    is_finalized: bool
    proposed_value: int
    creator: Address
    memo: str
    can_be_finalized_now: bool

@dataclass(slots=True, frozen=True)
class ProxyBallotInfo:
    kind: ClassVar[ContractKind] = ContractKind.PROXY
    start_time: datetime
    end_time: datetime
    total_voters: int
    progress: int
    is_finalized: bool
    proposed_value: Address
    contract_type: int
    creator: Address
    memo: str
    can_be_finalized_now: bool

@dataclass(slots=True, frozen=True)
class EmissionBallotInfo:
    kind: ClassVar[ContractKind] = ContractKind.EMISSION
    creation_time: datetime
    start_time: datetime
    end_time: datetime
    is_canceled: bool
    is_finalized: bool
    creator: Address
    memo: str
    amount: int
    burn_votes: int
    freeze_votes: int
    send_votes: int
    receiver: Address

BallotInfo = Union[KeysBallotInfo, ThresholdBallotInfo, ProxyBallotInfo, EmissionBallotInfo]

BallotState = Union[VotingState, BallotInfo]
