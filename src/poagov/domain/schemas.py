"""
Output tuples of the ballot-state functions, one ordered table per
(contract kind, protocol version). Field order mirrors the deployed
contracts' declared outputs; the decoder never uses positional indices.

V1 `votingState(uint256)`:
  keys       VotingToChangeKeys.sol             (aa45e19, L22)
  threshold  VotingToChangeMinThreshold.sol     (aa45e19, L20)
  proxy      VotingToChangeProxyAddress.sol     (aa45e19, L19)

V2 `getBallotInfo(uint256[, address])`:
  keys       VotingToChangeKeys.sol             (ec30706, L7)
  threshold  VotingToChangeMinThreshold.sol     (ec30706, L30)
  proxy      VotingToChangeProxyAddress.sol     (ec30706, L30)
  emission   VotingToManageEmissionFunds.sol    (ec30706, L126)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import (
    EmissionBallotInfo, KeysBallotInfo, KeysVotingState, ProxyBallotInfo, ProxyVotingState,
    ThresholdBallotInfo, ThresholdVotingState,
)
from .value_types import ContractKind, ContractVersion


class FieldKind(Enum):
    TIMESTAMP = "timestamp"
    UINT = "uint"
    ADDRESS = "address"
    BOOL = "bool"
    STRING = "string"
    KEY_TYPE = "key_type"
    BALLOT_TYPE = "ballot_type"
    QUORUM_STATE = "quorum_state"
    PROGRESS = "progress"          # signed reinterpretation against `total_voters`


# ABI type prefixes a declared output may use for each field kind.
ACCEPTED_ABI_TYPES: dict[FieldKind, tuple[str, ...]] = {
    FieldKind.TIMESTAMP:    ("uint",),
    FieldKind.UINT:         ("uint",),
    FieldKind.ADDRESS:      ("address",),
    FieldKind.BOOL:         ("bool",),
    FieldKind.STRING:       ("string",),
    FieldKind.KEY_TYPE:     ("uint",),
    FieldKind.BALLOT_TYPE:  ("uint",),
    FieldKind.QUORUM_STATE: ("uint",),
    FieldKind.PROGRESS:     ("uint", "int"),
}


@dataclass(slots=True, frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind


@dataclass(slots=True, frozen=True)
class OutputSchema:
    function: str
    fields: tuple[FieldSpec, ...]
    record: type

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)


def _f(name: str, kind: FieldKind) -> FieldSpec:
    return FieldSpec(name, kind)


TS, U, A, B, S = FieldKind.TIMESTAMP, FieldKind.UINT, FieldKind.ADDRESS, FieldKind.BOOL, FieldKind.STRING

VOTING_STATE = "votingState"
BALLOT_INFO = "getBallotInfo"

KEYS_V1 = OutputSchema(VOTING_STATE, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("affected_key", A),
    _f("affected_key_type", FieldKind.KEY_TYPE),
    _f("mining_key", A),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("quorum_state", FieldKind.QUORUM_STATE),
    _f("ballot_type", FieldKind.BALLOT_TYPE),
    _f("index", U),
    _f("min_threshold_of_voters", U),
    _f("creator", A),
    _f("memo", S),
), KeysVotingState)

THRESHOLD_V1 = OutputSchema(VOTING_STATE, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("quorum_state", FieldKind.QUORUM_STATE),
    _f("index", U),
    _f("min_threshold_of_voters", U),
    _f("proposed_value", U),
    _f("creator", A),
    _f("memo", S),
), ThresholdVotingState)

PROXY_V1 = OutputSchema(VOTING_STATE, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("quorum_state", FieldKind.QUORUM_STATE),
    _f("index", U),
    _f("min_threshold_of_voters", U),
    _f("proposed_value", A),
    _f("contract_type", U),
    _f("creator", A),
    _f("memo", S),
), ProxyVotingState)

KEYS_V2 = OutputSchema(BALLOT_INFO, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("affected_key", A),
    _f("affected_key_type", FieldKind.KEY_TYPE),
    _f("new_voting_key", A),
    _f("new_payout_key", A),
    _f("mining_key", A),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("ballot_type", FieldKind.BALLOT_TYPE),
    _f("creator", A),
    _f("memo", S),
    _f("can_be_finalized_now", B),
), KeysBallotInfo)

THRESHOLD_V2 = OutputSchema(BALLOT_INFO, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("proposed_value", U),
    _f("creator", A),
    _f("memo", S),
    _f("can_be_finalized_now", B),
), ThresholdBallotInfo)

PROXY_V2 = OutputSchema(BALLOT_INFO, (
    _f("start_time", TS),
    _f("end_time", TS),
    _f("total_voters", U),
    _f("progress", FieldKind.PROGRESS),
    _f("is_finalized", B),
    _f("proposed_value", A),
    _f("contract_type", U),
    _f("creator", A),
    _f("memo", S),
    _f("can_be_finalized_now", B),
), ProxyBallotInfo)

EMISSION_V2 = OutputSchema(BALLOT_INFO, (
    _f("creation_time", TS),
    _f("start_time", TS),
    _f("end_time", TS),
    _f("is_canceled", B),
    _f("is_finalized", B),
    _f("creator", A),
    _f("memo", S),
    _f("amount", U),
    _f("burn_votes", U),
    _f("freeze_votes", U),
    _f("send_votes", U),
    _f("receiver", A),
), EmissionBallotInfo)

# No (emission, v1) entry: the contract does not exist at that version.
SCHEMAS: dict[tuple[ContractKind, ContractVersion], OutputSchema] = {
    (ContractKind.KEYS,      ContractVersion.V1): KEYS_V1,
    (ContractKind.THRESHOLD, ContractVersion.V1): THRESHOLD_V1,
    (ContractKind.PROXY,     ContractVersion.V1): PROXY_V1,
    (ContractKind.KEYS,      ContractVersion.V2): KEYS_V2,
    (ContractKind.THRESHOLD, ContractVersion.V2): THRESHOLD_V2,
    (ContractKind.PROXY,     ContractVersion.V2): PROXY_V2,
    (ContractKind.EMISSION,  ContractVersion.V2): EMISSION_V2,
}
