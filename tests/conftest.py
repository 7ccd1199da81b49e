from __future__ import annotations
from typing import Any, Callable, Sequence

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from poagov.config import load_abi
from poagov.domain.decoding import BALLOT_CREATED, event_topic0
from poagov.domain.models import ContractDescriptor, RawLog
from poagov.domain.value_types import Address, ContractKind, ContractVersion

CREATOR = to_checksum_address("0x82e4e61e7f5139ff0a4157a5bc687ef42294c248")

ADDRESSES = {
    ContractKind.KEYS:      Address(to_checksum_address("0x" + "11" * 20)),
    ContractKind.THRESHOLD: Address(to_checksum_address("0x" + "22" * 20)),
    ContractKind.PROXY:     Address(to_checksum_address("0x" + "33" * 20)),
    ContractKind.EMISSION:  Address(to_checksum_address("0x" + "44" * 20)),
}


def contract(kind: ContractKind, version: ContractVersion) -> ContractDescriptor:
    return ContractDescriptor(kind, version, ADDRESSES[kind], load_abi(kind, version))


def ballot_created(c: ContractDescriptor, block: int, ballot_id: int, ballot_type: int,
                   creator: str = CREATOR, log_index: int = 0) -> RawLog:
    """A raw `BallotCreated` log as an RPC node would return it."""
    topics = (
        event_topic0(c.event(BALLOT_CREATED)),
        "0x" + encode(["uint256"], [ballot_id]).hex(),
        "0x" + encode(["uint256"], [ballot_type]).hex(),
        "0x" + encode(["address"], [creator]).hex(),
    )
    return RawLog(
        address=Address(c.address.lower()),
        topics=topics,
        data_hex="0x",
        block_number=block,
        tx_hash="0x" + f"{block:064x}",
        log_index=log_index,
    )


def encode_outputs(fn_abi: dict[str, Any], values: Sequence[Any]) -> str:
    return "0x" + encode([o["type"] for o in fn_abi["outputs"]], list(values)).hex()


class FakeRPC:
    """
    In-memory RPCClient. `heads` are returned one per `last_mined_block_number`
    call; the last one repeats, and `on_exhausted` fires every time it does.
    """

    def __init__(self, heads: Sequence[int] = (0,), logs: Sequence[RawLog] = (),
                 outputs: dict[str, str | Callable[[str], str]] | None = None,
                 on_exhausted: Callable[[], None] | None = None) -> None:
        self.heads = list(heads)
        self.logs = list(logs)
        self.outputs = outputs or {}
        self.on_exhausted = on_exhausted
        self.requests: list[tuple[Any, ...]] = []

    async def call(self, method: str, params: list[Any]) -> Any:
        raise NotImplementedError(method)

    async def last_mined_block_number(self) -> int:
        self.requests.append(("eth_blockNumber",))
        if len(self.heads) > 1:
            return self.heads.pop(0)
        if self.on_exhausted is not None:
            self.on_exhausted()
        return self.heads[0]

    async def get_logs(self, address, topic0, from_block, to_block) -> list[RawLog]:
        self.requests.append(("eth_getLogs", address, topic0, from_block, to_block))
        return [
            rl for rl in self.logs
            if rl.address == address.lower() and rl.topic0 == topic0 and from_block <= rl.block_number <= to_block
        ]

    async def call_contract(self, to, data) -> str:
        self.requests.append(("eth_call", to, data))
        out = self.outputs[to]
        return out(data) if callable(out) else out

    def count(self, method: str) -> int:
        return sum(1 for r in self.requests if r[0] == method)


@pytest.fixture
def keys_v2() -> ContractDescriptor:
    return contract(ContractKind.KEYS, ContractVersion.V2)

@pytest.fixture
def threshold_v1() -> ContractDescriptor:
    return contract(ContractKind.THRESHOLD, ContractVersion.V1)

@pytest.fixture
def threshold_v2() -> ContractDescriptor:
    return contract(ContractKind.THRESHOLD, ContractVersion.V2)

@pytest.fixture
def emission_v2() -> ContractDescriptor:
    return contract(ContractKind.EMISSION, ContractVersion.V2)
