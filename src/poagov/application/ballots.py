from __future__ import annotations
import logging

from ..domain.decoding import (
    BALLOT_CREATED, decode_ballot_created_log, decode_ballot_state, encode_call, event_topic0,
)
from ..domain.errors import EmissionV1NotSupported, InvalidAbi
from ..domain.models import (
    BallotCreatedLog, BallotInfo, BallotState, BlockWindow, ContractDescriptor, VotingState,
)
from ..domain.numeric import hex_to_bytes
from ..domain.schemas import BALLOT_INFO, SCHEMAS
from ..domain.value_types import ContractVersion, ZERO_ADDRESS
from ..ports.rpc import RPCClient

log = logging.getLogger(__name__)


class BallotReader:
    """Reads `BallotCreated` logs and ballot state from the governance contracts."""

    def __init__(self, rpc: RPCClient) -> None:
        self.rpc = rpc

    async def ballot_created_logs(self, contract: ContractDescriptor, window: BlockWindow) -> list[BallotCreatedLog]:
        event_abi = contract.event(BALLOT_CREATED)
        raw = await self.rpc.get_logs(contract.address, event_topic0(event_abi), window.start, window.stop)
        logs = [decode_ballot_created_log(event_abi, rl) for rl in raw]
        log.debug("%s: %d %s logs in blocks %d..%d", contract, len(logs), BALLOT_CREATED, window.start, window.stop)
        return logs

    async def voting_state(self, contract: ContractDescriptor, ballot_id: int) -> VotingState:
        """V1 `votingState(uint256)`."""
        schema = SCHEMAS.get((contract.kind, ContractVersion.V1))
        if schema is None:
            raise EmissionV1NotSupported()
        fn = contract.function(schema.function)
        return await self._call(contract, fn, schema, [ballot_id])

    async def ballot_info(self, contract: ContractDescriptor, ballot_id: int) -> BallotInfo:
        """
        V2 `getBallotInfo`. Some deployments take a second `_votingKey` argument
        (used only for the trailing `alreadyVoted` output); the zero address is
        passed for it.
        """
        if contract.version is not ContractVersion.V2:
            raise InvalidAbi(f"{contract} has no {BALLOT_INFO}: it is a v1 contract")
        schema = SCHEMAS[(contract.kind, ContractVersion.V2)]
        fn = contract.function(schema.function)
        args: list[object] = [ballot_id]
        if len(fn.get("inputs", [])) == 2:
            args.append(ZERO_ADDRESS)
        return await self._call(contract, fn, schema, args)

    async def ballot_state(self, contract: ContractDescriptor, ballot: BallotCreatedLog) -> BallotState:
        if contract.version is ContractVersion.V1:
            return await self.voting_state(contract, ballot.ballot_id)
        return await self.ballot_info(contract, ballot.ballot_id)

    async def _call(self, contract, fn, schema, args) -> BallotState:
        out = await self.rpc.call_contract(contract.address, encode_call(fn, args))
        return decode_ballot_state(fn, schema, hex_to_bytes(out))

