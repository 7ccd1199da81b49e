# poagov/ports/rpc.py
from __future__ import annotations

from typing import Any, Protocol
from ..domain.models import RawLog
from ..domain.value_types import Address, Topic0


class RPCClient(Protocol):
    """Port defining the contract for an Ethereum JSON-RPC client."""

    async def call(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC 2.0 request and return its `result`."""

    async def last_mined_block_number(self) -> int:
        """Return the last mined block number as an integer."""

    async def get_logs(
        self,
        address: Address,
        topic0: Topic0,
        from_block: int,
        to_block: int,
    ) -> list[RawLog]:
        """Return typed logs for [from_block, to_block] inclusive."""

    async def call_contract(self, to: Address, data: str) -> str:
        """Run a read-only call against the latest block; return the 0x-hex output."""
