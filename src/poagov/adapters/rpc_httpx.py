from __future__ import annotations
import logging
from typing import Any

import httpx

from ..domain.errors import MalformedHex, NetworkError, ProtocolError, RemoteError
from ..domain.models import RawLog
from ..domain.numeric import hex_to_u64
from ..domain.value_types import Address, Topic0
from ..ports.rpc import RPCClient

log = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
REQUEST_ID = 1

def _to_hex_block(n: int) -> str: return hex(int(n))
def _is_topic_hash(x: str) -> bool: return isinstance(x, str) and x.startswith("0x") and len(x)==66

def _to_raw_log(rl: Any) -> RawLog:
    if not isinstance(rl, dict):
        raise ProtocolError(f"eth_getLogs entry is not an object: {rl!r}")
    try:
        return RawLog(
            address=Address(rl["address"].lower()),
            topics=tuple(t.lower() for t in rl.get("topics", [])),
            data_hex=rl.get("data") or "0x",
            block_number=hex_to_u64(rl["blockNumber"]),
            tx_hash=(rl.get("transactionHash") or "").lower(),
            log_index=hex_to_u64(rl["logIndex"]) if rl.get("logIndex") else 0,
        )
    except (KeyError, AttributeError, MalformedHex) as e:
        # pending logs come back with null blockNumber/logIndex
        raise ProtocolError(f"malformed eth_getLogs entry ({type(e).__name__}: {e}): {rl!r}") from e

class HttpxRPC(RPCClient):
    def __init__(self, rpc_url: str, timeout_s: int = 20, client: httpx.AsyncClient | None = None) -> None:
        self.rpc_url = rpc_url
        self.client = client or httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(timeout_s),
        )

    async def __aenter__(self) -> "HttpxRPC":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": JSONRPC_VERSION, "method": method, "params": params, "id": REQUEST_ID}
        log.debug("rpc request %s %s", method, params)
        try:
            r = await self.client.post(self.rpc_url, json=payload)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} request to {self.rpc_url} failed: {type(e).__name__}: {e}") from e
        try:
            data = r.json()
        except ValueError as e:
            raise ProtocolError(f"{method} response is not JSON: {r.text[:200]!r}") from e
        if not isinstance(data, dict):
            # a batch (list) reply to a single call is a protocol violation too
            raise ProtocolError(f"{method} response is not a single JSON-RPC object: {data!r:.200}")
        if data.get("error") is not None:
            err = data["error"]
            if isinstance(err, dict):
                raise RemoteError(method, err.get("code"), err.get("message"))
            raise RemoteError(method, None, str(err))
        if "result" not in data:
            raise ProtocolError(f"{method} response has neither `result` nor `error`: {data!r:.200}")
        return data["result"]

    async def last_mined_block_number(self) -> int:
        res = await self.call("eth_blockNumber", [])
        if not isinstance(res, str):
            raise ProtocolError(f"eth_blockNumber returned a non-string result: {res!r}")
        return hex_to_u64(res)

    async def get_logs(self, address: Address, topic0: Topic0, from_block: int, to_block: int) -> list[RawLog]:
        t0 = str(topic0).strip().lower()
        if not _is_topic_hash(t0):
            raise ValueError(f"Invalid topic0: {topic0}")
        res = await self.call("eth_getLogs", [{
            "address": str(address),
            "fromBlock": _to_hex_block(from_block),
            "toBlock": _to_hex_block(to_block),
            "topics": [t0],
        }])
        if not isinstance(res, list):
            raise ProtocolError(f"eth_getLogs returned a non-array result: {res!r:.200}")
        return [_to_raw_log(rl) for rl in res]

    async def call_contract(self, to: Address, data: str) -> str:
        res = await self.call("eth_call", [{"to": str(to), "data": data}, "latest"])
        if not isinstance(res, str):
            raise ProtocolError(f"eth_call returned a non-string result: {res!r}")
        return res
