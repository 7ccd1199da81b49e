from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Literal

from ..domain.errors import InvalidStartBlock, MalformedHex, StartBlockExceedsLastMined, TailUnderflow
from ..domain.models import BlockWindow
from ..domain.numeric import hex_to_u64
from ..ports.rpc import RPCClient
from .cancellation import CancellationToken

log = logging.getLogger(__name__)

StartPolicy = Literal["earliest", "latest", "number", "tail"]

@dataclass(slots=True, frozen=True)
class StartBlock:
    policy: StartPolicy
    value: int = 0

    @classmethod
    def earliest(cls) -> "StartBlock": return cls("earliest")
    @classmethod
    def latest(cls) -> "StartBlock": return cls("latest")
    @classmethod
    def number(cls, n: int) -> "StartBlock": return cls("number", n)
    @classmethod
    def tail(cls, k: int) -> "StartBlock": return cls("tail", k)

    @classmethod
    def parse(cls, s: str) -> "StartBlock":
        """`earliest`, `latest`, `-k` (tail), `0x..` (hex) or a decimal block number."""
        s = s.strip().lower()
        if s == "earliest": return cls.earliest()
        if s == "latest": return cls.latest()
        try:
            if s.startswith("-") and re.fullmatch(r"-\d+", s):
                return cls.tail(int(s[1:]))
            if s.startswith("0x"):
                return cls.number(hex_to_u64(s))
            if re.fullmatch(r"\d+", s):
                return cls.number(int(s))
        except MalformedHex:
            pass
        raise InvalidStartBlock(f"invalid start block: {s!r}")

    def resolve(self, last_mined: int) -> int:
        if self.policy == "earliest": return 0
        if self.policy == "latest": return last_mined
        if self.policy == "number": return self.value
        if self.value > last_mined:
            raise TailUnderflow(self.value, last_mined)
        return last_mined - self.value


class BlockWindowIterator:
    """
    Lazy, single-use async sequence of new-block windows [start, stop].

    Windows are contiguous and non-overlapping. Between windows the iterator
    sleeps `poll_interval` seconds at a time until the chain has advanced; the
    sequence ends (without error) as soon as `token` is cancelled.
    """

    def __init__(self, rpc: RPCClient, start: int, last_mined: int, poll_interval: float,
                 token: CancellationToken) -> None:
        if start > last_mined:
            raise StartBlockExceedsLastMined(start, last_mined)
        self.rpc = rpc
        self.start_block = start
        self.stop_block = last_mined
        self.poll_interval = poll_interval
        self.token = token
        self._first = True
        self._done = False

    @classmethod
    async def start(cls, rpc: RPCClient, start_block: StartBlock, poll_interval: float,
                    token: CancellationToken) -> "BlockWindowIterator":
        last_mined = await rpc.last_mined_block_number()
        start = start_block.resolve(last_mined)
        log.debug("resolved %s start block to %d (last mined %d)", start_block.policy, start, last_mined)
        return cls(rpc, start, last_mined, poll_interval, token)

    def __aiter__(self) -> "BlockWindowIterator":
        return self

    async def __anext__(self) -> BlockWindow:
        if self._done:
            raise StopAsyncIteration
        if self._first:
            self._first = False
        else:
            self.start_block = self.stop_block + 1
            while self.start_block >= self.stop_block:
                if not await self.token.sleep(self.poll_interval):
                    self._done = True
                    raise StopAsyncIteration
                self.stop_block = await self.rpc.last_mined_block_number()
        if self.token.cancelled:
            self._done = True
            raise StopAsyncIteration
        return BlockWindow(self.start_block, self.stop_block)
