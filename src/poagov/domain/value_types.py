from __future__ import annotations
from enum import Enum, IntEnum
from typing import NewType

from .errors import UnknownEnumCode

Address = NewType("Address", str)   # 0x-prefixed, EIP-55 checksum
Topic0  = NewType("Topic0", str)    # 66-char 0x-hash

ZERO_ADDRESS = Address("0x0000000000000000000000000000000000000000")


class Network(str, Enum):
    CORE = "core"
    SOKOL = "sokol"
    XDAI = "xdai"


class ContractKind(str, Enum):
    KEYS = "keys"
    THRESHOLD = "threshold"
    PROXY = "proxy"
    EMISSION = "emission"


class ContractVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


class _CodedEnum(IntEnum):
    """On-chain enum; conversion from a raw code is fallible."""

    @classmethod
    def from_code(cls, code: int):
        try:
            return cls(int(code))
        except ValueError:
            raise UnknownEnumCode(cls.__name__, int(code)) from None


# Same codes in the V1 event/votingState and the V2 EnumBallotTypes.
class BallotType(_CodedEnum):
    INVALID_KEY = 0
    ADD_KEY = 1
    REMOVE_KEY = 2
    SWAP_KEY = 3
    THRESHOLD = 4
    PROXY = 5
    EMISSION = 6


class KeyType(_CodedEnum):
    INVALID_KEY = 0
    MINING_KEY = 1
    VOTING_KEY = 2
    PAYOUT_KEY = 3


class QuorumState(_CodedEnum):
    INVALID = 0
    IN_PROGRESS = 1
    ACCEPTED = 2
    REJECTED = 3
