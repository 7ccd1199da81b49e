# poagov/domain/errors.py
from __future__ import annotations


class PoagovError(Exception):
    """Base class for every failure raised by poagov."""


# ---------------------------- configuration ----------------------------------

class ConfigError(PoagovError):
    """Fatal, pre-flight configuration problem."""


class StartBlockExceedsLastMined(ConfigError):
    def __init__(self, start_block: int, last_mined_block: int) -> None:
        self.start_block = start_block
        self.last_mined_block = last_mined_block
        super().__init__(
            f"start block ({start_block}) exceeds the last mined block ({last_mined_block})"
        )


class TailUnderflow(ConfigError):
    def __init__(self, tail: int, last_mined_block: int) -> None:
        self.tail = tail
        self.last_mined_block = last_mined_block
        super().__init__(
            f"tail of {tail} blocks reaches past genesis (last mined block is {last_mined_block})"
        )


class EmissionV1NotSupported(ConfigError):
    def __init__(self) -> None:
        super().__init__("the emission-funds voting contract does not exist in version v1")


class InvalidAbi(ConfigError):
    pass


class InvalidContractAddress(ConfigError):
    pass


class InvalidStartBlock(ConfigError):
    pass


class MissingEnvVar(ConfigError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"missing environment variable: {name}")


# ---------------------------- network ----------------------------------------

class RpcError(PoagovError):
    """JSON-RPC call failed; carries the method name when known."""


class NetworkError(RpcError):
    pass


class ProtocolError(RpcError):
    pass


class RemoteError(RpcError):
    def __init__(self, method: str, code: int | None, message: str | None) -> None:
        self.method = method
        self.code = code
        self.message = message
        super().__init__(f"{method} RPC error code={code} message={message}")


# ---------------------------- decoding ---------------------------------------

class DecodeError(PoagovError):
    pass


class MalformedHex(DecodeError):
    pass


class MalformedEventLog(DecodeError):
    pass


class MalformedOutput(DecodeError):
    pass


class UnknownEnumCode(DecodeError):
    def __init__(self, enum_name: str, code: int) -> None:
        self.enum_name = enum_name
        self.code = code
        super().__init__(f"unrecognized {enum_name} code: {code}")
