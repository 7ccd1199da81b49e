from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode as abi_decode, encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import event_abi_to_log_topic, function_abi_to_4byte_selector, to_checksum_address

from .errors import InvalidAbi, MalformedEventLog, MalformedOutput
from .models import BallotCreatedLog, BallotState, RawLog
from .numeric import hex_to_bytes, reinterpret_signed_vote_progress, u256_to_timestamp
from .schemas import ACCEPTED_ABI_TYPES, FieldKind, OutputSchema
from .value_types import Address, BallotType, KeyType, QuorumState, Topic0


BALLOT_CREATED = "BallotCreated"

# ---------- scalar converters ------------------------------------------------

def _addr(v: Any) -> Address:
    return Address(to_checksum_address(v))

def _text(v: bytes) -> str:
    return v.decode("utf-8", "replace")

_CONVERTERS = {
    FieldKind.TIMESTAMP:    u256_to_timestamp,
    FieldKind.UINT:         int,
    FieldKind.ADDRESS:      _addr,
    FieldKind.BOOL:         bool,
    FieldKind.STRING:       _text,
    FieldKind.KEY_TYPE:     KeyType.from_code,
    FieldKind.BALLOT_TYPE:  BallotType.from_code,
    FieldKind.QUORUM_STATE: QuorumState.from_code,
}

# ---------- selectors / topics -----------------------------------------------

def event_topic0(event_abi: dict[str, Any]) -> Topic0:
    return Topic0("0x" + event_abi_to_log_topic(event_abi).hex())

def encode_call(fn_abi: dict[str, Any], args: Sequence[Any]) -> str:
    """4-byte selector + ABI-encoded arguments, as 0x-hex `data` for eth_call."""
    types = [i["type"] for i in fn_abi.get("inputs", [])]
    if len(types) != len(args):
        raise InvalidAbi(f"{fn_abi.get('name')} takes {len(types)} inputs, got {len(args)} arguments")
    try:
        encoded = abi_encode(types, list(args))
    except EncodingError as e:
        raise InvalidAbi(f"cannot encode {fn_abi.get('name')}{tuple(types)}: {e}") from e
    return "0x" + (function_abi_to_4byte_selector(fn_abi) + encoded).hex()

# ---------- function outputs -------------------------------------------------

def _check_declared_outputs(fn_abi: dict[str, Any], schema: OutputSchema) -> list[str]:
    outputs = fn_abi.get("outputs", [])
    name = fn_abi.get("name")
    if len(outputs) < len(schema.fields):
        raise MalformedOutput(
            f"{name} declares {len(outputs)} outputs, expected at least {len(schema.fields)}"
        )
    types = [o["type"] for o in outputs]
    for fs, typ in zip(schema.fields, types):
        if "[" in typ or not typ.startswith(ACCEPTED_ABI_TYPES[fs.kind]):
            raise MalformedOutput(f"{name} output {fs.name!r} is declared {typ}, expected {fs.kind.value}")
    return types

def decode_output(fn_abi: dict[str, Any], schema: OutputSchema, data: bytes) -> dict[str, Any]:
    """
    Decode the declared output tuple and convert it field by field according to
    `schema`. Declared outputs past the end of the schema are decoded and dropped.
    """
    types = _check_declared_outputs(fn_abi, schema)
    # same head/tail layout as `string`; memos are user input and may not be valid UTF-8
    wire = ["bytes" if t == "string" else t for t in types]
    try:
        values = abi_decode(wire, data)
    except (DecodingError, UnicodeDecodeError) as e:
        raise MalformedOutput(f"{fn_abi.get('name')}: cannot decode {len(data)} bytes as {types}: {e}") from e

    raw = dict(zip(schema.names, values))
    out: dict[str, Any] = {}
    for fs in schema.fields:
        if fs.kind is FieldKind.PROGRESS:
            out[fs.name] = reinterpret_signed_vote_progress(raw[fs.name], int(raw["total_voters"]))
        else:
            out[fs.name] = _CONVERTERS[fs.kind](raw[fs.name])
    return out

def decode_ballot_state(fn_abi: dict[str, Any], schema: OutputSchema, data: bytes) -> BallotState:
    return schema.record(**decode_output(fn_abi, schema, data))

# ---------- event logs -------------------------------------------------------

def _log_context(log: RawLog) -> str:
    return f"block={log.block_number} tx={log.tx_hash} log_index={log.log_index} address={log.address}"

def decode_event_params(event_abi: dict[str, Any], log: RawLog) -> dict[str, Any]:
    """Name -> decoded value for every input of `event_abi`, indexed ones read from topics."""
    expected = event_topic0(event_abi)
    if log.topic0 != expected:
        raise MalformedEventLog(f"topic0 {log.topic0} is not {event_abi.get('name')} ({expected}); {_log_context(log)}")

    inputs = event_abi.get("inputs", [])
    indexed = [i for i in inputs if i.get("indexed")]
    plain = [i for i in inputs if not i.get("indexed")]
    topics = log.topics[1:]
    if len(topics) != len(indexed):
        raise MalformedEventLog(
            f"{len(topics)} indexed topics for {len(indexed)} indexed inputs; {_log_context(log)}"
        )

    params: dict[str, Any] = {}
    try:
        for inp, topic in zip(indexed, topics):
            (params[inp["name"]],) = abi_decode([inp["type"]], hex_to_bytes(topic))
        if plain:
            values = abi_decode([i["type"] for i in plain], hex_to_bytes(log.data_hex))
            params.update(zip((i["name"] for i in plain), values))
    except (DecodingError, UnicodeDecodeError) as e:
        raise MalformedEventLog(f"{e}; {_log_context(log)}") from e
    return params

def decode_ballot_created_log(event_abi: dict[str, Any], log: RawLog) -> BallotCreatedLog:
    ballot_id: int | None = None
    ballot_type: BallotType | None = None
    creator: Address | None = None
    for name, value in decode_event_params(event_abi, log).items():
        if name == "id":
            ballot_id = int(value)
        elif name == "ballotType":
            ballot_type = BallotType.from_code(value)
        elif name == "creator":
            creator = _addr(value)
        else:
            raise MalformedEventLog(f"unknown {BALLOT_CREATED} field {name!r}; {_log_context(log)}")

    if ballot_id is None:
        raise MalformedEventLog(f"missing `id`; {_log_context(log)}")
    if ballot_type is None:
        raise MalformedEventLog(f"missing `ballotType`; {_log_context(log)}")
    if creator is None:
        raise MalformedEventLog(f"missing `creator`; {_log_context(log)}")
    return BallotCreatedLog(
        block_number=log.block_number,
        ballot_id=ballot_id,
        ballot_type=ballot_type,
        creator=creator,
    )
