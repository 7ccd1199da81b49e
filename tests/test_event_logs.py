import dataclasses

import pytest
from eth_abi import encode

from poagov.application.ballots import BallotReader
from poagov.domain.decoding import BALLOT_CREATED, decode_ballot_created_log, event_topic0
from poagov.domain.errors import MalformedEventLog, UnknownEnumCode
from poagov.domain.models import BallotCreatedLog, BlockWindow, RawLog
from poagov.domain.value_types import BallotType

from conftest import CREATOR, FakeRPC, ballot_created


def test_topic0_is_event_signature_hash(keys_v2):
    # keccak("BallotCreated(uint256,uint256,address)")
    topic = event_topic0(keys_v2.event(BALLOT_CREATED))
    assert topic.startswith("0x") and len(topic) == 66
    assert topic == event_topic0({
        "type": "event", "name": "BallotCreated",
        "inputs": [{"name": "a", "type": "uint256", "indexed": True},
                   {"name": "b", "type": "uint256", "indexed": True},
                   {"name": "c", "type": "address", "indexed": True}],
    })


def test_decode_ballot_created(threshold_v1):
    raw = ballot_created(threshold_v1, block=1234, ballot_id=7, ballot_type=4)
    assert decode_ballot_created_log(threshold_v1.event(BALLOT_CREATED), raw) == BallotCreatedLog(
        block_number=1234, ballot_id=7, ballot_type=BallotType.THRESHOLD, creator=CREATOR,
    )


def test_unknown_ballot_type_rejected(keys_v2):
    raw = ballot_created(keys_v2, block=1, ballot_id=1, ballot_type=7)
    with pytest.raises(UnknownEnumCode) as ei:
        decode_ballot_created_log(keys_v2.event(BALLOT_CREATED), raw)
    assert (ei.value.enum_name, ei.value.code) == ("BallotType", 7)


def test_wrong_topic0_rejected(keys_v2):
    raw = ballot_created(keys_v2, block=1, ballot_id=1, ballot_type=1)
    raw = dataclasses.replace(raw, topics=("0x" + "00" * 32,) + raw.topics[1:])
    with pytest.raises(MalformedEventLog):
        decode_ballot_created_log(keys_v2.event(BALLOT_CREATED), raw)


def test_topic_count_mismatch_rejected(keys_v2):
    raw = ballot_created(keys_v2, block=1, ballot_id=1, ballot_type=1)
    raw = dataclasses.replace(raw, topics=raw.topics[:3])
    with pytest.raises(MalformedEventLog):
        decode_ballot_created_log(keys_v2.event(BALLOT_CREATED), raw)


def _event(*inputs):
    return {"type": "event", "name": BALLOT_CREATED, "anonymous": False, "inputs": list(inputs)}


def test_unknown_field_rejected():
    abi = _event(
        {"name": "id", "type": "uint256", "indexed": True},
        {"name": "ballotType", "type": "uint256", "indexed": True},
        {"name": "creator", "type": "address", "indexed": True},
        {"name": "memo", "type": "string", "indexed": False},
    )
    raw = ballot_created_from(abi, [1, 2, CREATOR], data="0x" + encode(["string"], ["hi"]).hex())
    with pytest.raises(MalformedEventLog, match="memo"):
        decode_ballot_created_log(abi, raw)


def test_missing_field_rejected():
    abi = _event(
        {"name": "id", "type": "uint256", "indexed": True},
        {"name": "ballotType", "type": "uint256", "indexed": True},
    )
    raw = ballot_created_from(abi, [1, 2])
    with pytest.raises(MalformedEventLog, match="creator"):
        decode_ballot_created_log(abi, raw)


def test_non_indexed_fields_read_from_data():
    abi = _event(
        {"name": "id", "type": "uint256", "indexed": True},
        {"name": "ballotType", "type": "uint256", "indexed": False},
        {"name": "creator", "type": "address", "indexed": False},
    )
    raw = ballot_created_from(abi, [9], data="0x" + encode(["uint256", "address"], [5, CREATOR]).hex())
    log = decode_ballot_created_log(abi, raw)
    assert (log.ballot_id, log.ballot_type, log.creator) == (9, BallotType.PROXY, CREATOR)


def test_invalid_utf8_in_event_data_rejected():
    abi = _event(
        {"name": "id", "type": "uint256", "indexed": True},
        {"name": "ballotType", "type": "uint256", "indexed": True},
        {"name": "creator", "type": "address", "indexed": True},
        {"name": "memo", "type": "string", "indexed": False},
    )
    raw = ballot_created_from(abi, [1, 2, CREATOR], data="0x" + encode(["bytes"], [b"\xff\xfe"]).hex())
    with pytest.raises(MalformedEventLog, match="log_index=0"):
        decode_ballot_created_log(abi, raw)


def ballot_created_from(abi, indexed_values, data="0x"):
    types = [i["type"] for i in abi["inputs"] if i["indexed"]]
    topics = (event_topic0(abi),) + tuple("0x" + encode([t], [v]).hex() for t, v in zip(types, indexed_values))
    return RawLog(address="0x" + "11" * 20, topics=topics, data_hex=data, block_number=1, tx_hash="0x", log_index=0)


@pytest.mark.asyncio
async def test_reader_filters_by_address_topic_and_window(keys_v2, threshold_v2):
    logs = [
        ballot_created(keys_v2, block=100, ballot_id=1, ballot_type=1),
        ballot_created(keys_v2, block=130, ballot_id=2, ballot_type=2),
        ballot_created(threshold_v2, block=105, ballot_id=3, ballot_type=4),
    ]
    rpc = FakeRPC(logs=logs)
    found = await BallotReader(rpc).ballot_created_logs(keys_v2, BlockWindow(90, 120))

    assert [(b.block_number, b.ballot_id, b.ballot_type) for b in found] == [(100, 1, BallotType.ADD_KEY)]
    [req] = rpc.requests
    assert req == ("eth_getLogs", keys_v2.address, event_topic0(keys_v2.event(BALLOT_CREATED)), 90, 120)
