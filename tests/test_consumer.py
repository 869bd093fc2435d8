import struct

import pytest

from kafkawire.consumer import (
    GroupCoordinatorRequest,
    GroupCoordinatorResponse,
    OffsetCommitRequest,
    OffsetCommitResponse,
    OffsetCommitVersion,
    OffsetFetchRequest,
    OffsetFetchResponse,
    OffsetFetchVersion,
    PartitionOffsetCommitResponse,
    PartitionOffsetFetchResponse,
    TopicPartitionOffsetCommitRequest,
)
from kafkawire.errors import KafkaCode, KafkaError, UnexpectedEOFError
from kafkawire.utils import PartitionOffset
from kafkawire.wire import Encoder
from kafkawire.zreader import ZReader


def _encode(obj) -> bytes:
    enc = Encoder()
    obj.encode(enc)
    return enc.getvalue()


def _read_header(r: ZReader):
    return (r.read_i16(), r.read_i16(), r.read_i32(), r.read_str())


def test_group_coordinator_request_wire_bytes():
    req = GroupCoordinatorRequest("g", 3, "c")
    expected = struct.pack(">hhih", 10, 0, 3, 1) + b"c" + struct.pack(">h", 1) + b"g"
    assert _encode(req) == expected


def _coordinator_bytes(error, broker_id, host, port) -> bytes:
    enc = Encoder()
    enc.write_i32(11)
    enc.write_i16(error)
    enc.write_i32(broker_id)
    enc.write_str(host)
    enc.write_i32(port)
    return enc.getvalue()


def test_group_coordinator_response_decode():
    resp = GroupCoordinatorResponse.decode(ZReader(_coordinator_bytes(0, 4, "localhost", 9092)))
    assert resp.header.correlation == 11
    assert (resp.broker_id, resp.host, resp.port) == (4, "localhost", 9092)
    assert resp.into_result() is resp


def test_group_coordinator_response_error():
    resp = GroupCoordinatorResponse.decode(ZReader(_coordinator_bytes(15, 0, "", 0)))
    with pytest.raises(KafkaError) as info:
        resp.into_result()
    assert info.value.code == KafkaCode.GROUP_COORDINATOR_NOT_AVAILABLE


def test_offset_fetch_request_encode():
    req = OffsetFetchRequest("grp", OffsetFetchVersion.V1, 5, "cid")
    req.add("a", 0)
    req.add("b", 2)
    req.add("a", 1)
    r = ZReader(_encode(req))
    assert _read_header(r) == (9, 1, 5, "cid")
    assert r.read_str() == "grp"
    topics = r.read_array(lambda rd: (rd.read_str(), rd.read_array(ZReader.read_i32)))
    assert topics == [("a", [0, 1]), ("b", [2])]
    assert r.is_empty()


def _fetch_response_bytes(parts) -> bytes:
    enc = Encoder()
    enc.write_i32(1)
    enc.write_i32(1)
    enc.write_str("topic")
    enc.write_i32(len(parts))
    for partition, offset, metadata, error in parts:
        enc.write_i32(partition)
        enc.write_i64(offset)
        enc.write_str(metadata)
        enc.write_i16(error)
    return enc.getvalue()


def test_offset_fetch_response_decode():
    data = _fetch_response_bytes([(0, 100, "meta", 0), (1, 0, "", 3)])
    resp = OffsetFetchResponse.decode(ZReader(data))
    tp = resp.topic_partitions[0]
    assert tp.topic == "topic"
    assert tp.partitions[0].metadata == "meta"
    assert tp.partitions[0].get_offsets() == PartitionOffset(partition=0, offset=100)
    # unknown topic or partition is reported as "no offset"
    assert tp.partitions[1].get_offsets() == PartitionOffset(partition=1, offset=-1)


def test_offset_fetch_get_offsets_raises_other_errors():
    p = PartitionOffsetFetchResponse(partition=2, offset=7, metadata="", error=16)
    with pytest.raises(KafkaError) as info:
        p.get_offsets()
    assert info.value.code == KafkaCode.NOT_COORDINATOR_FOR_GROUP


def test_offset_fetch_response_truncated():
    data = _fetch_response_bytes([(0, 100, "meta", 0)])
    with pytest.raises(UnexpectedEOFError):
        OffsetFetchResponse.decode(ZReader(data[:-1]))


def test_offset_commit_request_v0():
    req = OffsetCommitRequest("grp", OffsetCommitVersion.V0, 2, "cid")
    req.add("t", 0, 100, "m")
    r = ZReader(_encode(req))
    assert _read_header(r) == (8, 0, 2, "cid")
    assert r.read_str() == "grp"
    assert r.read_array_len() == 1
    assert r.read_str() == "t"
    assert r.read_array_len() == 1
    assert (r.read_i32(), r.read_i64(), r.read_str()) == (0, 100, "m")
    assert r.is_empty()


def test_offset_commit_request_v1():
    req = OffsetCommitRequest("grp", OffsetCommitVersion.V1, 2, "cid")
    req.add("t", 1, 200, "")
    r = ZReader(_encode(req))
    assert _read_header(r) == (8, 1, 2, "cid")
    assert r.read_str() == "grp"
    assert r.read_i32() == -1
    assert r.read_str() == ""
    assert r.read_array_len() == 1
    assert r.read_str() == "t"
    assert r.read_array_len() == 1
    assert (r.read_i32(), r.read_i64(), r.read_i64(), r.read_str()) == (1, 200, -1, "")
    assert r.is_empty()


def test_offset_commit_request_v2():
    req = OffsetCommitRequest("grp", OffsetCommitVersion.V2, 2, "cid")
    req.add("t", 1, 300, "x")
    req.add("t", 0, 400, "y")
    r = ZReader(_encode(req))
    assert _read_header(r) == (8, 2, 2, "cid")
    assert r.read_str() == "grp"
    assert (r.read_i32(), r.read_str(), r.read_i64()) == (-1, "", -1)
    assert r.read_array_len() == 1
    assert r.read_str() == "t"
    parts = r.read_array(lambda rd: (rd.read_i32(), rd.read_i64(), rd.read_str()))
    assert parts == [(1, 300, "x"), (0, 400, "y")]
    assert r.is_empty()


def test_offset_commit_request_unknown_version():
    req = OffsetCommitRequest("grp", OffsetCommitVersion.V0, 2, "cid")
    req.header.api_version = 5
    with pytest.raises(ValueError):
        _encode(req)


def test_topic_partition_commit_add():
    tp = TopicPartitionOffsetCommitRequest("t")
    tp.add(0, 10, "a")
    tp.add(1, 20, "b")
    assert [(p.partition, p.offset, p.metadata) for p in tp.partitions] == [
        (0, 10, "a"),
        (1, 20, "b"),
    ]


def test_offset_commit_response_decode():
    enc = Encoder()
    enc.write_i32(6)
    enc.write_i32(1)
    enc.write_str("t")
    enc.write_i32(2)
    enc.write_i32(0)
    enc.write_i16(0)
    enc.write_i32(1)
    enc.write_i16(12)
    resp = OffsetCommitResponse.decode(ZReader(enc.getvalue()))
    assert resp.header.correlation == 6
    parts = resp.topic_partitions[0].partitions
    assert parts[0].to_error() is None
    assert parts[1].to_error() == KafkaCode.OFFSET_METADATA_TOO_LARGE


def test_commit_response_unknown_code():
    assert PartitionOffsetCommitResponse(partition=0, error=-100).to_error() == KafkaCode.UNKNOWN