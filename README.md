# kafkawire

Build and parse Kafka wire protocol messages in pure Python. The package
covers the classic (v0, 0.8–0.9 era) protocol: metadata, produce, fetch,
offset lookup, group coordinator lookup, and offset commit/fetch.

## Installation

```
pip install kafkawire
```

## Modules

- `kafkawire.wire`: `Encoder`, `HeaderRequest`, `HeaderResponse`, `to_crc`
  and `to_millis_i32`.
- `kafkawire.zreader`: `ZReader`, which reads big-endian protocol values
  from a byte buffer.
- `kafkawire.errors`: `KafkaCode` and the exceptions.
- `kafkawire.utils`: `PartitionOffset`, a frozen `(partition, offset)` pair.
- `kafkawire.metadata`: `MetadataRequest` and `MetadataResponse`.
- `kafkawire.produce`: `ProduceRequest`, `ProduceResponse` and `Compression`.
- `kafkawire.fetch_request`: `FetchRequest`.
- `kafkawire.fetch`: `Response`, `ResponseParser` and `parse_message_set`.
- `kafkawire.offset`: `OffsetRequest` and `OffsetResponse`.
- `kafkawire.consumer`: `GroupCoordinatorRequest`/`Response`,
  `OffsetFetchRequest`/`Response` and `OffsetCommitRequest`/`Response`.

## Encoding a request

Requests take a `kafkawire.wire.Encoder` and write their fields into it in
protocol order. The size prefix a connection needs is not included:

```python
from kafkawire.wire import Encoder
from kafkawire.metadata import MetadataRequest

out = Encoder()
MetadataRequest(1, "my-client", ["my-topic"]).encode(out)
payload = out.getvalue()
```

Requests that cover many partitions are built up with `add`. Entries for
the same topic, and in a produce request the same partition, are grouped
together:

```python
from kafkawire.produce import ProduceRequest, Compression

req = ProduceRequest(1, 1000, 2, "my-client", Compression.NONE)
req.add("my-topic", 0, None, b"hello")
req.add("my-topic", 0, b"key", b"world")
out = Encoder()
req.encode(out)
```

`ProduceRequest.encode` computes the CRC and size of each message itself.
With `Compression.GZIP` the message set of each partition is gzip-compressed
and wrapped in a single message. `Compression.SNAPPY` is not supported for
encoding: it raises `UnsupportedCompressionError`.

`OffsetCommitRequest` writes the extra fields that versions `V1` and `V2`
of `OffsetCommitVersion` need; `OffsetFetchRequest` takes an
`OffsetFetchVersion`.

## Decoding a response

Responses are read with a `kafkawire.zreader.ZReader` over the raw bytes:

```python
from kafkawire.zreader import ZReader
from kafkawire.metadata import MetadataResponse

meta = MetadataResponse.decode(ZReader(raw))
for topic in meta.topics:
    print(topic.topic, [p.id for p in topic.partitions])
```

Helpers turn per-partition results into values:

- `PartitionOffsetResponse.to_offset()` returns a `PartitionOffset` with the
  first reported offset, or -1 when there is none.
- `PartitionOffsetFetchResponse.get_offsets()` returns the committed offset;
  an "unknown topic or partition" error yields offset -1.
- `PartitionOffsetCommitResponse.to_error()` returns a `KafkaCode` or `None`.
- `ProduceResponse.get_response()` returns `ProduceConfirm` objects whose
  `ProducePartitionConfirm` entries hold either an offset or an error code.
- `GroupCoordinatorResponse.into_result()` returns the response or raises.

A fetch response is parsed in one step. Pass the original request so that
messages below the requested offset are dropped:

```python
from kafkawire.fetch import Response
from kafkawire.fetch_request import FetchRequest

req = FetchRequest(0, "my-client", 100, 1)
req.add("my-topic", 0, 0, 1 << 20)
resp = Response.from_bytes(raw, req, True)
for topic in resp.topics:
    for partition in topic.partitions:
        for msg in partition.data().messages:
            print(msg.offset, msg.key, msg.value)
```

With CRC validation on, a message whose checksum does not match raises
`KafkaError` with `KafkaCode.CORRUPT_MESSAGE`. A truncated last message is
skipped. Gzip-compressed message sets are decompressed. Any other codec
raises `UnsupportedCompressionError`. `Partition.data()` raises the
partition's Kafka error if the broker reported one for that partition.

## Errors

Every error derives from `kafkawire.errors.KafkaClientError`:

- `KafkaError` is raised for a broker error code. Its `code` is a `KafkaCode`.
- `UnexpectedEOFError` is raised for truncated input.
- `StringDecodeError` is raised for a protocol string that is not valid UTF-8.
- `UnsupportedCompressionError` and `UnsupportedProtocolError` are raised for
  message sets the package cannot read or write.
- `InvalidDurationError` is raised by `kafkawire.wire.to_millis_i32` when a
  `timedelta` is negative or does not fit in a signed 32-bit millisecond count.

`kafkawire.errors.kafka_code_from_protocol` maps a raw error number to a
`KafkaCode`. It returns `None` for zero. Numbers with no known meaning map
to `KafkaCode.UNKNOWN`. `error_from_protocol` does the same but returns a
`KafkaError`.

## What the package does not do

It does not open connections, frame requests with a size prefix, or talk to
brokers. It has no client, producer or consumer logic: no metadata caching,
partition selection, retries or offset tracking. You send the bytes it
produces and hand it the bytes you get back. Snappy compression is not
supported in either direction.

## Running the tests

```
pip install -e .[test]
pytest
```