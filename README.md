# celestia_kit

Python tools for working with a Celestia data availability network:

- `celestia_kit.nmt` – namespaces (`Namespace`), a namespaced Merkle tree
  (`NamespacedMerkleTree`) and the plain Merkle root
  `simple_hash_from_byte_vectors`.
- `celestia_kit.commitment` – splitting blob data into 512-byte sparse shares
  and computing share commitments (`Commitment`).
- `celestia_kit.blob` – `Blob` and its protobuf-shaped form `RawBlob`.
- `celestia_kit.block` – block headers and commits with basic validation and
  canonical vote sign bytes.
- `celestia_kit.rpc` – an asynchronous JSON-RPC client over HTTP for the blob,
  header, share, state and p2p APIs of a node.
- `celestia_kit.exchange` – length-delimited framing for the header-exchange
  protocol on asyncio-style streams.
- `celestia_kit.protocol` – network-scoped protocol ids and gossipsub topic names.
- `celestia_kit.serializers` – JSON forms of optional protobuf `Any` and
  `Timestamp` values.
- `celestia_kit.errors` – the exception hierarchy, rooted at `CelestiaError`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Blobs and commitments

```python
from celestia_kit.blob import Blob
from celestia_kit.nmt import Namespace

# version byte 0, then 18 zero bytes and a 10-byte id
namespace = Namespace.from_bytes(bytes(19) + b"\x01" * 10)
blob = Blob.new(namespace, b"hello celestia")

print(blob.commitment.to_base64())
blob.validate()              # raises ValidationError if the commitment does not match
shares = blob.to_shares()    # list of 512-byte sparse shares
```

A version 0 `Namespace` may also be built directly from up to 10 id bytes:
`Namespace(0, b"\x01" * 10)`.

`Blob.to_json()` / `Blob.from_json()` use the node's JSON layout (base64
namespace, data and commitment). `Blob.from_json()` keeps the commitment as
given; call `validate()` to check it. `Blob.to_raw()` / `Blob.from_raw()`
convert to and from `RawBlob`, which carries no commitment, so `from_raw`
computes it.

Only share version 0 is supported; other versions raise
`UnsupportedShareVersionError`.

The lower-level pieces are available too: `split_blob_to_shares`,
`build_sparse_share_v0`, `merkle_mountain_range_sizes`, `subtree_width`,
`blob_min_square_size`, `round_up_to_power_of_2` and
`round_down_to_power_of_2` in `celestia_kit.commitment`.

## Block validation

```python
from celestia_kit.block import Commit, Header

header = Header.from_json(header_json)   # a header as a decoded JSON object
header.validate_basic()

commit = Commit.from_json(commit_json)   # a commit as a decoded JSON object
commit.validate_basic()
sign_bytes = commit.vote_sign_bytes("private", 0)
```

`validate_basic()` raises `ValidationError`. `vote_sign_bytes()` raises
`InvalidSignatureIndexError` for an index with no signature and
`UnexpectedAbsentSignatureError` when that signature is absent.

## RPC client

```python
import asyncio

from celestia_kit.rpc import Client, HttpTransport


async def main():
    async with Client(HttpTransport("http://localhost:26658", "token")) as client:
        head = await client.header_local_head()
        balance = await client.state_balance()
        print(head, balance)


asyncio.run(main())
```

`HttpTransport` sends JSON-RPC 2.0 requests with an optional
`Authorization: Bearer` header; leaving the `Client` context closes it.
Blobs, namespaces and commitments are typed (`Blob`, `Namespace`,
`Commitment`); headers, proofs, data squares, state responses and peer
information are passed and returned as decoded JSON objects.

Errors returned by the node, and failures of the HTTP request itself, are
raised as `JsonRpcError`. An auth token that cannot be placed in an HTTP
header raises `InvalidTokenError`. `p2p_block_peer`, `p2p_unblock_peer`,
`p2p_close_peer`, `p2p_connect` and `p2p_protect` do not raise for errors
reported in the node's response, only for transport failures.

## Header exchange framing

```python
from celestia_kit.exchange import HeaderCodec, header_exchange_protocol

protocol = header_exchange_protocol("private")   # "/private/header-ex/v0.0.3"
codec = HeaderCodec()
# await codec.write_request(writer, request_bytes)
# response_bytes = await codec.read_response(reader)
```

The codec handles already-serialized message bytes: it prefixes them with a
varint length on write, and on read takes at most 1 KiB for a request and
10 MiB for a response before unwrapping one framed message.
`encode_length_delimited` and `decode_length_delimited` are available on
their own.

## What the package does not do

- It is not a node: there is no p2p networking, peer discovery, gossipsub,
  header syncing or header store, and no command to start one.
- The RPC client speaks HTTP only; there is no websocket transport, so
  subscriptions such as new-header notifications are not available.
- Headers, proofs and data squares received over RPC are not decoded into
  typed models or verified; they stay plain JSON objects.
- It does not serialize header-exchange requests or responses itself; it
  only frames bytes you supply.