"""Share splitting and share commitments for blobs."""

from __future__ import annotations

import base64
import binascii
import math
from dataclasses import dataclass
from itertools import islice

from celestia_kit.errors import ShareSequenceLenExceededError, UnsupportedShareVersionError
from celestia_kit.nmt import (
    HASH_SIZE,
    NAMESPACE_SIZE,
    Namespace,
    NamespacedMerkleTree,
    simple_hash_from_byte_vectors,
)

SHARE_SIZE = 512
SHARE_INFO_BYTES = 1
SEQUENCE_LEN_BYTES = 4
SHARE_VERSION_ZERO = 0
MAX_SHARE_VERSION = 127
FIRST_SPARSE_SHARE_CONTENT_SIZE = SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES - SEQUENCE_LEN_BYTES
CONTINUATION_SPARSE_SHARE_CONTENT_SIZE = SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES
SUBTREE_ROOT_THRESHOLD = 64

_MAX_SEQUENCE_LEN = 0xFFFF_FFFF
_MAX_POWER_OF_2 = 1 << 63


def _info_byte(version: int, is_first_share: bool) -> int:
    if not 0 <= version <= MAX_SHARE_VERSION:
        raise ValueError(f"share version out of range: {version}")
    return (version << 1) | int(is_first_share)


@dataclass(frozen=True, order=True)
class Commitment:
    """A 32-byte share commitment over a blob."""

    hash: bytes

    def __post_init__(self) -> None:
        value = bytes(self.hash)
        if len(value) != HASH_SIZE:
            raise ValueError("commitment is not a size of a sha256")
        object.__setattr__(self, "hash", value)

    @classmethod
    def generate(cls, namespace: Namespace, share_version: int, blob_data: bytes) -> Commitment:
        """Compute the share commitment of a blob.

        The commitment is the root of a Merkle mountain range of namespaced
        subtree roots; the subtree width grows only once the number of
        subtree roots would pass a fixed threshold.
        """
        shares = split_blob_to_shares(namespace, share_version, blob_data)
        width = subtree_width(len(shares), SUBTREE_ROOT_THRESHOLD)

        remaining = iter(shares)
        subtree_roots = []
        for size in merkle_mountain_range_sizes(len(shares), width):
            tree = NamespacedMerkleTree()
            for share in islice(remaining, size):
                tree.push_leaf(share, namespace)
            subtree_roots.append(tree.root())

        return cls(simple_hash_from_byte_vectors(subtree_roots))

    def to_base64(self) -> str:
        """Return the standard base64 form used in JSON."""
        return base64.b64encode(self.hash).decode("ascii")

    @classmethod
    def from_base64(cls, text: str) -> Commitment:
        """Parse a commitment from standard base64."""
        if not isinstance(text, str):
            raise ValueError(f"expected a base64 string, got {text!r}")
        try:
            raw = base64.b64decode(text, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64: {text!r}") from exc
        return cls(raw)


def split_blob_to_shares(namespace: Namespace, share_version: int, blob_data: bytes) -> list[bytes]:
    """Split blob data into a sequence of sparse shares."""
    if share_version != SHARE_VERSION_ZERO:
        raise UnsupportedShareVersionError(share_version)

    blob_data = bytes(blob_data)
    shares = []
    offset = 0
    while offset < len(blob_data):
        share, offset = build_sparse_share_v0(namespace, blob_data, offset)
        shares.append(share)
    return shares


def build_sparse_share_v0(namespace: Namespace, data: bytes, offset: int) -> tuple[bytes, int]:
    """Build one sparse share from ``data`` starting at ``offset``.

    Returns the share and the offset just past the bytes it consumed.
    """
    is_first_share = offset == 0
    share = bytearray(namespace.as_bytes())
    share.append(_info_byte(SHARE_VERSION_ZERO, is_first_share))

    if is_first_share:
        if len(data) > _MAX_SEQUENCE_LEN:
            raise ShareSequenceLenExceededError(len(data))
        share += len(data).to_bytes(SEQUENCE_LEN_BYTES, "big")

    chunk = data[offset : offset + SHARE_SIZE - len(share)]
    share += chunk
    share += bytes(SHARE_SIZE - len(share))
    return bytes(share), offset + len(chunk)


def merkle_mountain_range_sizes(total_size: int, max_tree_size: int) -> list[int]:
    """Return the leaf counts of the trees in a Merkle mountain range."""
    tree_sizes = []
    while total_size:
        size = max_tree_size if total_size >= max_tree_size else round_down_to_power_of_2(total_size)
        tree_sizes.append(size)
        total_size -= size
    return tree_sizes


def blob_min_square_size(share_count: int) -> int:
    """Return the minimum square size that can hold ``share_count`` shares."""
    return round_up_to_power_of_2(math.isqrt(share_count - 1) + 1 if share_count > 0 else 0)


def subtree_width(share_count: int, subtree_root_threshold: int) -> int:
    """Return the maximum number of leaves per subtree in a blob's commitment."""
    width = -(-share_count // subtree_root_threshold)
    width = round_up_to_power_of_2(width)
    return min(width, blob_min_square_size(share_count))


def round_up_to_power_of_2(x: int) -> int:
    """Return the smallest power of two greater than or equal to ``x``."""
    if x > _MAX_POWER_OF_2:
        raise ValueError(f"no 64-bit power of two is >= {x}")
    return 1 if x <= 1 else 1 << (x - 1).bit_length()


def round_down_to_power_of_2(x: int) -> int:
    """Return the largest power of two less than or equal to ``x`` (``x`` > 0)."""
    if x <= 0:
        raise ValueError(f"expected a positive integer, got {x}")
    power = round_up_to_power_of_2(x)
    return x if power == x else power // 2