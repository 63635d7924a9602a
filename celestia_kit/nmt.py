"""Namespaces and the namespaced Merkle tree used for share commitments."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

NAMESPACE_VERSION_SIZE = 1
NAMESPACE_ID_SIZE = 28
NAMESPACE_SIZE = NAMESPACE_VERSION_SIZE + NAMESPACE_ID_SIZE
NS_ID_V0_SIZE = 10
NAMESPACE_VERSION_ZERO = 0
NAMESPACE_VERSION_MAX = 255
HASH_SIZE = 32
NAMESPACED_HASH_SIZE = 2 * NAMESPACE_SIZE + HASH_SIZE

_V0_PREFIX = bytes(NAMESPACE_ID_SIZE - NS_ID_V0_SIZE)
_LEAF_PREFIX = b"\x00"
_NODE_PREFIX = b"\x01"


@dataclass(frozen=True, order=True)
class Namespace:
    """A versioned namespace; ordering follows the byte encoding.

    Version 0 ids may be given as up to 10 bytes (left padded with zeros)
    or as the full 28-byte id with an 18-byte zero prefix.
    """

    version: int
    id: bytes

    def __post_init__(self) -> None:
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise ValueError(f"namespace version must be an integer, got {self.version!r}")
        if isinstance(self.id, int):
            raise ValueError(f"namespace id must be bytes, got {self.id!r}")
        ident = bytes(self.id)

        if self.version == NAMESPACE_VERSION_ZERO:
            if len(ident) == NAMESPACE_ID_SIZE:
                if not ident.startswith(_V0_PREFIX):
                    raise ValueError("version 0 namespace id must start with 18 zero bytes")
            elif len(ident) <= NS_ID_V0_SIZE:
                ident = _V0_PREFIX + ident.rjust(NS_ID_V0_SIZE, b"\x00")
            else:
                raise ValueError(
                    f"version 0 namespace id too long: {len(ident)} > {NS_ID_V0_SIZE}"
                )
        elif self.version == NAMESPACE_VERSION_MAX:
            if len(ident) != NAMESPACE_ID_SIZE:
                raise ValueError(
                    f"namespace id must be {NAMESPACE_ID_SIZE} bytes, got {len(ident)}"
                )
        else:
            raise ValueError(f"unsupported namespace version: {self.version}")

        object.__setattr__(self, "id", ident)

    def as_bytes(self) -> bytes:
        """Return the 29-byte encoding: version byte followed by the id."""
        return bytes([self.version]) + self.id

    @classmethod
    def from_bytes(cls, data: bytes) -> Namespace:
        """Parse a namespace from its 29-byte encoding."""
        data = bytes(data)
        if len(data) != NAMESPACE_SIZE:
            raise ValueError(f"namespace must be {NAMESPACE_SIZE} bytes, got {len(data)}")
        return cls(data[0], data[1:])


PARITY_SHARE_NAMESPACE = Namespace(NAMESPACE_VERSION_MAX, b"\xff" * NAMESPACE_ID_SIZE)
_MAX_NS = PARITY_SHARE_NAMESPACE.as_bytes()


def _sha256(*parts: bytes) -> bytes:
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part)
    return digest.digest()


def _split_point(length: int) -> int:
    """Largest power of two strictly less than ``length`` (``length`` >= 2)."""
    return 1 << ((length - 1).bit_length() - 1)


def _hash_leaf(data: bytes, namespace: bytes) -> bytes:
    return namespace + namespace + _sha256(_LEAF_PREFIX, namespace, data)


def _hash_nodes(left: bytes, right: bytes) -> bytes:
    left_min, left_max = left[:NAMESPACE_SIZE], left[NAMESPACE_SIZE : 2 * NAMESPACE_SIZE]
    right_min, right_max = right[:NAMESPACE_SIZE], right[NAMESPACE_SIZE : 2 * NAMESPACE_SIZE]

    min_ns = min(left_min, right_min)
    if left_min == _MAX_NS:
        max_ns = _MAX_NS
    elif right_min == _MAX_NS:
        max_ns = left_max
    else:
        max_ns = max(left_max, right_max)

    return min_ns + max_ns + _sha256(_NODE_PREFIX, left, right)


def _root_of(nodes: list[bytes]) -> bytes:
    if len(nodes) == 1:
        return nodes[0]
    split = _split_point(len(nodes))
    return _hash_nodes(_root_of(nodes[:split]), _root_of(nodes[split:]))


class NamespacedMerkleTree:
    """A namespaced Merkle tree whose maximum namespace is ignored in parents."""

    def __init__(self) -> None:
        self._leaves: list[bytes] = []
        self._last_namespace: bytes | None = None

    def __len__(self) -> int:
        return len(self._leaves)

    def push_leaf(self, data: bytes, namespace: Namespace) -> None:
        """Append a leaf; namespaces must not decrease."""
        ns = namespace.as_bytes()
        if self._last_namespace is not None and ns < self._last_namespace:
            raise ValueError("leaves must be pushed in non-decreasing namespace order")
        self._leaves.append(_hash_leaf(bytes(data), ns))
        self._last_namespace = ns

    def root(self) -> bytes:
        """Return the root as min namespace, max namespace and hash (90 bytes)."""
        if not self._leaves:
            return bytes(2 * NAMESPACE_SIZE) + _sha256()
        return _root_of(self._leaves)


def _simple_root(items: list[bytes]) -> bytes:
    if len(items) == 1:
        return _sha256(_LEAF_PREFIX, items[0])
    split = _split_point(len(items))
    return _sha256(_NODE_PREFIX, _simple_root(items[:split]), _simple_root(items[split:]))


def simple_hash_from_byte_vectors(items) -> bytes:
    """Return the RFC 6962 Merkle root of a sequence of byte strings."""
    items = [bytes(item) for item in items]
    if not items:
        return _sha256()
    return _simple_root(items)