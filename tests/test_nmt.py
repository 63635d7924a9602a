import pytest

from celestia_kit.nmt import (
    NAMESPACE_SIZE,
    NAMESPACED_HASH_SIZE,
    PARITY_SHARE_NAMESPACE,
    Namespace,
    NamespacedMerkleTree,
    simple_hash_from_byte_vectors,
)

EMPTY_SHA256 = bytes.fromhex(
    "E3B0C44298FC1C149AFBF4C8996FB92427AE41E4649B934CA495991B7852B855"
)


def test_v0_namespace_is_left_padded():
    ns = Namespace(0, bytes([1] * 10))
    assert ns.as_bytes() == bytes(19) + bytes([1] * 10)


def test_v0_short_id_is_padded():
    assert Namespace(0, b"\x05") == Namespace(0, bytes(9) + b"\x05")


def test_namespace_bytes_round_trip():
    ns = Namespace(0, b"\x0c\x20\x4d\x39\x60\x0f\xdd\xd3")
    assert Namespace.from_bytes(ns.as_bytes()) == ns
    assert len(ns.as_bytes()) == NAMESPACE_SIZE


def test_from_bytes_wrong_length():
    with pytest.raises(ValueError):
        Namespace.from_bytes(b"\x00" * 10)


def test_v0_id_too_long():
    with pytest.raises(ValueError):
        Namespace(0, bytes(11))


def test_v0_full_id_without_zero_prefix():
    with pytest.raises(ValueError):
        Namespace(0, b"\x01" * 28)


def test_unsupported_version():
    with pytest.raises(ValueError):
        Namespace(1, bytes(10))


def test_namespace_ordering_follows_bytes():
    low = Namespace(0, b"\x01")
    high = Namespace(0, b"\x02")
    assert low < high
    assert high < PARITY_SHARE_NAMESPACE


def test_empty_tree_root():
    root = NamespacedMerkleTree().root()
    assert root == bytes(2 * NAMESPACE_SIZE) + EMPTY_SHA256


def test_single_leaf_root_namespaces():
    ns = Namespace(0, bytes([1] * 10))
    tree = NamespacedMerkleTree()
    tree.push_leaf(b"data", ns)
    root = tree.root()
    assert len(root) == NAMESPACED_HASH_SIZE
    assert root[:NAMESPACE_SIZE] == ns.as_bytes()
    assert root[NAMESPACE_SIZE : 2 * NAMESPACE_SIZE] == ns.as_bytes()


def test_root_spans_namespaces():
    low = Namespace(0, b"\x01")
    high = Namespace(0, b"\x09")
    tree = NamespacedMerkleTree()
    tree.push_leaf(b"a", low)
    tree.push_leaf(b"b", high)
    tree.push_leaf(b"c", high)
    root = tree.root()
    assert root[:NAMESPACE_SIZE] == low.as_bytes()
    assert root[NAMESPACE_SIZE : 2 * NAMESPACE_SIZE] == high.as_bytes()
    assert len(tree) == 3


def test_parity_namespace_is_ignored_in_max():
    ns = Namespace(0, b"\x01")
    tree = NamespacedMerkleTree()
    tree.push_leaf(b"a", ns)
    tree.push_leaf(b"b", PARITY_SHARE_NAMESPACE)
    root = tree.root()
    assert root[NAMESPACE_SIZE : 2 * NAMESPACE_SIZE] == ns.as_bytes()


def test_push_out_of_order_fails():
    tree = NamespacedMerkleTree()
    tree.push_leaf(b"a", Namespace(0, b"\x02"))
    with pytest.raises(ValueError):
        tree.push_leaf(b"b", Namespace(0, b"\x01"))


def test_root_depends_on_data():
    ns = Namespace(0, b"\x01")
    first, second = NamespacedMerkleTree(), NamespacedMerkleTree()
    first.push_leaf(b"a", ns)
    second.push_leaf(b"b", ns)
    assert first.root()[2 * NAMESPACE_SIZE :] != second.root()[2 * NAMESPACE_SIZE :]


def test_simple_hash_empty():
    assert simple_hash_from_byte_vectors([]) == EMPTY_SHA256


def test_simple_hash_order_sensitive():
    forward = simple_hash_from_byte_vectors([b"a", b"b", b"c"])
    backward = simple_hash_from_byte_vectors([b"c", b"b", b"a"])
    assert len(forward) == 32
    assert forward != backward
    assert forward == simple_hash_from_byte_vectors([b"a", b"b", b"c"])