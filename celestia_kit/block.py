"""Block headers and commits with basic validation and vote sign bytes."""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass, field
from enum import IntEnum

from celestia_kit.errors import (
    InvalidSignatureIndexError,
    UnexpectedAbsentSignatureError,
    ValidationError,
)
from celestia_kit.serializers import Timestamp, parse_timestamp

BLOCK_PROTOCOL = 11
MAX_CHAIN_ID_LEN = 50
GENESIS_HEIGHT = 1
SIGNATURE_LENGTH = 64
HASH_SIZE = 32

_PRECOMMIT = 2
_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LEN = 2


class BlockIdFlag(IntEnum):
    """Which block a commit signature is for."""

    ABSENT = 1
    COMMIT = 2
    NIL = 3


def _parse_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"expected an integer, got {value!r}")
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"expected an integer, got {value!r}") from exc


def _parse_hex(text: object) -> bytes:
    if text is None:
        return b""
    if not isinstance(text, str):
        raise ValueError(f"expected a hex string, got {text!r}")
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"invalid hex string: {text!r}") from exc


def _parse_hash(text: object) -> bytes:
    raw = _parse_hex(text)
    if raw and len(raw) != HASH_SIZE:
        raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(raw)}")
    return raw


def _parse_signature(text: object) -> bytes | None:
    if not text:
        return None
    if not isinstance(text, str):
        raise ValueError(f"expected a base64 signature, got {text!r}")
    try:
        return base64.b64decode(text, validate=True) or None
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 signature: {text!r}") from exc


def _field(data: dict, key: str) -> object:
    try:
        return data[key]
    except KeyError as exc:
        raise ValueError(f"missing field {key!r}") from exc
    except TypeError as exc:
        raise ValueError(f"expected an object, got {data!r}") from exc


def _varint(value: int) -> bytes:
    value &= (1 << 64) - 1
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _key(number: int, wire_type: int) -> bytes:
    return _varint((number << 3) | wire_type)


def _len_field(number: int, payload: bytes) -> bytes:
    return _key(number, _WIRE_LEN) + _varint(len(payload)) + payload


@dataclass
class PartSetHeader:
    """Number of parts of a block and the hash over them."""

    total: int = 0
    hash: bytes = b""


@dataclass
class BlockId:
    """Identifier of a block: its hash and its part set header."""

    hash: bytes = b""
    part_set_header: PartSetHeader = field(default_factory=PartSetHeader)

    def is_zero(self) -> bool:
        """True when neither hash is set and the part set is empty."""
        return (
            not self.hash
            and not self.part_set_header.hash
            and self.part_set_header.total == 0
        )

    @classmethod
    def from_json(cls, data: dict) -> BlockId:
        """Build a block id from its JSON object."""
        parts = data.get("parts", data.get("part_set_header")) if isinstance(data, dict) else None
        if parts is None:
            parts = {}
        return cls(
            hash=_parse_hash(_field(data, "hash")),
            part_set_header=PartSetHeader(
                total=_parse_int(parts.get("total", 0)),
                hash=_parse_hash(parts.get("hash", "")),
            ),
        )

    def _canonical_bytes(self) -> bytes:
        psh = bytearray()
        if self.part_set_header.total:
            psh += _key(1, _WIRE_VARINT) + _varint(self.part_set_header.total)
        if self.part_set_header.hash:
            psh += _len_field(2, self.part_set_header.hash)
        out = bytearray()
        if self.hash:
            out += _len_field(1, self.hash)
        out += _len_field(2, bytes(psh))
        return bytes(out)


@dataclass
class Version:
    """Block and application protocol versions."""

    block: int
    app: int = 0


@dataclass
class Header:
    """A block header."""

    version: Version
    chain_id: str
    height: int
    time: Timestamp
    last_block_id: BlockId | None = None
    last_commit_hash: bytes = b""
    data_hash: bytes = b""
    validators_hash: bytes = b""
    next_validators_hash: bytes = b""
    consensus_hash: bytes = b""
    app_hash: bytes = b""
    last_results_hash: bytes = b""
    evidence_hash: bytes = b""
    proposer_address: bytes = b""

    def validate_basic(self) -> None:
        """Raise ValidationError if the header breaks a basic rule."""
        if self.version.block != BLOCK_PROTOCOL:
            raise ValidationError(
                f"version block ({self.version.block}) != block protocol ({BLOCK_PROTOCOL})"
            )
        if len(self.chain_id.encode()) > MAX_CHAIN_ID_LEN:
            raise ValidationError(
                f"chain id ({self.chain_id}) len > maximum ({MAX_CHAIN_ID_LEN})"
            )
        if self.height == 0:
            raise ValidationError("height == 0")
        if self.last_block_id is None and self.height != GENESIS_HEIGHT:
            raise ValidationError(f"last_block_id == None at height {self.height}")

    @classmethod
    def from_json(cls, data: dict) -> Header:
        """Build a header from its JSON object; a zero last block id becomes None."""
        version = _field(data, "version")
        last_block_id = None
        raw_last = data.get("last_block_id")
        if raw_last is not None:
            block_id = BlockId.from_json(raw_last)
            last_block_id = None if block_id.is_zero() else block_id
        chain_id = _field(data, "chain_id")
        if not isinstance(chain_id, str):
            raise ValueError(f"chain_id must be a string, got {chain_id!r}")
        return cls(
            version=Version(
                block=_parse_int(_field(version, "block")),
                app=_parse_int(version.get("app", 0)),
            ),
            chain_id=chain_id,
            height=_parse_int(_field(data, "height")),
            time=parse_timestamp(_field(data, "time")),
            last_block_id=last_block_id,
            last_commit_hash=_parse_hash(data.get("last_commit_hash")),
            data_hash=_parse_hash(data.get("data_hash")),
            validators_hash=_parse_hash(data.get("validators_hash")),
            next_validators_hash=_parse_hash(data.get("next_validators_hash")),
            consensus_hash=_parse_hash(data.get("consensus_hash")),
            app_hash=_parse_hex(data.get("app_hash")),
            last_results_hash=_parse_hash(data.get("last_results_hash")),
            evidence_hash=_parse_hash(data.get("evidence_hash")),
            proposer_address=_parse_hex(data.get("proposer_address")),
        )


@dataclass
class CommitSig:
    """One validator's entry in a commit."""

    block_id_flag: BlockIdFlag
    validator_address: bytes = b""
    timestamp: Timestamp | None = None
    signature: bytes | None = None

    @property
    def is_absent(self) -> bool:
        return self.block_id_flag is BlockIdFlag.ABSENT

    def validate_basic(self) -> None:
        """Raise ValidationError if a present signature is missing or malformed."""
        if self.is_absent:
            return
        if not self.signature:
            raise ValidationError("no signature in commit sig")
        if len(self.signature) != SIGNATURE_LENGTH:
            raise ValidationError(
                f"signature ({list(self.signature)}) length != required ({SIGNATURE_LENGTH})"
            )

    @classmethod
    def from_json(cls, data: dict) -> CommitSig:
        """Build a commit signature from its JSON object."""
        flag = BlockIdFlag(_parse_int(_field(data, "block_id_flag")))
        if flag is BlockIdFlag.ABSENT:
            return cls(flag)
        raw_time = data.get("timestamp")
        return cls(
            block_id_flag=flag,
            validator_address=_parse_hex(data.get("validator_address")),
            timestamp=parse_timestamp(raw_time) if raw_time else None,
            signature=_parse_signature(data.get("signature")),
        )


@dataclass
class Commit:
    """The set of validator signatures committing a block."""

    height: int
    round: int
    block_id: BlockId
    signatures: list[CommitSig] = field(default_factory=list)

    def validate_basic(self) -> None:
        """Raise ValidationError if the commit breaks a basic rule."""
        if self.height >= GENESIS_HEIGHT:
            if self.block_id.is_zero():
                raise ValidationError("block_id is zero")
            if not self.signatures:
                raise ValidationError("no signatures in commit")
            for commit_sig in self.signatures:
                commit_sig.validate_basic()

    def vote_sign_bytes(self, chain_id: str, signature_idx: int) -> bytes:
        """Return the canonical precommit bytes signed by the given signature."""
        if not 0 <= signature_idx < len(self.signatures):
            raise InvalidSignatureIndexError(signature_idx, self.height)
        sig = self.signatures[signature_idx]
        if sig.is_absent:
            raise UnexpectedAbsentSignatureError()
        if not chain_id or len(chain_id.encode()) > MAX_CHAIN_ID_LEN:
            raise ValueError(f"invalid chain id: {chain_id!r}")

        timestamp = sig.timestamp or Timestamp(0)
        ts = bytearray()
        if timestamp.seconds:
            ts += _key(1, _WIRE_VARINT) + _varint(timestamp.seconds)
        if timestamp.nanos:
            ts += _key(2, _WIRE_VARINT) + _varint(timestamp.nanos)

        body = bytearray(_key(1, _WIRE_VARINT) + _varint(_PRECOMMIT))
        if self.height:
            body += _key(2, _WIRE_FIXED64) + struct.pack("<q", self.height)
        if self.round:
            body += _key(3, _WIRE_FIXED64) + struct.pack("<q", self.round)
        if not self.block_id.is_zero():
            body += _len_field(4, self.block_id._canonical_bytes())
        body += _len_field(5, bytes(ts))
        body += _len_field(6, chain_id.encode())
        return _varint(len(body)) + bytes(body)

    @classmethod
    def from_json(cls, data: dict) -> Commit:
        """Build a commit from its JSON object."""
        signatures = _field(data, "signatures") or []
        return cls(
            height=_parse_int(_field(data, "height")),
            round=_parse_int(data.get("round", 0)),
            block_id=BlockId.from_json(_field(data, "block_id")),
            signatures=[CommitSig.from_json(item) for item in signatures],
        )