"""Blobs: namespaced data with a share commitment."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from celestia_kit.commitment import (
    SHARE_VERSION_ZERO,
    Commitment,
    split_blob_to_shares,
)
from celestia_kit.errors import ValidationError
from celestia_kit.nmt import Namespace


def _decode_base64(text: object) -> bytes:
    if not isinstance(text, str):
        raise ValueError(f"expected a base64 string, got {text!r}")
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64: {text!r}") from exc


def _encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _as_u8(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be an integer in 0..255, got {value!r}")
    return value


@dataclass
class RawBlob:
    """The protobuf form of a blob, without its commitment."""

    namespace_id: bytes
    namespace_version: int
    data: bytes
    share_version: int


@dataclass
class Blob:
    """Data submitted under a namespace, with its share commitment."""

    namespace: Namespace
    data: bytes
    share_version: int
    commitment: Commitment

    @classmethod
    def new(cls, namespace: Namespace, data: bytes) -> Blob:
        """Create a version 0 blob and compute its commitment."""
        data = bytes(data)
        commitment = Commitment.generate(namespace, SHARE_VERSION_ZERO, data)
        return cls(namespace, data, SHARE_VERSION_ZERO, commitment)

    def validate(self) -> None:
        """Raise ValidationError if the commitment does not match the data."""
        computed = Commitment.generate(self.namespace, self.share_version, self.data)
        if self.commitment != computed:
            raise ValidationError("blob commitment != localy computed commitment")

    def to_shares(self) -> list[bytes]:
        """Split the blob's data into shares."""
        return split_blob_to_shares(self.namespace, self.share_version, self.data)

    def to_raw(self) -> RawBlob:
        """Return the protobuf form of the blob."""
        return RawBlob(
            namespace_id=self.namespace.id,
            namespace_version=self.namespace.version,
            data=self.data,
            share_version=self.share_version,
        )

    @classmethod
    def from_raw(cls, raw: RawBlob) -> Blob:
        """Build a blob from its protobuf form, computing the commitment."""
        namespace = Namespace(_as_u8(raw.namespace_version, "namespace_version"), raw.namespace_id)
        share_version = _as_u8(raw.share_version, "share_version")
        data = bytes(raw.data)
        commitment = Commitment.generate(namespace, share_version, data)
        return cls(namespace, data, share_version, commitment)

    def to_json(self) -> dict:
        """Return the JSON object of the blob."""
        return {
            "namespace": _encode_base64(self.namespace.as_bytes()),
            "data": _encode_base64(self.data),
            "share_version": self.share_version,
            "commitment": self.commitment.to_base64(),
        }

    @classmethod
    def from_json(cls, data: dict) -> Blob:
        """Build a blob from its JSON object; the commitment is taken as given."""
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {data!r}")
        try:
            namespace = Namespace.from_bytes(_decode_base64(data["namespace"]))
            payload = _decode_base64(data["data"])
            share_version = _as_u8(data["share_version"], "share_version")
            commitment = Commitment.from_base64(data["commitment"])
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from exc
        return cls(namespace, payload, share_version, commitment)