import dataclasses
import json

import pytest

from celestia_kit.blob import Blob, RawBlob
from celestia_kit.commitment import SHARE_SIZE, Commitment
from celestia_kit.errors import UnsupportedShareVersionError, ValidationError
from celestia_kit.nmt import Namespace

SAMPLE_JSON = """{
  "namespace": "AAAAAAAAAAAAAAAAAAAAAAAAAAAADCBNOWAP3dM=",
  "data": "8fIMqAB+kQo7+LLmHaDya8oH73hxem6lQWX1",
  "share_version": 0,
  "commitment": "D6YGsPWdxR8ju2OcOspnkgPG2abD30pSHxsFdiPqnVk="
}"""


def sample_blob():
    return Blob.from_json(json.loads(SAMPLE_JSON))


def test_create_from_raw():
    expected = sample_blob()
    raw = expected.to_raw()
    created = Blob.from_raw(raw)
    assert created == expected


def test_validate_blob():
    blob = sample_blob()
    blob.validate()
    assert blob.commitment == Commitment.generate(blob.namespace, 0, blob.data)


def test_validate_blob_commitment_mismatch():
    blob = dataclasses.replace(sample_blob(), commitment=Commitment(bytes([7] * 32)))
    with pytest.raises(ValidationError):
        blob.validate()


def test_json_round_trip():
    document = json.loads(SAMPLE_JSON)
    assert sample_blob().to_json() == document


def test_new_blob_validates():
    namespace = Namespace(0, bytes([1] * 10))
    blob = Blob.new(namespace, b"some data")
    blob.validate()
    assert blob.share_version == 0
    assert Blob.from_json(blob.to_json()) == blob


def test_to_shares():
    blob = sample_blob()
    shares = blob.to_shares()
    assert len(shares) == 1
    assert len(shares[0]) == SHARE_SIZE
    assert shares[0][:29] == blob.namespace.as_bytes()


def test_raw_fields():
    blob = sample_blob()
    raw = blob.to_raw()
    assert raw.namespace_version == 0
    assert bytes([raw.namespace_version]) + raw.namespace_id == blob.namespace.as_bytes()
    assert raw.data == blob.data


def test_from_raw_unsupported_share_version():
    raw = RawBlob(namespace_id=bytes(28), namespace_version=0, data=b"abc", share_version=1)
    with pytest.raises(UnsupportedShareVersionError):
        Blob.from_raw(raw)


def test_from_json_missing_field():
    document = json.loads(SAMPLE_JSON)
    del document["commitment"]
    with pytest.raises(ValueError):
        Blob.from_json(document)