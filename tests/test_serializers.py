import json

import pytest

from celestia_kit.serializers import (
    Any,
    Timestamp,
    deserialize_option_any,
    deserialize_option_timestamp,
    format_timestamp,
    parse_timestamp,
    serialize_option_any,
    serialize_option_timestamp,
)


def _dumps(obj):
    return json.dumps(obj, separators=(",", ":"))


def test_serialize():
    msg = {"tx": serialize_option_any(Any(type_url="abc", value=bytes([1, 2, 3])))}
    assert _dumps(msg) == '{"tx":{"type_url":"abc","value":"AQID"}}'


def test_serialize_none():
    msg = {"tx": serialize_option_any(None)}
    assert _dumps(msg) == '{"tx":null}'


def test_deserialize():
    msg = json.loads('{"tx":{"type_url":"abc","value":"AQID"}}')
    tx = deserialize_option_any(msg["tx"])
    assert tx.type_url == "abc"
    assert tx.value == bytes([1, 2, 3])


def test_deserialize_none():
    msg = json.loads('{"tx":null}')
    assert deserialize_option_any(msg["tx"]) is None

    msg = json.loads("{}")
    assert deserialize_option_any(msg.get("tx")) is None


def test_deserialize_any_invalid_base64():
    with pytest.raises(ValueError):
        deserialize_option_any({"type_url": "abc", "value": "!!!"})


def test_deserialize_any_missing_field():
    with pytest.raises(ValueError):
        deserialize_option_any({"type_url": "abc"})


def test_any_round_trip():
    value = Any(type_url="/cosmos.tx", value=bytes(range(50)))
    assert deserialize_option_any(serialize_option_any(value)) == value


def test_parse_known_timestamp():
    ts = parse_timestamp("2023-06-23T10:40:48.769228056Z")
    assert ts == Timestamp(seconds=1687516848, nanos=769228056)


def test_format_known_timestamp():
    ts = Timestamp(seconds=1687516848, nanos=769228056)
    assert format_timestamp(ts) == "2023-06-23T10:40:48.769228056Z"


@pytest.mark.parametrize(
    "text",
    [
        "2023-06-23T10:40:48.410305119Z",
        "2023-06-23T10:40:48.769228056Z",
        "1970-01-01T00:00:00Z",
        "0001-01-01T00:00:00Z",
    ],
)
def test_timestamp_text_round_trip(text):
    assert format_timestamp(parse_timestamp(text)) == text


def test_trailing_zero_nanos_are_trimmed():
    text = format_timestamp(Timestamp(seconds=0, nanos=500_000_000))
    assert parse_timestamp(text) == Timestamp(seconds=0, nanos=500_000_000)
    assert not text.endswith("0Z")


def test_offset_is_applied():
    utc = parse_timestamp("2023-06-23T10:40:48Z")
    shifted = parse_timestamp("2023-06-23T12:40:48+02:00")
    assert shifted == utc


def test_invalid_timestamp():
    with pytest.raises(ValueError):
        parse_timestamp("not a timestamp")
    with pytest.raises(ValueError):
        parse_timestamp("2023-13-40T10:40:48Z")


def test_nanos_out_of_range():
    with pytest.raises(ValueError):
        Timestamp(seconds=0, nanos=1_000_000_000)


def test_option_timestamp_round_trip():
    ts = Timestamp(seconds=1687516848, nanos=769228056)
    assert deserialize_option_timestamp(serialize_option_timestamp(ts)) == ts
    assert serialize_option_timestamp(None) is None
    assert deserialize_option_timestamp(None) is None


def test_option_timestamp_rejects_non_string():
    with pytest.raises(ValueError):
        deserialize_option_timestamp(12)