import pytest

from celestia_kit.protocol import gossipsub_ident_topic, stream_protocol_id


def test_stream_protocol_id_value():
    assert stream_protocol_id("private", "/header-ex/v0.0.3") == "/private/header-ex/v0.0.3"


def test_gossipsub_topic_value():
    assert gossipsub_ident_topic("private", "/header-sub/v0.0.1") == "/private/header-sub/v0.0.1"


@pytest.mark.parametrize("prefix", ["", "/", "///"])
def test_leading_slashes_are_stripped(prefix):
    assert stream_protocol_id("net", prefix + "proto/v1") == stream_protocol_id("net", "proto/v1")
    assert gossipsub_ident_topic("net", prefix + "topic") == gossipsub_ident_topic("net", "topic")


def test_result_starts_with_network():
    result = stream_protocol_id("mocha", "/shrex/v1")
    assert result.startswith("/mocha/")
    assert "//" not in result


def test_topic_and_protocol_agree():
    assert gossipsub_ident_topic("arabica", "x/y") == stream_protocol_id("arabica", "x/y")