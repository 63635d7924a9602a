"""Length-delimited framing for the header exchange request/response protocol."""

from __future__ import annotations

from dataclasses import dataclass

from celestia_kit.protocol import stream_protocol_id

REQUEST_SIZE_MAXIMUM = 1024
"""Max request size in bytes."""

RESPONSE_SIZE_MAXIMUM = 10 * 1024 * 1024
"""Max response size in bytes."""

HEADER_EXCHANGE_PROTOCOL = "/header-ex/v0.0.3"

_MAX_VARINT_BYTES = 10


def header_exchange_protocol(network: str) -> str:
    """Return the header exchange protocol id for ``network``."""
    return stream_protocol_id(network, HEADER_EXCHANGE_PROTOCOL)


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _decode_varint(data: bytes) -> tuple[int, int]:
    result = 0
    for position, byte in enumerate(data[:_MAX_VARINT_BYTES]):
        result |= (byte & 0x7F) << (7 * position)
        if byte < 0x80:
            if result >= 1 << 64:
                raise ValueError("varint overflows 64 bits")
            return result, position + 1
    raise ValueError("invalid or truncated varint")


def encode_length_delimited(payload: bytes) -> bytes:
    """Prefix ``payload`` with its length as a protobuf varint."""
    payload = bytes(payload)
    return _encode_varint(len(payload)) + payload


def decode_length_delimited(data: bytes) -> bytes:
    """Return the message framed at the start of ``data``; trailing bytes are ignored."""
    data = bytes(data)
    length, offset = _decode_varint(data)
    end = offset + length
    if end > len(data):
        raise ValueError(
            f"length-delimited message is truncated: need {length} bytes, "
            f"have {len(data) - offset}"
        )
    return data[offset:end]


async def _read_limited(reader, limit: int) -> bytes:
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = await reader.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


async def _write_all(writer, data: bytes) -> None:
    writer.write(data)
    await writer.drain()


@dataclass(frozen=True)
class HeaderCodec:
    """Reads and writes serialized header requests and responses on a stream.

    Readers need an async ``read(n)``; writers need ``write(data)`` and an
    async ``drain()``, as asyncio streams provide.
    """

    request_size_maximum: int = REQUEST_SIZE_MAXIMUM
    response_size_maximum: int = RESPONSE_SIZE_MAXIMUM

    async def read_request(self, reader) -> bytes:
        """Read one framed request, reading at most the request size limit."""
        return decode_length_delimited(await _read_limited(reader, self.request_size_maximum))

    async def read_response(self, reader) -> bytes:
        """Read one framed response, reading at most the response size limit."""
        return decode_length_delimited(await _read_limited(reader, self.response_size_maximum))

    async def write_request(self, writer, payload: bytes) -> None:
        """Write a serialized request with its length prefix."""
        await _write_all(writer, encode_length_delimited(payload))

    async def write_response(self, writer, payload: bytes) -> None:
        """Write a serialized response with its length prefix."""
        await _write_all(writer, encode_length_delimited(payload))