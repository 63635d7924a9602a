"""JSON forms of optional protobuf ``Any`` and ``Timestamp`` values."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_SECOND = 1_000_000_000
_SECONDS_PER_DAY = 86_400

_RFC3339 = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


@dataclass(frozen=True)
class Any:
    """A protobuf ``Any``: a type URL and the encoded message."""

    type_url: str
    value: bytes = b""


@dataclass(frozen=True)
class Timestamp:
    """A protobuf ``Timestamp``: seconds since the Unix epoch plus nanoseconds."""

    seconds: int
    nanos: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanos < _NANOS_PER_SECOND:
            raise ValueError(f"nanos out of range: {self.nanos}")


def _decode_base64(text: object) -> bytes:
    if not isinstance(text, str):
        raise ValueError(f"expected a base64 string, got {text!r}")
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64: {text!r}") from exc


def serialize_option_any(value: Any | None) -> dict | None:
    """Return the JSON object for an optional ``Any``, or None."""
    if value is None:
        return None
    return {
        "type_url": value.type_url,
        "value": base64.b64encode(value.value).decode("ascii"),
    }


def deserialize_option_any(data: object) -> Any | None:
    """Build an optional ``Any`` from its JSON object (None stays None)."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"expected an object, got {data!r}")
    try:
        type_url = data["type_url"]
        raw_value = data["value"]
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]!r}") from exc
    if not isinstance(type_url, str):
        raise ValueError(f"type_url must be a string, got {type_url!r}")
    return Any(type_url=type_url, value=_decode_base64(raw_value))


def format_timestamp(timestamp: Timestamp) -> str:
    """Format a timestamp as RFC 3339 in UTC, with trailing zero nanos trimmed."""
    moment = _EPOCH + timedelta(seconds=timestamp.seconds)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}T"
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if timestamp.nanos:
        text += "." + f"{timestamp.nanos:09d}".rstrip("0")
    return text + "Z"


def parse_timestamp(text: str) -> Timestamp:
    """Parse an RFC 3339 timestamp with up to nanosecond precision."""
    match = _RFC3339.match(text) if isinstance(text, str) else None
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    try:
        moment = datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}") from exc

    offset = timedelta()
    zone = match["offset"]
    if zone not in ("Z", "z"):
        hours, minutes = zone[1:].split(":")
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        if zone[0] == "-":
            offset = -offset

    delta = (moment - _EPOCH) - offset
    frac = match["frac"] or ""
    nanos = int(frac.ljust(9, "0")) if frac else 0
    return Timestamp(seconds=delta.days * _SECONDS_PER_DAY + delta.seconds, nanos=nanos)


def serialize_option_timestamp(value: Timestamp | None) -> str | None:
    """Return the JSON string for an optional timestamp, or None."""
    return None if value is None else format_timestamp(value)


def deserialize_option_timestamp(data: object) -> Timestamp | None:
    """Build an optional timestamp from its JSON string (None stays None)."""
    if data is None:
        return None
    if not isinstance(data, str):
        raise ValueError(f"expected a timestamp string, got {data!r}")
    return parse_timestamp(data)