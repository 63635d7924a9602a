"""Network-scoped names for stream protocols and gossipsub topics."""

from __future__ import annotations


def _scoped(network: str, name: str) -> str:
    return f"/{network}/{name.lstrip('/')}"


def stream_protocol_id(network: str, protocol: str) -> str:
    """Return the stream protocol id of ``protocol`` within ``network``."""
    return _scoped(network, protocol)


def gossipsub_ident_topic(network: str, topic: str) -> str:
    """Return the gossipsub topic name of ``topic`` within ``network``."""
    return _scoped(network, topic)