"""Blob commitments, block validation, header-exchange framing and a JSON-RPC client for Celestia nodes."""

__version__ = "0.1.0"