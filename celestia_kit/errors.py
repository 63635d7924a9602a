"""Exception hierarchy shared by the package."""

from __future__ import annotations


class CelestiaError(Exception):
    """Base class of every error raised by the package."""


class ValidationError(CelestiaError):
    """A value failed a basic validity check."""


class UnsupportedShareVersionError(CelestiaError):
    """The share version is not supported."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported share version: {version}")
        self.version = version


class ShareSequenceLenExceededError(CelestiaError):
    """The share sequence length does not fit in 32 bits."""

    def __init__(self, length: int) -> None:
        super().__init__(f"Share sequence length exceeded: {length}")
        self.length = length


class InvalidSignatureIndexError(CelestiaError):
    """A commit has no signature at the requested index."""

    def __init__(self, index: int, height: int) -> None:
        super().__init__(f"Invalid signature index {index} at height {height}")
        self.index = index
        self.height = height


class UnexpectedAbsentSignatureError(CelestiaError):
    """A signature was required but the commit signature is absent."""

    def __init__(self) -> None:
        super().__init__("Unexpected absent commit signature")


class InvalidTokenError(CelestiaError):
    """The authentication token cannot be used in a request header."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Token contains invalid characters: {detail}")
        self.detail = detail


class JsonRpcError(CelestiaError):
    """A JSON-RPC call failed."""

    def __init__(self, code: int, message: str, data: object = None) -> None:
        super().__init__(f"JSON-RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data