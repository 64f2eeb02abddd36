"""
Error types raised by md_api_client.
"""

from typing import Any, Optional


class ApiClientError(Exception):
    """Base class for every error raised by the client."""


class TransportError(ApiClientError):
    """
    The call never produced a usable envelope.

    Raised for network errors, refused connections and bodies that are not
    JSON. The underlying exception is kept on ``error`` and chained as
    ``__cause__``.
    """

    def __init__(self, message: str, error: Optional[BaseException] = None):
        super().__init__(message)
        self.error = error


class ProtocolError(TransportError):
    """The response decoded, but does not have the shape the call expects."""


class RemoteError(ApiClientError):
    """The server answered with ``success: false``."""

    def __init__(self, msg: Any, method: Optional[str] = None):
        super().__init__(msg if msg is not None else "Remote call failed")
        self.msg = msg
        self.method = method


class CallContractError(ApiClientError, ValueError):
    """A call was issued in a way the client refuses to send."""
