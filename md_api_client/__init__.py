"""
md_api_client - asyncio client for md_api_server

This module provides single RPC-style calls, a challenge-response login
that never sends the password, and multicall batching with per-call
dispatch.
"""

from .core import (
    CallDescriptor, CallFailure, CallSkipped, CallSuccess, Envelope,
    MulticallResponse, Session, SessionState,
)
from .errors import ApiClientError, CallContractError, ProtocolError, RemoteError, TransportError
from .rpc import ApiClientOptions, CallInvoker, SessionStore
from .session import SessionManager
from .batch import MulticallDispatcher
from .keepalive import KeepAliveTimer, KEEP_ALIVE_INTERVAL
from .transport import HttpTransport, AiohttpTransport
from .client import ApiClient
from .digest import digest, sha256

__version__ = "0.1.0"
__all__ = [
    "ApiClient",
    "ApiClientOptions",
    "CallInvoker",
    "SessionStore",
    "SessionManager",
    "MulticallDispatcher",
    "KeepAliveTimer",
    "KEEP_ALIVE_INTERVAL",
    "HttpTransport",
    "AiohttpTransport",
    "CallDescriptor",
    "CallSuccess",
    "CallFailure",
    "CallSkipped",
    "Envelope",
    "MulticallResponse",
    "Session",
    "SessionState",
    "ApiClientError",
    "TransportError",
    "ProtocolError",
    "RemoteError",
    "CallContractError",
    "digest",
    "sha256",
]
