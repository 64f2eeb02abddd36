"""
Core data types for md_api_client.

This module contains the values that flow between the call invoker, the
session manager and the multicall dispatcher: sessions, response envelopes,
call descriptors and the per-call results of a multicall.
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from .errors import ProtocolError

ParamValue = Union[str, int, float, bool]
Params = Mapping[str, ParamValue]

SuccessCallback = Callable[[Any], Any]
ErrorCallback = Callable[['Envelope'], Any]


class SessionState(Enum):
    """Login states of a client."""
    LOGGED_OUT = "logged_out"
    TOKEN_REQUESTED = "token_requested"
    LOGGED_IN = "logged_in"


@dataclass
class Session:
    """
    A server session obtained through login.

    ``data`` is the ``session`` object exactly as the server returned it,
    so method-specific fields (expiry, user id, ...) stay reachable.
    """
    token: str
    username: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_login_response(cls, username: str, response: Any) -> 'Session':
        """Build a session from the data of a ``session/login`` call."""
        session = response.get("session") if isinstance(response, dict) else None
        if not isinstance(session, dict) or not session.get("token"):
            raise ProtocolError("Login response does not contain a session token")
        return cls(token=str(session["token"]), username=username, data=dict(session))


@dataclass
class Envelope:
    """
    The ``{success, data | msg}`` shape every call answers with.

    Only one of ``data`` and ``msg`` is meaningful, selected by ``success``.
    """
    success: bool
    data: Any = None
    msg: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_json(cls, value: Any) -> 'Envelope':
        """Wrap a decoded response body."""
        if not isinstance(value, dict):
            raise ProtocolError(f"Expected a JSON object envelope, got {type(value).__name__}")
        return cls(
            success=bool(value.get("success")),
            data=value.get("data"),
            msg=value.get("msg"),
            raw=value,
        )


class CallDescriptor:
    """
    One call in a multicall batch.

    Callbacks are optional, but they come in pairs: give both ``on_success``
    and ``on_error`` or neither. Results are always available on the
    ``MulticallResponse`` returned by ``multicall``.

    Args:
        method: Name of the remote method, e.g. ``"user/get"``
        params: Parameters of the call
        on_success: Called with the envelope's ``data`` when the call succeeds
        on_error: Called with the whole ``Envelope`` when the call fails
        breaking: If true, the server skips the remaining calls when this one fails
    """

    def __init__(self,
                 method: str,
                 params: Optional[Params] = None,
                 on_success: Optional[SuccessCallback] = None,
                 on_error: Optional[ErrorCallback] = None,
                 breaking: Optional[bool] = None):
        self.method = method
        self.params: Dict[str, ParamValue] = dict(params or {})
        self.on_success = on_success
        self.on_error = on_error
        self.breaking = breaking
        self.response: Optional[Envelope] = None

    def __repr__(self) -> str:
        return f"CallDescriptor(method={self.method!r}, breaking={self.breaking!r})"


@dataclass
class CallSuccess:
    """A multicall entry that succeeded."""
    descriptor: CallDescriptor
    data: Any
    ok = True


@dataclass
class CallFailure:
    """A multicall entry the server reported as failed."""
    descriptor: CallDescriptor
    envelope: Envelope
    ok = False

    @property
    def msg(self) -> Optional[str]:
        return self.envelope.msg


@dataclass
class CallSkipped:
    """A multicall entry the server sent no envelope for."""
    descriptor: CallDescriptor
    ok = False


CallResult = Union[CallSuccess, CallFailure, CallSkipped]


@dataclass
class MulticallResponse:
    """The outcome of a multicall, in request order."""
    raw: Dict[str, Any]
    results: List[CallResult]

    def __iter__(self) -> Iterator[CallResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> CallResult:
        return self.results[index]

    @property
    def ok(self) -> bool:
        """True if every call in the batch succeeded."""
        return all(result.ok for result in self.results)


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if a callback handed back an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value
