"""
Client for an md_api_server.

``ApiClient`` ties the pieces together: one transport, one session store
shared by the call invoker and the session manager, and a multicall
dispatcher on top of the same invoker.
"""

import logging
from typing import Any, Optional, Sequence, Union

from .batch import MulticallDispatcher
from .core import CallDescriptor, MulticallResponse, Params, Session, SessionState
from .digest import digest
from .keepalive import KEEP_ALIVE_INTERVAL
from .rpc import ApiClientOptions, CallInvoker, SessionStore
from .session import SessionManager
from .transport import AiohttpTransport, HttpTransport

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Client for easy communication with an md_api_server.

    Args:
        options: ``ApiClientOptions`` or the server's base URL
        transport: HTTP transport to use; an ``AiohttpTransport`` is created
            (and closed by ``close``) if omitted
        keep_alive_interval: Seconds between keep-alive calls

    Example:
        ```python
        async with ApiClient("https://api.example.com") as client:
            await client.login("alice", stored_password_hash)
            client.start_keep_alive()
            profile = await client.call("user/profile")
        ```
    """

    def __init__(self,
                 options: Union[ApiClientOptions, str],
                 transport: Optional[HttpTransport] = None,
                 keep_alive_interval: float = KEEP_ALIVE_INTERVAL):
        if isinstance(options, str):
            options = ApiClientOptions(options)
        self.options = options
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else AiohttpTransport()

        self._store = SessionStore()
        self._invoker = CallInvoker(options, self.transport, self._store)
        self._sessions = SessionManager(self._invoker, self._store, keep_alive_interval)
        self._multicall = MulticallDispatcher(self._invoker)

    @property
    def session(self) -> Optional[Session]:
        """The current session, or None when logged out."""
        return self._sessions.session

    @property
    def state(self) -> SessionState:
        return self._sessions.state

    async def call(self, method: str, params: Optional[Params] = None) -> Any:
        """Call a method on the API server and return its data."""
        return await self._invoker.call(method, params)

    async def login(self, username: str, password: str,
                    password_is_hashed: bool = True) -> Session:
        """Log in and attach the session token to every further call."""
        return await self._sessions.login(username, password, password_is_hashed)

    async def logout(self) -> Any:
        """Log out from the API. The local session is kept, see ``clear_session``."""
        return await self._sessions.logout()

    def clear_session(self) -> None:
        self._sessions.clear_session()

    def start_keep_alive(self) -> None:
        """Refresh the session every 30 minutes so the server does not expire it."""
        self._sessions.start_keep_alive()

    def stop_keep_alive(self) -> None:
        self._sessions.stop_keep_alive()

    @property
    def keep_alive_running(self) -> bool:
        return self._sessions.keep_alive_running

    async def multicall(self, calls: Sequence[CallDescriptor]) -> MulticallResponse:
        """Execute several API methods in one request."""
        return await self._multicall.multicall(calls)

    @staticmethod
    def digest(*values: str) -> str:
        """SHA-256 hex digest of the concatenated values."""
        return digest(*values)

    sha256 = digest

    async def close(self) -> None:
        """Stop the keep-alive timer, forget the session and release the transport."""
        await self._sessions.aclose()
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
