"""
Session management for md_api_client.

Login is a challenge-response handshake:

1. ``session/request_login_token`` hands out a single-use challenge token.
2. The client proves knowledge of the stored password hash
   (``sha256(sha256(USERNAME) + password)``) by sending
   ``sha256(password_hash + challenge)`` to ``session/login``.

Neither the password nor its stored hash ever goes over the wire, and a
captured proof is useless against a different challenge.
"""

import logging
from typing import Any, Optional

from .core import Session, SessionState
from .digest import login_proof, password_hash as derive_password_hash
from .errors import ProtocolError
from .keepalive import KEEP_ALIVE_INTERVAL, KeepAliveTimer
from .rpc import CallInvoker, SessionStore

logger = logging.getLogger(__name__)

REQUEST_LOGIN_TOKEN = "session/request_login_token"
LOGIN = "session/login"
LOGOUT = "session/logout"
KEEP_ALIVE = "session/keep_alive"


class SessionManager:
    """
    Owns the login state of one client.

    Args:
        invoker: Invoker used for every session call
        store: Session container shared with ``invoker``; written only here
        keep_alive_interval: Seconds between keep-alive calls
    """

    def __init__(self, invoker: CallInvoker, store: SessionStore,
                 keep_alive_interval: float = KEEP_ALIVE_INTERVAL):
        self.invoker = invoker
        self.store = store
        self._pending_logins = 0
        self._keep_alive = KeepAliveTimer(self._send_keep_alive, keep_alive_interval)

    @property
    def session(self) -> Optional[Session]:
        return self.store.session

    @property
    def state(self) -> SessionState:
        if self._pending_logins:
            return SessionState.TOKEN_REQUESTED
        if self.store.session is not None:
            return SessionState.LOGGED_IN
        return SessionState.LOGGED_OUT

    async def login(self, username: str, password: str,
                    password_is_hashed: bool = True) -> Session:
        """
        Log in and keep the session token for further calls.

        Applications should store the derived password hash rather than the
        password and pass it here. With ``password_is_hashed=False`` the hash
        is derived on the fly.

        Args:
            username: Account name
            password: The stored password hash, or the plain password
            password_is_hashed: False if ``password`` is the plain password

        Returns:
            Session: The new session, also kept on this manager

        Raises:
            RemoteError: The server rejected one of the handshake calls
            TransportError: One of the handshake calls got no usable reply
        """
        self._pending_logins += 1
        try:
            logger.info("Requesting login token from API...")
            response = await self.invoker.call(REQUEST_LOGIN_TOKEN)
            challenge = response.get("token") if isinstance(response, dict) else None
            if not challenge:
                raise ProtocolError("Login token response does not contain a token")

            if not password_is_hashed:
                password = derive_password_hash(username, password)

            logger.info("Logging in to API...")
            data = await self.invoker.call(LOGIN, {
                "username": username,
                "password_hash": login_proof(password, str(challenge)),
            })
            session = Session.from_login_response(username, data)
        except Exception as e:
            logger.warning(f"Login as {username!r} failed: {e}")
            raise
        finally:
            self._pending_logins -= 1

        self.store.set(session)
        logger.info("Login successful")
        return session

    async def logout(self) -> Any:
        """
        Log out from the API.

        The local session is kept; call ``clear_session`` to forget it.
        """
        return await self.invoker.call(LOGOUT)

    def clear_session(self) -> None:
        """Forget the local session without contacting the server."""
        self.store.clear()

    @property
    def keep_alive_running(self) -> bool:
        return self._keep_alive.running

    def start_keep_alive(self) -> None:
        """
        Call ``session/keep_alive`` periodically so the server keeps the session.

        Restarts the schedule if it is already running.
        """
        self._keep_alive.start()

    def stop_keep_alive(self) -> None:
        """Stop the keep-alive schedule."""
        self._keep_alive.stop()

    async def aclose(self) -> None:
        await self._keep_alive.aclose()
        self.store.clear()

    async def _send_keep_alive(self) -> None:
        await self.invoker.call(KEEP_ALIVE)
        logger.debug("Session has been refreshed")
