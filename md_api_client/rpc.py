"""
Call invocation for md_api_client.

This module executes single remote methods: it builds the form body,
attaches the session token, posts to ``<url>/<method>`` and unwraps the
``{success, data | msg}`` envelope into a return value or an exception.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from .core import Envelope, Params, Session
from .errors import RemoteError
from .serialize import form_fields
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class ApiClientOptions:
    """Configuration options for an API client."""

    def __init__(self, url: str):
        """
        Initialize API client options.

        Args:
            url: Base URL of the md_api_server, e.g. ``"https://api.example.com/v1"``
        """
        if not isinstance(url, str) or not url:
            raise ValueError("ApiClientOptions requires a base URL")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Not an http(s) URL: {url!r}")
        self.url = url.rstrip("/")

    def method_url(self, method: str) -> str:
        return f"{self.url}/{method}"

    def __repr__(self) -> str:
        return f"ApiClientOptions(url={self.url!r})"


class SessionStore:
    """
    Holds the client's current session, if any.

    The session manager is the only writer; the invoker reads the token from
    here to attach it to outgoing calls.
    """

    def __init__(self):
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session is not None else None

    def set(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class CallInvoker:
    """
    Executes one named remote method per ``call``.

    Every call is a single attempt: no retries, no timeouts and no caching.
    """

    def __init__(self, options: ApiClientOptions, transport: HttpTransport,
                 store: SessionStore):
        self.options = options
        self.transport = transport
        self.store = store

    async def call(self, method: str, params: Optional[Params] = None) -> Any:
        """
        Call a method on the API server.

        Args:
            method: Remote method path, e.g. ``"session/keep_alive"``
            params: Optional parameters; values are sent as strings

        Returns:
            The envelope's ``data`` field

        Raises:
            RemoteError: The server answered with ``success: false``
            TransportError: No JSON envelope came back
        """
        if not isinstance(method, str) or not method:
            raise ValueError("method must be a non-empty string")

        fields = form_fields(params, self.store.token)
        url = self.options.method_url(method)
        logger.debug(f"Calling {method} with fields {[name for name, _ in fields]}")

        envelope = Envelope.from_json(await self.transport.post(url, fields))
        if envelope.success:
            return envelope.data

        logger.debug(f"{method} failed: {envelope.msg}")
        raise RemoteError(envelope.msg, method)
