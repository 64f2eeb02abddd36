"""
HTTP transport for md_api_client.

A transport performs one POST with a form-encoded body and hands back the
decoded JSON document. Everything above it (envelopes, tokens, batching)
is transport independent, so tests and alternative HTTP stacks only need to
implement ``HttpTransport``.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from .errors import TransportError
from .serialize import FormFields

logger = logging.getLogger(__name__)


class HttpTransport(ABC):
    """Abstract base class for HTTP transports."""

    @abstractmethod
    async def post(self, url: str, fields: FormFields) -> Any:
        """
        POST ``fields`` form-encoded to ``url`` and return the decoded JSON body.

        Implementations raise ``TransportError`` for anything that prevents a
        JSON document from coming back.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release any connection resources."""
        pass


class AiohttpTransport(HttpTransport):
    """
    Transport backed by an ``aiohttp.ClientSession``.

    If no session is given, one is created on first use and closed by
    ``close()``. A session passed in by the caller stays the caller's to close.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def post(self, url: str, fields: FormFields) -> Any:
        """Send the form and decode the reply, whatever its status code."""
        session = self._get_session()
        try:
            async with session.post(url, data=aiohttp.FormData(fields)) as response:
                body = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.debug(f"POST {url} failed: {e!r}")
            raise TransportError(f"Request to {url} failed: {e}", e) from e

        # UnicodeDecodeError is a ValueError
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as e:
            logger.debug(f"POST {url} returned a body that is not UTF-8 JSON (status {status})")
            raise TransportError(f"Response from {url} is not JSON (status {status})", e) from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
