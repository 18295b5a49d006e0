"""Shared aiohttp plumbing for the remote backend clients."""
from __future__ import annotations

import asyncio
import json
from typing import Any
from urllib.parse import urljoin

import aiohttp

from app.core.constants import DEFAULT_API_TIMEOUT_SECONDS
from app.core.exceptions import RemoteServiceError
from logging_config import logger


class ApiClient:
    """
    Thin JSON-over-HTTP client.

    Returns the decoded response body for 2xx responses. Anything else is
    raised as ``error_class`` carrying the status code and body; transport
    failures are raised with ``status=None``. No retries.
    """

    error_class: type[RemoteServiceError] = RemoteServiceError
    service_name = "backend"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_API_TIMEOUT_SECONDS,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        """Decoded JSON when possible, else text; undecodable bytes become U+FFFD."""
        raw = await response.read()
        try:
            text = raw.decode(response.charset or "utf-8", errors="replace")
        except LookupError:
            text = raw.decode("utf-8", errors="replace")
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def _request(self, method: str, path: str, *, payload: Any = None) -> Any:
        url = self._url(path)
        session = await self._get_session()
        try:
            async with session.request(method, url, json=payload) as response:
                body = await self._read_body(response)
                if response.status >= 400:
                    logger.warning(
                        "%s %s %s failed: HTTP %s", self.service_name, method, path, response.status
                    )
                    raise self.error_class(
                        f"{method} {path} returned HTTP {response.status}",
                        status=response.status,
                        body=body,
                    )
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s %s transport error: %s", self.service_name, method, path, e)
            raise self.error_class(f"{method} {path} failed: {e!r}") from e
