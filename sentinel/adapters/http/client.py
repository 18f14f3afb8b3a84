"""
HTTP transport for Sentinel.

This module wraps a shared aiohttp session for the incident feed,
the HTML mirrors and the geocoding providers.
"""

import asyncio
from typing import Any, Dict, Optional
import aiohttp
from sentinel.common.errors import HttpError
from sentinel.observability.logging_setup import get_logger

log = get_logger("sentinel.http")

class HttpClient:
    """aiohttp session wrapper returning decoded bodies"""

    def __init__(self, timeout: int = 30, headers: Optional[Dict[str, str]] = None):
        """
        Args:
            timeout: Total per-request timeout (seconds)
            headers: Headers sent with every request
        """
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpClient":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, url: str, *, params: Optional[Dict[str, Any]],
                       headers: Optional[Dict[str, str]], as_json: bool) -> Any:
        session = self._ensure_session()
        try:
            async with session.get(url, params=params, headers=headers) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise HttpError(
                        f"HTTP {response.status} from {url}: {body[:200]}",
                        url=url,
                        status=response.status,
                    )
                if as_json:
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise HttpError(f"invalid JSON payload from {url}", url=url,
                                        status=response.status) from e
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HttpError(f"request to {url} failed: {e!r}", url=url) from e

    async def get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a JSON document.

        Args:
            url: Absolute URL
            params: Query parameters
            headers: Extra headers for this request

        Returns:
            Decoded JSON payload

        Raises:
            HttpError: Network failure, status >= 400 or undecodable body
        """
        return await self._request(url, params=params, headers=headers, as_json=True)

    async def get_text(self, url: str, *, params: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> str:
        """GET a text document (HTML mirrors). Raises HttpError like get_json."""
        return await self._request(url, params=params, headers=headers, as_json=False)
