"""HTTP adapter for marketplace API operations."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "connect.sid"


class HTTPAPIClient:
    """
    Authenticated HTTP client adapter for the marketplace API.

    Implements IAPIClient protocol. Retries 5xx responses and transport
    errors; the upload path uses ``http`` directly and never retries.
    """

    max_retries = 3

    def __init__(
        self,
        base_url: str,
        timeout: int = 60,
        token: Optional[str] = None,
        session_cookie: Optional[str] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._token = token
        self._session_cookie = session_cookie
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        cookies = {SESSION_COOKIE_NAME: self._session_cookie} if self._session_cookie else None
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            cookies=cookies,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        """Underlying client, carrying base URL and credentials."""
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")
        return self._client

    async def _request(self, method: str, endpoint: str, json: Optional[Dict] = None) -> httpx.Response:
        client = self.http
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                response = await client.request(method, endpoint, json=json)

                if response.status_code >= 500 and attempt < self.max_retries - 1:
                    logger.debug("%s %s returned %s, retrying", method, endpoint, response.status_code)
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue

                if response.status_code >= 400:
                    try:
                        error_detail = response.json()
                    except ValueError:
                        error_detail = response.text
                    raise RuntimeError(
                        f"API error {response.status_code} on {method} {endpoint}: {error_detail}"
                    )

                return response
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                last_exception = exc
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise

        if last_exception:
            raise last_exception
        raise RuntimeError(f"Failed to {method} {endpoint} after {self.max_retries} attempts")

    async def get(self, endpoint: str) -> Any:
        return await self._request("GET", endpoint)

    async def put(self, endpoint: str, json: Dict) -> Any:
        return await self._request("PUT", endpoint, json=json)

    async def post(self, endpoint: str, json: Optional[Dict] = None) -> Any:
        return await self._request("POST", endpoint, json=json)
