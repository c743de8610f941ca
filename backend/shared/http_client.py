"""
HTTP client used to talk to the storage API.
"""

import asyncio
from typing import Any

import aiohttp


class AsyncHTTPClient:
    """Async JSON client bound to a base URL."""

    DEFAULT_HEADERS = {"Content-Type": "application/json"}

    def __init__(self, base_url: str = "", timeout: int = 30) -> None:
        """Initialize HTTP client."""
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self.session:
            await self.session.close()
            self.session = None

    def url_for(self, endpoint: str) -> str:
        """Join an endpoint onto the base URL; absolute URLs pass through."""
        if endpoint.startswith(("http://", "https://")) or not self.base_url:
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any) -> None:
        """Invoke raise_for_status, awaiting when necessary."""
        result = response.raise_for_status()
        if asyncio.iscoroutine(result):
            await result

    def _merge_headers(self, headers: dict[str, Any] | None) -> dict[str, Any]:
        return {**self.DEFAULT_HEADERS, **(headers or {})}

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        headers: dict[str, Any] | None = None,
    ) -> Any:
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")

        send = getattr(self.session, method)
        kwargs: dict[str, Any] = {"headers": self._merge_headers(headers)}
        if data is not None:
            kwargs["json"] = data

        request_ctx = await self._prepare_request(send(self.url_for(endpoint), **kwargs))
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            return await response.json()

    async def get(self, endpoint: str, headers: dict[str, Any] | None = None) -> Any:
        """Perform GET request."""
        return await self._request("get", endpoint, headers=headers)

    async def post(
        self,
        endpoint: str,
        data: Any = None,
        headers: dict[str, Any] | None = None,
    ) -> Any:
        """Perform POST request."""
        return await self._request("post", endpoint, data=data, headers=headers)

    async def put(
        self,
        endpoint: str,
        data: Any = None,
        headers: dict[str, Any] | None = None,
    ) -> Any:
        """Perform PUT request."""
        return await self._request("put", endpoint, data=data, headers=headers)

    async def delete(self, endpoint: str, headers: dict[str, Any] | None = None) -> Any:
        """Perform DELETE request."""
        return await self._request("delete", endpoint, headers=headers)
