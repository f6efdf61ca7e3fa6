"""Async HTTP client used by the provider services."""

import logging
from typing import Any

import httpx

from weathercards.config import settings
from weathercards.errors import TransientFailure

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Thin async JSON client over httpx.

    Retries are not handled here; callers wrap requests with a
    RetryExecutor. Every transport error and non-2xx response is raised
    as TransientFailure so the retry layer treats them uniformly.
    """

    DEFAULT_TIMEOUT = httpx.Timeout(
        connect=settings.http_timeout_connect,
        read=settings.http_timeout_read,
        write=10.0,
        pool=10.0,
    )

    def __init__(
        self,
        timeout: httpx.Timeout | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            timeout: Request timeout configuration
            headers: Default headers for all requests
            transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._default_headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._default_headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def fetch_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        GET a URL and decode the JSON body.

        Args:
            url: Request URL
            params: Query string parameters

        Returns:
            Decoded JSON payload

        Raises:
            TransientFailure: On transport errors, non-2xx status or invalid JSON
        """
        client = await self._get_client()
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransientFailure(f"Request to {url} failed: {e}") from e

        if response.is_error:
            logger.error(f"HTTP error {response.status_code} from {url}")
            raise TransientFailure(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransientFailure(f"Invalid JSON from {url}: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
