"""
Async client for the external search engine (Meilisearch HTTP API).

The client is created once at startup and passed to the components that need
it. Transport failures are raised as ConnectivityError and rejected requests
as QueryError so callers can treat the two differently.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from facetsearch.config import (
    MEILISEARCH_API_KEY,
    MEILISEARCH_HOST,
    SEARCH_TIMEOUT_SECONDS,
)
from facetsearch.errors import ConnectivityError, QueryError

logger = logging.getLogger(__name__)


class SearchEngineClient:
    def __init__(
        self,
        host: str = MEILISEARCH_HOST,
        api_key: Optional[str] = MEILISEARCH_API_KEY,
        timeout: float = SEARCH_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.host = host.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.host,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def search(
        self, index: str, query: str, options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Run one search.

        Returns the raw engine payload with ``hits``, ``estimatedTotalHits``,
        ``facetDistribution`` and ``processingTimeMs``.
        """
        body = {"q": query, **(options or {})}
        return await self._request("POST", f"/indexes/{index}/search", json=body)

    async def get_stats(self, index: str) -> Dict[str, Any]:
        return await self._request("GET", f"/indexes/{index}/stats")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SearchEngineClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ConnectivityError(f"Search engine timed out: {e}", "timeout") from e
        except httpx.HTTPError as e:
            raise ConnectivityError(f"Cannot reach search engine: {e}") from e

        if response.status_code >= 500:
            raise ConnectivityError(
                f"Search engine error {response.status_code}: {response.text}"
            )
        if response.status_code >= 400:
            code, message = _parse_error(response)
            logger.warning("Search engine rejected %s %s: %s", method, path, message)
            raise QueryError(message, code)
        return response.json()


def _parse_error(response: httpx.Response) -> tuple[Optional[str], str]:
    try:
        payload = response.json()
    except ValueError:
        return None, response.text or f"HTTP {response.status_code}"
    return payload.get("code"), payload.get("message", str(payload))
