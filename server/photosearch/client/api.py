"""HTTP client for the search proxy.

Every failure, whatever its cause, surfaces as ``ProxyError`` so callers
only need one except clause to keep their display intact.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from photosearch.schemas.common import DownloadLink
from photosearch.schemas.search import Photo, SearchQuery, SearchResult

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 15.0


class ClientError(Exception):
    """Base class for search client failures."""

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = True):
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class ProxyError(ClientError):
    """The proxy could not be reached or answered with an error."""


class DownloadError(ClientError):
    """The photo file could not be fetched after tracking succeeded."""


class ProxyApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ProxyApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search(self, query: SearchQuery) -> SearchResult:
        data = await self._get_json(
            "/api/search",
            params={"q": query.text, "page": query.page, "per_page": query.page_size},
        )
        try:
            return SearchResult.model_validate(data)
        except ValidationError as e:
            raise ProxyError("Unexpected response from search service", retryable=False) from e

    async def track_download(self, photo: Photo) -> str:
        """Ask the proxy to register a download; returns the file URL."""
        data = await self._get_json(
            "/api/photos/download", params={"location": photo.download_tracking_url}
        )
        try:
            return DownloadLink.model_validate(data).url
        except ValidationError as e:
            raise ProxyError("Unexpected response from search service", retryable=False) from e

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning("Search service request failed: %s", type(e).__name__)
            raise ProxyError("Search service is unreachable") from e

        if not response.is_success:
            message, retryable = _error_details(response)
            raise ProxyError(message, status_code=response.status_code, retryable=retryable)

        try:
            return response.json()
        except ValueError as e:
            raise ProxyError(
                "Unexpected response from search service",
                status_code=response.status_code,
                retryable=False,
            ) from e


def _error_details(response: httpx.Response) -> tuple[str, bool]:
    """Pull ``error``/``retryable`` out of a proxy error body, with fallbacks."""
    default_retryable = response.status_code >= 500 or response.status_code == 429
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"], bool(body.get("retryable", default_retryable))
    return f"Search service error (HTTP {response.status_code})", default_retryable
