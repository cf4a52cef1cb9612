"""Unsplash API client for photo search and download tracking.

Attaches the access key to every call and turns upstream responses into
``SearchResult`` values. Upstream bodies are never surfaced: every failure
is mapped onto the ``UpstreamError`` taxonomy with a generic message.

One attempt per call. Callers decide whether to try again.
"""

import logging
import re
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from photosearch.core.exceptions import (
    ClientInputError,
    UpstreamProtocolError,
    UpstreamRejected,
    UpstreamUnavailable,
    sanitize_upstream_error,
)
from photosearch.schemas.search import Photo, SearchResult

logger = logging.getLogger(__name__)

UNSPLASH_API_BASE = "https://api.unsplash.com"
SEARCH_PATH = "/search/photos"
# Download-tracking endpoint; the only other path the proxy will call
DOWNLOAD_PATH = re.compile(r"/photos/[A-Za-z0-9_-]+/download/?")

# HTTP timeout for Unsplash API calls
HTTP_TIMEOUT = 10.0


# Upstream response shapes (only the fields we read; extras are ignored)


class _Urls(BaseModel):
    raw: str | None = None
    full: str | None = None
    regular: str | None = None
    small: str | None = None
    thumb: str | None = None


class _UserLinks(BaseModel):
    html: str


class _User(BaseModel):
    name: str
    links: _UserLinks


class _PhotoLinks(BaseModel):
    download_location: str
    html: str | None = None


class _UnsplashPhoto(BaseModel):
    id: str
    width: int | None = None
    height: int | None = None
    color: str | None = None
    description: str | None = None
    alt_description: str | None = None
    urls: _Urls
    user: _User
    links: _PhotoLinks


class _UnsplashSearchResponse(BaseModel):
    total: int
    total_pages: int
    results: list[_UnsplashPhoto]


def _to_photo(raw: _UnsplashPhoto) -> Photo:
    thumb_url = raw.urls.thumb or raw.urls.small
    full_url = raw.urls.full or raw.urls.regular or raw.urls.raw
    if not thumb_url or not full_url:
        logger.error("Unsplash photo %s has no usable image URLs", raw.id)
        raise UpstreamProtocolError()
    return Photo(
        id=raw.id,
        thumb_url=thumb_url,
        full_url=full_url,
        width=raw.width,
        height=raw.height,
        author_name=raw.user.name,
        author_profile_url=raw.user.links.html,
        download_tracking_url=raw.links.download_location,
        description=raw.alt_description or raw.description,
        color=raw.color,
    )


def parse_search_response(data: Any) -> SearchResult:
    """Normalize an Unsplash search body into a SearchResult, keeping item order."""
    try:
        parsed = _UnsplashSearchResponse.model_validate(data)
    except ValidationError as e:
        logger.error("Unexpected Unsplash search response shape (%d errors)", e.error_count())
        raise UpstreamProtocolError() from e

    return SearchResult(
        items=tuple(_to_photo(raw) for raw in parsed.results),
        total_count=parsed.total,
        total_pages=parsed.total_pages,
    )


class UnsplashClient:
    """Thin async wrapper around the Unsplash REST API."""

    def __init__(
        self,
        credential: str,
        base_url: str = UNSPLASH_API_BASE,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = httpx.URL(base_url.rstrip("/"))
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Client-ID {credential}",
                "Accept-Version": "v1",
            },
            transport=transport,
        )

    async def search_photos(self, text: str, page: int, per_page: int) -> SearchResult:
        """Run one upstream search call and normalize the response."""
        data = await self._get_json(
            SEARCH_PATH,
            params={"query": text, "page": page, "per_page": per_page},
        )
        return parse_search_response(data)

    async def track_download(self, location: str) -> str:
        """Register a download with Unsplash and return the file URL to fetch.

        ``location`` is the photo's ``download_location``; it must point at the
        configured API host so the proxy cannot be used to relay arbitrary URLs.
        """
        self._check_tracking_location(location)
        data = await self._get_json(location)
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            logger.error("Unsplash download tracking response has no url")
            raise UpstreamProtocolError()
        return url

    async def aclose(self) -> None:
        await self._client.aclose()

    def _check_tracking_location(self, location: str) -> None:
        try:
            url = httpx.URL(location)
        except (httpx.InvalidURL, TypeError) as e:
            raise ClientInputError("Invalid download location") from e
        if (url.scheme, url.host, url.port) != (
            self.base_url.scheme,
            self.base_url.host,
            self.base_url.port,
        ):
            raise ClientInputError("Download location must point at the photo API")
        prefix = self.base_url.path.rstrip("/")
        path = url.path
        if not path.startswith(prefix) or not DOWNLOAD_PATH.fullmatch(path[len(prefix) :]):
            raise ClientInputError("Download location is not a download-tracking URL")

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Unsplash request failed: %s", sanitize_upstream_error(e))
            raise UpstreamUnavailable() from e

        if 400 <= response.status_code < 500:
            logger.warning("Unsplash rejected request: HTTP %d", response.status_code)
            raise UpstreamRejected(upstream_status=response.status_code)
        if not response.is_success:
            logger.warning("Unsplash unavailable: HTTP %d", response.status_code)
            raise UpstreamUnavailable(upstream_status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error("Unsplash returned a non-JSON body (HTTP %d)", response.status_code)
            raise UpstreamProtocolError() from e
