"""Search proxy: cached, credential-holding front for the upstream photo API.

One instance per process, created at startup and closed at shutdown.
"""

import logging

from photosearch.core.config import Settings
from photosearch.schemas.common import DownloadLink
from photosearch.schemas.search import SearchQuery, SearchResult
from photosearch.services.search_cache import SearchCache
from photosearch.services.unsplash import UnsplashClient

logger = logging.getLogger(__name__)


class SearchProxy:
    """Owns the upstream client and the shared result cache."""

    def __init__(self, upstream: UnsplashClient, cache: SearchCache) -> None:
        self.upstream = upstream
        self.cache = cache

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchProxy":
        upstream = UnsplashClient(
            settings.credential,
            base_url=settings.upstream_base_url,
            timeout=settings.upstream_timeout_seconds,
        )
        cache = SearchCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        )
        return cls(upstream, cache)

    async def handle_search(self, query: SearchQuery) -> SearchResult:
        """Return results for ``query``, from cache when fresh.

        Empty text is answered locally with zero results. Upstream failures
        propagate as ``UpstreamError`` and leave the cache untouched.
        """
        if not query.text:
            return SearchResult.empty()

        key = query.cache_key
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Search cache hit: %s", key)
            return cached

        logger.debug("Search cache miss: %s", key)
        result = await self.upstream.search_photos(query.text, query.page, query.page_size)
        self.cache.put(key, result)
        return result

    async def track_download(self, location: str) -> DownloadLink:
        url = await self.upstream.track_download(location)
        return DownloadLink(url=url)

    def clear_cache(self) -> int:
        count = self.cache.clear()
        logger.info("Cleared %d cached search results", count)
        return count

    async def aclose(self) -> None:
        await self.upstream.aclose()
