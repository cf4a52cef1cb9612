from fastapi import APIRouter, Depends, Query, Request, Response

from photosearch.api.deps import get_search_proxy
from photosearch.core.config import get_settings
from photosearch.core.rate_limit import limiter
from photosearch.schemas.search import SearchQuery, SearchResult
from photosearch.services.search_proxy import SearchProxy

router = APIRouter()
settings = get_settings()


@router.get("", response_model=SearchResult, response_model_by_alias=True)
@limiter.limit(lambda: f"{settings.search_rate_limit_per_minute}/minute")
async def search(
    request: Request,
    response: Response,
    q: str = Query("", max_length=200),
    # Kept as strings: out-of-range or malformed values are clamped, not rejected
    page: str | None = Query(None),
    per_page: str | None = Query(None),
    proxy: SearchProxy = Depends(get_search_proxy),
) -> SearchResult:
    query = SearchQuery.from_params(q, page, per_page, settings.default_page_size)
    result = await proxy.handle_search(query)
    response.headers["Cache-Control"] = f"private, max-age={settings.cache_ttl_seconds}"
    return result
