from fastapi import APIRouter, Depends, Query

from photosearch.api.deps import get_search_proxy
from photosearch.schemas.common import DownloadLink
from photosearch.services.search_proxy import SearchProxy

router = APIRouter()


@router.get("/download", response_model=DownloadLink)
async def track_download(
    location: str = Query(..., min_length=1, max_length=2048),
    proxy: SearchProxy = Depends(get_search_proxy),
) -> DownloadLink:
    """Register a download with the photo API and return the file URL.

    ``location`` is a photo's ``downloadTrackingUrl`` from a search result.
    """
    return await proxy.track_download(location)
