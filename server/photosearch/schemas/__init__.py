from photosearch.schemas.common import DownloadLink, ErrorResponse, StatusResponse
from photosearch.schemas.search import Photo, SearchQuery, SearchResult

__all__ = [
    "DownloadLink",
    "ErrorResponse",
    "StatusResponse",
    "Photo",
    "SearchQuery",
    "SearchResult",
]
