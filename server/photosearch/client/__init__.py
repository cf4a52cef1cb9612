"""Search client: proxy API wrapper, debounced session, views and downloads."""

from photosearch.client.api import ClientError, DownloadError, ProxyApiClient, ProxyError
from photosearch.client.debounce import Debouncer
from photosearch.client.session import SearchSession, SessionState

__all__ = [
    "ClientError",
    "Debouncer",
    "DownloadError",
    "ProxyApiClient",
    "ProxyError",
    "SearchSession",
    "SessionState",
]
