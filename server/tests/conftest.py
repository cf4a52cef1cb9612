"""Pytest configuration and fixtures for photosearch tests."""

from collections.abc import Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from photosearch.api.deps import get_search_proxy
from photosearch.main import app
from photosearch.services.search_cache import SearchCache
from photosearch.services.search_proxy import SearchProxy
from photosearch.services.unsplash import UnsplashClient

TEST_CREDENTIAL = "test-access-key-5f2b9c"

Handler = Callable[[httpx.Request], httpx.Response]


def unsplash_photo(photo_id: str, author: str = "Ansel Adams", **overrides) -> dict:
    """Build one upstream search result in the Unsplash response shape."""
    photo = {
        "id": photo_id,
        "width": 4000,
        "height": 3000,
        "color": "#262626",
        "description": None,
        "alt_description": f"photo {photo_id}",
        "urls": {
            "raw": f"https://images.unsplash.com/{photo_id}?raw",
            "full": f"https://images.unsplash.com/{photo_id}?full",
            "regular": f"https://images.unsplash.com/{photo_id}?regular",
            "small": f"https://images.unsplash.com/{photo_id}?small",
            "thumb": f"https://images.unsplash.com/{photo_id}?thumb",
        },
        "user": {
            "name": author,
            "links": {"html": f"https://unsplash.com/@{author.lower().replace(' ', '')}"},
        },
        "links": {
            "html": f"https://unsplash.com/photos/{photo_id}",
            "download_location": f"https://api.unsplash.com/photos/{photo_id}/download?ixid=abc",
        },
    }
    photo.update(overrides)
    return photo


def unsplash_search_body(photo_ids: list[str], total: int | None = None, total_pages: int = 1):
    return {
        "total": len(photo_ids) if total is None else total,
        "total_pages": total_pages,
        "results": [unsplash_photo(photo_id) for photo_id in photo_ids],
    }


class FakeUpstream:
    """httpx.MockTransport handler that records requests and replays queued replies.

    Queued items are httpx.Response objects, exceptions to raise, or callables
    taking the request. When the queue is empty ``default`` is used.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list = []
        self.default: httpx.Response | Exception | Handler = lambda request: httpx.Response(
            200, json=unsplash_search_body([])
        )

    def queue(self, *replies) -> None:
        self._queue.extend(replies)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._queue.pop(0) if self._queue else self.default
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def search_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/search/photos"]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def unsplash(upstream: FakeUpstream) -> UnsplashClient:
    return UnsplashClient(TEST_CREDENTIAL, transport=httpx.MockTransport(upstream))


@pytest.fixture
def search_proxy(unsplash: UnsplashClient, clock: FakeClock) -> SearchProxy:
    cache = SearchCache(ttl_seconds=300, max_entries=16, clock=clock)
    return SearchProxy(unsplash, cache)


@pytest.fixture(scope="function")
def client(search_proxy: SearchProxy) -> Generator[TestClient, None, None]:
    """Create a test client whose proxy talks to the fake upstream."""
    app.dependency_overrides[get_search_proxy] = lambda: search_proxy
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
