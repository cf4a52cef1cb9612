"""Search session: debounced input, pagination and stale-response handling.

State machine::

    IDLE       --input-->        PENDING
    PENDING    --input-->        PENDING      (timer restarted)
    PENDING    --timer fires-->  IN_FLIGHT(id)
    IN_FLIGHT  --input-->        SUPERSEDED   (timer armed, older request still out)
    SUPERSEDED --input-->        SUPERSEDED
    SUPERSEDED --timer fires-->  IN_FLIGHT(new id)
    IN_FLIGHT  --response(id)--> IDLE         (PENDING if a timer is armed)

Only a response whose request id is the latest issued id touches the
displayed state. Older responses are dropped when they arrive; the HTTP
calls themselves are never cancelled.
"""

import logging
from collections.abc import Callable
from enum import Enum

from photosearch.client.api import ProxyApiClient, ProxyError
from photosearch.client.debounce import Debouncer
from photosearch.core.validation import normalize_single_line
from photosearch.schemas.search import Photo, SearchQuery, SearchResult

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUPERSEDED = "superseded"


Listener = Callable[["SearchSession"], None]


class SearchSession:
    """Displayed results for one user typing into one search box."""

    def __init__(
        self,
        api: ProxyApiClient,
        debounce_seconds: float,
        page_size: int,
        on_change: Listener | None = None,
    ) -> None:
        self._api = api
        self.page_size = page_size
        self._debouncer: Debouncer[str] = Debouncer(debounce_seconds, self._on_quiet)
        self._listeners: list[Listener] = [on_change] if on_change else []

        self.state = SessionState.IDLE
        self.query_text = ""
        self.items: list[Photo] = []
        self.current_page = 0
        self.total_count = 0
        self.total_pages = 0
        self.notice: str | None = None

        self._issued_id = 0
        self._in_flight_id: int | None = None
        self._in_flight_query: SearchQuery | None = None

    # -- inputs ------------------------------------------------------------

    def input(self, text: str) -> None:
        """Record a keystroke; the search runs once input has been quiet."""
        self._debouncer.trigger(text)
        if self._in_flight_id is not None:
            self._set_state(SessionState.SUPERSEDED)
        else:
            self._set_state(SessionState.PENDING)

    async def load_more(self) -> bool:
        """Fetch the next page of the displayed query. Returns False if nothing to do."""
        if self._in_flight_id is not None or not self.has_more:
            return False
        query = SearchQuery(
            text=self.query_text, page=self.current_page + 1, page_size=self.page_size
        )
        await self._issue(query)
        return True

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    async def settle(self) -> None:
        """Wait for a pending debounce and the requests it starts."""
        await self._debouncer.wait()

    def close(self) -> None:
        self._debouncer.cancel()

    # -- derived -----------------------------------------------------------

    @property
    def has_more(self) -> bool:
        return 0 < self.current_page < self.total_pages

    @property
    def busy(self) -> bool:
        return self._in_flight_id is not None

    # -- transitions -------------------------------------------------------

    async def _on_quiet(self, raw_text: str) -> None:
        text = normalize_single_line(raw_text) or ""

        if not text:
            self._reset_display()
            # Anything still in flight belongs to the text that was cleared
            self._drop_in_flight()
            self._set_state(SessionState.IDLE)
            self._notify()
            return

        if text == self.query_text and self.current_page > 0:
            logger.debug("Query unchanged (%r), not searching again", text)
            in_flight = self._in_flight_query
            if in_flight is not None and in_flight.text != text:
                # The request still out is for text the user has moved away from
                self._drop_in_flight()
            self._settle_state()
            self._notify()
            return

        await self._issue(SearchQuery(text=text, page=1, page_size=self.page_size))

    async def _issue(self, query: SearchQuery) -> None:
        self._issued_id += 1
        request_id = self._issued_id
        self._in_flight_id = request_id
        self._in_flight_query = query
        self._set_state(
            SessionState.SUPERSEDED if self._debouncer.pending else SessionState.IN_FLIGHT
        )
        self._notify()

        try:
            result = await self._api.search(query)
        except ProxyError as e:
            self._on_response(request_id, query, error=e)
        else:
            self._on_response(request_id, query, result=result)

    def _on_response(
        self,
        request_id: int,
        query: SearchQuery,
        result: SearchResult | None = None,
        error: ProxyError | None = None,
    ) -> None:
        if request_id != self._issued_id:
            logger.debug("Discarding stale response #%d for %r", request_id, query.text)
            return

        self._in_flight_id = None
        self._in_flight_query = None
        if error is not None:
            logger.info("Search for %r failed: %s", query.text, error.message)
            self.notice = error.message
        else:
            self._apply(query, result)
        self._settle_state()
        self._notify()

    def _apply(self, query: SearchQuery, result: SearchResult) -> None:
        if query.page == 1:
            self.items = list(result.items)
            self.query_text = query.text
        else:
            seen = {photo.id for photo in self.items}
            self.items.extend(photo for photo in result.items if photo.id not in seen)
        self.current_page = query.page
        self.total_count = result.total_count
        self.total_pages = result.total_pages
        self.notice = None

    def _drop_in_flight(self) -> None:
        """Forget the outstanding request so its response is discarded on arrival."""
        self._issued_id += 1
        self._in_flight_id = None
        self._in_flight_query = None

    def _reset_display(self) -> None:
        self.query_text = ""
        self.items = []
        self.current_page = 0
        self.total_count = 0
        self.total_pages = 0
        self.notice = None

    def _settle_state(self) -> None:
        if self._in_flight_id is not None:
            if self._debouncer.pending:
                self._set_state(SessionState.SUPERSEDED)
            else:
                self._set_state(SessionState.IN_FLIGHT)
        elif self._debouncer.pending:
            self._set_state(SessionState.PENDING)
        else:
            self._set_state(SessionState.IDLE)

    def _set_state(self, state: SessionState) -> None:
        if state is not self.state:
            logger.debug("Session %s -> %s", self.state.value, state.value)
            self.state = state

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)
