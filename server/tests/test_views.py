"""Tests for result cards, detail view and terminal rendering."""

from urllib.parse import parse_qs, urlsplit

from photosearch.client.session import SearchSession, SessionState
from photosearch.client.views import (
    PhotoCard,
    PhotoDetail,
    attribution_url,
    render_detail,
    render_results,
)
from photosearch.schemas.search import Photo

APP = "photosearch_test"


def _photo(**overrides) -> Photo:
    data = {
        "id": "A",
        "thumb_url": "https://img/A?thumb",
        "full_url": "https://img/A?full",
        "width": 4000,
        "height": 3000,
        "author_name": "Vivian Maier",
        "author_profile_url": "https://unsplash.com/@vmaier",
        "download_tracking_url": "https://api.unsplash.com/photos/A/download",
        "description": "street corner",
        "color": "#101010",
    }
    data.update(overrides)
    return Photo(**data)


class TestAttributionUrl:
    def test_adds_referral_params(self):
        url = attribution_url("https://unsplash.com/@vmaier", APP)

        params = parse_qs(urlsplit(url).query)
        assert params == {"utm_source": [APP], "utm_medium": ["referral"]}

    def test_keeps_existing_params_and_replaces_utm(self):
        url = attribution_url("https://unsplash.com/@vmaier?lang=en&utm_source=old", APP)

        params = parse_qs(urlsplit(url).query)
        assert params["lang"] == ["en"]
        assert params["utm_source"] == [APP]


class TestPhotoCard:
    def test_from_photo(self):
        card = PhotoCard.from_photo(_photo(), APP)

        assert card.photo_id == "A"
        assert card.thumb_url == "https://img/A?thumb"
        assert card.loading == "lazy"
        assert card.placeholder_color == "#101010"
        assert card.author_name == "Vivian Maier"
        assert "utm_medium=referral" in card.author_url


class TestPhotoDetail:
    def test_attribution_and_dimensions(self):
        detail = PhotoDetail.from_photo(_photo(), APP)

        assert detail.attribution == "Photo by Vivian Maier on Unsplash"
        assert detail.dimensions == "4000x3000"
        assert detail.full_url == "https://img/A?full"
        assert detail.download_tracking_url == "https://api.unsplash.com/photos/A/download"

    def test_unknown_dimensions(self):
        assert PhotoDetail.from_photo(_photo(width=None), APP).dimensions is None

    def test_render_detail(self):
        lines = render_detail(PhotoDetail.from_photo(_photo(), APP))

        assert lines[0] == "Photo by Vivian Maier on Unsplash"
        assert any("https://img/A?full" in line for line in lines)
        assert any("4000x3000" in line for line in lines)


class TestRenderResults:
    def _session(self) -> SearchSession:
        return SearchSession(api=None, debounce_seconds=0.01, page_size=2)

    def test_lists_items_in_order(self):
        session = self._session()
        session.query_text = "street"
        session.items = [_photo(id="A"), _photo(id="B", author_name="Garry Winogrand")]
        session.current_page = 1
        session.total_count = 10
        session.total_pages = 5

        lines = render_results(session, APP)

        assert lines[0] == 'Results for "street": 2 of 10'
        assert lines[1].strip().startswith("1. Vivian Maier")
        assert lines[2].strip().startswith("2. Garry Winogrand")
        assert "more" in lines[-1]

    def test_notice_shown_above_results(self):
        session = self._session()
        session.query_text = "street"
        session.items = [_photo()]
        session.current_page = 1
        session.total_pages = 1
        session.notice = "Photo search is currently unavailable"

        lines = render_results(session, APP)

        assert lines[0] == "! Photo search is currently unavailable"
        assert any("Vivian Maier" in line for line in lines)

    def test_no_results(self):
        session = self._session()
        session.query_text = "zzzz"
        session.current_page = 1

        assert render_results(session, APP)[-1] == "No photos found."

    def test_searching_indicator(self):
        session = self._session()
        session.state = SessionState.IN_FLIGHT

        assert render_results(session, APP) == ["Searching..."]
