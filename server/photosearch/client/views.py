"""View models and terminal rendering for search results.

Cards never fetch their thumbnail; the URL is handed to whatever displays
the card, which loads it when the card is actually shown. The dominant
color stands in until then.
"""

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from photosearch.client.session import SearchSession, SessionState
from photosearch.schemas.search import Photo

UPSTREAM_NAME = "Unsplash"


def attribution_url(url: str, app_name: str) -> str:
    """Add the referral parameters the photo API's attribution terms require."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k not in ("utm_source", "utm_medium")]
    query += [("utm_source", app_name), ("utm_medium", "referral")]
    return urlunsplit(parts._replace(query=urlencode(query)))


@dataclass(frozen=True)
class PhotoCard:
    photo_id: str
    thumb_url: str
    placeholder_color: str | None
    author_name: str
    author_url: str
    loading: str = "lazy"

    @classmethod
    def from_photo(cls, photo: Photo, app_name: str) -> "PhotoCard":
        return cls(
            photo_id=photo.id,
            thumb_url=photo.thumb_url,
            placeholder_color=photo.color,
            author_name=photo.author_name,
            author_url=attribution_url(photo.author_profile_url, app_name),
        )


@dataclass(frozen=True)
class PhotoDetail:
    photo_id: str
    full_url: str
    width: int | None
    height: int | None
    description: str | None
    author_name: str
    author_url: str
    download_tracking_url: str

    @classmethod
    def from_photo(cls, photo: Photo, app_name: str) -> "PhotoDetail":
        return cls(
            photo_id=photo.id,
            full_url=photo.full_url,
            width=photo.width,
            height=photo.height,
            description=photo.description,
            author_name=photo.author_name,
            author_url=attribution_url(photo.author_profile_url, app_name),
            download_tracking_url=photo.download_tracking_url,
        )

    @property
    def attribution(self) -> str:
        return f"Photo by {self.author_name} on {UPSTREAM_NAME}"

    @property
    def dimensions(self) -> str | None:
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None


def render_card(index: int, card: PhotoCard) -> str:
    return f"{index:>3}. {card.author_name}  {card.thumb_url}"


def render_results(session: SearchSession, app_name: str) -> list[str]:
    """Lines describing the session's current display, notice included."""
    lines: list[str] = []
    if session.notice:
        lines.append(f"! {session.notice}")

    if session.query_text:
        lines.append(
            f'Results for "{session.query_text}": '
            f"{len(session.items)} of {session.total_count}"
        )
    for index, photo in enumerate(session.items, start=1):
        lines.append(render_card(index, PhotoCard.from_photo(photo, app_name)))

    if session.state in (SessionState.IN_FLIGHT, SessionState.SUPERSEDED):
        lines.append("Searching...")
    elif session.has_more:
        lines.append(f"Page {session.current_page} of {session.total_pages} - :more for next page")
    elif session.query_text and not session.items:
        lines.append("No photos found.")
    return lines


def render_detail(detail: PhotoDetail) -> list[str]:
    lines = [detail.attribution, f"  Profile: {detail.author_url}"]
    if detail.description:
        lines.append(f"  {detail.description}")
    if detail.dimensions:
        lines.append(f"  Size: {detail.dimensions}")
    lines.append(f"  Full image: {detail.full_url}")
    return lines
