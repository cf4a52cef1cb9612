from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from photosearch.core.config import MAX_PAGE_SIZE
from photosearch.core.validation import clamp, coerce_int, normalize_single_line

DEFAULT_PAGE_SIZE = 20


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, immutable once built."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @field_validator("text", mode="before")
    @classmethod
    def _normalize_text(cls, value: object) -> str:
        if value is None:
            return ""
        return normalize_single_line(str(value)) or ""

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: object) -> int:
        return clamp(coerce_int(value, 1), 1)

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: object) -> int:
        return clamp(coerce_int(value, DEFAULT_PAGE_SIZE), 1, MAX_PAGE_SIZE)

    @classmethod
    def from_params(
        cls,
        text: str | None,
        page: object = None,
        page_size: object = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "SearchQuery":
        """Build a query from raw request parameters; missing values take defaults."""
        return cls(
            text=text,
            page=1 if page in (None, "") else page,
            page_size=default_page_size if page_size in (None, "") else page_size,
        )

    @property
    def cache_key(self) -> tuple[str, int, int]:
        return (self.text.casefold(), self.page, self.page_size)


class Photo(_WireModel):
    id: str
    thumb_url: str
    full_url: str
    width: int | None = None
    height: int | None = None
    author_name: str
    author_profile_url: str
    download_tracking_url: str
    description: str | None = None
    color: str | None = None  # Dominant color, shown while the thumbnail is deferred


class SearchResult(_WireModel):
    items: tuple[Photo, ...] = Field(default_factory=tuple)
    total_count: int = 0
    total_pages: int = 0

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls(items=(), total_count=0, total_pages=0)
