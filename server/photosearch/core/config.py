import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Look for .env in project root (parent of server/)
_env_file = Path(__file__).resolve().parent.parent.parent.parent / ".env"

# Upper bound the upstream API accepts for per_page
MAX_PAGE_SIZE = 30


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_env_file, extra="ignore")

    # Environment
    env: Literal["development", "production"] = "development"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000  # PaaS platforms set PORT env var
    log_level: str = "INFO"

    # Upstream photo-search API (Unsplash-compatible)
    credential: str = ""
    upstream_base_url: str = "https://api.unsplash.com"
    upstream_timeout_seconds: float = 10.0

    # Search cache
    cache_ttl_seconds: int = 300
    cache_max_entries: int = 256

    # Search client
    proxy_url: str = "http://127.0.0.1:8000"
    debounce_ms: int = 400
    page_size: int = 20
    # Used as utm_source on attribution links
    app_name: str = "photosearch"

    # Trusted proxy IPs for X-Forwarded-For (comma-separated)
    # Set to nginx/load balancer IPs in production; empty = trust direct connection only
    trusted_proxies: str = "127.0.0.1,::1"

    # CORS - comma-separated origins or "*" for all (dev only)
    cors_origins: str = "*"

    # Rate limiting (disabled by default in dev, enable in prod)
    rate_limit_enabled: bool | None = None  # None = auto (disabled in dev, enabled in prod)
    search_rate_limit_per_minute: int = 60

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_rate_limit_enabled(self) -> bool:
        """Check if rate limiting is enabled (auto-detect based on env if not set)."""
        if self.rate_limit_enabled is not None:
            return self.rate_limit_enabled
        return self.is_production

    @property
    def default_page_size(self) -> int:
        """Configured page size clamped into the range the upstream accepts."""
        return min(max(self.page_size, 1), MAX_PAGE_SIZE)

    @property
    def debounce_seconds(self) -> float:
        return max(self.debounce_ms, 0) / 1000.0


def validate_settings(settings: Settings) -> None:
    """Validate required settings and print helpful error messages."""
    errors = []

    if settings.is_production:
        if not settings.credential:
            errors.append("CREDENTIAL must be set to the upstream API access key in production")
        if settings.cors_origins == "*":
            errors.append(
                "CORS_ORIGINS should not be '*' in production - "
                "set to your frontend domain (e.g., https://photos.example.com)"
            )
    elif not settings.credential:
        logging.warning("CREDENTIAL not set - upstream searches will be rejected")

    if settings.cache_ttl_seconds <= 0:
        errors.append("CACHE_TTL_SECONDS must be positive")
    if settings.cache_max_entries <= 0:
        errors.append("CACHE_MAX_ENTRIES must be positive")

    if not 1 <= settings.page_size <= MAX_PAGE_SIZE:
        logging.warning(
            "PAGE_SIZE=%d is outside 1..%d, using %d",
            settings.page_size,
            MAX_PAGE_SIZE,
            settings.default_page_size,
        )

    if errors:
        for error in errors:
            logging.error("Configuration error: %s", error)
        sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    validate_settings(settings)
    return settings
