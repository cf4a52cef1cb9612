"""Run the search proxy with uvicorn on the configured host and port."""

import uvicorn

from photosearch.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "photosearch.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips=settings.trusted_proxies,
    )


if __name__ == "__main__":
    main()
