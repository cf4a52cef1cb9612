"""Photo downloads that honor the photo API's download-tracking requirement."""

import logging
import re
from pathlib import Path

import httpx

from photosearch.client.api import DownloadError, ProxyApiClient
from photosearch.schemas.search import Photo

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60.0

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def photo_filename(photo: Photo) -> str:
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', photo.id) or 'photo'}.jpg"


async def download_photo(
    api: ProxyApiClient,
    photo: Photo,
    destination: Path,
    overwrite: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Register the download, then stream the file into ``destination``.

    The tracking call must succeed before any byte is fetched; a failure
    there raises ``ProxyError``. A failed file transfer raises
    ``DownloadError``. An interrupted transfer, for whatever reason, leaves
    no partial file behind.
    """
    destination.mkdir(parents=True, exist_ok=True)
    dest_path = destination / photo_filename(photo)
    if dest_path.exists() and not overwrite:
        raise DownloadError(f"{dest_path} already exists", retryable=False)

    file_url = await api.track_download(photo)

    partial = False
    try:
        async with httpx.AsyncClient(
            timeout=DOWNLOAD_TIMEOUT, follow_redirects=True, transport=transport
        ) as client:
            async with client.stream("GET", file_url) as response:
                response.raise_for_status()
                with dest_path.open("wb") as f:
                    partial = True
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        partial = False
    except httpx.HTTPError as e:
        status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
        logger.warning("Download of photo %s failed: %s", photo.id, type(e).__name__)
        raise DownloadError("Photo download failed", status_code=status) from e
    except OSError as e:
        logger.warning("Could not save photo %s to %s: %s", photo.id, dest_path, e)
        raise DownloadError(f"Could not save {dest_path}", retryable=False) from e
    finally:
        if partial:
            dest_path.unlink(missing_ok=True)

    logger.info("Downloaded photo %s to %s", photo.id, dest_path)
    return dest_path
