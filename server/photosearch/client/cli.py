"""Terminal front end for the photo search proxy.

Type text to search. Commands:
  :more              load the next page
  :open N            show photo N with attribution
  :download N [DIR]  register the download and save photo N
  :quit              exit
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from photosearch.client.api import ClientError, ProxyApiClient
from photosearch.client.downloader import download_photo
from photosearch.client.session import SearchSession
from photosearch.client.views import PhotoDetail, render_detail, render_results
from photosearch.core.config import get_settings
from photosearch.schemas.search import Photo

log = logging.getLogger("photosearch.cli")

PROMPT = "search> "


class Shell:
    """Maps command lines onto a search session and prints the outcome."""

    def __init__(
        self,
        session: SearchSession,
        api: ProxyApiClient,
        app_name: str,
        download_dir: Path,
        write: Callable[[str], None] = print,
    ) -> None:
        self.session = session
        self.api = api
        self.app_name = app_name
        self.download_dir = download_dir
        self.write = write

    async def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the user asked to quit."""
        line = line.strip()
        if not line.startswith(":"):
            self.session.input(line)
            await self.session.settle()
            self._show_results()
            return True

        command, _, rest = line[1:].partition(" ")
        args = rest.split()
        if command in ("q", "quit", "exit"):
            return False
        if command == "more":
            if await self.session.load_more():
                self._show_results()
            else:
                self.write("No more results.")
        elif command == "open":
            photo = self._photo_arg(args)
            if photo is not None:
                for text in render_detail(PhotoDetail.from_photo(photo, self.app_name)):
                    self.write(text)
        elif command == "download":
            photo = self._photo_arg(args)
            if photo is not None:
                destination = Path(args[1]) if len(args) > 1 else self.download_dir
                await self._download(photo, destination)
        else:
            self.write(f"Unknown command :{command}")
        return True

    def _show_results(self) -> None:
        for text in render_results(self.session, self.app_name):
            self.write(text)

    def _photo_arg(self, args: list[str]) -> Photo | None:
        try:
            index = int(args[0])
        except (IndexError, ValueError):
            self.write("Expected a photo number")
            return None
        if not 1 <= index <= len(self.session.items):
            self.write(f"No photo #{index}")
            return None
        return self.session.items[index - 1]

    async def _download(self, photo: Photo, destination: Path) -> None:
        try:
            path = await download_photo(self.api, photo, destination)
        except ClientError as e:
            self.write(f"! {e.message}")
            return
        self.write(f"Saved {path}")


async def _read_line(prompt: str) -> str | None:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    page_size = args.page_size or settings.default_page_size
    async with ProxyApiClient(args.proxy_url or settings.proxy_url) as api:
        session = SearchSession(api, settings.debounce_seconds, page_size)
        shell = Shell(session, api, settings.app_name, Path(args.download_dir))
        try:
            if args.query is not None:
                await shell.handle(args.query)
                return 0 if session.notice is None else 1

            while True:
                line = await _read_line(PROMPT)
                if line is None or not await shell.handle(line):
                    return 0
        finally:
            session.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Search photos through the photo search proxy")
    parser.add_argument("--proxy-url", help="Proxy base URL (default: PROXY_URL setting)")
    parser.add_argument("--query", help="Run a single search, print page 1 and exit")
    parser.add_argument("--page-size", type=int, help="Photos per page (1-30)")
    parser.add_argument("--download-dir", default=".", help="Where :download saves files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        log.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
