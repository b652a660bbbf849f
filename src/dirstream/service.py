# DirectoryService: the operations the browsing UI consumes.
# Created: 2026-10-12
#
#   list_files(path)                  -> list[Entry]
#   get_file_size(path)               -> int
#   stream_file(path, sink, start, end)
# plus get_file_info() and get_stream_url() for player integrations.
#
# Configuration is passed in; the service keeps no state between calls, so
# one instance can serve any number of concurrent requests.

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from datetime import datetime

import httpx

from dirstream.config import Settings
from dirstream.listing import Entry, parse_listing
from dirstream.paths import normalize_path
from dirstream.streaming.proxy import StreamingProxy, StreamState
from dirstream.streaming.sink import ResponseSink
from dirstream.upstream.fetcher import UpstreamFetcher

logger = logging.getLogger(__name__)


@dataclass
class FileInfo:
    name: str
    size: int
    path: str
    modified: datetime | None = None


class DirectoryService:
    """Browse and stream one upstream directory index."""

    def __init__(
        self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.settings = settings
        self.fetcher = UpstreamFetcher(settings, transport=transport)
        self.proxy = StreamingProxy(self.fetcher)

    async def list_files(self, path: str = "/") -> list[Entry]:
        """Fetch and parse the listing of directory *path*."""
        path = normalize_path(path)
        url = self.fetcher.url_for(path, directory=True)
        logger.info("Fetching directory listing from: %s", url)

        markup = await self.fetcher.fetch_text(url)
        if not markup:
            logger.info("Received empty listing for %s", path)
            return []

        entries = parse_listing(markup, path)
        logger.info("Listed %d entries in %s", len(entries), path)
        return entries

    async def get_file_size(self, path: str) -> int:
        return await self.proxy.size(normalize_path(path))

    async def stream_file(
        self,
        path: str,
        sink: ResponseSink,
        start: int = 0,
        end: int | None = None,
    ) -> StreamState:
        path = normalize_path(path)
        logger.info("Streaming %s (start=%d, end=%s)", path, start, end)
        return await self.proxy.stream(path, sink, start, end)

    async def get_file_info(self, path: str) -> FileInfo:
        """Name and size of a file. The modification time isn't available from HEAD."""
        path = normalize_path(path)
        size = await self.proxy.size(path)
        return FileInfo(name=posixpath.basename(path), size=size, path=path)

    def get_stream_url(self, path: str) -> str:
        """Direct upstream URL, for external players that can't use the proxy."""
        return self.fetcher.url_for(normalize_path(path))
