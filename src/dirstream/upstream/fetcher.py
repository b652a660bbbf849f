# Upstream fetcher: GET/HEAD/streamed GET against the index server.
# Created: 2026-10-12
#
# Every call opens its own httpx.AsyncClient, so concurrent requests share no
# connection pool, cache or other mutable state. Deadlines are total elapsed
# time from request start (asyncio.timeout), not per-read idle timeouts.

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager

import httpx

from dirstream.config import Settings
from dirstream.errors import NetworkError, UpstreamError, UpstreamHTTPError, UpstreamTimeoutError
from dirstream.paths import build_url

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(url: str, timeout: float | None) -> Iterator[None]:
    """Map httpx and deadline failures onto the upstream error taxonomy."""
    try:
        yield
    except UpstreamError:
        raise
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise UpstreamTimeoutError(url, timeout) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        detail = str(exc) or type(exc).__name__
        raise NetworkError(f"{detail} ({url})") from exc


class UpstreamFetcher:
    """Performs the raw upstream requests for one configured server."""

    def __init__(
        self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.settings.upstream_url

    def url_for(self, path: str, *, directory: bool = False) -> str:
        return build_url(self.base_url, path, directory=directory)

    def _client(self, timeout: float | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch_text(self, url: str) -> str:
        """GET *url* and return the body text.

        Raises:
            NetworkError: connection or transport failure.
            UpstreamTimeoutError: the listing deadline elapsed.
            UpstreamHTTPError: the status was not 200.
        """
        timeout = self.settings.listing_timeout
        with translate_errors(url, timeout):
            async with asyncio.timeout(timeout):
                async with self._client(timeout) as client:
                    resp = await client.get(url)

        if resp.status_code != 200:
            raise UpstreamHTTPError(resp.status_code, resp.reason_phrase, url)
        return resp.text

    async def head(self, url: str) -> httpx.Headers:
        """HEAD *url* and return the response headers, whatever the status."""
        timeout = self.settings.listing_timeout
        with translate_errors(url, timeout):
            async with asyncio.timeout(timeout):
                async with self._client(timeout) as client:
                    resp = await client.head(url)
        logger.debug("HEAD %s -> %d", url, resp.status_code)
        return resp.headers

    @asynccontextmanager
    async def open_stream(
        self, url: str, headers: Mapping[str, str] | None = None
    ) -> AsyncIterator[httpx.Response]:
        """Open a streamed GET; the body is read by the caller chunk by chunk.

        Leaving the context closes the response and its client, which is how
        a cancelled download releases the upstream socket. Error translation
        and the overall deadline are the caller's job because they have to
        cover body iteration too.
        """
        async with self._client(self.settings.stream_timeout) as client:
            async with client.stream("GET", url, headers=headers) as response:
                yield response
