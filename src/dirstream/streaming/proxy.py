# Streaming proxy: re-serves one upstream file per call into a ResponseSink.
# Created: 2026-10-12
#
# Per stream call:
#   NOT_STARTED -> HEADERS_PENDING -> STREAMING -> DONE
#   failure before the sink committed its head -> FAILED_BEFORE_HEADERS (raised)
#   failure after the head went out            -> FAILED_AFTER_HEADERS (logged)
# Once the client has a status line there is no way to report an error, so a
# late failure just ends the transfer early.

from __future__ import annotations

import asyncio
import logging
from enum import Enum

import httpx

from dirstream.errors import UpstreamError, UpstreamHTTPError
from dirstream.streaming.sink import ResponseSink
from dirstream.upstream.fetcher import UpstreamFetcher, translate_errors

logger = logging.getLogger(__name__)

# The body is forwarded decoded, so these would misdescribe it.
_DROPPED_HEADERS = frozenset({"content-encoding", "transfer-encoding"})
_FORWARDABLE_STATUSES = (200, 206)


class StreamState(str, Enum):
    NOT_STARTED = "not_started"
    HEADERS_PENDING = "headers_pending"
    STREAMING = "streaming"
    DONE = "done"
    FAILED_BEFORE_HEADERS = "failed_before_headers"
    FAILED_AFTER_HEADERS = "failed_after_headers"


def content_length(headers: httpx.Headers) -> int:
    """Content-Length as an int, 0 when missing or unparseable."""
    value = headers.get("content-length", "").strip()
    return int(value) if value.isdecimal() else 0


class StreamingProxy:
    """Size lookups and byte-range streaming for files on the upstream."""

    def __init__(self, fetcher: UpstreamFetcher) -> None:
        self.fetcher = fetcher

    async def size(self, path: str) -> int:
        """Size of *path* from a HEAD request; 0 if the upstream doesn't say."""
        headers = await self.fetcher.head(self.fetcher.url_for(path))
        return content_length(headers)

    async def stream(
        self,
        path: str,
        sink: ResponseSink,
        start: int = 0,
        end: int | None = None,
    ) -> StreamState:
        """Stream *path* (optionally bytes ``start..end`` inclusive) into *sink*.

        Whatever status and headers the caller already put on the sink win;
        upstream headers only fill the gaps. Each chunk is awaited into the
        sink before the next one is read, so a slow client slows the upstream
        read instead of growing a buffer.

        Returns:
            The terminal state, DONE or FAILED_AFTER_HEADERS.

        Raises:
            UpstreamError: the transfer failed before anything was sent.
        """
        if start < 0 or (end is not None and end < start):
            raise ValueError(f"invalid byte range {start}-{end}")

        url = self.fetcher.url_for(path)
        ranged = start > 0 or end is not None
        request_headers = {"Accept-Encoding": "identity"}
        if ranged:
            request_headers["Range"] = f"bytes={start}-{'' if end is None else end}"

        timeout = self.fetcher.settings.stream_timeout
        state = StreamState.HEADERS_PENDING
        logger.debug("Streaming %s (range=%s)", url, request_headers.get("Range", "none"))
        try:
            with translate_errors(url, timeout):
                async with asyncio.timeout(timeout):
                    async with self.fetcher.open_stream(url, request_headers) as response:
                        # Upstream ignored the Range header: cut the slice out of
                        # the full body ourselves.
                        sliced = ranged and response.status_code == 200
                        self._forward_head(url, response, sink, sliced)
                        state = StreamState.STREAMING

                        skip, limit = 0, None
                        if sliced:
                            skip = start
                            limit = None if end is None else end - start + 1
                        await self._pipe(response, sink, skip, limit)
            await sink.end()
        except UpstreamError as exc:
            if not sink.headers_sent:
                logger.debug(
                    "Stream of %s failed (%s, was %s): %s",
                    url,
                    StreamState.FAILED_BEFORE_HEADERS.value,
                    state.value,
                    exc,
                )
                raise
            logger.warning("Stream of %s aborted after headers were sent: %s", url, exc)
            return StreamState.FAILED_AFTER_HEADERS
        except asyncio.CancelledError:
            logger.debug("Stream of %s cancelled (client went away)", url)
            raise

        logger.debug("Finished streaming %s", url)
        return StreamState.DONE

    @staticmethod
    def _forward_head(
        url: str, response: httpx.Response, sink: ResponseSink, sliced: bool
    ) -> None:
        if response.status_code not in _FORWARDABLE_STATUSES:
            raise UpstreamHTTPError(response.status_code, response.reason_phrase, url)
        if sink.headers_sent:
            return
        if sink.status is None:
            sink.set_status(response.status_code)
        for name, value in response.headers.multi_items():
            lowered = name.lower()
            if lowered in _DROPPED_HEADERS or sink.has_header(name):
                continue
            if sliced and lowered == "content-length":
                continue
            sink.set_header(name, value)

    async def _pipe(
        self, response: httpx.Response, sink: ResponseSink, skip: int, limit: int | None
    ) -> None:
        async for chunk in response.aiter_bytes(self.fetcher.settings.chunk_size):
            if skip:
                if len(chunk) <= skip:
                    skip -= len(chunk)
                    continue
                chunk = chunk[skip:]
                skip = 0
            if limit is not None:
                chunk = chunk[:limit]
                limit -= len(chunk)
            if chunk:
                await sink.write(chunk)
            if limit == 0:
                break
