# Shared fixtures: an in-process fake of the upstream index server.
# Created: 2026-10-17
#
# FakeUpstream answers through httpx.MockTransport, so the fetcher, proxy and
# API run their real code paths without opening a socket.

from __future__ import annotations

import asyncio
import re

import httpx
import pytest

from dirstream.config import Settings
from dirstream.service import DirectoryService

UPSTREAM = "http://upstream.test"

_RANGE = re.compile(r"bytes=(\d*)-(\d*)")


class BrokenStream(httpx.AsyncByteStream):
    """Body that yields *prefix* and then drops the connection."""

    def __init__(self, prefix: bytes) -> None:
        self.prefix = prefix

    async def __aiter__(self):
        yield self.prefix
        raise httpx.ReadError("connection reset by peer")


class StallingStream(httpx.AsyncByteStream):
    """Body that yields *prefix* and then never sends another byte."""

    def __init__(self, prefix: bytes) -> None:
        self.prefix = prefix
        self.closed = False

    async def __aiter__(self):
        yield self.prefix
        await asyncio.sleep(3600)
        yield b""

    async def aclose(self) -> None:
        self.closed = True


class FakeUpstream:
    """A tiny directory-index server.

    ``pages`` maps directory paths (with trailing slash) to index HTML,
    ``files`` maps file paths to their content.
    """

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}
        self.files: dict[str, bytes] = {}
        self.extra_headers: dict[str, str] = {}
        self.honour_ranges = True
        self.head_content_length = True
        self.delay = 0.0
        self.body_override: httpx.AsyncByteStream | None = None
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        path = request.url.path
        # Undecodable escapes (Latin-1 names) are looked up as sent.
        raw_path = request.url.raw_path.split(b"?", 1)[0].decode("ascii")
        if raw_path in self.files or raw_path in self.pages:
            path = raw_path
        if path in self.pages and request.method == "GET":
            return httpx.Response(
                200, text=self.pages[path], headers={"Content-Type": "text/html"}
            )
        if path not in self.files:
            if request.method == "HEAD":
                return httpx.Response(404)
            return httpx.Response(404, text="Not Found")

        content = self.files[path]
        if request.method == "HEAD":
            headers = {"Content-Type": "application/octet-stream"}
            if self.head_content_length:
                headers["Content-Length"] = str(len(content))
            return httpx.Response(200, headers=headers)

        headers = {"Content-Type": "application/octet-stream", **self.extra_headers}
        if self.body_override is not None:
            return httpx.Response(200, headers=headers, stream=self.body_override)

        range_header = request.headers.get("range")
        if range_header and self.honour_ranges:
            match = _RANGE.fullmatch(range_header)
            start = int(match.group(1))
            end = int(match.group(2)) if match.group(2) else len(content) - 1
            body = content[start : end + 1]
            headers["Content-Range"] = f"bytes {start}-{end}/{len(content)}"
            return httpx.Response(206, headers=headers, content=body)
        return httpx.Response(200, headers=headers, content=content)

    def get_requests(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        upstream_url=UPSTREAM,
        listing_timeout=2.0,
        stream_timeout=5.0,
        chunk_size=16,
    )


@pytest.fixture
def service(settings, fake_upstream) -> DirectoryService:
    return DirectoryService(settings, transport=fake_upstream.transport)


@pytest.fixture
def api_app(settings, fake_upstream):
    """API app wired to the fake upstream."""
    from dirstream.api.deps import get_directory_service
    from dirstream.api.serve import create_api_app

    app = create_api_app(settings)
    app.dependency_overrides[get_directory_service] = lambda: DirectoryService(
        settings, transport=fake_upstream.transport
    )
    return app


@pytest.fixture
def client(api_app):
    from fastapi.testclient import TestClient

    return TestClient(api_app)
