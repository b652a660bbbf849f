# Tests for API v1 stream router.
# Created: 2026-10-17

import asyncio

import pytest

from dirstream.api.streaming import ProxyStreamResponse
from dirstream.streaming import prepare_stream_headers
from conftest import BrokenStream, StallingStream

CONTENT = bytes(i % 256 for i in range(1000))


@pytest.fixture(autouse=True)
def media(fake_upstream):
    fake_upstream.files["/Movies/clip.mp4"] = CONTENT


class TestStreamGet:
    """Tests for GET /api/v1/stream."""

    def test_full_file(self, client):
        resp = client.get("/api/v1/stream", params={"path": "/Movies/clip.mp4"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "video/mp4"
        assert resp.headers["content-length"] == "1000"
        assert resp.headers["accept-ranges"] == "bytes"
        assert resp.headers["cache-control"] == "no-cache"
        assert resp.content == CONTENT

    def test_byte_range(self, client):
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=100-199"},
        )
        assert resp.status_code == 206
        assert resp.headers["content-range"] == "bytes 100-199/1000"
        assert resp.headers["content-length"] == "100"
        assert resp.content == CONTENT[100:200]

    def test_open_ended_range(self, client):
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=990-"},
        )
        assert resp.status_code == 206
        assert resp.headers["content-range"] == "bytes 990-999/1000"
        assert resp.content == CONTENT[990:]

    def test_range_forwarded_upstream(self, client, fake_upstream):
        client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=0-9"},
        )
        (upstream_get,) = fake_upstream.get_requests("GET")
        assert upstream_get.headers["range"] == "bytes=0-9"

    def test_upstream_ignoring_range(self, client, fake_upstream):
        fake_upstream.honour_ranges = False
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=500-549"},
        )
        assert resp.status_code == 206
        assert resp.content == CONTENT[500:550]

    def test_malformed_range_serves_whole_file(self, client):
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=0-1,5-9"},
        )
        assert resp.status_code == 200
        assert resp.content == CONTENT

    def test_unsatisfiable_range(self, client, fake_upstream):
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=5000-"},
        )
        assert resp.status_code == 416
        assert resp.headers["content-range"] == "bytes */1000"
        assert fake_upstream.get_requests("GET") == []

    def test_path_required(self, client):
        resp = client.get("/api/v1/stream")
        assert resp.status_code == 400
        assert resp.json() == {"error": "File path is required"}

    def test_missing_file(self, client):
        resp = client.get("/api/v1/stream", params={"path": "/Movies/missing.mp4"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "HTTP 404: Not Found"}

    def test_unknown_size_passes_upstream_through(self, client, fake_upstream):
        fake_upstream.head_content_length = False
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=0-9"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "video/mp4"
        assert resp.content == CONTENT


class TestStreamHead:
    """Tests for HEAD /api/v1/stream."""

    def test_head_full(self, client, fake_upstream):
        resp = client.head("/api/v1/stream", params={"path": "/Movies/clip.mp4"})
        assert resp.status_code == 200
        assert resp.headers["content-length"] == "1000"
        assert resp.content == b""
        assert fake_upstream.get_requests("GET") == []

    def test_head_ranged(self, client):
        resp = client.head(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Range": "bytes=0-99"},
        )
        assert resp.status_code == 206
        assert resp.headers["content-range"] == "bytes 0-99/1000"
        assert resp.headers["content-length"] == "100"


class TestCors:
    def test_range_headers_exposed(self, client):
        resp = client.get(
            "/api/v1/stream",
            params={"path": "/Movies/clip.mp4"},
            headers={"Origin": "http://player.example", "Range": "bytes=0-9"},
        )
        assert resp.status_code == 206
        exposed = resp.headers["access-control-expose-headers"].lower()
        assert "content-range" in exposed
        assert "accept-ranges" in exposed


class TestStreamResponseLifecycle:
    """ProxyStreamResponse driven directly over ASGI."""

    @staticmethod
    def _response(service):
        head = prepare_stream_headers("/Movies/clip.mp4", len(CONTENT), None)
        return ProxyStreamResponse(service, "/Movies/clip.mp4", head)

    @pytest.mark.asyncio
    async def test_client_disconnect_closes_upstream(self, service, fake_upstream):
        upstream_body = StallingStream(CONTENT[:16])
        fake_upstream.body_override = upstream_body
        messages = []
        head_sent = asyncio.Event()

        async def send(message):
            messages.append(message)
            if message["type"] == "http.response.start":
                head_sent.set()

        async def receive():
            await head_sent.wait()
            return {"type": "http.disconnect"}

        await asyncio.wait_for(self._response(service)({"type": "http"}, receive, send), 5)

        assert upstream_body.closed
        assert messages[0]["status"] == 200
        assert not any(m.get("more_body") is False for m in messages[1:])

    @pytest.mark.asyncio
    async def test_failure_after_head_sends_no_error_body(self, service, fake_upstream):
        fake_upstream.body_override = BrokenStream(CONTENT[:40])
        messages = []

        async def send(message):
            messages.append(message)

        async def receive():
            await asyncio.Event().wait()

        await asyncio.wait_for(self._response(service)({"type": "http"}, receive, send), 5)

        starts = [m for m in messages if m["type"] == "http.response.start"]
        assert len(starts) == 1
        assert starts[0]["status"] == 200
        body = b"".join(m.get("body", b"") for m in messages[1:])
        assert body == CONTENT[:32]
        assert b"error" not in body
        assert not any(m.get("more_body") is False for m in messages[1:])
