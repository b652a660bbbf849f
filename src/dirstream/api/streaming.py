# ASGI glue for the streaming proxy.
# Created: 2026-10-13
#
# ASGIResponseSink turns sink calls into http.response.start/body messages.
# ProxyStreamResponse runs one proxied stream per request and watches for the
# client disconnecting, the same way Starlette's StreamingResponse does: when
# the client goes away the stream task is cancelled, which closes the upstream
# response and releases its socket.

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from functools import partial

import anyio
from fastapi.responses import JSONResponse
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from dirstream.errors import UpstreamError
from dirstream.service import DirectoryService
from dirstream.streaming.ranges import ByteRange, StreamHead
from dirstream.streaming.sink import BaseSink

logger = logging.getLogger(__name__)


class ASGIResponseSink(BaseSink):
    """Writes a streamed response straight to an ASGI ``send`` callable.

    ``await send(...)`` only returns once the server accepted the message, so
    a slow client pushes back on the proxy instead of filling memory.
    """

    def __init__(
        self, send: Send, status: int | None = None, headers: Mapping[str, str] | None = None
    ):
        super().__init__(status, headers)
        self._send = send

    async def _send_head(self, status: int, headers: Iterable[tuple[str, str]]) -> None:
        await self._send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [
                    (name.lower().encode("latin-1"), value.encode("latin-1", errors="replace"))
                    for name, value in headers
                ],
            }
        )

    async def _send_body(self, chunk: bytes, more_body: bool) -> None:
        await self._send({"type": "http.response.body", "body": chunk, "more_body": more_body})


class ProxyStreamResponse(Response):
    """Response that proxies one upstream file through a DirectoryService."""

    def __init__(
        self,
        service: DirectoryService,
        path: str,
        head: StreamHead,
        byte_range: ByteRange | None = None,
    ) -> None:
        self.service = service
        self.path = path
        self.head = head
        self.byte_range = byte_range
        self.status_code = head.status or 200
        self.background = None

    async def listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break

    async def stream_response(self, scope: Scope, receive: Receive, send: Send) -> None:
        sink = ASGIResponseSink(send, self.head.status, self.head.headers)
        start, end = 0, None
        if self.byte_range is not None:
            start, end = self.byte_range.start, self.byte_range.last

        try:
            await self.service.stream_file(self.path, sink, start, end)
        except UpstreamError as e:
            # stream_file only raises while nothing has been sent yet.
            logger.error("Error streaming file %s: %s", self.path, e)
            await JSONResponse({"error": str(e)}, status_code=500)(scope, receive, send)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with anyio.create_task_group() as task_group:

            async def wrap(func) -> None:
                await func()
                task_group.cancel_scope.cancel()

            task_group.start_soon(wrap, partial(self.stream_response, scope, receive, send))
            await wrap(partial(self.listen_for_disconnect, receive))

        if self.background is not None:
            await self.background()
