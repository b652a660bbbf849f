# Stream router: byte-range proxying of upstream files for media playback.
# Created: 2026-10-13
#
# The size comes from a HEAD request first so the response head (206 +
# Content-Range, or 200 + Content-Length) can be computed before any upstream
# byte is forwarded.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from dirstream.api.deps import get_directory_service
from dirstream.api.streaming import ProxyStreamResponse
from dirstream.errors import UpstreamError
from dirstream.service import DirectoryService
from dirstream.streaming.ranges import (
    ByteRange,
    RangeNotSatisfiable,
    StreamHead,
    parse_range_header,
    prepare_stream_headers,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stream"])


async def _prepare(
    request: Request, path: str | None, service: DirectoryService
) -> Response | tuple[StreamHead, ByteRange | None]:
    if not path:
        return JSONResponse({"error": "File path is required"}, status_code=400)

    try:
        size = await service.get_file_size(path)
    except UpstreamError as e:
        logger.error("Error getting size of %s: %s", path, e)
        return JSONResponse({"error": str(e)}, status_code=500)

    try:
        byte_range = parse_range_header(request.headers.get("range"), size)
    except RangeNotSatisfiable as e:
        return Response(
            status_code=416,
            headers={"Content-Range": f"bytes */{e.size}", "Accept-Ranges": "bytes"},
        )

    return prepare_stream_headers(path, size, byte_range), byte_range


@router.get("/stream")
async def stream_file(
    request: Request,
    path: str | None = None,
    service: DirectoryService = Depends(get_directory_service),
):
    """Stream a file, honouring a single ``Range: bytes=`` request header."""
    prepared = await _prepare(request, path, service)
    if isinstance(prepared, Response):
        return prepared

    head, byte_range = prepared
    return ProxyStreamResponse(service, path, head, byte_range)


@router.head("/stream")
async def stream_file_head(
    request: Request,
    path: str | None = None,
    service: DirectoryService = Depends(get_directory_service),
):
    """Response head of ``GET /stream`` without the body (players probe with HEAD)."""
    prepared = await _prepare(request, path, service)
    if isinstance(prepared, Response):
        return prepared

    head, _ = prepared
    return Response(status_code=head.status or 200, headers=head.headers)
