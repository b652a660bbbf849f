# File browser router: directory listing, file info and direct URLs.
# Created: 2026-10-13

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dirstream.api.deps import get_directory_service
from dirstream.api.v1.schemas.common import ErrorResponse
from dirstream.api.v1.schemas.files import FileEntry, FileInfoResponse, StreamUrlResponse
from dirstream.errors import UpstreamError
from dirstream.service import DirectoryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _path_required() -> JSONResponse:
    return JSONResponse({"error": "File path is required"}, status_code=400)


@router.get("/files", response_model=list[FileEntry], responses=_ERROR_RESPONSES)
async def list_files(
    path: str = "/", service: DirectoryService = Depends(get_directory_service)
):
    """List the files and directories at *path* on the upstream server."""
    logger.info("Request to list files at path: %s", path)
    try:
        entries = await service.list_files(path)
    except UpstreamError as e:
        logger.error("Error listing files at %s: %s", path, e)
        return JSONResponse({"error": str(e)}, status_code=500)

    return [FileEntry.model_validate(entry) for entry in entries]


@router.get("/fileinfo", response_model=FileInfoResponse, responses=_ERROR_RESPONSES)
async def get_file_info(
    path: str | None = None, service: DirectoryService = Depends(get_directory_service)
):
    """Name and size of a single file."""
    if not path:
        return _path_required()
    try:
        info = await service.get_file_info(path)
    except UpstreamError as e:
        logger.error("Error getting file info for %s: %s", path, e)
        return JSONResponse({"error": str(e)}, status_code=500)

    return FileInfoResponse.model_validate(info)


@router.get("/direct-stream-url", response_model=StreamUrlResponse, responses=_ERROR_RESPONSES)
async def get_direct_stream_url(
    path: str | None = None, service: DirectoryService = Depends(get_directory_service)
):
    """Upstream URL of a file, for external players (VLC, mpv) that fetch it themselves."""
    if not path:
        return _path_required()
    return StreamUrlResponse(url=service.get_stream_url(path))
