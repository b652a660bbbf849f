# Static extension -> MIME type table for proxied files.
# Created: 2026-10-12
#
# The upstream Content-Type is never trusted: index servers frequently send
# application/octet-stream (or text/plain) for media, which breaks playback.

from __future__ import annotations

import posixpath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    # Video
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogv": "video/ogg",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".m4v": "video/x-m4v",
    ".3gp": "video/3gpp",
    ".ts": "video/mp2t",
    ".mts": "video/mp2t",
    # Audio (.ogg is more often audio than video)
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".opus": "audio/opus",
    ".wma": "audio/x-ms-wma",
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    # Documents and subtitles
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".json": "application/json",
    ".srt": "application/x-subrip",
    ".vtt": "text/vtt",
}


def content_type_for(path: str) -> str:
    """MIME type for *path* based only on its extension."""
    _, ext = posixpath.splitext(path)
    return CONTENT_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)
