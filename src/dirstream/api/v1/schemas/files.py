# File browser schemas.
# Created: 2026-10-13

from __future__ import annotations

from datetime import datetime
from typing import Literal

from dirstream.api.v1.schemas.common import APIResponse


class FileEntry(APIResponse):
    """A single file or directory in an upstream listing."""

    name: str
    type: Literal["file", "directory"]
    size: int = 0
    modified: datetime | None = None
    path: str


class FileInfoResponse(APIResponse):
    """Name and size of a single upstream file."""

    name: str
    size: int = 0
    modified: datetime | None = None
    path: str


class StreamUrlResponse(APIResponse):
    """Direct upstream URL for a file."""

    url: str
