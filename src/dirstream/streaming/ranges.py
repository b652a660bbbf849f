# Byte ranges: Range header parsing and the response head a proxied stream
# starts with.
# Created: 2026-10-12

from __future__ import annotations

import re
from dataclasses import dataclass, field

from dirstream.streaming.mime import content_type_for

_RANGE_HEADER = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


class RangeNotSatisfiable(Exception):
    """The requested range starts beyond the end of the resource."""

    def __init__(self, size: int) -> None:
        self.size = size
        super().__init__(f"Requested range not satisfiable (size {size})")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range ``start..end`` of a resource of ``size`` bytes.

    ``end`` may be None for "until the end of the resource".
    """

    start: int
    end: int | None
    size: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end is not None and not (self.start <= self.end < self.size):
            raise ValueError(
                f"invalid range {self.start}-{self.end} for a {self.size}-byte resource"
            )

    @property
    def last(self) -> int:
        return self.end if self.end is not None else self.size - 1

    @property
    def length(self) -> int:
        return self.last - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.last}/{self.size}"


@dataclass
class StreamHead:
    """Status and headers set on the client response before any upstream
    header is forwarded. ``status`` None lets the upstream status through."""

    status: int | None
    headers: dict[str, str] = field(default_factory=dict)


def parse_range_header(header: str | None, size: int) -> ByteRange | None:
    """Parse a single-range ``Range`` header against a resource of *size* bytes.

    Returns None when there is nothing to honour (no header, unknown size,
    malformed or multi-range header): the caller then serves the whole
    resource, as RFC 9110 allows.

    Raises:
        RangeNotSatisfiable: the range starts at or past the end.
    """
    if not header or size <= 0:
        return None
    match = _RANGE_HEADER.match(header)
    if match is None:
        return None

    first, last = match.groups()
    if not first and not last:
        return None
    if not first:
        suffix = int(last)
        if suffix == 0:
            raise RangeNotSatisfiable(size)
        return ByteRange(max(size - suffix, 0), size - 1, size)

    start = int(first)
    if start >= size:
        raise RangeNotSatisfiable(size)
    end = int(last) if last else size - 1
    if end < start:
        return None
    return ByteRange(start, min(end, size - 1), size)


def prepare_stream_headers(path: str, size: int, byte_range: ByteRange | None) -> StreamHead:
    """Compute the response head for streaming *path* from its known *size*.

    Ranged: 206 with Content-Range/Content-Length for the slice. Unranged: 200
    with the full length. Size unknown (0): no length headers, and the status
    is left to the upstream.
    """
    headers = {
        "Content-Type": content_type_for(path),
        "Cache-Control": "no-cache",
    }
    if byte_range is not None:
        headers["Content-Range"] = byte_range.content_range
        headers["Accept-Ranges"] = "bytes"
        headers["Content-Length"] = str(byte_range.length)
        return StreamHead(206, headers)
    if size > 0:
        headers["Content-Length"] = str(size)
        headers["Accept-Ranges"] = "bytes"
        return StreamHead(200, headers)
    return StreamHead(None, headers)
