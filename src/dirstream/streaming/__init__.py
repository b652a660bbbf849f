"""Byte-range streaming of upstream files."""

from dirstream.streaming.mime import content_type_for
from dirstream.streaming.proxy import StreamingProxy, StreamState
from dirstream.streaming.ranges import (
    ByteRange,
    RangeNotSatisfiable,
    StreamHead,
    parse_range_header,
    prepare_stream_headers,
)
from dirstream.streaming.sink import BaseSink, MemorySink, ResponseSink

__all__ = [
    "BaseSink",
    "ByteRange",
    "MemorySink",
    "RangeNotSatisfiable",
    "ResponseSink",
    "StreamHead",
    "StreamState",
    "StreamingProxy",
    "content_type_for",
    "parse_range_header",
    "prepare_stream_headers",
]
