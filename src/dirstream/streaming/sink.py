# Response sinks: the transport-agnostic target a proxied stream writes into.
# Created: 2026-10-12
#
# Status and headers stay mutable until the first write() (or end()), which
# commits them. After that they are frozen: an HTTP status line cannot be
# changed once it has been sent.

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Protocol


class ResponseSink(Protocol):
    """Protocol for anything a StreamingProxy can stream into."""

    @property
    def status(self) -> int | None:
        """Status set so far, or None if nobody set one yet."""
        ...

    @property
    def headers_sent(self) -> bool:
        """True once status and headers have been committed to the client."""
        ...

    def set_status(self, status: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def has_header(self, name: str) -> bool: ...

    async def write(self, chunk: bytes) -> None:
        """Send a body chunk, committing the head first if needed.

        Implementations should only return once the chunk has been handed to
        the transport, which is what gives the proxy its backpressure.
        """
        ...

    async def end(self) -> None: ...


class BaseSink(ABC):
    """Header bookkeeping shared by concrete sinks."""

    def __init__(self, status: int | None = None, headers: Mapping[str, str] | None = None):
        self._status = status
        # lower-cased name -> (name as set, value)
        self._headers: dict[str, tuple[str, str]] = {}
        self._headers_sent = False
        self._ended = False
        for name, value in (headers or {}).items():
            self.set_header(name, value)

    @property
    def status(self) -> int | None:
        return self._status

    @property
    def headers(self) -> dict[str, str]:
        return {name: value for name, value in self._headers.values()}

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    @property
    def ended(self) -> bool:
        return self._ended

    def set_status(self, status: int) -> None:
        if self._headers_sent:
            raise RuntimeError("Cannot change the status after headers were sent")
        self._status = status

    def set_header(self, name: str, value: str) -> None:
        if self._headers_sent:
            raise RuntimeError(f"Cannot set header {name!r} after headers were sent")
        self._headers[name.lower()] = (name, str(value))

    def has_header(self, name: str) -> bool:
        return name.lower() in self._headers

    async def write(self, chunk: bytes) -> None:
        if self._ended:
            raise RuntimeError("write() after end()")
        if not self._headers_sent:
            await self._commit()
        if chunk:
            await self._send_body(chunk, more_body=True)

    async def end(self) -> None:
        if self._ended:
            return
        if not self._headers_sent:
            await self._commit()
        self._ended = True
        await self._send_body(b"", more_body=False)

    async def _commit(self) -> None:
        self._headers_sent = True
        await self._send_head(self._status or 200, list(self._headers.values()))

    @abstractmethod
    async def _send_head(self, status: int, headers: Iterable[tuple[str, str]]) -> None: ...

    @abstractmethod
    async def _send_body(self, chunk: bytes, more_body: bool) -> None: ...


class MemorySink(BaseSink):
    """Collects a streamed response in memory. Meant for tests and small files."""

    def __init__(self, status: int | None = None, headers: Mapping[str, str] | None = None):
        super().__init__(status, headers)
        self.sent_status: int | None = None
        self.sent_headers: dict[str, str] = {}
        self.chunks: list[bytes] = []

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)

    async def _send_head(self, status: int, headers: Iterable[tuple[str, str]]) -> None:
        self.sent_status = status
        self.sent_headers = dict(headers)

    async def _send_body(self, chunk: bytes, more_body: bool) -> None:
        if chunk:
            self.chunks.append(chunk)
