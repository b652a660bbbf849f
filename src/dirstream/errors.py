# Upstream error taxonomy.
# Created: 2026-10-12
#
# httpx exceptions are translated into these at the fetcher boundary so the
# rest of the package (and the API layer) never depends on transport details.

from __future__ import annotations


class UpstreamError(Exception):
    """Base class for failures talking to the upstream server."""


class NetworkError(UpstreamError):
    """Connection, DNS or transport failure."""


class UpstreamTimeoutError(UpstreamError, TimeoutError):
    """The request exceeded its deadline."""

    def __init__(self, url: str, timeout: float | None) -> None:
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request timeout after {timeout}s: {url}")


class UpstreamHTTPError(UpstreamError):
    """The upstream answered with an unexpected status code."""

    def __init__(self, status_code: int, reason: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"HTTP {status_code}: {reason}".rstrip(": "))
