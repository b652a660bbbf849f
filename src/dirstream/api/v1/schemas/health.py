# Health schemas.
# Created: 2026-10-13

from __future__ import annotations

from dirstream.api.v1.schemas.common import StatusResponse


class HealthResponse(StatusResponse):
    """Liveness plus the upstream being proxied."""

    upstream: str
    version: str
