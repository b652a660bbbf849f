# API v1 router aggregation.
# Created: 2026-10-13
#
# mount_v1_routers(app) registers all domain routers at /api/v1/ (canonical)
# and again at /api/ (unversioned alias, hidden from the OpenAPI schema).

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_V1_ROUTERS: list[tuple[str, str, str]] = [
    # (module_path, attr_name, tag)
    ("dirstream.api.v1.health", "router", "Health"),
    ("dirstream.api.v1.files", "router", "Files"),
    ("dirstream.api.v1.stream", "router", "Stream"),
]


def mount_v1_routers(app: FastAPI) -> None:
    """Mount all v1 domain routers on *app*."""
    import importlib

    from fastapi import APIRouter

    for module_path, attr_name, tag in _V1_ROUTERS:
        mod = importlib.import_module(module_path)
        router: APIRouter = getattr(mod, attr_name)

        app.include_router(router, prefix="/api/v1")
        app.include_router(router, prefix="/api", include_in_schema=False)

        logger.debug("Mounted v1 router: %s (%s)", module_path, tag)
