"""API server for ``dirstream serve``.

Builds the FastAPI application (versioned ``/api/v1/`` routers, CORS) and runs
it under uvicorn. The UI is a separate client; nothing here serves HTML.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dirstream import __version__
from dirstream.config import Settings

logger = logging.getLogger(__name__)


def create_api_app(settings: Settings | None = None):
    """Build the FastAPI application.

    Args:
        settings: Explicit configuration. Defaults to the environment
            (``get_settings()``); tests pass their own.
    """
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from dirstream.api.v1 import mount_v1_routers
    from dirstream.config import get_settings

    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="dirstream API",
        description="Browse an upstream HTML directory index and stream its files "
        "with byte-range support.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )
    app.state.settings = settings

    # --- CORS -----------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["Range", "Content-Type"],
        expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
    )

    # --- Mount all /api/v1/ routers -------------------------------------
    mount_v1_routers(app)

    logger.debug("API app created for upstream %s", settings.upstream_url)
    return app


def startup_banner(settings: Settings, host: str, port: int) -> str:
    """Summary printed when the server starts: where it listens, what it proxies."""
    docs_host = "localhost" if host in ("0.0.0.0", "::") else host
    stream_deadline = (
        "none" if settings.stream_timeout is None else f"{settings.stream_timeout:g}s"
    )
    return "\n".join(
        [
            f"dirstream {__version__}",
            f"  upstream   {settings.upstream_url}",
            f"  listen     {host}:{port}",
            f"  timeouts   listing {settings.listing_timeout:g}s, stream {stream_deadline}",
            f"  docs       http://{docs_host}:{port}/api/v1/docs",
        ]
    )


def run_api_server(
    settings: Settings,
    host: str | None = None,
    port: int | None = None,
    dev: bool = False,
) -> None:
    """Start the API server under uvicorn.

    With *dev*, uvicorn rebuilds the app from the environment on every code
    change, so settings must come from ``DIRSTREAM_*`` variables.
    """
    import uvicorn

    host = host or settings.host
    port = port or settings.port

    print(startup_banner(settings, host, port) + "\n")

    if dev:
        uvicorn.run(
            "dirstream.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[str(Path(__file__).resolve().parent.parent)],
            log_level="debug",
        )
    else:
        uvicorn.run(create_api_app(settings), host=host, port=port, log_config=None)
