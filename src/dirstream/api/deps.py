# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-13

from __future__ import annotations

from fastapi import Depends, Request

from dirstream.config import Settings, get_settings
from dirstream.service import DirectoryService


def get_app_settings(request: Request) -> Settings:
    """Settings the app was built with, falling back to the environment."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_directory_service(settings: Settings = Depends(get_app_settings)) -> DirectoryService:
    """A DirectoryService for the current request.

    Services are stateless, so building one per request is cheap and keeps
    requests independent. Tests swap this out via ``app.dependency_overrides``.
    """
    return DirectoryService(settings)
