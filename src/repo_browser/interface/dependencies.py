"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import FastAPI, Request

from repo_browser.infrastructure.config import get_settings
from repo_browser.infrastructure.registry import RepositoryRegistry
from repo_browser.services.repository_browser import RepositoryBrowser


async def startup(app: FastAPI) -> None:
    """Open every configured repository — called from the lifespan context manager."""
    settings = get_settings()
    app.state.registry = RepositoryRegistry.open(settings.repositories)


async def shutdown(app: FastAPI) -> None:
    """Drop the registry; repositories are reopened on the next startup."""
    app.state.registry = None


def get_registry(request: Request) -> RepositoryRegistry:
    """Return the registry the application opened at startup."""
    registry: RepositoryRegistry | None = getattr(request.app.state, "registry", None)
    assert registry is not None, "startup() was not called"
    return registry


def get_browser() -> RepositoryBrowser:
    """Build the use case from settings."""
    settings = get_settings()
    return RepositoryBrowser(
        default_revision=settings.default_revision,
        page_size=settings.page_size,
    )
