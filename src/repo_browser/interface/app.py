"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from repo_browser.interface.dependencies import shutdown, startup
from repo_browser.interface.error_handlers import register_error_handlers
from repo_browser.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the repository registry for the lifetime of the process."""
    await startup(app)
    yield
    await shutdown(app)


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="Repo Browser",
        version="1.0.0",
        description=(
            "Read-only browser for git repositories: resolves a revision to a "
            "directory listing or a file and pages through its history with "
            "inline diffs."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    # ── Health check (simple liveness probe) ────────────────────────────
    # Registered before the router so it is not taken for a repository name.

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)

    return app
