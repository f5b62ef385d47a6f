"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from repo_browser.domain.entities import (
    BrowseResult,
    NotFoundModel,
    RawContentModel,
    TreeResponseModel,
)
from repo_browser.infrastructure.registry import RepositoryRegistry
from repo_browser.interface.dependencies import get_browser, get_registry
from repo_browser.interface.schemas import (
    NotFoundResponse,
    RepositoryIndexResponse,
    RepositorySummary,
    TreeResponse,
)
from repo_browser.services.repository_browser import RepositoryBrowser

router = APIRouter()

_BROWSE_RESPONSES: dict[int | str, dict[str, object]] = {
    200: {
        "description": "Tree page as JSON, or raw file content with its mime type",
        "model": TreeResponse,
    },
    400: {"description": "Malformed revision token"},
    404: {"description": "Unknown repository, unresolvable revision or empty tree"},
    503: {"description": "Repository backend unavailable"},
}


@router.get("/", response_model=RepositoryIndexResponse)
async def index(
    registry: RepositoryRegistry = Depends(get_registry),
) -> RepositoryIndexResponse:
    """List the configured repositories."""
    return RepositoryIndexResponse(
        repositories=[
            RepositorySummary(
                name=name,
                description=registry[name].description,
                href=f"{name}/",
            )
            for name in registry
        ]
    )


@router.get("/{repo_name}/", response_model=None, responses=_BROWSE_RESPONSES)
async def browse_default(
    repo_name: str,
    offset: int = Query(0, description="Number of commits to skip"),
    registry: RepositoryRegistry = Depends(get_registry),
    browser: RepositoryBrowser = Depends(get_browser),
) -> Response:
    """Browse the default revision of a repository."""
    return await _browse(registry, browser, repo_name, "", offset)


@router.get("/{repo_name}/{revision}", response_model=None, responses=_BROWSE_RESPONSES)
async def browse(
    repo_name: str,
    revision: str,
    offset: int = Query(0, description="Number of commits to skip"),
    registry: RepositoryRegistry = Depends(get_registry),
    browser: RepositoryBrowser = Depends(get_browser),
) -> Response:
    """Browse a revision token, optionally prefixed with ``(topic)``."""
    return await _browse(registry, browser, repo_name, revision, offset)


async def _browse(
    registry: RepositoryRegistry,
    browser: RepositoryBrowser,
    repo_name: str,
    revision: str,
    offset: int,
) -> Response:
    repo = registry.get_repository(repo_name)
    result = await run_in_threadpool(browser.render, repo, revision, offset)
    return to_response(result)


def to_response(result: BrowseResult) -> Response:
    """Translate a browse result into an HTTP response."""
    if isinstance(result, RawContentModel):
        return Response(content=result.content, media_type=result.mime_type)
    if isinstance(result, NotFoundModel):
        body = NotFoundResponse.from_model(result)
        return JSONResponse(status_code=404, content=body.model_dump(mode="json"))
    if isinstance(result, TreeResponseModel):
        body = TreeResponse.from_model(result)
        return JSONResponse(content=body.model_dump(mode="json"))
    raise TypeError(f"Unknown browse result: {result!r}")
