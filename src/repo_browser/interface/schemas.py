"""Pydantic response DTOs for the API boundary."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from repo_browser.domain.entities import LineKind, NotFoundModel, TreeResponseModel
from repo_browser.services.revision_codec import encode_spec


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class RepositorySummary(BaseModel):
    """One line of the repository index."""

    name: str
    description: str | None = None
    href: str


class RepositoryIndexResponse(BaseModel):
    """Response from ``GET /``."""

    repositories: list[RepositorySummary]


class TreeNodeSchema(_FromDomain):
    """A file (``kind="blob"``) or directory (``kind="tree"``) of the listing."""

    kind: Literal["blob", "tree"]
    name: str
    short_id: str | None = None
    children: list[TreeNodeSchema] = Field(default_factory=list)


class DiffLineSchema(_FromDomain):
    kind: LineKind
    text: str


class LogEntrySchema(_FromDomain):
    summary: str
    parsed: bool
    subject: str
    author: str
    relative_date: str
    absolute_date: str
    short_id: str
    href: str
    body: str
    stat: str
    diff_lines: list[DiffLineSchema]


class RefLinkSchema(_FromDomain):
    name: str
    href: str
    commit_id: str
    authored_date: str
    author: str


class PageSchema(_FromDomain):
    """Pagination cursor; ``has_more`` is a full-page heuristic, not a count."""

    offset: int
    page_size: int
    count: int
    has_previous: bool
    has_more: bool
    previous_offset: int | None = None
    next_offset: int | None = None


class RevisionSchema(BaseModel):
    base: str
    topic: str | None = None
    token: str


class TreeResponse(BaseModel):
    """Successful tree page from ``GET /{repo}/{revision}``."""

    title: str
    description: str | None = None
    revision: RevisionSchema
    heads: list[RefLinkSchema]
    tags: list[RefLinkSchema]
    remotes: list[RefLinkSchema]
    listing: TreeNodeSchema
    log: list[LogEntrySchema]
    page: PageSchema

    @classmethod
    def from_model(cls, model: TreeResponseModel) -> TreeResponse:
        return cls(
            title=model.title,
            description=model.description,
            revision=RevisionSchema(
                base=model.revision.base,
                topic=model.revision.topic,
                token=encode_spec(model.revision),
            ),
            heads=[RefLinkSchema.model_validate(ref) for ref in model.heads],
            tags=[RefLinkSchema.model_validate(ref) for ref in model.tags],
            remotes=[RefLinkSchema.model_validate(ref) for ref in model.remotes],
            listing=TreeNodeSchema.model_validate(model.listing),
            log=[LogEntrySchema.model_validate(entry) for entry in model.log],
            page=PageSchema.model_validate(model.page),
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str


class NotFoundResponse(ErrorResponse):
    """404 envelope; *reason* tells an empty tree from a bad revision."""

    reason: str
    revision: str

    @classmethod
    def from_model(cls, model: NotFoundModel) -> NotFoundResponse:
        return cls(
            message=model.message,
            reason=model.reason.value,
            revision=model.revision,
        )
