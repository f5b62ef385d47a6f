"""Browse-repository use case — the per-request orchestration pipeline.

Depends only on the :class:`RepositoryBackend` port held by each
:class:`Repository` and on the pure service modules.  Stateless across
requests; every call blocks on backend I/O.
"""

from __future__ import annotations

import logging

from repo_browser.domain.entities import (
    BlobTarget,
    BrowseResult,
    NotFoundModel,
    NotFoundReason,
    RawContentModel,
    RefInfo,
    RefLink,
    Repository,
    TreeResponseModel,
    TreeTarget,
)
from repo_browser.domain.exceptions import (
    AmbiguousOrInvalidRevisionError,
    EmptyTreeError,
    ObjectNotFoundError,
)
from repo_browser.domain.value_objects import RevisionSpec
from repo_browser.services import history_paginator, tree_walker
from repo_browser.services.revision_codec import encode, parse_compound

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
REMOTE_HREF_LENGTH = 8


class RepositoryBrowser:
    """Resolves a path segment and assembles the response model.

    Parameters
    ----------
    default_revision:
        Revision used when the path segment is empty.
    page_size:
        Number of commits per history page.
    """

    def __init__(
        self, default_revision: str = "HEAD", page_size: int = DEFAULT_PAGE_SIZE
    ) -> None:
        self._default_revision = default_revision
        self._page_size = page_size

    # ── Public entry point ──────────────────────────────────────────────

    def render(
        self, repo: Repository, path_segment: str, query_offset: int = 0
    ) -> BrowseResult:
        """Run the full pipeline for one request."""
        token = path_segment or encode(self._default_revision)
        spec = parse_compound(token)
        logger.info("Browsing %s at %s (offset %d)", repo.name, spec.display, query_offset)

        try:
            target = tree_walker.resolve(repo.backend, spec)
        except AmbiguousOrInvalidRevisionError as exc:
            return NotFoundModel(exc.revision, NotFoundReason.INVALID_REVISION)
        except EmptyTreeError as exc:
            return NotFoundModel(exc.revision, NotFoundReason.EMPTY_TREE)
        except ObjectNotFoundError as exc:
            return NotFoundModel(exc.revision, NotFoundReason.NOT_FOUND)

        if isinstance(target, BlobTarget):
            return RawContentModel(
                object_id=target.object_id,
                content=target.content,
                mime_type=target.mime_type,
            )
        if isinstance(target, TreeTarget):
            try:
                return self._render_tree(repo, spec, target, query_offset)
            except AmbiguousOrInvalidRevisionError as exc:
                return NotFoundModel(exc.revision, NotFoundReason.INVALID_REVISION)

        raise TypeError(f"Unknown resolved target: {target!r}")

    # ── Tree page ───────────────────────────────────────────────────────

    def _render_tree(
        self,
        repo: Repository,
        spec: RevisionSpec,
        target: TreeTarget,
        query_offset: int,
    ) -> TreeResponseModel:
        backend = repo.backend
        log, page = history_paginator.paginate(
            backend, spec, query_offset, self._page_size
        )

        head_infos = sorted(backend.list_heads(), key=lambda ref: ref.name)
        head_commits = {ref.name: ref.commit_id for ref in head_infos}

        return TreeResponseModel(
            title=self._title(repo, spec, target.object_id),
            description=repo.description,
            revision=spec,
            heads=[_named_link(ref) for ref in head_infos],
            tags=[
                _named_link(ref)
                for ref in sorted(backend.list_tags(), key=lambda ref: ref.name)
            ],
            remotes=select_remotes(backend.list_remotes(), head_commits),
            listing=target.listing,
            log=log,
            page=page,
        )

    @staticmethod
    def _title(repo: Repository, spec: RevisionSpec, object_id: str) -> str:
        requested = spec.display
        nice = repo.backend.describe(object_id)
        if nice != requested:
            return f"{requested} ({nice} = {object_id})"
        return f"{requested} ({object_id})"


# ── Reference helpers ───────────────────────────────────────────────────────


def select_remotes(remotes: list[RefInfo], head_commits: dict[str, str]) -> list[RefLink]:
    """Sort remotes by name, dropping mere copies of a local head."""
    links: list[RefLink] = []
    for ref in sorted(remotes, key=lambda r: r.name):
        branch = ref.name.split("/")[-1]
        if head_commits.get(branch) == ref.commit_id:
            continue
        links.append(_link(ref, ref.commit_id[:REMOTE_HREF_LENGTH]))
    return links


def _named_link(ref: RefInfo) -> RefLink:
    return _link(ref, encode(ref.name))


def _link(ref: RefInfo, href: str) -> RefLink:
    return RefLink(
        name=ref.name,
        href=href,
        commit_id=ref.commit_id,
        authored_date=ref.authored_date.isoformat(),
        author=ref.author,
    )
