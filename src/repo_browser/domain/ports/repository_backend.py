"""Port: repository backend — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_browser.domain.entities import RefInfo, TreeEntry


class RepositoryBackend(Protocol):
    """Abstract read-only contract for a version-control object store.

    Every method may block on I/O.
    """

    def resolve_revision(self, revision: str) -> str:
        """Return the full object id named by *revision*.

        Raises ``AmbiguousOrInvalidRevisionError`` unless exactly one object
        matches.
        """
        ...

    def read_tree(self, object_id: str) -> list[TreeEntry]:
        """Return the immediate children of a tree (commits and tags are peeled).

        Raises ``NotATreeError`` for any other object.
        """
        ...

    def read_blob(self, object_id: str, name: str | None = None) -> tuple[bytes, str]:
        """Return ``(content, mime_type)``; *name* is a mime-type hint.

        Raises ``NotABlobError`` for any other object.
        """
        ...

    def list_heads(self) -> list[RefInfo]:
        """Return local branches."""
        ...

    def list_tags(self) -> list[RefInfo]:
        """Return tags that point (possibly through a tag object) at a commit."""
        ...

    def list_remotes(self) -> list[RefInfo]:
        """Return remote-tracking branches, named ``<remote>/<branch>``."""
        ...

    def query_log(
        self, from_id: str, exclude_id: str | None, skip: int, limit: int
    ) -> str:
        """Return the raw NUL-separated log stream with diffs inline."""
        ...

    def describe(self, object_id: str) -> str:
        """Return a human-readable approximate name for *object_id*."""
        ...

    def read_description(self) -> str | None:
        """Return the repository description, or None when unset."""
        ...
