"""Domain exception hierarchy.

Inner layers raise these; the interface layer either turns them into a
``NotFoundModel`` or translates them to an HTTP status in the error handlers.
"""

from __future__ import annotations


class RepoBrowserError(Exception):
    """Base exception for the entire application."""


# ── Request input ───────────────────────────────────────────────────────────


class InvalidRevisionTokenError(RepoBrowserError):
    """The URL path segment cannot be decoded into a revision specifier."""


class RepositoryNotFoundError(RepoBrowserError):
    """No repository is registered under the requested name."""


# ── Revision resolution ─────────────────────────────────────────────────────


class AmbiguousOrInvalidRevisionError(RepoBrowserError):
    """The backend cannot resolve the revision to exactly one object."""

    def __init__(self, revision: str) -> None:
        super().__init__(f"Cannot resolve revision '{revision}'.")
        self.revision = revision


class NotATreeError(RepoBrowserError):
    """The object exists but is not a tree (nor a commit or tag pointing at one)."""


class NotABlobError(RepoBrowserError):
    """The object exists but is not a blob."""


class ObjectNotFoundError(RepoBrowserError):
    """The object resolved but is neither a tree nor a blob."""

    def __init__(self, revision: str) -> None:
        super().__init__(f"'{revision}' is neither a tree nor a file.")
        self.revision = revision


class EmptyTreeError(RepoBrowserError):
    """The revision resolves to a tree without entries."""

    def __init__(self, revision: str) -> None:
        super().__init__(f"Tree at '{revision}' is empty.")
        self.revision = revision


# ── Backend ─────────────────────────────────────────────────────────────────


class BackendUnavailableError(RepoBrowserError):
    """I/O or process failure while talking to the version-control backend."""
