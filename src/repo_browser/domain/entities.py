"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

from repo_browser.domain.value_objects import RevisionSpec

if TYPE_CHECKING:
    from repo_browser.domain.ports.repository_backend import RepositoryBackend


# ── Repository ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Repository:
    """A repository opened once at startup and shared by every request."""

    name: str
    path: str
    backend: RepositoryBackend
    description: str | None = None


# ── Backend records ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """An immediate child of a tree as reported by the backend."""

    name: str
    object_id: str
    kind: str  # "blob", "tree" or "commit" (submodule)


@dataclass(frozen=True, slots=True)
class RefInfo:
    """A named reference (head, tag or remote) and the commit it points at."""

    name: str
    commit_id: str
    authored_date: datetime
    author: str


# ── Tree listing ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Blob:
    """A file leaf in a tree listing."""

    kind: ClassVar[str] = "blob"

    name: str
    short_id: str


@dataclass(frozen=True, slots=True)
class SubTree:
    """A directory in a tree listing; children are sorted by name."""

    kind: ClassVar[str] = "tree"

    name: str
    children: list[TreeNode] = field(default_factory=list)


TreeNode = Union[Blob, SubTree]


@dataclass(frozen=True, slots=True)
class TreeTarget:
    """A revision that resolved to a tree."""

    object_id: str
    listing: SubTree


@dataclass(frozen=True, slots=True)
class BlobTarget:
    """A revision that resolved to a file."""

    object_id: str
    content: bytes
    mime_type: str


ResolvedTarget = Union[TreeTarget, BlobTarget]


# ── History ─────────────────────────────────────────────────────────────────


class LineKind(str, Enum):
    """Presentation class of a single diff line."""

    REMOVED = "removed"
    ADDED = "added"
    INFO = "info"
    CONTEXT = "context"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """One escaped diff line with its classification."""

    kind: LineKind
    text: str


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One commit of a paginated history window."""

    summary: str
    parsed: bool = False
    subject: str = ""
    author: str = ""
    relative_date: str = ""
    absolute_date: str = ""
    short_id: str = ""
    body: str = ""
    stat: str = ""
    diff: str = ""
    diff_lines: list[DiffLine] = field(default_factory=list)

    @property
    def href(self) -> str:
        return self.short_id


@dataclass(frozen=True, slots=True)
class Page:
    """Pagination cursor.

    ``has_more`` is a heuristic: a full page implies more entries may exist.
    """

    offset: int
    page_size: int
    count: int = 0

    @property
    def has_previous(self) -> bool:
        return self.offset > 0

    @property
    def has_more(self) -> bool:
        return self.count == self.page_size

    @property
    def previous_offset(self) -> int | None:
        if not self.has_previous:
            return None
        return max(self.offset - self.page_size, 0)

    @property
    def next_offset(self) -> int | None:
        if not self.has_more:
            return None
        return self.offset + self.page_size


# ── Response models ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RefLink:
    """A reference rendered as a link target."""

    name: str
    href: str
    commit_id: str
    authored_date: str
    author: str


class NotFoundReason(str, Enum):
    """Why a request rendered as not found."""

    INVALID_REVISION = "invalid_revision"
    EMPTY_TREE = "empty_tree"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class TreeResponseModel:
    """Everything a presentation layer needs to render a tree page."""

    title: str
    description: str | None
    revision: RevisionSpec
    heads: list[RefLink]
    tags: list[RefLink]
    remotes: list[RefLink]
    listing: SubTree
    log: list[LogEntry]
    page: Page


@dataclass(frozen=True, slots=True)
class RawContentModel:
    """A file served verbatim."""

    object_id: str
    content: bytes
    mime_type: str


@dataclass(frozen=True, slots=True)
class NotFoundModel:
    """Same shape for every 404-class outcome; *reason* tells them apart."""

    revision: str
    reason: NotFoundReason

    @property
    def message(self) -> str:
        return f"Not found: {self.revision}"


BrowseResult = Union[TreeResponseModel, RawContentModel, NotFoundModel]
