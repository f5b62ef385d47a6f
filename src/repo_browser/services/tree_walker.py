"""Tree walker — resolve a revision to a tree listing or a file."""

from __future__ import annotations

import logging

from repo_browser.domain.entities import (
    Blob,
    BlobTarget,
    ResolvedTarget,
    SubTree,
    TreeEntry,
    TreeNode,
    TreeTarget,
)
from repo_browser.domain.exceptions import (
    EmptyTreeError,
    NotABlobError,
    NotATreeError,
    ObjectNotFoundError,
)
from repo_browser.domain.ports.repository_backend import RepositoryBackend
from repo_browser.domain.value_objects import RevisionSpec

logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 7


def resolve(backend: RepositoryBackend, spec: RevisionSpec) -> ResolvedTarget:
    """Resolve ``spec.base`` to a :class:`TreeTarget` or a :class:`BlobTarget`.

    Raises ``AmbiguousOrInvalidRevisionError`` (from the backend),
    ``EmptyTreeError`` for a tree without entries, and ``ObjectNotFoundError``
    when the object is neither a tree nor a blob.
    """
    object_id = backend.resolve_revision(spec.base)

    try:
        entries = backend.read_tree(object_id)
    except NotATreeError:
        try:
            content, mime_type = backend.read_blob(object_id, spec.blob_name)
        except NotABlobError as exc:
            raise ObjectNotFoundError(spec.base) from exc
        return BlobTarget(object_id=object_id, content=content, mime_type=mime_type)

    listing = walk(backend, entries)
    # Submodules are dropped by the walk, so check the built listing.
    if not listing.children:
        raise EmptyTreeError(spec.base)

    return TreeTarget(object_id=object_id, listing=listing)


def sort_entries(entries: list[TreeEntry]) -> list[TreeEntry]:
    """Case-insensitive ascending by name; exact spelling breaks ties."""
    return sorted(entries, key=lambda e: (e.name.lower(), e.name))


def walk(backend: RepositoryBackend, root_entries: list[TreeEntry]) -> SubTree:
    """Build the full listing below a tree.

    Uses an explicit stack so arbitrarily deep trees cannot exhaust the
    interpreter's recursion limit.
    """
    root = SubTree(name="")
    stack: list[tuple[SubTree, list[TreeEntry]]] = [(root, root_entries)]

    while stack:
        parent, entries = stack.pop()
        for entry in sort_entries(entries):
            node = _to_node(entry)
            if node is None:
                continue
            parent.children.append(node)
            if isinstance(node, SubTree):
                stack.append((node, backend.read_tree(entry.object_id)))

    return root


def _to_node(entry: TreeEntry) -> TreeNode | None:
    if entry.kind == "blob":
        return Blob(name=entry.name, short_id=entry.object_id[:SHORT_ID_LENGTH])
    if entry.kind == "tree":
        return SubTree(name=entry.name)
    logger.debug("Skipping %s entry %s", entry.kind, entry.name)
    return None
