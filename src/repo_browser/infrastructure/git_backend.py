"""GitPython adapter — implements the RepositoryBackend port."""

from __future__ import annotations

import logging
import mimetypes
import threading
from typing import Any

import git
from git.exc import (
    BadName,
    BadObject,
    CommandError,
    GitCommandError,
    GitCommandNotFound,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from repo_browser.domain.entities import RefInfo, TreeEntry
from repo_browser.domain.exceptions import (
    AmbiguousOrInvalidRevisionError,
    BackendUnavailableError,
    NotABlobError,
    NotATreeError,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "format:%s (%aN, %ar) %ai %h%n%b"
DEFAULT_DESCRIPTION = "Unnamed repository; edit this file 'description' to name the repository."
DEFAULT_MIME_TYPE = "text/plain"
BINARY_MIME_TYPE = "application/octet-stream"
ABBREV = 7

_TREE_ENTRY_KINDS = {"blob": "blob", "tree": "tree", "submodule": "commit"}


class GitPythonBackend:
    """Concrete RepositoryBackend backed by a local git repository.

    GitPython keeps persistent ``git cat-file`` processes per ``Repo``; calls
    are serialised with a lock so one handle can serve concurrent requests.
    """

    def __init__(self, path: str) -> None:
        try:
            self._repo = git.Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise BackendUnavailableError(f"Not a git repository: {path}") from exc
        self._lock = threading.RLock()
        self.path = path

    # ── Revisions ───────────────────────────────────────────────────────

    def resolve_revision(self, revision: str) -> str:
        """``git rev-parse --verify`` → full object id."""
        if not revision or revision.startswith("-"):
            raise AmbiguousOrInvalidRevisionError(revision)
        try:
            with self._lock:
                return self._repo.git.rev_parse(revision, verify=True).strip()
        except GitCommandNotFound as exc:
            raise BackendUnavailableError(f"git executable not found: {exc}") from exc
        except GitCommandError as exc:
            raise AmbiguousOrInvalidRevisionError(revision) from exc

    def describe(self, object_id: str) -> str:
        """``git describe --contains --all --always``; falls back to the abbreviation."""
        try:
            with self._lock:
                return self._repo.git.describe(
                    object_id, contains=True, always=True, all=True, abbrev=ABBREV
                ).strip()
        except GitCommandError:
            logger.debug("describe failed for %s — using abbreviation", object_id)
            return object_id[:ABBREV]

    # ── Objects ─────────────────────────────────────────────────────────

    def read_tree(self, object_id: str) -> list[TreeEntry]:
        with self._lock:
            obj = self._object(object_id)
            while obj.type == "tag":
                obj = obj.object
            if obj.type == "commit":
                obj = obj.tree
            if obj.type != "tree":
                raise NotATreeError(f"{object_id} is a {obj.type}")

            entries: list[TreeEntry] = []
            for item in obj:
                kind = _TREE_ENTRY_KINDS.get(item.type)
                if kind is None:
                    continue
                entries.append(
                    TreeEntry(
                        name=item.path.rsplit("/", 1)[-1],
                        object_id=item.hexsha,
                        kind=kind,
                    )
                )
            return entries

    def read_blob(self, object_id: str, name: str | None = None) -> tuple[bytes, str]:
        with self._lock:
            obj = self._object(object_id)
            while obj.type == "tag":
                obj = obj.object
            if obj.type != "blob":
                raise NotABlobError(f"{object_id} is a {obj.type}")
            content: bytes = obj.data_stream.read()
        return content, guess_mime_type(name, content)

    def _object(self, object_id: str) -> Any:
        try:
            return self._repo.rev_parse(object_id)
        except (BadName, BadObject, ValueError) as exc:
            raise AmbiguousOrInvalidRevisionError(object_id) from exc

    # ── References ──────────────────────────────────────────────────────

    def list_heads(self) -> list[RefInfo]:
        with self._lock:
            return _ref_infos(self._repo.heads)

    def list_tags(self) -> list[RefInfo]:
        with self._lock:
            return _ref_infos(self._repo.tags)

    def list_remotes(self) -> list[RefInfo]:
        with self._lock:
            refs = [
                ref
                for ref in self._repo.refs
                if isinstance(ref, git.RemoteReference) and ref.remote_head != "HEAD"
            ]
            return _ref_infos(refs)

    # ── History ─────────────────────────────────────────────────────────

    def query_log(
        self, from_id: str, exclude_id: str | None, skip: int, limit: int
    ) -> str:
        """``git log --cc -p --shortstat -z`` bounded to one page."""
        revisions = [from_id]
        if exclude_id:
            revisions.append(f"^{exclude_id}")
        try:
            with self._lock:
                raw: bytes = self._repo.git.log(
                    *revisions,
                    "--",
                    cc=True,
                    p=True,
                    shortstat=True,
                    z=True,
                    pretty=LOG_FORMAT,
                    skip=skip,
                    max_count=limit,
                    stdout_as_string=False,
                )
        except (CommandError, OSError) as exc:
            raise BackendUnavailableError(f"git log failed: {exc}") from exc
        # Diffs of non-UTF-8 files must not fail the whole page.
        return raw.decode("utf-8", errors="replace")

    # ── Metadata ────────────────────────────────────────────────────────

    def read_description(self) -> str | None:
        try:
            with self._lock:
                description = self._repo.description
        except OSError:
            return None
        if description is None:
            return None
        description = description.strip()
        if not description or description == DEFAULT_DESCRIPTION:
            return None
        return description


def _ref_infos(refs: Any) -> list[RefInfo]:
    infos: list[RefInfo] = []
    for ref in refs:
        try:
            commit = ref.commit
        except ValueError:
            logger.debug("Skipping %s — does not point at a commit", ref.name)
            continue
        infos.append(
            RefInfo(
                name=ref.name,
                commit_id=commit.hexsha,
                authored_date=commit.authored_datetime,
                author=commit.author.name or "",
            )
        )
    return infos


def guess_mime_type(name: str | None, content: bytes) -> str:
    """Mime type from the file name, else a text/binary guess from the content."""
    if name:
        guessed, _ = mimetypes.guess_type(name)
        if guessed:
            return guessed
    if b"\0" in content[:8000]:
        return BINARY_MIME_TYPE
    return DEFAULT_MIME_TYPE
