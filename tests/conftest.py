from __future__ import annotations

import hashlib
import shutil
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path

import git
import pytest

from repo_browser.domain.entities import RefInfo, Repository, TreeEntry
from repo_browser.domain.exceptions import (
    AmbiguousOrInvalidRevisionError,
    NotABlobError,
    NotATreeError,
)

COMMIT_SUFFIX = "^{commit}"


def object_id(seed: str) -> str:
    return hashlib.sha1(seed.encode()).hexdigest()


def ref(name: str, commit_id: str, author: str = "Test User") -> RefInfo:
    return RefInfo(
        name=name,
        commit_id=commit_id,
        authored_date=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        author=author,
    )


class FakeBackend:
    """In-memory RepositoryBackend.

    ``files`` is a nested dict: ``bytes`` values are files, ``dict`` values
    are directories.  ``revisions`` maps revision strings to the name of a
    tree (``"root"``) or a file path; names listed in ``commits`` also peel to
    a commit.
    """

    def __init__(
        self,
        files: dict | None = None,
        revisions: dict[str, str] | None = None,
        commits: set[str] | None = None,
        heads: list[RefInfo] | None = None,
        tags: list[RefInfo] | None = None,
        remotes: list[RefInfo] | None = None,
        log: str = "",
        describe: str | None = None,
        description: str | None = None,
    ) -> None:
        self.objects: dict[str, tuple[str, object]] = {}
        self.paths: dict[str, str] = {}
        self.root_id = self._store_tree("root", files or {})
        self.revisions = revisions if revisions is not None else {"HEAD": "root", "master": "root"}
        self.commits = commits if commits is not None else set(self.revisions)
        self.heads = heads or []
        self.tags = tags or []
        self.remotes = remotes or []
        self.log = log
        self._describe = describe
        self.description = description
        self.log_calls: list[tuple[str, str | None, int, int]] = []
        self.tree_reads = 0

    def _store_tree(self, path: str, files: dict) -> str:
        entries = []
        for name, value in files.items():
            child_path = f"{path}/{name}"
            if isinstance(value, dict):
                entries.append(TreeEntry(name, self._store_tree(child_path, value), "tree"))
            else:
                oid = object_id(child_path)
                self.objects[oid] = ("blob", value)
                self.paths[child_path] = oid
                entries.append(TreeEntry(name, oid, "blob"))
        oid = object_id(path + "/")
        self.objects[oid] = ("tree", entries)
        self.paths[path] = oid
        return oid

    def add_entry(self, tree_path: str, entry: TreeEntry) -> None:
        kind, entries = self.objects[self.paths[tree_path]]
        entries.append(entry)

    # ── RepositoryBackend ──

    def resolve_revision(self, revision: str) -> str:
        peel = revision.endswith(COMMIT_SUFFIX)
        name = revision[: -len(COMMIT_SUFFIX)] if peel else revision
        if name not in self.revisions or (peel and name not in self.commits):
            raise AmbiguousOrInvalidRevisionError(revision)
        return self.paths.get(self.revisions[name], self.revisions[name])

    def read_tree(self, object_id: str) -> list[TreeEntry]:
        self.tree_reads += 1
        kind, value = self.objects.get(object_id, ("missing", None))
        if kind != "tree":
            raise NotATreeError(object_id)
        return list(value)

    def read_blob(self, object_id: str, name: str | None = None) -> tuple[bytes, str]:
        kind, value = self.objects.get(object_id, ("missing", None))
        if kind != "blob":
            raise NotABlobError(object_id)
        return value, "text/x-python" if (name or "").endswith(".py") else "text/plain"

    def list_heads(self) -> list[RefInfo]:
        return list(self.heads)

    def list_tags(self) -> list[RefInfo]:
        return list(self.tags)

    def list_remotes(self) -> list[RefInfo]:
        return list(self.remotes)

    def query_log(self, from_id: str, exclude_id: str | None, skip: int, limit: int) -> str:
        self.log_calls.append((from_id, exclude_id, skip, limit))
        return self.log

    def describe(self, object_id: str) -> str:
        return self._describe if self._describe is not None else object_id[:7]

    def read_description(self) -> str | None:
        return self.description


def make_repository(backend: FakeBackend, name: str = "wib") -> Repository:
    return Repository(name=name, path=f"/srv/git/{name}", backend=backend, description=backend.description)


def meta_record(subject: str, short_id: str, body: str = "", author: str = "Test User") -> str:
    title = f"{subject} ({author}, 2 days ago) 2024-01-02 03:04:05 +0000 {short_id}"
    return f"{title}\n{body}" if body else title


def diff_record(path: str = "a.txt", old: str = "old", new: str = "new") -> str:
    return (
        f"diff --git a/{path} b/{path}\n"
        "index 1111111..2222222 100644\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        "@@ -1 +1 @@\n"
        f"-{old}\n"
        f"+{new}\n"
    )


def log_stream(*records: str) -> str:
    return "\0".join(records)


# ── Real repositories ──


def _cleanup(path: str) -> None:
    try:
        shutil.rmtree(path)
    except PermissionError:
        time.sleep(0.1)
        shutil.rmtree(path, ignore_errors=True)


class GitRepoBuilder:
    def __init__(self, path: str) -> None:
        self.path = path
        self.repo = git.Repo.init(path)
        with self.repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")

    def commit(self, files: dict[str, str | bytes], message: str) -> git.Commit:
        for name, content in files.items():
            target = Path(self.path) / name
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content)
        self.repo.index.add(list(files))
        return self.repo.index.commit(message, author=git.Actor("Test User", "test@example.com"))


@pytest.fixture
def git_repo():
    temp_dir = tempfile.mkdtemp()
    try:
        yield GitRepoBuilder(temp_dir)
    finally:
        _cleanup(temp_dir)
