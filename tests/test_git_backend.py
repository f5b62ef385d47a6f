import pytest

from repo_browser.domain.exceptions import (
    AmbiguousOrInvalidRevisionError,
    BackendUnavailableError,
    NotABlobError,
    NotATreeError,
)
from repo_browser.domain.value_objects import RevisionSpec
from repo_browser.infrastructure.git_backend import (
    BINARY_MIME_TYPE,
    DEFAULT_DESCRIPTION,
    GitPythonBackend,
    guess_mime_type,
)
from repo_browser.services.history_paginator import parse_log
from repo_browser.services.tree_walker import resolve


class TestOpen:
    def test_not_a_repository(self, tmp_path):
        with pytest.raises(BackendUnavailableError):
            GitPythonBackend(str(tmp_path))

    def test_missing_path(self, tmp_path):
        with pytest.raises(BackendUnavailableError):
            GitPythonBackend(str(tmp_path / "nowhere"))


class TestRevisions:
    def test_resolve_branch_and_hash(self, git_repo):
        commit = git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        branch = git_repo.repo.active_branch.name

        assert backend.resolve_revision(branch) == commit.hexsha
        assert backend.resolve_revision(commit.hexsha[:7]) == commit.hexsha
        assert backend.resolve_revision("HEAD^{tree}") == commit.tree.hexsha

    @pytest.mark.parametrize("revision", ["no-such-branch", "--all", ""])
    def test_invalid_revision(self, git_repo, revision):
        git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        with pytest.raises(AmbiguousOrInvalidRevisionError):
            backend.resolve_revision(revision)

    def test_describe_falls_back_to_abbreviation(self, git_repo):
        git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        assert backend.describe("0" * 40) == "0000000"

    def test_describe_names_commit_by_ref(self, git_repo):
        commit = git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        branch = git_repo.repo.active_branch.name
        assert branch in backend.describe(commit.hexsha)


class TestObjects:
    def test_read_tree_peels_commit(self, git_repo):
        commit = git_repo.commit({"README": "r", "src/app.py": "print(1)\n"}, "Initial")
        backend = GitPythonBackend(git_repo.path)

        entries = {e.name: e for e in backend.read_tree(commit.hexsha)}

        assert set(entries) == {"README", "src"}
        assert entries["README"].kind == "blob"
        assert entries["src"].kind == "tree"
        assert [e.name for e in backend.read_tree(entries["src"].object_id)] == ["app.py"]

    def test_read_tree_of_blob(self, git_repo):
        commit = git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        blob_id = commit.tree["a.txt"].hexsha
        with pytest.raises(NotATreeError):
            backend.read_tree(blob_id)

    def test_read_blob(self, git_repo):
        commit = git_repo.commit({"app.py": "print(1)\n"}, "Initial")
        backend = GitPythonBackend(git_repo.path)

        content, mime = backend.read_blob(commit.tree["app.py"].hexsha, "app.py")

        assert content == b"print(1)\n"
        assert mime.startswith("text/")

    def test_read_blob_of_tree(self, git_repo):
        commit = git_repo.commit({"a.txt": "a"}, "Initial")
        backend = GitPythonBackend(git_repo.path)
        with pytest.raises(NotABlobError):
            backend.read_blob(commit.tree.hexsha)

    def test_tag_pointing_at_blob_serves_content(self, git_repo):
        commit = git_repo.commit({"notes.txt": "signed notes\n"}, "Notes")
        blob = commit.tree["notes.txt"]
        git_repo.repo.create_tag("notes-v1", ref=blob.hexsha, message="Notes release")
        backend = GitPythonBackend(git_repo.path)

        content, _ = backend.read_blob(backend.resolve_revision("notes-v1"))
        target = resolve(backend, RevisionSpec(base="notes-v1"))

        assert content == b"signed notes\n"
        assert target.content == b"signed notes\n"
        assert target.object_id != blob.hexsha

    def test_resolve_path_revision_to_blob(self, git_repo):
        git_repo.commit({"docs/index.html": "<h1>hi</h1>"}, "Docs")
        backend = GitPythonBackend(git_repo.path)

        target = resolve(backend, RevisionSpec(base="HEAD:docs/index.html"))

        assert target.content == b"<h1>hi</h1>"
        assert target.mime_type == "text/html"


class TestMimeType:
    def test_name_wins(self):
        assert guess_mime_type("style.css", b"\0") == "text/css"

    def test_binary_content(self):
        assert guess_mime_type(None, b"\x89PNG\0\0") == BINARY_MIME_TYPE

    def test_text_content(self):
        assert guess_mime_type(None, b"plain") == "text/plain"


class TestReferences:
    def test_heads_and_tags(self, git_repo):
        first = git_repo.commit({"a.txt": "1"}, "First")
        second = git_repo.commit({"a.txt": "2"}, "Second")
        git_repo.repo.create_head("feature/x", first)
        git_repo.repo.create_tag("v1", ref=first)
        git_repo.repo.create_tag("v2", ref=second, message="Annotated")
        git_repo.repo.create_tag("tree-tag", ref=second.tree)
        backend = GitPythonBackend(git_repo.path)

        heads = {h.name: h for h in backend.list_heads()}
        tags = {t.name: t.commit_id for t in backend.list_tags()}

        assert heads["feature/x"].commit_id == first.hexsha
        assert heads["feature/x"].author == "Test User"
        assert tags == {"v1": first.hexsha, "v2": second.hexsha}

    def test_remotes(self, git_repo):
        commit = git_repo.commit({"a.txt": "1"}, "First")
        git_repo.repo.git.update_ref("refs/remotes/origin/main", commit.hexsha)
        git_repo.repo.git.symbolic_ref("refs/remotes/origin/HEAD", "refs/remotes/origin/main")
        backend = GitPythonBackend(git_repo.path)

        remotes = backend.list_remotes()

        assert [(r.name, r.commit_id) for r in remotes] == [("origin/main", commit.hexsha)]

    def test_description(self, git_repo):
        git_repo.commit({"a.txt": "1"}, "First")
        description_file = git_repo.repo.git_dir + "/description"

        with open(description_file, "w") as fp:
            fp.write(DEFAULT_DESCRIPTION + "\n")
        assert GitPythonBackend(git_repo.path).read_description() is None

        with open(description_file, "w") as fp:
            fp.write("Personal wiki\n")
        assert GitPythonBackend(git_repo.path).read_description() == "Personal wiki"


class TestQueryLog:
    def test_pages_pair_each_commit_with_its_diff(self, git_repo):
        for i in range(3):
            git_repo.commit({f"file{i}.txt": f"content {i}\n"}, f"Commit {i}")
        backend = GitPythonBackend(git_repo.path)
        head = backend.resolve_revision("HEAD")

        first_page = parse_log(backend.query_log(head, None, 0, 2))
        second_page = parse_log(backend.query_log(head, None, 2, 2))

        assert [e.subject for e in first_page] == ["Commit 2", "Commit 1"]
        assert [e.subject for e in second_page] == ["Commit 0"]
        for entry, i in zip(first_page + second_page, [2, 1, 0]):
            assert entry.parsed
            assert entry.author == "Test User"
            assert f"file{i}.txt" in entry.diff
            assert f"+content {i}" in entry.diff
            assert entry.stat.startswith("1 file changed")

    def test_topic_range_excludes_commits(self, git_repo):
        base = git_repo.commit({"a.txt": "1"}, "Base")
        git_repo.commit({"b.txt": "2"}, "On top")
        backend = GitPythonBackend(git_repo.path)
        head = backend.resolve_revision("HEAD")

        entries = parse_log(backend.query_log(head, base.hexsha, 0, 10))

        assert [e.subject for e in entries] == ["On top"]

    def test_subject_resembling_shortstat_keeps_its_own_diff(self, git_repo):
        git_repo.commit({"a.txt": "a\n"}, "First")
        git_repo.commit({"b.txt": "b\n"}, "3 files changed in refactor")
        git_repo.commit({"c.txt": "c\n"}, "Third")
        backend = GitPythonBackend(git_repo.path)
        head = backend.resolve_revision("HEAD")

        entries = parse_log(backend.query_log(head, None, 0, 10))

        assert [e.subject for e in entries] == ["Third", "3 files changed in refactor", "First"]
        assert [e.stat for e in entries] == ["1 file changed, 1 insertion(+)"] * 3
        assert "b.txt" in entries[1].diff
        assert "b.txt" not in entries[0].diff
