"""Tests for indexing/git_reader.py against real throw-away repositories."""

import pytest

from gitrends.exceptions import RepositoryError
from gitrends.indexing.git_reader import GitRepository, _parse_offset


class TestOpen:
    def test_not_a_repository(self, tmp_path):
        with GitRepository(tmp_path) as repo:
            with pytest.raises(RepositoryError):
                repo.open()

    def test_missing_path(self, tmp_path):
        with GitRepository(tmp_path / "nope") as repo:
            with pytest.raises(RepositoryError, match="Cannot read repository"):
                repo.open()

    def test_repository_without_commits(self, git_repo):
        with GitRepository(git_repo.path) as repo:
            with pytest.raises(RepositoryError) as excinfo:
                repo.open()
        assert "no HEAD commit" in str(excinfo.value)

    def test_returns_head_id(self, git_repo):
        git_repo.write("a.txt", "a\n")
        head = git_repo.commit("first", 1_000)
        with GitRepository(git_repo.path) as repo:
            assert repo.open() == head


class TestQueries:
    def test_head_files_lists_nested_blobs(self, git_repo):
        git_repo.write("a.txt", "a\n")
        git_repo.write("src/deep/b.py", "b = 1\n")
        git_repo.commit("first", 1_000)
        git_repo.remove("a.txt")
        git_repo.commit("second", 2_000)

        with GitRepository(git_repo.path) as repo:
            assert repo.head_files() == {"src/deep/b.py"}

    def test_read_commits_metadata(self, git_repo):
        git_repo.write("a.txt", "a\n")
        first = git_repo.commit("first line\n\nbody text", 1_000, author="Alice Smith")
        git_repo.write("a.txt", "b\n")
        second = git_repo.commit("second", 2_000, author="Bob")

        with GitRepository(git_repo.path) as repo:
            commits = repo.read_commits()

        assert set(commits) == {first, second}
        assert commits[first].author == "Alice Smith"
        assert commits[first].timestamp == 1_000
        assert commits[first].parents == ()
        assert commits[first].message.startswith("first line\n\nbody text")
        assert commits[second].parents == (first,)
        assert second.startswith(commits[second].revision)

    def test_diff_tree_against_parent_and_root(self, git_repo):
        git_repo.write("a.txt", "one\ntwo\n")
        git_repo.write("b.txt", "keep\n")
        first = git_repo.commit("first", 1_000)
        git_repo.write("a.txt", "one\nthree\nfour\n")
        git_repo.remove("b.txt")
        second = git_repo.commit("second", 2_000)

        with GitRepository(git_repo.path) as repo:
            root_changes = {c.path: c for c in repo.diff_tree(first, None)}
            changes = {c.path: c for c in repo.diff_tree(second, first)}

        assert set(root_changes) == {"a.txt", "b.txt"}
        assert root_changes["a.txt"].num_added_lines == 2
        assert changes["a.txt"].num_added_lines == 2
        assert changes["a.txt"].num_removed_lines == 1
        assert changes["b.txt"].num_removed_lines == 1

    def test_diff_tree_marks_binary(self, git_repo):
        git_repo.write("blob.bin", b"\x00\x01\x02\xff")
        head = git_repo.commit("binary", 1_000)

        with GitRepository(git_repo.path) as repo:
            (change,) = repo.diff_tree(head, None)
        assert change.binary
        assert change.num_added_lines == 0

    def test_read_blob(self, git_repo):
        git_repo.write("dir/a.txt", "hello\n")
        head = git_repo.commit("first", 1_000)

        with GitRepository(git_repo.path) as repo:
            assert repo.read_blob(head, "dir/a.txt") == b"hello\n"
            assert repo.read_blob(head, "missing.txt") is None
            # Trees are not blobs
            assert repo.read_blob(head, "dir") is None
            # The batch process stays usable after misses
            assert repo.read_blob(head, "dir/a.txt") == b"hello\n"


class TestParseOffset:
    @pytest.mark.parametrize(
        "raw,minutes",
        [("+0000", 0), ("+0130", 90), ("-0500", -300), ("garbage", 0), ("", 0)],
    )
    def test_offsets(self, raw, minutes):
        assert _parse_offset(raw) == minutes
