"""Shared test fixtures for gitrends."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional

import pytest

from gitrends.indexing.models import CommitLogEntry, FileRevisionEntry


class GitRepoBuilder:
    """Builds a throw-away repository with controlled authors and timestamps."""

    def __init__(self, path: Path):
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.name", "Test")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, env: Optional[dict] = None) -> str:
        result = subprocess.run(
            ["git", "-C", str(self.path), *args],
            capture_output=True,
            text=True,
            env={**os.environ, "GIT_CONFIG_NOSYSTEM": "1", **(env or {})},
        )
        if result.returncode != 0:
            raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr}")
        return result.stdout.strip()

    def write(self, name: str, content) -> None:
        target = self.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")

    def remove(self, name: str) -> None:
        (self.path / name).unlink()

    def commit(self, message: str, timestamp: int, author: str = "Alice") -> str:
        self.git("add", "-A")
        self.git("commit", "-q", "--allow-empty", "-m", message, env=_identity(author, timestamp))
        return self.head()

    def branch(self, name: str, start: str = "HEAD") -> None:
        self.git("branch", name, start)

    def checkout(self, name: str) -> None:
        self.git("checkout", "-q", name)

    def merge(
        self,
        branch: str,
        message: str,
        timestamp: int,
        author: str = "Alice",
        resolve: Optional[dict] = None,
    ) -> str:
        """Merge *branch* into the current branch.

        With *resolve*, the merge keeps the current tree and then writes the
        given files, so those files differ from both parents.
        """
        env = _identity(author, timestamp)
        if resolve is None:
            self.git("merge", "-q", "--no-ff", "-m", message, branch, env=env)
            return self.head()

        self.git("merge", "-q", "--no-ff", "--no-commit", "-s", "ours", branch, env=env)
        for name, content in resolve.items():
            self.write(name, content)
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message, env=env)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")


def _identity(author: str, timestamp: int) -> dict:
    email = f"{author.lower().replace(' ', '.')}@example.com"
    date = f"@{timestamp} +0000"
    return {
        "GIT_AUTHOR_NAME": author,
        "GIT_AUTHOR_EMAIL": email,
        "GIT_AUTHOR_DATE": date,
        "GIT_COMMITTER_NAME": author,
        "GIT_COMMITTER_EMAIL": email,
        "GIT_COMMITTER_DATE": date,
    }


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository builder (skips when git is unavailable)."""
    if shutil.which("git") is None:
        pytest.skip("git not found")
    return GitRepoBuilder(tmp_path / "repo")


def make_entry(
    revision: str,
    file_name: str,
    date: int,
    code: int,
    added: int = 0,
    removed: int = 0,
    exists_at_head: bool = True,
) -> FileRevisionEntry:
    return FileRevisionEntry(
        revision=revision,
        file_name=file_name,
        date=date,
        exists_at_head=exists_at_head,
        num_code_lines=code,
        num_comment_lines=1,
        num_blank_lines=2,
        total_indent_levels=code // 2,
        avg_indent_levels=0.5,
        std_indent_level=0.25,
        num_added_lines=added,
        num_removed_lines=removed,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def sample_commits() -> list[CommitLogEntry]:
    """Five commits by alice, bob (also as "Bob B") and carol."""
    return [
        CommitLogEntry("r1", 100, "alice", "initial import\n"),
        CommitLogEntry("r2", 200, "bob", "add library\n"),
        CommitLogEntry("r3", 300, "alice", "refactor\n"),
        CommitLogEntry("r4", 400, "Bob B", "extend library\n"),
        CommitLogEntry("r5", 500, "carol", "temporary file\n"),
    ]


@pytest.fixture
def sample_entries() -> list[FileRevisionEntry]:
    """File entries matching ``sample_commits``.

    Active at HEAD: src/a.py, src/b.py, lib/c.rs. README.md is meant to be
    ignored, old/gone.py and src/deleted.py no longer exist.
    """
    return [
        make_entry("r1", "src/a.py", 100, code=10, added=10),
        make_entry("r1", "src/b.py", 100, code=5, added=5),
        make_entry("r1", "README.md", 100, code=3, added=3),
        make_entry("r2", "src/a.py", 200, code=12, added=4, removed=2),
        make_entry("r2", "lib/c.rs", 200, code=7, added=7),
        make_entry("r3", "src/a.py", 300, code=8, added=1, removed=5),
        make_entry("r3", "src/b.py", 300, code=7, added=2),
        make_entry("r4", "src/b.py", 400, code=10, added=3),
        make_entry("r4", "lib/c.rs", 400, code=8, added=1),
        make_entry("r4", "old/gone.py", 400, code=4, added=4, exists_at_head=False),
        make_entry("r5", "src/deleted.py", 500, code=2, added=2, exists_at_head=False),
    ]


SAMPLE_IGNORE = "*.md\n"
SAMPLE_MODULES = "lib/** => library\n"
SAMPLE_AUTHORS = "Bob B => bob\n"


@pytest.fixture
def sample_data_dir(tmp_path, sample_commits, sample_entries) -> Path:
    """Data directory with both tables and all three rule files written."""
    pytest.importorskip("pyarrow")
    from gitrends.storage import IndexWriter

    data_dir = tmp_path / "data"
    by_revision: dict[str, list[FileRevisionEntry]] = {}
    for entry in sample_entries:
        by_revision.setdefault(entry.revision, []).append(entry)

    with IndexWriter(data_dir) as writer:
        for commit in sample_commits:
            writer.write_commit(commit, by_revision.get(commit.revision, []))
        writer.publish()

    (data_dir / "ignore.txt").write_text(SAMPLE_IGNORE)
    (data_dir / "modules.txt").write_text(SAMPLE_MODULES)
    (data_dir / "authors.txt").write_text(SAMPLE_AUTHORS)
    return data_dir


@pytest.fixture
def sample_rules():
    from gitrends.analytics.rules import AuthorAliases, IgnoreRules, ModuleRules, RuleSet

    return RuleSet(
        ignore=IgnoreRules.parse(SAMPLE_IGNORE),
        modules=ModuleRules.parse(SAMPLE_MODULES),
        authors=AuthorAliases.parse(SAMPLE_AUTHORS),
    )
