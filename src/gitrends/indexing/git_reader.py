"""Read repository objects through the ``git`` executable.

Every query is a ``git -C <repo> ...`` subprocess, except blob retrieval
which keeps one ``git cat-file --batch`` process open for the lifetime of the
reader, since an indexing run asks for thousands of blobs.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import IO, Optional

from ..exceptions import RepositoryError
from ..logging_config import get_logger
from .models import Commit, FileChange

logger = get_logger(__name__)

# Unit separator between log fields; the message is always the last field.
_FIELD_SEP = "\x1f"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%h", "%P", "%ct", "%cd", "%an", "%B"])


class GitRepository:
    """Repository reader backed by git subprocesses.

    Usage::

        with GitRepository("/path/to/repo") as repo:
            head_files = repo.head_files()
            commits = repo.read_commits()
            changes = repo.diff_tree(commit.id, commit.parents[0])
            content = repo.read_blob(commit.id, "src/main.rs")
    """

    def __init__(self, repo_path: str | Path, timeout_seconds: int = 120):
        self.repo_path = Path(repo_path).expanduser().resolve()
        self.timeout_seconds = timeout_seconds
        self._batch: Optional[subprocess.Popen] = None

    # ── Lifecycle ────────────────────────────────────────────────────

    def open(self) -> str:
        """Check that the path is a repository with a valid HEAD and return the head id."""
        if not self.repo_path.exists():
            raise RepositoryError(self.repo_path, "path does not exist")

        self._run_git(["rev-parse", "--git-dir"])
        try:
            head = self._run_git(["rev-parse", "--verify", "--quiet", "HEAD^{commit}"])
        except RepositoryError as e:
            raise RepositoryError(self.repo_path, "repository has no HEAD commit") from e
        return head.decode("ascii").strip()

    def close(self) -> None:
        if self._batch is None:
            return
        batch, self._batch = self._batch, None
        try:
            if batch.stdin:
                batch.stdin.close()
            batch.wait(timeout=5)
        except (OSError, subprocess.TimeoutExpired):
            batch.kill()
            batch.wait()
        finally:
            if batch.stdout:
                batch.stdout.close()

    def __enter__(self) -> GitRepository:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ── Queries ──────────────────────────────────────────────────────

    def head_files(self) -> set[str]:
        """Paths of every blob in the HEAD tree (full recursive walk)."""
        raw = self._run_git(["ls-tree", "-r", "-z", "--full-tree", "HEAD"])
        files: set[str] = set()
        for record in raw.split(b"\0"):
            if not record:
                continue
            meta, _, path = record.partition(b"\t")
            parts = meta.split()
            if len(parts) < 2 or parts[1] != b"blob":
                continue
            decoded = _decode_path(path)
            if decoded is not None:
                files.add(decoded)
        return files

    def read_commits(self) -> dict[str, Commit]:
        """Every commit reachable from HEAD, keyed by full id."""
        raw = self._run_git(
            [
                "-c",
                "log.showSignature=false",
                "log",
                "-z",
                f"--format={_LOG_FORMAT}",
                "--date=format:%z",
                "HEAD",
            ]
        )
        text = raw.decode("utf-8", errors="replace")

        commits: dict[str, Commit] = {}
        for record in text.split("\0"):
            if not record.strip():
                continue
            commit = self._parse_commit(record)
            commits[commit.id] = commit
        return commits

    def diff_tree(self, commit_id: str, parent_id: Optional[str]) -> list[FileChange]:
        """Paths added, modified or deleted between *parent_id*'s tree and *commit_id*'s tree.

        A missing parent diffs the commit against the empty tree.
        """
        args = ["diff-tree", "-r", "-z", "--no-renames", "--no-commit-id", "--numstat"]
        if parent_id is None:
            args += ["--root", commit_id]
        else:
            args += [parent_id, commit_id]

        raw = self._run_git(args)
        changes: list[FileChange] = []
        for record in raw.split(b"\0"):
            if not record:
                continue
            fields = record.split(b"\t", 2)
            if len(fields) != 3:
                raise RepositoryError(
                    self.repo_path, f"unexpected diff-tree record: {record[:80]!r}", ["diff-tree"]
                )
            added, removed, path = fields
            decoded = _decode_path(path)
            if decoded is None:
                continue
            binary = added == b"-" or removed == b"-"
            changes.append(
                FileChange(
                    path=decoded,
                    num_added_lines=0 if binary else int(added),
                    num_removed_lines=0 if binary else int(removed),
                    binary=binary,
                )
            )
        return changes

    def read_blob(self, commit_id: str, path: str) -> Optional[bytes]:
        """Content of *path* in *commit_id*'s tree, or None if it is absent or not a blob."""
        if "\n" in path:
            logger.debug("Cannot look up path containing a newline: %r", path)
            return None

        batch = self._batch_process()
        stdin: IO[bytes] = batch.stdin  # type: ignore[assignment]
        stdout: IO[bytes] = batch.stdout  # type: ignore[assignment]
        try:
            stdin.write(f"{commit_id}:{path}\n".encode("utf-8"))
            stdin.flush()
            header = stdout.readline()
        except OSError as e:
            raise RepositoryError(self.repo_path, f"cat-file failed: {e}", ["cat-file"]) from e

        if not header:
            raise RepositoryError(self.repo_path, "cat-file exited unexpectedly", ["cat-file"])

        # Misses echo the requested name, which may itself contain spaces
        line = header.rstrip(b"\n")
        if line.endswith((b" missing", b" ambiguous")):
            return None
        parts = line.split(b" ")
        if len(parts) != 3:
            raise RepositoryError(
                self.repo_path, f"unexpected cat-file header: {header!r}", ["cat-file"]
            )

        object_type, size = parts[1], int(parts[2])
        content = stdout.read(size)
        stdout.read(1)  # trailing newline after the object body
        if len(content) != size:
            raise RepositoryError(
                self.repo_path, f"truncated object {commit_id}:{path}", ["cat-file"]
            )
        if object_type != b"blob":
            return None
        return content

    # ── Internals ────────────────────────────────────────────────────

    def _parse_commit(self, record: str) -> Commit:
        fields = record.lstrip("\n").split(_FIELD_SEP, 6)
        if len(fields) != 7:
            raise RepositoryError(self.repo_path, f"unexpected log record: {record[:80]!r}", ["log"])

        full_id, short_id, parents, timestamp, offset, author, message = fields
        try:
            ts = int(timestamp)
        except ValueError as e:
            raise RepositoryError(self.repo_path, f"invalid commit time for {full_id}") from e

        return Commit(
            id=full_id,
            revision=short_id,
            timestamp=ts,
            tz_offset_minutes=_parse_offset(offset),
            author=author or "unknown",
            message=message,
            parents=tuple(parents.split()),
        )

    def _batch_process(self) -> subprocess.Popen:
        if self._batch is None or self._batch.poll() is not None:
            try:
                self._batch = subprocess.Popen(
                    ["git", "-C", str(self.repo_path), "cat-file", "--batch"],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.DEVNULL,
                )
            except FileNotFoundError as e:
                raise RepositoryError(self.repo_path, "git executable not found") from e
        return self._batch

    def _run_git(self, args: list[str]) -> bytes:
        cmd = ["git", "-C", str(self.repo_path)] + args
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise RepositoryError(self.repo_path, "git executable not found", cmd) from e
        except subprocess.TimeoutExpired as e:
            raise RepositoryError(
                self.repo_path, f"git timed out after {self.timeout_seconds}s", cmd
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise RepositoryError(self.repo_path, stderr or f"git exited with {result.returncode}", cmd)
        return result.stdout


def _decode_path(raw: bytes) -> Optional[str]:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Skipping path that is not valid UTF-8: %r", raw)
        return None


def _parse_offset(offset: str) -> int:
    """``+0130`` -> 90, ``-0500`` -> -300; unparseable offsets count as UTC."""
    offset = offset.strip()
    if len(offset) != 5 or offset[0] not in "+-" or not offset[1:].isdigit():
        return 0
    minutes = int(offset[1:3]) * 60 + int(offset[3:5])
    return -minutes if offset[0] == "-" else minutes
