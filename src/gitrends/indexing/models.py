"""Data models for the indexing pipeline and the two indexed tables."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Commit:
    """A commit as read from history. Parents are full object ids."""

    id: str
    revision: str  # short, displayable hash
    timestamp: int  # unix seconds
    tz_offset_minutes: int
    author: str
    message: str
    parents: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) >= 2


@dataclass(frozen=True)
class FileChange:
    """One changed path between a commit's tree and one of its parents' trees."""

    path: str
    num_added_lines: int
    num_removed_lines: int
    binary: bool = False


@dataclass(frozen=True)
class CommitLogEntry:
    revision: str
    date: int
    author: str
    commit_message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_commit(cls, commit: Commit) -> CommitLogEntry:
        return cls(
            revision=commit.revision,
            date=commit.timestamp,
            author=commit.author,
            commit_message=commit.message,
        )


@dataclass(frozen=True)
class FileRevisionEntry:
    """Metrics of one file as of one revision. Unique on (revision, file_name)."""

    revision: str
    file_name: str
    date: int
    exists_at_head: bool

    num_code_lines: int
    num_comment_lines: int
    num_blank_lines: int

    total_indent_levels: int
    avg_indent_levels: float
    std_indent_level: float

    num_added_lines: int = 0
    num_removed_lines: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.revision, self.file_name)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> FileRevisionEntry:
        return cls(
            revision=row["revision"],
            file_name=row["file_name"],
            date=row["date"],
            exists_at_head=bool(row["exists_at_head"]),
            num_code_lines=row["num_code_lines"],
            num_comment_lines=row["num_comment_lines"],
            num_blank_lines=row["num_blank_lines"],
            total_indent_levels=row["total_indent_levels"],
            avg_indent_levels=_float_or_nan(row.get("avg_indent_levels")),
            std_indent_level=_float_or_nan(row.get("std_indent_level")),
            num_added_lines=row.get("num_added_lines") or 0,
            num_removed_lines=row.get("num_removed_lines") or 0,
        )


@dataclass(frozen=True)
class IndexResult:
    """Outcome of one indexing run."""

    skipped: bool
    num_commits: int = 0
    num_file_entries: int = 0
    num_ignored_commits: int = 0
    head_revision: Optional[str] = None


def _float_or_nan(value: Optional[float]) -> float:
    return float("nan") if value is None else float(value)
