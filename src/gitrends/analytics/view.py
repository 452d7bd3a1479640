"""The active view: the filtered slice of the index every report reads from.

A file entry is active when its file exists at HEAD, matches no ignore
pattern, and its date lies in the inclusive date range. A view is built once
and never mutated; changing rules or the range means building a new one.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..exceptions import QueryError
from ..indexing.models import CommitLogEntry, FileRevisionEntry
from .rules import RuleSet


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of commit timestamps; ``None`` leaves a side open."""

    min_date: Optional[int] = None
    max_date: Optional[int] = None

    def __post_init__(self) -> None:
        if self.min_date is not None and self.max_date is not None and self.min_date > self.max_date:
            raise QueryError(f"invalid date range: {self.min_date} > {self.max_date}")

    def contains(self, date: int) -> bool:
        if self.min_date is not None and date < self.min_date:
            return False
        if self.max_date is not None and date > self.max_date:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"min_date": self.min_date, "max_date": self.max_date}


class ActiveView:
    """Indexed facts filtered and indexed for the analytics engine.

    Attributes:
        commits: Commit log entries in range, oldest first
        entries: Active file entries, oldest first (stable for equal dates)
        ranged_entries: Every file entry in range, without the HEAD and
            ignore filters; module revision and author totals count these
        latest: Most recent active entry per file
    """

    def __init__(
        self,
        commits: Iterable[CommitLogEntry],
        entries: Iterable[FileRevisionEntry],
        rules: Optional[RuleSet] = None,
        date_range: Optional[DateRange] = None,
    ):
        self.rules = rules or RuleSet()
        self.date_range = date_range or DateRange()

        all_commits = list(commits)
        self.authors: dict[str, str] = {
            commit.revision: self.rules.authors.normalize(commit.author) for commit in all_commits
        }
        self.commits: list[CommitLogEntry] = sorted(
            (c for c in all_commits if self.date_range.contains(c.date)), key=lambda c: c.date
        )

        self.ranged_entries: list[FileRevisionEntry] = sorted(
            (e for e in entries if self.date_range.contains(e.date)), key=lambda e: e.date
        )

        ignored: dict[str, bool] = {}
        self.entries: list[FileRevisionEntry] = []
        for entry in self.ranged_entries:
            if not entry.exists_at_head:
                continue
            if entry.file_name not in ignored:
                ignored[entry.file_name] = self.rules.ignore.is_ignored(entry.file_name)
            if not ignored[entry.file_name]:
                self.entries.append(entry)

        self._modules: dict[str, str] = {
            file_name: self.rules.modules.module_name(file_name)
            for file_name in {entry.file_name for entry in self.ranged_entries}
        }
        self.latest: dict[str, FileRevisionEntry] = {}
        self.file_revisions: dict[str, set[str]] = defaultdict(set)
        self.revision_files: dict[str, set[str]] = defaultdict(set)
        for entry in self.entries:
            self.latest[entry.file_name] = entry
            self.file_revisions[entry.file_name].add(entry.revision)
            self.revision_files[entry.revision].add(entry.file_name)

    @property
    def files(self) -> list[str]:
        return sorted(self.latest)

    def author_of(self, revision: str) -> str:
        return self.authors.get(revision, "unknown")

    def module_of(self, file_name: str) -> str:
        module = self._modules.get(file_name)
        if module is None:
            return self.rules.modules.module_name(file_name)
        return module

    def module_files(self) -> dict[str, list[str]]:
        """Active files grouped by module, both levels sorted by name."""
        modules: dict[str, list[str]] = defaultdict(list)
        for file_name in self.files:
            modules[self.module_of(file_name)].append(file_name)
        return {name: modules[name] for name in sorted(modules)}

    def revision_modules(self) -> dict[str, set[str]]:
        """Modules touched by each revision of the active entries."""
        result: dict[str, set[str]] = defaultdict(set)
        for revision, files in self.revision_files.items():
            for file_name in files:
                result[revision].add(self.module_of(file_name))
        return result
