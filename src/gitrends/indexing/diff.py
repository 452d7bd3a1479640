"""Turn tree diffs into file revision entries."""

from __future__ import annotations

from typing import Iterator, Optional

from ..logging_config import get_logger
from .git_reader import GitRepository
from .models import Commit, FileRevisionEntry
from .source_stats import calculate_source_code_stats, language_hint

logger = get_logger(__name__)


class DiffExtractor:
    """Changed paths of a commit relative to one parent, classified line by line.

    One extractor serves a whole indexing run. ``seen`` holds the
    (revision, path) pairs that already produced an entry, so a merge diffed
    against several parents yields at most one entry per path. A pair is only
    marked seen once its content decoded; a path whose blob is missing
    (deleted) or not UTF-8 text can still produce an entry from a later parent.
    """

    def __init__(self, repo: GitRepository, head_files: set[str]):
        self.repo = repo
        self.head_files = head_files
        self.seen: set[tuple[str, str]] = set()
        self.num_undecodable = 0

    def extract(self, commit: Commit, parent_id: Optional[str]) -> Iterator[FileRevisionEntry]:
        for change in self.repo.diff_tree(commit.id, parent_id):
            key = (commit.revision, change.path)
            if key in self.seen:
                continue

            content = self.repo.read_blob(commit.id, change.path)
            if content is None:
                continue

            try:
                text = content.decode("utf-8")
            except UnicodeDecodeError:
                self.num_undecodable += 1
                logger.debug("Skipping %s@%s: not UTF-8 text", change.path, commit.revision)
                continue

            stats = calculate_source_code_stats(language_hint(change.path), text)
            self.seen.add(key)

            yield FileRevisionEntry(
                revision=commit.revision,
                file_name=change.path,
                date=commit.timestamp,
                exists_at_head=change.path in self.head_files,
                num_code_lines=stats.num_code_lines,
                num_comment_lines=stats.num_comment_lines,
                num_blank_lines=stats.num_blank_lines,
                total_indent_levels=stats.total_indent_levels,
                avg_indent_levels=stats.avg_indent_levels,
                std_indent_level=stats.std_indent_level,
                num_added_lines=change.num_added_lines,
                num_removed_lines=change.num_removed_lines,
            )
