"""Indexing: git history -> commit log and per-file revision entries."""

from .models import Commit, CommitLogEntry, FileChange, FileRevisionEntry, IndexResult
from .source_stats import SourceCodeStats, calculate_source_code_stats, language_hint
from .indexer import index_repository, try_index_repository

__all__ = [
    "Commit",
    "CommitLogEntry",
    "FileChange",
    "FileRevisionEntry",
    "IndexResult",
    "SourceCodeStats",
    "calculate_source_code_stats",
    "index_repository",
    "language_hint",
    "try_index_repository",
]
