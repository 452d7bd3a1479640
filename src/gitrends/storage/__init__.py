"""Parquet storage of the indexed commit log and file entries."""

from .reader import IndexReader
from .schema import GIT_FILE_ENTRIES_FILE, GIT_LOG_FILE
from .writer import IndexWriter, index_exists

__all__ = [
    "GIT_FILE_ENTRIES_FILE",
    "GIT_LOG_FILE",
    "IndexReader",
    "IndexWriter",
    "index_exists",
]
