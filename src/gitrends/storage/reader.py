"""Read the indexed tables back into Python objects."""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from ..exceptions import QueryError, StorageError
from ..indexing.models import CommitLogEntry, FileRevisionEntry
from .schema import GIT_FILE_ENTRIES_FILE, GIT_LOG_FILE
from .writer import index_exists


class IndexReader:
    """Reads ``git_log.parquet`` and ``git_file_entries.parquet`` from a data directory.

    Usage::

        reader = IndexReader(".gitrends")
        if reader.available:
            commits = reader.read_commit_log()
            entries = reader.read_file_entries()
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    @property
    def available(self) -> bool:
        """Return True if a completed indexing run is present."""
        return index_exists(self.data_dir)

    def read_commit_log(self) -> list[CommitLogEntry]:
        rows = self._read_rows(GIT_LOG_FILE)
        return [
            CommitLogEntry(
                revision=row["revision"],
                date=row["date"],
                author=row["author"],
                commit_message=row["commit_message"],
            )
            for row in rows
        ]

    def read_file_entries(self) -> list[FileRevisionEntry]:
        return [FileRevisionEntry.from_dict(row) for row in self._read_rows(GIT_FILE_ENTRIES_FILE)]

    def _read_rows(self, file_name: str) -> list[dict]:
        if not self.available:
            raise QueryError("no index found, run indexing first", self.data_dir)

        path = self.data_dir / file_name
        try:
            table = pq.read_table(str(path))
        except (OSError, pa.ArrowException) as e:
            raise StorageError(path, f"cannot read table: {e}") from e
        return table.to_pylist()
