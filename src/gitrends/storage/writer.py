"""Write the commit log and file entries tables.

Both tables are streamed into a private staging directory inside the data
directory and only moved into place by :meth:`IndexWriter.publish`. The log
table is moved last, so its presence next to the entries table means a run
completed.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from ..exceptions import StorageError
from ..indexing.models import CommitLogEntry, FileRevisionEntry
from ..logging_config import get_logger
from .schema import (
    GIT_FILE_ENTRIES_FILE,
    GIT_FILE_ENTRIES_SCHEMA,
    GIT_LOG_FILE,
    GIT_LOG_SCHEMA,
)

logger = get_logger(__name__)

STAGING_PREFIX = ".staging-"


def index_exists(data_dir: str | Path) -> bool:
    """True when both tables are present in *data_dir*."""
    data_dir = Path(data_dir)
    return (data_dir / GIT_LOG_FILE).exists() and (data_dir / GIT_FILE_ENTRIES_FILE).exists()


class IndexWriter:
    """Streams one indexing run into Parquet files.

    Usage::

        with IndexWriter(data_dir) as writer:
            for commit, entries in ...:
                writer.write_commit(log_entry, entries)
            writer.publish()

    Leaving the ``with`` block without calling :meth:`publish` discards the
    staged files and leaves any previously published tables untouched.

    Parameters
    ----------
    data_dir:
        Directory receiving ``git_log.parquet`` and ``git_file_entries.parquet``.
    log_batch_size:
        Commit log rows buffered per row group. File entries are always
        written as one row group per commit.
    """

    def __init__(self, data_dir: str | Path, log_batch_size: int = 1024) -> None:
        self.data_dir = Path(data_dir)
        self.log_batch_size = log_batch_size
        self.num_commits = 0
        self.num_file_entries = 0

        self._staging: Optional[Path] = None
        self._log_writer: Optional[pq.ParquetWriter] = None
        self._entries_writer: Optional[pq.ParquetWriter] = None
        self._log_buffer: list[dict] = []

    @property
    def log_path(self) -> Path:
        return self.data_dir / GIT_LOG_FILE

    @property
    def entries_path(self) -> Path:
        return self.data_dir / GIT_FILE_ENTRIES_FILE

    def open(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.data_dir))
            self._log_writer = pq.ParquetWriter(
                str(self._staging / GIT_LOG_FILE), GIT_LOG_SCHEMA
            )
            self._entries_writer = pq.ParquetWriter(
                str(self._staging / GIT_FILE_ENTRIES_FILE), GIT_FILE_ENTRIES_SCHEMA
            )
        except (OSError, pa.ArrowException) as e:
            self.discard()
            raise StorageError(self.data_dir, f"cannot create output tables: {e}") from e

    def write_commit(
        self, log_entry: CommitLogEntry, file_entries: Iterable[FileRevisionEntry]
    ) -> None:
        """Append one commit's log row and its file entries (one row group)."""
        if self._log_writer is None or self._entries_writer is None:
            raise StorageError(self.data_dir, "writer is not open")

        self._log_buffer.append(log_entry.to_dict())
        self.num_commits += 1

        rows = [entry.to_dict() for entry in file_entries]
        try:
            if rows:
                table = pa.Table.from_pylist(rows, schema=GIT_FILE_ENTRIES_SCHEMA)
                self._entries_writer.write_table(table)
                self.num_file_entries += len(rows)

            if len(self._log_buffer) >= self.log_batch_size:
                self._flush_log()
        except (OSError, pa.ArrowException) as e:
            raise StorageError(self._staging or self.data_dir, f"write failed: {e}") from e

    def publish(self) -> None:
        """Close the staged tables and move them over the published ones."""
        if self._staging is None:
            raise StorageError(self.data_dir, "writer is not open")

        try:
            self._flush_log()
            self._close_writers()

            # Drop the completion marker first so an interrupted publish never
            # pairs a new entries table with an old log table.
            self.log_path.unlink(missing_ok=True)
            os.replace(self._staging / GIT_FILE_ENTRIES_FILE, self.entries_path)
            os.replace(self._staging / GIT_LOG_FILE, self.log_path)
        except (OSError, pa.ArrowException) as e:
            raise StorageError(self.data_dir, f"cannot publish tables: {e}") from e
        finally:
            self.discard()

        logger.info(
            "Wrote %d commits and %d file entries to %s",
            self.num_commits,
            self.num_file_entries,
            self.data_dir,
        )

    def discard(self) -> None:
        """Close writers and remove the staging directory."""
        try:
            self._close_writers()
        except (OSError, pa.ArrowException) as e:
            logger.debug("Ignoring error while closing staged tables: %s", e)
        if self._staging is not None:
            shutil.rmtree(self._staging, ignore_errors=True)
            self._staging = None

    def __enter__(self) -> IndexWriter:
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.discard()

    def _flush_log(self) -> None:
        if not self._log_buffer or self._log_writer is None:
            return
        table = pa.Table.from_pylist(self._log_buffer, schema=GIT_LOG_SCHEMA)
        self._log_writer.write_table(table)
        self._log_buffer = []

    def _close_writers(self) -> None:
        writers = (self._log_writer, self._entries_writer)
        self._log_writer = None
        self._entries_writer = None
        for writer in writers:
            if writer is not None:
                writer.close()
