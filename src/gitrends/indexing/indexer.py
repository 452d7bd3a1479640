"""Full indexing run: walk history, classify changed files, write both tables."""

from __future__ import annotations

from pathlib import Path

from ..exceptions import GitrendsError, IndexingError, RepositoryError
from ..logging_config import get_logger
from ..storage.writer import IndexWriter, index_exists
from .diff import DiffExtractor
from .git_reader import GitRepository
from .models import CommitLogEntry, FileRevisionEntry, IndexResult
from .walker import CommitGraphWalker

logger = get_logger(__name__)


def index_repository(
    source_dir: str | Path,
    data_dir: str | Path,
    force: bool = False,
    timeout_seconds: int = 120,
) -> IndexResult:
    """Index the history reachable from the repository's HEAD into *data_dir*.

    A previous completed run (both tables present) is kept as-is unless
    *force* is set; there is no staleness check.

    Raises:
        RepositoryError: The repository cannot be opened or read.
        StorageError: The tables cannot be written or published.
    """
    source_dir = Path(source_dir)
    data_dir = Path(data_dir)

    if not force and index_exists(data_dir):
        logger.info("Index already present in %s, skipping", data_dir)
        return IndexResult(skipped=True)

    logger.info("Indexing %s into %s", source_dir, data_dir)

    with GitRepository(source_dir, timeout_seconds=timeout_seconds) as repo:
        head_id = repo.open()
        head_files = repo.head_files()
        logger.info("HEAD %s has %d files", head_id[:10], len(head_files))

        commits = repo.read_commits()
        if head_id not in commits:
            raise RepositoryError(source_dir, f"HEAD {head_id} missing from history")

        walker = CommitGraphWalker(commits, head_id)
        extractor = DiffExtractor(repo, head_files)
        num_ignored = 0

        with IndexWriter(data_dir) as writer:
            for step in walker.walk():
                entries: list[FileRevisionEntry] = []
                for parent_id in step.parents_to_diff:
                    entries.extend(extractor.extract(step.commit, parent_id))
                if step.ignored:
                    num_ignored += 1

                writer.write_commit(CommitLogEntry.from_commit(step.commit), entries)

            writer.publish()

        if extractor.num_undecodable:
            logger.info("Skipped %d blobs that are not UTF-8 text", extractor.num_undecodable)

        return IndexResult(
            skipped=False,
            num_commits=writer.num_commits,
            num_file_entries=writer.num_file_entries,
            num_ignored_commits=num_ignored,
            head_revision=commits[head_id].revision,
        )


def try_index_repository(
    source_dir: str | Path,
    data_dir: str | Path,
    force: bool = False,
    timeout_seconds: int = 120,
) -> IndexResult:
    """Like :func:`index_repository`, but wraps unexpected failures in IndexingError."""
    try:
        return index_repository(source_dir, data_dir, force=force, timeout_seconds=timeout_seconds)
    except GitrendsError:
        raise
    except Exception as e:
        logger.error("Indexing failed: %s", e)
        raise IndexingError(f"Indexing failed: {e}", details={"source_dir": str(source_dir)}) from e
