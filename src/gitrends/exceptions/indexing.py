"""Indexing exceptions: repository access and table storage."""

from pathlib import Path
from typing import Optional, Sequence

from .base import GitrendsError


class IndexingError(GitrendsError):
    """Base class for errors that abort an indexing run."""

    pass


class RepositoryError(IndexingError):
    """Raised when the repository cannot be opened or an object cannot be read."""

    def __init__(
        self,
        repository: Path,
        reason: str,
        command: Optional[Sequence[str]] = None,
    ):
        details = {"repository": str(repository), "reason": reason}
        if command:
            details["command"] = " ".join(command)

        super().__init__(f"Cannot read repository: {repository}", details=details)
        self.repository = repository
        self.reason = reason
        self.command = list(command) if command else None


class StorageError(IndexingError):
    """Raised when an output table cannot be created, written or read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Table storage failed: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
