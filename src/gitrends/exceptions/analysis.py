"""Analytics exceptions: rule files and query evaluation."""

from pathlib import Path
from typing import Optional

from .base import GitrendsError


class AnalyticsError(GitrendsError):
    """Base class for analytics-related errors."""

    pass


class RuleParseError(AnalyticsError):
    """Raised when an ignore, module or author rule file is malformed.

    Lines that simply do not follow the file's grammar are skipped by the
    parsers; this error is reserved for lines that do follow the grammar but
    carry an invalid pattern or a contradictory definition.
    """

    def __init__(
        self,
        source: Optional[Path],
        line_number: int,
        text: str,
        reason: str,
    ):
        where = str(source) if source is not None else "<string>"
        super().__init__(
            f"Invalid rule in {where} at line {line_number}: {text!r}",
            details={"reason": reason},
        )
        self.source = source
        self.line_number = line_number
        self.text = text
        self.reason = reason


class QueryError(AnalyticsError):
    """Raised when analytics cannot be evaluated over the indexed tables."""

    def __init__(self, reason: str, data_dir: Optional[Path] = None):
        details = {"reason": reason}
        if data_dir is not None:
            details["data_dir"] = str(data_dir)

        super().__init__(f"Query failed: {reason}", details=details)
        self.reason = reason
        self.data_dir = data_dir
