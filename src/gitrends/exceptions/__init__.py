"""Exception hierarchy for gitrends."""

from .analysis import AnalyticsError, QueryError, RuleParseError
from .base import GitrendsError
from .config import ConfigurationError, InvalidConfigError
from .indexing import IndexingError, RepositoryError, StorageError

__all__ = [
    "GitrendsError",
    "IndexingError",
    "RepositoryError",
    "StorageError",
    "AnalyticsError",
    "RuleParseError",
    "QueryError",
    "ConfigurationError",
    "InvalidConfigError",
]
