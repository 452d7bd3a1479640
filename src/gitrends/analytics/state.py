"""Shared analytics state with hot-swappable engines.

Readers take the current engine reference without locking; an engine is
immutable, so a reader keeps a consistent view for as long as it holds one.
Rebuilds (reload, reindex, date range change) construct a complete new engine
and then replace the reference. A single lock serializes rebuilds.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from ..config import GitrendsConfig
from ..exceptions import StorageError
from ..indexing import IndexResult, index_repository
from ..logging_config import get_logger
from .engine import AnalyticsEngine
from .view import DateRange

logger = get_logger(__name__)


def load_date_range(state_file: Path) -> Optional[DateRange]:
    """Date range persisted in *state_file*, or None when nothing was saved."""
    try:
        data = json.loads(state_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        raise StorageError(state_file, f"cannot read state: {e}") from e

    querying = data.get("querying_config") or {}
    return DateRange(querying.get("min_date"), querying.get("max_date"))


def save_date_range(state_file: Path, date_range: DateRange) -> None:
    payload = json.dumps({"querying_config": date_range.to_dict()}, indent=2)
    try:
        state_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", dir=state_file.parent)
    except OSError as e:
        raise StorageError(state_file, f"cannot write state: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, state_file)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise StorageError(state_file, f"cannot write state: {e}") from e


class AnalyticsState:
    """Current engine for one data directory.

    The persisted date range in ``state.json`` takes precedence over the
    range in the configuration.
    """

    def __init__(self, config: GitrendsConfig):
        self.config = config
        self._rebuild_lock = threading.Lock()
        self._engine: Optional[AnalyticsEngine] = None

        persisted = load_date_range(config.state_file)
        self._date_range = persisted or DateRange(config.min_date, config.max_date)

    @property
    def date_range(self) -> DateRange:
        return self._date_range

    @property
    def engine(self) -> AnalyticsEngine:
        engine = self._engine
        if engine is not None:
            return engine
        with self._rebuild_lock:
            if self._engine is None:
                self._engine = self._build()
            return self._engine

    def reload(self) -> AnalyticsEngine:
        """Rebuild the engine from the current tables and rule files."""
        with self._rebuild_lock:
            self._engine = self._build()
            return self._engine

    def reindex(self) -> IndexResult:
        """Force a fresh indexing run, then rebuild the engine."""
        with self._rebuild_lock:
            result = index_repository(
                self.config.source_path,
                self.config.data_path,
                force=True,
                timeout_seconds=self.config.git_timeout_seconds,
            )
            self._engine = self._build()
            return result

    def set_date_range(self, date_range: DateRange) -> AnalyticsEngine:
        """Persist *date_range* and swap in an engine that uses it."""
        with self._rebuild_lock:
            engine = self._build(date_range)
            save_date_range(self.config.state_file, date_range)
            self._date_range = date_range
            self._engine = engine
            return engine

    def _build(self, date_range: Optional[DateRange] = None) -> AnalyticsEngine:
        date_range = date_range or self._date_range
        logger.info(
            "Rebuilding analytics view (min_date=%s, max_date=%s)",
            date_range.min_date,
            date_range.max_date,
        )
        return AnalyticsEngine.from_data_dir(self.config.data_path, date_range)
