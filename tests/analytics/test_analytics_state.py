"""Tests for analytics/state.py - engine swaps and the persisted date range."""

import json
import threading

import pytest

from gitrends.analytics import AnalyticsState, DateRange
from gitrends.analytics.state import load_date_range, save_date_range
from gitrends.config import GitrendsConfig
from gitrends.exceptions import QueryError, StorageError


@pytest.fixture
def config(sample_data_dir):
    return GitrendsConfig(data_dir=str(sample_data_dir))


class TestStateFile:
    def test_missing_file(self, tmp_path):
        assert load_date_range(tmp_path / "state.json") is None

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        save_date_range(path, DateRange(10, 20))

        assert json.loads(path.read_text()) == {"querying_config": {"min_date": 10, "max_date": 20}}
        assert load_date_range(path) == DateRange(10, 20)
        assert list(path.parent.iterdir()) == [path]

    def test_open_bounds(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text('{"querying_config": {"min_date": null}}')
        assert load_date_range(path) == DateRange()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        with pytest.raises(StorageError):
            load_date_range(path)


class TestAnalyticsState:
    def test_engine_is_built_once(self, config):
        state = AnalyticsState(config)
        assert state.engine is state.engine

    def test_configured_range_applies_without_state_file(self, sample_data_dir):
        state = AnalyticsState(GitrendsConfig(data_dir=str(sample_data_dir), min_date=150, max_date=350))
        assert state.date_range == DateRange(150, 350)
        assert [c.revision for c in state.engine.commit_log()] == ["r2", "r3"]

    def test_persisted_range_overrides_config(self, sample_data_dir):
        save_date_range(sample_data_dir / "state.json", DateRange(min_date=400))
        state = AnalyticsState(GitrendsConfig(data_dir=str(sample_data_dir), min_date=150))
        assert state.date_range == DateRange(min_date=400)
        assert [c.revision for c in state.engine.commit_log()] == ["r4", "r5"]

    def test_set_date_range_swaps_engine_and_persists(self, config):
        state = AnalyticsState(config)
        old_engine = state.engine

        new_engine = state.set_date_range(DateRange(150, 350))

        assert state.engine is new_engine
        assert new_engine is not old_engine
        # Engines are immutable: a reader holding the old one keeps its view
        assert len(old_engine.commit_log()) == 5
        assert len(new_engine.commit_log()) == 2
        assert load_date_range(config.state_file) == DateRange(150, 350)

        restarted = AnalyticsState(config)
        assert restarted.date_range == DateRange(150, 350)

    def test_failed_rebuild_keeps_current_engine(self, tmp_path):
        config = GitrendsConfig(data_dir=str(tmp_path / "empty"))
        state = AnalyticsState(config)

        with pytest.raises(QueryError):
            state.set_date_range(DateRange(1, 2))

        assert not config.state_file.exists()
        assert state.date_range == DateRange()

    def test_reload_picks_up_rule_changes(self, config, sample_data_dir):
        state = AnalyticsState(config)
        assert "README.md" not in state.engine.view.files

        (sample_data_dir / "ignore.txt").write_text("")
        state.reload()

        assert "README.md" in state.engine.view.files

    def test_concurrent_readers_see_complete_engines(self, config):
        state = AnalyticsState(config)
        seen = []

        def read():
            for _ in range(20):
                seen.append(len(state.engine.commit_log()))

        readers = [threading.Thread(target=read) for _ in range(4)]
        for thread in readers:
            thread.start()
        state.set_date_range(DateRange(150, 350))
        for thread in readers:
            thread.join()

        assert set(seen) <= {5, 2}

    def test_reindex_rebuilds_from_repository(self, git_repo, tmp_path):
        git_repo.write("a.py", "x = 1\n")
        git_repo.commit("first", 1_000)
        config = GitrendsConfig(source_dir=str(git_repo.path), data_dir=str(tmp_path / "data"))
        state = AnalyticsState(config)

        result = state.reindex()
        assert result.num_commits == 1
        assert state.engine.view.files == ["a.py"]

        git_repo.write("b.py", "y = 2\n")
        git_repo.commit("second", 2_000)
        state.reindex()
        assert state.engine.view.files == ["a.py", "b.py"]
