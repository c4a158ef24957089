"""
Tests for the SQLite high score store.
"""

import logging
import os

import pytest

from dropjack.core.config_loader import load_config
from dropjack.core.highscores import DATA_DIR_ENV, SqliteHighScoreStore, default_db_path


@pytest.fixture
def store(tmp_path):
    return SqliteHighScoreStore(str(tmp_path / "data" / "highscores.db"))


class TestSqliteStore:
    """Test recording and ranking scores."""

    def test_empty_table(self, store):
        assert store.top_scores(10) == []

    def test_creates_missing_directory(self, store):
        assert store.record_score("ABC", 100, "Easy")
        assert os.path.exists(store.db_path)

    def test_best_scores_first(self, store):
        store.record_score("AAA", 1000, "Easy")
        store.record_score("BBB", 1500, "Hard")
        store.record_score("CCC", 500, "Easy")

        scores = store.top_scores(10)

        assert [s.initials for s in scores] == ["BBB", "AAA", "CCC"]
        assert [s.score for s in scores] == [1500, 1000, 500]
        assert scores[0].difficulty == "Hard"
        assert all(s.id is not None and s.date for s in scores)

    def test_limit(self, store):
        for i in range(5):
            store.record_score("P%d" % i, i * 10, "Easy")
        assert len(store.top_scores(3)) == 3
        assert store.top_scores(3)[0].score == 40

    def test_persists_across_instances(self, store):
        store.record_score("XYZ", 42, "Easy")
        again = SqliteHighScoreStore(store.db_path)
        assert again.top_scores(1)[0].initials == "XYZ"


class TestStoreFailures:
    """Storage errors are logged and reported, never raised."""

    def test_unopenable_path(self, tmp_path, caplog):
        # A directory cannot be opened as a database file
        store = SqliteHighScoreStore(str(tmp_path))

        with caplog.at_level(logging.WARNING):
            assert not store.record_score("ABC", 10, "Easy")
            assert store.top_scores(10) == []

        assert "Could not" in caplog.text


class TestDefaultPath:
    """Test database location resolution."""

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
        config = load_config()
        assert default_db_path(config) == os.path.join(str(tmp_path), "highscores.db")

    def test_home_fallback(self, monkeypatch):
        monkeypatch.delenv(DATA_DIR_ENV, raising=False)
        path = default_db_path(load_config())
        assert path.endswith(os.path.join("DropJack", "highscores.db"))
