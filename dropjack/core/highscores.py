"""
High Score Store
================

SQLite persistence for finished games. Storage problems are logged and
reported through return values; they never interrupt play.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from dropjack.core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "DROPJACK_DATA_DIR"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class HighScore:
    """One row of the high score table."""
    id: Optional[int]
    initials: str
    score: int
    difficulty: str
    date: str


class HighScoreStore(Protocol):
    """What the session needs from a persistence backend."""

    def record_score(self, initials: str, score: int, difficulty: str) -> bool:
        ...

    def top_scores(self, limit: int) -> List[HighScore]:
        ...


def default_db_path(config: Optional[GameConfig] = None) -> str:
    """
    Location of the high score database.

    Uses $DROPJACK_DATA_DIR when set, otherwise ~/.local/share/<app_name>.
    """
    if config is None:
        config = get_config()

    directory = os.getenv(DATA_DIR_ENV)
    if not directory:
        directory = os.path.join(
            os.path.expanduser("~"), ".local", "share", config.persistence.app_name
        )
    return os.path.join(directory, config.persistence.db_filename)


def _ensure_db_dir(db_path: str) -> None:
    """Creates the directory for the SQLite file if it doesn't exist yet."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _ensure_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS high_scores (
            id INTEGER PRIMARY KEY,
            player_initials TEXT NOT NULL,
            score INTEGER NOT NULL,
            difficulty TEXT NOT NULL,
            date TEXT NOT NULL
        )
        """
    )
    conn.commit()


class SqliteHighScoreStore:
    """High score table in a single SQLite file."""

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path of the database file. ":memory:" is not supported
                since every call opens its own connection.
        """
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        _ensure_db_dir(self._db_path)
        conn = sqlite3.connect(self._db_path)
        try:
            _ensure_table(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def record_score(self, initials: str, score: int, difficulty: str) -> bool:
        """
        Insert a finished game.

        Returns:
            True if the row was written.
        """
        date = datetime.now().strftime(DATE_FORMAT)
        try:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT INTO high_scores (player_initials, score, difficulty, date) "
                    "VALUES (?, ?, ?, ?)",
                    (initials, int(score), difficulty, date)
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning("Could not record high score in %s: %s", self._db_path, e)
            return False

        logger.info("Recorded high score %s %d (%s)", initials, score, difficulty)
        return True

    def top_scores(self, limit: int) -> List[HighScore]:
        """
        Best scores first, at most `limit` rows.

        Returns:
            The rows, or an empty list if the database cannot be read.
        """
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT id, player_initials, score, difficulty, date "
                    "FROM high_scores ORDER BY score DESC, id ASC LIMIT ?",
                    (int(limit),)
                ).fetchall()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning("Could not read high scores from %s: %s", self._db_path, e)
            return []

        return [
            HighScore(id=row[0], initials=row[1], score=row[2], difficulty=row[3], date=row[4])
            for row in rows
        ]
