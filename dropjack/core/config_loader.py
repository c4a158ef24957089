"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Grid geometry."""
    width: int      # Columns
    height: int     # Rows
    spawn_row: int  # Row new pieces appear on


@dataclass(frozen=True)
class TimingConfig:
    """Tick timing parameters (milliseconds unless noted)."""
    initial_fall_ms: int
    min_fall_ms: int
    speed_increase_interval_s: float
    speed_factor: float
    removal_stagger_ms: int
    hard_drop_row_ms: int

    @property
    def initial_fall_interval(self) -> float:
        """Initial fall delay in seconds."""
        return self.initial_fall_ms / 1000.0

    @property
    def min_fall_interval(self) -> float:
        """Fall delay floor in seconds."""
        return self.min_fall_ms / 1000.0

    @property
    def removal_stagger(self) -> float:
        """Per-card removal stagger in seconds."""
        return self.removal_stagger_ms / 1000.0

    @property
    def hard_drop_row_interval(self) -> float:
        """Seconds an in-flight piece needs per row."""
        return self.hard_drop_row_ms / 1000.0


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    card_score: int
    cascade_bonus: int


@dataclass(frozen=True)
class DeckConfig:
    """Deck parameters."""
    seed: Optional[int]


@dataclass(frozen=True)
class PersistenceConfig:
    """High-score storage parameters."""
    app_name: str
    db_filename: str
    top_scores_limit: int


@dataclass(frozen=True)
class SessionConfig:
    """Session-level parameters."""
    max_initials: int
    starting_difficulty: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    timing: TimingConfig
    scoring: ScoringConfig
    deck: DeckConfig
    persistence: PersistenceConfig
    session: SessionConfig

    @property
    def cell_count(self) -> int:
        """Total number of cells on the grid."""
        return self.board.width * self.board.height


def validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    board = config.board
    if board.width < 1 or board.height < 2:
        raise ValueError(
            f"Board must be at least 1x2, got {board.width}x{board.height}"
        )
    if not 0 <= board.spawn_row < board.height:
        raise ValueError(
            f"spawn_row ({board.spawn_row}) must lie inside the board height ({board.height})"
        )

    timing = config.timing
    if timing.min_fall_ms <= 0:
        raise ValueError(f"min_fall_ms must be positive, got {timing.min_fall_ms}")
    if timing.initial_fall_ms < timing.min_fall_ms:
        raise ValueError(
            f"initial_fall_ms ({timing.initial_fall_ms}) is below "
            f"min_fall_ms ({timing.min_fall_ms})"
        )
    if not 0.0 < timing.speed_factor <= 1.0:
        raise ValueError(f"speed_factor must be in (0, 1], got {timing.speed_factor}")
    if timing.speed_increase_interval_s <= 0:
        raise ValueError("speed_increase_interval_s must be positive")
    if timing.removal_stagger_ms < 0 or timing.hard_drop_row_ms < 0:
        raise ValueError("removal_stagger_ms and hard_drop_row_ms must not be negative")

    if config.scoring.card_score < 0 or config.scoring.cascade_bonus < 0:
        raise ValueError("Scores must not be negative")

    if config.persistence.top_scores_limit < 1:
        raise ValueError("top_scores_limit must be at least 1")

    if config.session.max_initials < 1:
        raise ValueError("max_initials must be at least 1")
    if config.session.starting_difficulty.lower() not in ("easy", "hard"):
        raise ValueError(
            f"starting_difficulty must be 'easy' or 'hard', "
            f"got '{config.session.starting_difficulty}'"
        )


def parse_config(raw: dict) -> GameConfig:
    """
    Build and validate a GameConfig from an already-parsed YAML mapping.

    Args:
        raw: Mapping with the same layout as game_config.yaml.

    Returns:
        Validated GameConfig instance.

    Raises:
        ValueError: If a section is missing or validation fails.
    """
    try:
        board_data = raw["board"]
        timing_data = raw["timing"]
        scoring_data = raw["scoring"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Config is missing required section: {e}") from e

    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"]),
        spawn_row=int(board_data.get("spawn_row", 0))
    )

    timing = TimingConfig(
        initial_fall_ms=int(timing_data["initial_fall_ms"]),
        min_fall_ms=int(timing_data.get("min_fall_ms", 100)),
        speed_increase_interval_s=float(timing_data.get("speed_increase_interval_s", 30)),
        speed_factor=float(timing_data.get("speed_factor", 0.9)),
        removal_stagger_ms=int(timing_data.get("removal_stagger_ms", 300)),
        hard_drop_row_ms=int(timing_data.get("hard_drop_row_ms", 15))
    )

    scoring = ScoringConfig(
        card_score=int(scoring_data["card_score"]),
        cascade_bonus=int(scoring_data["cascade_bonus"])
    )

    # Remaining sections are optional
    deck_data = raw.get("deck") or {}
    seed = deck_data.get("seed")
    deck = DeckConfig(seed=int(seed) if seed is not None else None)

    persistence_data = raw.get("persistence") or {}
    persistence = PersistenceConfig(
        app_name=str(persistence_data.get("app_name", "DropJack")),
        db_filename=str(persistence_data.get("db_filename", "highscores.db")),
        top_scores_limit=int(persistence_data.get("top_scores_limit", 10))
    )

    session_data = raw.get("session") or {}
    session = SessionConfig(
        max_initials=int(session_data.get("max_initials", 3)),
        starting_difficulty=str(session_data.get("starting_difficulty", "easy"))
    )

    config = GameConfig(
        board=board,
        timing=timing,
        scoring=scoring,
        deck=deck,
        persistence=persistence,
        session=session
    )

    validate_config(config)
    return config


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
