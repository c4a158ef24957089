"""
DropJack Core - The puzzle engine.

This module provides the grid model, the 21-combination search, gravity,
the staggered cascade scheduler and the game session that ties them
together.

Main exports:
- GameSession: Tick-driven game with session states and player intents
- GridBoard: Card grid with removal marks and gravity
- find_combinations: Cells taking part in a 21-sum combination
- CascadeScheduler: Staggered removal waves and chains
- GameConfig: Configuration loaded from game_config.yaml
"""

from dropjack.core.config_loader import GameConfig, load_config
from dropjack.core.cards import Card, Difficulty, Rank, Suit, parse_card
from dropjack.core.deck import Deck
from dropjack.core.board import GridBoard
from dropjack.core.combinations import find_combinations, group_combinations
from dropjack.core.cascade import CascadeScheduler
from dropjack.core.events import GameEvent
from dropjack.core.intents import Intent
from dropjack.core.highscores import HighScore, SqliteHighScoreStore, default_db_path
from dropjack.core.session import GameSession, SessionState

__all__ = [
    "GameConfig",
    "load_config",
    "Card",
    "Difficulty",
    "Rank",
    "Suit",
    "parse_card",
    "Deck",
    "GridBoard",
    "find_combinations",
    "group_combinations",
    "CascadeScheduler",
    "GameEvent",
    "Intent",
    "HighScore",
    "SqliteHighScoreStore",
    "default_db_path",
    "GameSession",
    "SessionState",
]
