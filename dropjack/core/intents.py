"""
Player Intents
==============

The closed set of inputs the session accepts. Front ends translate keys or
buttons into these and pass them to GameSession.handle().
"""

from __future__ import annotations

from enum import Enum


class Intent(Enum):
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    SOFT_DROP_TICK = "soft_drop_tick"
    HARD_DROP = "hard_drop"
    PAUSE = "pause"
    RESUME = "resume"
    START_GAME = "start_game"              # arg: Difficulty or name, optional
    SELECT_DIFFICULTY = "select_difficulty"  # arg: Difficulty or name, optional
    REQUEST_QUIT = "request_quit"
    CONFIRM_QUIT = "confirm_quit"
    CANCEL_QUIT = "cancel_quit"
    FORFEIT = "forfeit"
    ADD_INITIAL_CHAR = "add_initial_char"  # arg: single character
    REMOVE_INITIAL_CHAR = "remove_initial_char"
    SUBMIT_SCORE = "submit_score"
