"""
Game Session
============

Main game orchestrator: session states, the active piece, per-tick updates,
scoring and high scores.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from dropjack.core.board import GridBoard, Position
from dropjack.core.cards import Card, Difficulty
from dropjack.core.cascade import CascadeScheduler
from dropjack.core.combinations import find_combinations
from dropjack.core.config_loader import GameConfig, get_config, validate_config
from dropjack.core.deck import Deck
from dropjack.core.events import EventQueue, EventRecord, GameEvent
from dropjack.core.highscores import HighScore, HighScoreStore
from dropjack.core.intents import Intent
from dropjack.core.piece import (
    ActivePiece,
    PieceConfig,
    advance,
    blocked_cells,
    hard_drop_row,
    landing_targets,
    make_piece,
    step_in_flight,
    try_shift,
)
from dropjack.core.rules import SpawnRules, TerminationRules
from dropjack.core.scoring import ScoreTracker
from dropjack.core.state_snapshot import SessionSnapshot, build_snapshot

logger = logging.getLogger(__name__)


class SessionState(Enum):
    START_SCREEN = "start_screen"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    QUIT_CONFIRM = "quit_confirm"


@dataclass
class TickResult:
    """What happened during one tick."""
    removed: List[Tuple[int, int, Card]] = field(default_factory=list)
    locked: List[Position] = field(default_factory=list)
    spawned: bool = False
    delta_score: int = 0
    game_over: bool = False


class GameSession:
    """
    One player's game from start screen to game over.

    Orchestrates:
    - Deck draws and piece spawning
    - Piece movement, hard drops and locking
    - Combination search and the cascade scheduler
    - Speed increases and the game-over check
    - Session state transitions and high scores

    Only the PLAYING state ticks. Every mutator ignores calls that are not
    valid for the current state and returns False for them.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[HighScoreStore] = None,
        clock: Callable[[], float] = time.monotonic,
        seed: Optional[int] = None,
        deck: Optional[Deck] = None
    ):
        """
        Initialize session on the start screen.

        Args:
            config: Game configuration. Uses default if None.
            store: High score persistence. Scores are not saved if None.
            clock: Monotonic time source in seconds.
            seed: Deck seed. Falls back to the configured seed.
            deck: Deck to draw from. A new one is built from the seed if None.

        Raises:
            ValueError: If the configuration is inconsistent.
        """
        if config is None:
            config = get_config()
        validate_config(config)

        self._config = config
        self._store = store
        self._clock = clock
        self._seed = seed if seed is not None else config.deck.seed

        self._board = GridBoard(config.board.width, config.board.height)
        self._deck = deck if deck is not None else Deck(seed=self._seed)
        self._scorer = ScoreTracker(config)
        self._spawn_rules = SpawnRules(config)
        self._termination = TerminationRules()
        self._difficulty = Difficulty.parse(config.session.starting_difficulty)
        self._scheduler = CascadeScheduler(self._board, self._scorer, self._difficulty, config)
        self._events = EventQueue()

        self._state = SessionState.START_SCREEN
        self._active: Optional[ActivePiece] = None
        self._in_flight: List[ActivePiece] = []
        self._next_card: Optional[Card] = self._deck.draw_or_refill()

        now = self._clock()
        self._fall_interval = config.timing.initial_fall_interval
        self._last_fall_at = now
        self._last_speed_increase_at = now

        self._initials = ""
        self._game_over_reason = ""
        self._should_exit = False
        self._top_scores: List[HighScore] = self._load_top_scores()

    # -- properties ------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is SessionState.PLAYING

    @property
    def board(self) -> GridBoard:
        return self._board

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def active_piece(self) -> Optional[ActivePiece]:
        return self._active

    @property
    def in_flight(self) -> List[ActivePiece]:
        """Hard-dropped pieces still travelling to their landing cell."""
        return list(self._in_flight)

    @property
    def next_card(self) -> Optional[Card]:
        return self._next_card

    @property
    def fall_interval(self) -> float:
        """Seconds between automatic one-row steps."""
        return self._fall_interval

    @property
    def chain_multiplier(self) -> int:
        return self._scheduler.chain_multiplier

    @property
    def scheduler(self) -> CascadeScheduler:
        return self._scheduler

    @property
    def initials(self) -> str:
        return self._initials

    @property
    def top_scores(self) -> List[HighScore]:
        return list(self._top_scores)

    @property
    def game_over_reason(self) -> str:
        return self._game_over_reason

    @property
    def should_exit(self) -> bool:
        """True once the player confirmed quitting."""
        return self._should_exit

    # -- events ----------------------------------------------------------

    def drain_events(self) -> List[EventRecord]:
        """Return every event emitted since the last drain."""
        return self._events.drain()

    def _emit(self, event: GameEvent, **data: Any) -> None:
        self._events.push(event, **data)

    # -- state transitions -----------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        logger.info("Session state %s -> %s", self._state.value, state.value)
        self._state = state

    def start_game(self, difficulty: Union[Difficulty, str, None] = None) -> bool:
        """
        Begin a new game from the start screen.

        Args:
            difficulty: Difficulty for this game. Keeps the selected one if None.
        """
        if self._state is not SessionState.START_SCREEN:
            return False
        if difficulty is not None:
            self._difficulty = _as_difficulty(difficulty)

        now = self._clock()
        self._board.clear()
        self._scorer.reset()
        self._deck.reset(self._seed)
        self._spawn_rules.reset()
        self._scheduler = CascadeScheduler(
            self._board, self._scorer, self._difficulty, self._config
        )
        self._active = None
        self._in_flight = []
        self._next_card = self._deck.draw_or_refill()
        self._fall_interval = self._config.timing.initial_fall_interval
        self._last_fall_at = now
        self._last_speed_increase_at = now
        self._initials = ""
        self._game_over_reason = ""

        self._set_state(SessionState.PLAYING)
        self._emit(GameEvent.START_GAME, difficulty=self._difficulty.value)
        self._spawn_piece(now)
        return True

    def select_difficulty(self, difficulty: Union[Difficulty, str, None] = None) -> bool:
        """
        Change the difficulty on the start screen.

        Args:
            difficulty: New difficulty. Toggles between Easy and Hard if None.
        """
        if self._state is not SessionState.START_SCREEN:
            return False
        if difficulty is None:
            new = Difficulty.HARD if self._difficulty is Difficulty.EASY else Difficulty.EASY
        else:
            new = _as_difficulty(difficulty)
        if new is self._difficulty:
            return False
        self._difficulty = new
        self._emit(GameEvent.DIFFICULTY_CHANGE, difficulty=new.value)
        return True

    def pause(self) -> bool:
        if self._state is not SessionState.PLAYING:
            return False
        self._set_state(SessionState.PAUSED)
        self._emit(GameEvent.PAUSE_GAME)
        return True

    def resume(self) -> bool:
        if self._state is not SessionState.PAUSED:
            return False
        self._set_state(SessionState.PLAYING)
        self._emit(GameEvent.RESUME_GAME)
        return True

    def forfeit(self) -> bool:
        """Abandon a paused game without recording a score."""
        if self._state is not SessionState.PAUSED:
            return False
        self._active = None
        self._in_flight = []
        self._set_state(SessionState.START_SCREEN)
        self._emit(GameEvent.FORFEIT_GAME, score=self.score)
        return True

    def request_quit(self) -> bool:
        if self._state is not SessionState.START_SCREEN:
            return False
        self._set_state(SessionState.QUIT_CONFIRM)
        self._emit(GameEvent.OPEN_QUIT_CONFIRMATION)
        return True

    def cancel_quit(self) -> bool:
        if self._state is not SessionState.QUIT_CONFIRM:
            return False
        self._set_state(SessionState.START_SCREEN)
        self._emit(GameEvent.RETURN_TO_GAME)
        return True

    def confirm_quit(self) -> bool:
        if self._state is not SessionState.QUIT_CONFIRM:
            return False
        self._should_exit = True
        self._emit(GameEvent.QUIT_GAME)
        return True

    def _game_over(self, reason: str) -> None:
        self._active = None
        self._in_flight = []
        self._game_over_reason = reason
        self._initials = ""
        self._set_state(SessionState.GAME_OVER)
        self._emit(GameEvent.GAME_OVER, score=self.score, reason=reason)
        logger.info("Game over (%s) with score %d", reason, self.score)

    # -- initials and high scores ----------------------------------------

    def add_initial(self, char: str) -> bool:
        """Append one letter to the initials on the game-over screen."""
        if self._state is not SessionState.GAME_OVER:
            return False
        if len(self._initials) >= self._config.session.max_initials:
            return False
        if len(char) != 1 or not (char.isascii() and char.isalpha()):
            return False
        self._initials += char.upper()
        return True

    def remove_initial(self) -> bool:
        if self._state is not SessionState.GAME_OVER or not self._initials:
            return False
        self._initials = self._initials[:-1]
        return True

    def submit_score(self) -> bool:
        """
        Leave the game-over screen, recording the score if initials were entered.

        Returns:
            True if the score was stored.
        """
        if self._state is not SessionState.GAME_OVER:
            return False

        recorded = False
        if self._initials and self._store is not None:
            recorded = self._store.record_score(
                self._initials, self.score, self._difficulty.label
            )
            self._top_scores = self._load_top_scores()

        self._set_state(SessionState.START_SCREEN)
        return recorded

    def _load_top_scores(self) -> List[HighScore]:
        if self._store is None:
            return []
        return self._store.top_scores(self._config.persistence.top_scores_limit)

    # -- piece control ---------------------------------------------------

    def move_left(self) -> bool:
        return self._shift(-1, GameEvent.MOVE_LEFT)

    def move_right(self) -> bool:
        return self._shift(1, GameEvent.MOVE_RIGHT)

    def _shift(self, dx: int, event: GameEvent) -> bool:
        if self._state is not SessionState.PLAYING or self._active is None:
            return False
        if not try_shift(self._active, dx, self._board, blocked_cells(self._in_flight)):
            return False
        self._emit(event)
        return True

    def soft_drop(self) -> bool:
        """
        Advance the active piece one row right away.

        The automatic fall timer restarts, so the next automatic step is a
        full interval away. A piece that can't move locks instead.
        """
        if self._state is not SessionState.PLAYING or self._active is None:
            return False
        now = self._clock()
        piece = self._active
        self._step_active(now)
        self._last_fall_at = now
        if self._active is piece:
            self._emit(GameEvent.SOFT_DROP)
        return True

    def hard_drop(self) -> bool:
        """
        Send the active piece straight down its column.

        With room below, the piece keeps falling quickly on its own and the
        next piece appears at once. Otherwise it locks where it is.
        """
        if self._state is not SessionState.PLAYING or self._active is None:
            return False

        now = self._clock()
        piece = self._active
        self._active = None
        piece.target_x = piece.x
        landing = hard_drop_row(piece, self._board, landing_targets(self._in_flight))
        self._emit(GameEvent.HARD_DROP, x=piece.x, row=landing)

        if landing > piece.y:
            piece.target_y = landing
            piece.falling = True
            piece.fast_fall = True
            piece.last_step_at = now
            self._in_flight.append(piece)
        else:
            self._lock(piece, now)

        if self._state is SessionState.PLAYING:
            self._spawn_piece(now)
        return True

    def _spawn_piece(self, now: float) -> bool:
        """Put the next card on the spawn cell. Ends the game if it's taken."""
        position = self._spawn_rules.spawn_position()
        blocked = self._termination.check_spawn(self._board, position)
        if blocked.terminated:
            self._game_over(blocked.reason)
            return False

        card = self._next_card if self._next_card is not None else self._deck.draw_or_refill()
        self._next_card = self._deck.draw_or_refill()
        x, y = position
        self._active = make_piece(card, PieceConfig(x=x, y=y, spawned_at=now))
        logger.debug("Spawned %s at (%d, %d)", card, x, y)
        return True

    def _step_active(self, now: float) -> Optional[Position]:
        """One downward step of the active piece; locks it if it can't move."""
        piece = self._active
        if piece is None:
            return None
        if advance(piece, self._board, blocked_cells(self._in_flight)):
            return None
        self._active = None
        return self._lock(piece, now)

    def _lock(self, piece: ActivePiece, now: float) -> Optional[Position]:
        """
        Place a piece's card on the board and look for combinations.

        If the landing cell was filled in the meantime the card goes to the
        nearest free cell above it.

        Returns:
            The cell the card was placed in, or None if the column was full.
        """
        x, y = piece.x, piece.y
        while y >= 0 and not self._board.is_empty(x, y):
            y -= 1
        if y < 0:
            self._game_over("column_full")
            return None

        self._spawn_rules.record_lock(x)
        self._board.place(x, y, piece.card)
        self._emit(GameEvent.DROP_CARD, x=x, y=y, card=str(piece.card))
        logger.debug("Locked %s at (%d, %d)", piece.card, x, y)

        positions = find_combinations(self._board, self._difficulty)
        if positions:
            wave = self._scheduler.schedule(positions, now)
            self._emit(GameEvent.MAKE_MATCH, cards=len(positions), chain=wave.chain_multiplier)
        return (x, y)

    # -- tick ------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> TickResult:
        """
        Advance the session to `now` (the clock is read if omitted).

        Motions reported by the previous tick are flagged settled first.
        Order: removals and cascade checks, in-flight pieces, spawning,
        speed increase, automatic fall, game-over check.
        """
        result = TickResult()
        if self._state is not SessionState.PLAYING:
            return result
        if now is None:
            now = self._clock()
        score_before = self.score
        self._board.mark_motions_settled()

        update = self._scheduler.update(now)
        result.removed.extend(update.removed)
        for x, y, card in update.removed:
            self._emit(GameEvent.EXPLODE_CARD, x=x, y=y, card=str(card))
        for wave in update.new_waves:
            self._emit(GameEvent.MAKE_MATCH, cards=wave.size, chain=wave.chain_multiplier)

        row_interval = self._config.timing.hard_drop_row_interval
        for piece in list(self._in_flight):
            if not step_in_flight(piece, now, row_interval):
                continue
            self._in_flight.remove(piece)
            cell = self._lock(piece, now)
            if cell is not None:
                result.locked.append(cell)
            if self._state is not SessionState.PLAYING:
                return self._finish_tick(result, score_before)

        if self._active is None:
            result.spawned = self._spawn_piece(now)
            if self._state is not SessionState.PLAYING:
                return self._finish_tick(result, score_before)

        timing = self._config.timing
        if now - self._last_speed_increase_at >= timing.speed_increase_interval_s:
            self._fall_interval = max(
                timing.min_fall_interval, self._fall_interval * timing.speed_factor
            )
            self._last_speed_increase_at = now
            logger.debug("Fall interval now %.3fs", self._fall_interval)

        if now - self._last_fall_at >= self._fall_interval:
            cell = self._step_active(now)
            if cell is not None:
                result.locked.append(cell)
            self._last_fall_at = now

        if self._state is SessionState.PLAYING:
            termination = self._termination.check(self._board)
            if termination.terminated:
                self._game_over(termination.reason)

        return self._finish_tick(result, score_before)

    def _finish_tick(self, result: TickResult, score_before: int) -> TickResult:
        result.delta_score = self.score - score_before
        result.game_over = self._state is SessionState.GAME_OVER
        return result

    # -- input -----------------------------------------------------------

    def handle(self, intent: Intent, arg: Any = None) -> bool:
        """
        Apply a player intent.

        Args:
            intent: What the player asked for.
            arg: Difficulty for START_GAME/SELECT_DIFFICULTY, the character
                for ADD_INITIAL_CHAR.

        Returns:
            True if the intent changed anything.
        """
        if intent is Intent.MOVE_LEFT:
            return self.move_left()
        if intent is Intent.MOVE_RIGHT:
            return self.move_right()
        if intent is Intent.SOFT_DROP_TICK:
            return self.soft_drop()
        if intent is Intent.HARD_DROP:
            return self.hard_drop()
        if intent is Intent.PAUSE:
            return self.pause()
        if intent is Intent.RESUME:
            return self.resume()
        if intent is Intent.START_GAME:
            return self.start_game(arg)
        if intent is Intent.SELECT_DIFFICULTY:
            return self.select_difficulty(arg)
        if intent is Intent.REQUEST_QUIT:
            return self.request_quit()
        if intent is Intent.CONFIRM_QUIT:
            return self.confirm_quit()
        if intent is Intent.CANCEL_QUIT:
            return self.cancel_quit()
        if intent is Intent.FORFEIT:
            return self.forfeit()
        if intent is Intent.ADD_INITIAL_CHAR:
            return self.add_initial(arg if isinstance(arg, str) else "")
        if intent is Intent.REMOVE_INITIAL_CHAR:
            return self.remove_initial()
        if intent is Intent.SUBMIT_SCORE:
            return self.submit_score()
        return False

    # -- presentation ----------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Read-only view of everything a renderer needs."""
        return build_snapshot(
            self._board,
            state=self._state.value,
            difficulty=self._difficulty.value,
            score=self.score,
            chain_multiplier=self.chain_multiplier,
            fall_interval=self._fall_interval,
            active=self._active,
            in_flight=self._in_flight,
            next_card=self._next_card,
            initials=self._initials
        )

    def get_render_data(self) -> Dict[str, Any]:
        """Snapshot as a dict, plus the high score table."""
        data = self.snapshot().to_dict()
        data["top_scores"] = self.top_scores
        data["game_over_reason"] = self._game_over_reason
        return data


def _as_difficulty(value: Union[Difficulty, str]) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    return Difficulty.parse(value)
