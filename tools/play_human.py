"""
Human Play Mode
===============

Play DropJack interactively with the keyboard.

Controls:
    Start screen:  Enter/Space start, D switch difficulty, ESC quit
    Playing:       Left/Right move, Down soft drop, Up/Space hard drop, P/ESC pause
    Paused:        P/ESC/N resume, Y forfeit
    Game over:     A-Z initials, Backspace delete, Enter submit
    Quit prompt:   Y/Enter quit, N/ESC back

Usage:
    python -m tools.play_human [--seed SEED] [--cell CELL] [--db PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from dropjack.core.cards import Rank, Suit
from dropjack.core.config_loader import GameConfig, load_config
from dropjack.core.highscores import SqliteHighScoreStore, default_db_path
from dropjack.core.intents import Intent
from dropjack.core.session import GameSession, SessionState

logger = logging.getLogger(__name__)

SUITS = list(Suit)
RANKS = list(Rank)


class DropJackRenderer:
    """Plain-rectangle renderer for the session snapshot."""

    def __init__(self, config: GameConfig, cell_size: int):
        self._config = config
        self._cell = cell_size

        self._bg = (24, 60, 40)
        self._grid_bg = (16, 44, 30)
        self._grid_line = (40, 80, 56)
        self._card_face = (250, 248, 240)
        self._card_marked = (255, 214, 120)
        self._red = (200, 30, 40)
        self._black = (20, 20, 20)
        self._text = (235, 235, 225)
        self._ghost = (250, 248, 240, 90)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 48)
        self._font_medium = pygame.font.Font(None, 30)
        self._font_card = pygame.font.Font(None, max(16, cell_size // 2))

        self._panel_width = 200
        self._margin = 20
        self.window_size = (
            config.board.width * cell_size + self._panel_width + 2 * self._margin,
            config.board.height * cell_size + 2 * self._margin
        )

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            self._margin + x * self._cell + 2,
            self._margin + y * self._cell + 2,
            self._cell - 4,
            self._cell - 4
        )

    def _draw_card(self, screen: pygame.Surface, x: int, y: int, label: str,
                   red: bool, marked: bool = False) -> None:
        rect = self._cell_rect(x, y)
        pygame.draw.rect(screen, self._card_marked if marked else self._card_face, rect,
                         border_radius=4)
        text = self._font_card.render(label, True, self._red if red else self._black)
        screen.blit(text, text.get_rect(center=rect.center))

    def render(self, screen: pygame.Surface, data: Dict) -> None:
        screen.fill(self._bg)
        width, height = data["board_width"], data["board_height"]

        grid_rect = pygame.Rect(self._margin, self._margin, width * self._cell, height * self._cell)
        pygame.draw.rect(screen, self._grid_bg, grid_rect)
        for gx in range(width + 1):
            px = self._margin + gx * self._cell
            pygame.draw.line(screen, self._grid_line, (px, grid_rect.top), (px, grid_rect.bottom))

        rank, suit, mask, removal_at = data["rank"], data["suit"], data["mask"], data["removal_at"]
        for y, x in np.argwhere(mask):
            card_suit = SUITS[int(suit[y, x])]
            label = RANKS[int(rank[y, x]) - 1].symbol + card_suit.symbol
            marked = not np.isnan(removal_at[y, x])
            self._draw_card(screen, int(x), int(y), label, card_suit.is_red, marked)

        for piece in [data["active"]] + data["in_flight"]:
            if piece is None:
                continue
            self._draw_card(screen, piece.x, piece.y, piece.card, piece.card[-1] in "♥♦")

        self._draw_panel(screen, data, grid_rect.right + self._margin)
        self._draw_overlay(screen, data)

    def _draw_panel(self, screen: pygame.Surface, data: Dict, left: int) -> None:
        lines = [
            f"Score: {data['score']}",
            f"Mode: {data['difficulty'].capitalize()}",
            f"Next: {data['next_card'] or '-'}",
        ]
        if data["chain_multiplier"] > 1:
            lines.append(f"Chain x{data['chain_multiplier']}")
        lines.append("")
        lines.append("High scores")
        for entry in data["top_scores"][:5]:
            lines.append(f"{entry.initials:<3} {entry.score:>6}")

        for i, line in enumerate(lines):
            text = self._font_medium.render(line, True, self._text)
            screen.blit(text, (left, self._margin + i * 30))

    def _draw_overlay(self, screen: pygame.Surface, data: Dict) -> None:
        state = data["state"]
        messages = {
            SessionState.START_SCREEN.value: ["DROPJACK", "Enter to start", "D: difficulty"],
            SessionState.PAUSED.value: ["PAUSED", "P to resume", "Y to forfeit"],
            SessionState.QUIT_CONFIRM.value: ["Quit?", "Y / N"],
            SessionState.GAME_OVER.value: [
                "GAME OVER", f"Score {data['score']}", f"Initials: {data['initials']}_",
                "Enter to submit"
            ],
        }
        if state not in messages:
            return

        shade = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 160))
        screen.blit(shade, (0, 0))
        cx, cy = screen.get_width() // 2, screen.get_height() // 3
        for i, line in enumerate(messages[state]):
            font = self._font_large if i == 0 else self._font_medium
            text = font.render(line, True, self._text)
            screen.blit(text, text.get_rect(center=(cx, cy + i * 44)))


# Key bindings per session state
KEYMAP: Dict[SessionState, Dict[int, Tuple[Intent, Optional[str]]]] = {}


def _build_keymap() -> None:
    KEYMAP[SessionState.START_SCREEN] = {
        pygame.K_RETURN: (Intent.START_GAME, None),
        pygame.K_SPACE: (Intent.START_GAME, None),
        pygame.K_d: (Intent.SELECT_DIFFICULTY, None),
        pygame.K_ESCAPE: (Intent.REQUEST_QUIT, None),
    }
    KEYMAP[SessionState.PLAYING] = {
        pygame.K_LEFT: (Intent.MOVE_LEFT, None),
        pygame.K_RIGHT: (Intent.MOVE_RIGHT, None),
        pygame.K_DOWN: (Intent.SOFT_DROP_TICK, None),
        pygame.K_UP: (Intent.HARD_DROP, None),
        pygame.K_SPACE: (Intent.HARD_DROP, None),
        pygame.K_p: (Intent.PAUSE, None),
        pygame.K_ESCAPE: (Intent.PAUSE, None),
    }
    KEYMAP[SessionState.PAUSED] = {
        pygame.K_p: (Intent.RESUME, None),
        pygame.K_ESCAPE: (Intent.RESUME, None),
        pygame.K_n: (Intent.RESUME, None),
        pygame.K_y: (Intent.FORFEIT, None),
    }
    KEYMAP[SessionState.QUIT_CONFIRM] = {
        pygame.K_y: (Intent.CONFIRM_QUIT, None),
        pygame.K_RETURN: (Intent.CONFIRM_QUIT, None),
        pygame.K_n: (Intent.CANCEL_QUIT, None),
        pygame.K_ESCAPE: (Intent.CANCEL_QUIT, None),
    }
    KEYMAP[SessionState.GAME_OVER] = {
        pygame.K_BACKSPACE: (Intent.REMOVE_INITIAL_CHAR, None),
        pygame.K_RETURN: (Intent.SUBMIT_SCORE, None),
    }


class HumanPlayer:
    """Interactive game loop."""

    def __init__(
        self,
        config: GameConfig,
        seed: Optional[int] = None,
        cell_size: int = 48,
        db_path: Optional[str] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required for human play. Install with: pip install pygame")

        pygame.init()
        _build_keymap()

        store = SqliteHighScoreStore(db_path or default_db_path(config))
        self._session = GameSession(config=config, store=store, seed=seed)
        self._renderer = DropJackRenderer(config, cell_size)
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("DropJack")
        self._clock = pygame.time.Clock()
        self._target_fps = target_fps

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        running = True
        while running and not self._session.should_exit:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event)

            self._session.tick()
            for record in self._session.drain_events():
                logger.debug("event %s %s", record.event.value, record.data)

            self._renderer.render(self._screen, self._session.get_render_data())
            pygame.display.flip()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._session.score

    def _handle_key(self, event) -> None:
        state = self._session.state
        if state is SessionState.GAME_OVER and event.unicode and event.unicode.isalpha():
            self._session.handle(Intent.ADD_INITIAL_CHAR, event.unicode)
            return
        binding = KEYMAP.get(state, {}).get(event.key)
        if binding is not None:
            intent, arg = binding
            self._session.handle(intent, arg)


def main():
    parser = argparse.ArgumentParser(description="Play DropJack interactively")
    parser.add_argument("--seed", type=int, default=None, help="Deck seed")
    parser.add_argument("--cell", type=int, default=48, help="Cell size in pixels (default: 48)")
    parser.add_argument("--db", type=str, default=None, help="High score database path")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--verbose", action="store_true", help="Log engine events")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            cell_size=args.cell,
            db_path=args.db,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
