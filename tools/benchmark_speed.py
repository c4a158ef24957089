"""
Performance Benchmark
=====================

Measures combination search and session tick throughput.

Usage:
    python -m tools.benchmark_speed [--boards N] [--ticks T] [--density D]
"""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from dropjack.core.board import GridBoard
from dropjack.core.cards import Card, Difficulty, Rank, Suit
from dropjack.core.combinations import find_combinations
from dropjack.core.config_loader import load_config
from dropjack.core.intents import Intent
from dropjack.core.session import GameSession, SessionState

RANKS = list(Rank)
SUITS = list(Suit)


def random_board(
    rng: np.random.Generator,
    width: int,
    height: int,
    density: float
) -> GridBoard:
    """
    Build a settled board with random cards.

    Each column is filled from the bottom to a random height whose
    expected value is `density` times the board height.
    """
    board = GridBoard(width, height)
    heights = rng.binomial(height - 1, density, size=width)
    for x, column_height in enumerate(heights):
        for y in range(height - column_height, height):
            card = Card(SUITS[rng.integers(len(SUITS))], RANKS[rng.integers(len(RANKS))])
            board.place(x, int(y), card)
    return board


def benchmark_finder(
    num_boards: int = 500,
    density: float = 0.5,
    difficulty: Difficulty = Difficulty.EASY,
    seed: int = 42
) -> dict:
    """
    Benchmark find_combinations on random boards.

    Args:
        num_boards: Number of boards to scan.
        density: Expected fill ratio per column.
        difficulty: Difficulty passed to the finder.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    rng = np.random.default_rng(seed)
    boards = [
        random_board(rng, config.board.width, config.board.height, density)
        for _ in range(num_boards)
    ]

    found = 0
    start = time.perf_counter()
    for board in boards:
        found += len(find_combinations(board, difficulty))
    elapsed = time.perf_counter() - start

    return {
        "mode": f"finder-{difficulty.value}",
        "count": num_boards,
        "elapsed_seconds": elapsed,
        "per_second": num_boards / elapsed,
        "ms_each": (elapsed * 1000) / num_boards,
        "cells_found": found
    }


def benchmark_session(num_ticks: int = 5000, seed: int = 42) -> dict:
    """
    Benchmark GameSession.tick with random inputs and a simulated clock.

    Each tick advances the clock by one 60 FPS frame. Games that end are
    restarted.
    """
    config = load_config()
    rng = np.random.default_rng(seed)
    now = [0.0]
    session = GameSession(config=config, clock=lambda: now[0], seed=seed)
    session.start_game(Difficulty.EASY)

    intents = [Intent.MOVE_LEFT, Intent.MOVE_RIGHT, Intent.SOFT_DROP_TICK, Intent.HARD_DROP]
    games = 1

    start = time.perf_counter()
    for _ in range(num_ticks):
        now[0] += 1.0 / 60.0
        if rng.random() < 0.1:
            session.handle(intents[rng.integers(len(intents))])
        session.tick(now[0])
        session.drain_events()
        if session.state is SessionState.GAME_OVER:
            session.submit_score()
            session.start_game()
            games += 1
    elapsed = time.perf_counter() - start

    return {
        "mode": "session",
        "count": num_ticks,
        "elapsed_seconds": elapsed,
        "per_second": num_ticks / elapsed,
        "ms_each": (elapsed * 1000) / num_ticks,
        "games": games
    }


def run_all_benchmarks(boards: int = 500, ticks: int = 5000, density: float = 0.5) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("DROPJACK PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for difficulty in Difficulty:
        print(f"Benchmarking finder ({difficulty.label})...")
        result = benchmark_finder(num_boards=boards, density=density, difficulty=difficulty)
        results.append(result)
        print(f"  Boards/sec: {result['per_second']:.1f}")
        print(f"  ms/board:   {result['ms_each']:.3f}")
        print()

    print("Benchmarking GameSession.tick...")
    result = benchmark_session(num_ticks=ticks)
    results.append(result)
    print(f"  Ticks/sec: {result['per_second']:.1f}")
    print(f"  ms/tick:   {result['ms_each']:.3f}")
    print(f"  Games:     {result['games']}")
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Count':>8} {'Per sec':>12} {'ms each':>10}")
    print("-" * 52)
    for r in results:
        print(f"{r['mode']:<20} {r['count']:>8} {r['per_second']:>12.1f} {r['ms_each']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark DropJack engine performance")
    parser.add_argument("--boards", type=int, default=500, help="Random boards for the finder")
    parser.add_argument("--ticks", type=int, default=5000, help="Session ticks to simulate")
    parser.add_argument("--density", type=float, default=0.5, help="Expected column fill (0-1)")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer iterations)")

    args = parser.parse_args()

    boards = 50 if args.quick else args.boards
    ticks = 500 if args.quick else args.ticks

    run_all_benchmarks(boards=boards, ticks=ticks, density=args.density)
    return 0


if __name__ == "__main__":
    sys.exit(main())
