"""Headless game running."""

from simulation.runner import (
    GameLog,
    GameResult,
    GameRunner,
    placement_stats,
    run_batch,
    save_game_log,
)

__all__ = [
    "GameResult",
    "GameLog",
    "GameRunner",
    "save_game_log",
    "run_batch",
    "placement_stats",
]
