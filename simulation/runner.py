"""Game runner for President simulations."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from president_engine.engine import PresidentEngine
from president_engine.events import EventType, event_to_dict

if TYPE_CHECKING:
    from strategies.base import Strategy

logger = logging.getLogger(__name__)

DEFAULT_PLAYERS = ("P1", "P2", "P3", "P4")


@dataclass
class GameResult:
    """Result of a completed game."""

    game_id: str
    seed: int | None
    standings: list[str]  # Best first
    president: str | None
    forced_last: str | None
    tricks: int
    event_count: int
    strategy: str
    duration_ms: float
    completed: bool = True  # False if the turn cap stopped the game

    def placement(self, name: str) -> int:
        """1-based finishing position of ``name``."""
        return self.standings.index(name) + 1


@dataclass
class GameLog:
    """Complete event log of a game."""

    game_id: str
    timestamp: str
    seed: int | None
    players: tuple[str, ...]
    initial_hands: dict[str, list[str]]
    events: list[dict] = field(default_factory=list)
    result: GameResult | None = None


class GameRunner:
    """Runs headless President games where every seat is an agent."""

    def __init__(
        self,
        strategy: Strategy,
        player_names: Sequence[str] = DEFAULT_PLAYERS,
        max_turns: int = 5000,
        log_events: bool = True,
    ):
        """Initialize the game runner.

        Args:
            strategy: Policy shared by every seat.
            player_names: Seat names.
            max_turns: Agent turns before the game is abandoned.
            log_events: Whether to keep the full event log.
        """
        self.strategy = strategy
        self.player_names = tuple(player_names)
        self.max_turns = max_turns
        self.log_events = log_events

    def run_game(self, seed: int | None = None) -> tuple[GameResult, GameLog | None]:
        """Run a single game.

        Args:
            seed: Random seed for reproducibility.

        Returns:
            Tuple of (result, log). Log is None if log_events is False.
        """
        start_time = time.perf_counter()
        game_id = str(uuid.uuid4())

        engine = PresidentEngine(self.player_names, seed=seed, policy=self.strategy)
        snapshot = engine.snapshot()
        self.strategy.on_game_start(snapshot)

        game_log = None
        if self.log_events:
            game_log = GameLog(
                game_id=game_id,
                timestamp=datetime.now().isoformat(),
                seed=engine.seed,
                players=tuple(p.name for p in snapshot.players),
                initial_hands={p.name: [str(c) for c in p.hand] for p in snapshot.players},
            )

        engine.advance_until_human(set(), max_turns=self.max_turns)
        events = engine.pop_events()
        if game_log:
            game_log.events.extend(event_to_dict(e) for e in events)

        standings = engine.standings()
        self.strategy.on_game_end(standings)
        if not engine.is_over:
            logger.warning(f"Game {game_id} (seed={engine.seed}) hit the turn cap")

        result = GameResult(
            game_id=game_id,
            seed=engine.seed,
            standings=standings,
            president=engine.ranking[0] if engine.ranking else None,
            forced_last=engine.forced_last,
            tricks=sum(1 for e in events if e.event_type == EventType.START_TRICK),
            event_count=len(events),
            strategy=self.strategy.name,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            completed=engine.is_over,
        )

        if game_log:
            game_log.result = result

        return result, game_log


def save_game_log(log: GameLog, base_dir: str = "logs/games") -> Path:
    """Save a game log to disk.

    Args:
        log: Game log to save.
        base_dir: Base directory for logs.

    Returns:
        Path to the saved file.
    """
    date_str = log.timestamp[:10]  # YYYY-MM-DD
    dir_path = Path(base_dir) / date_str
    dir_path.mkdir(parents=True, exist_ok=True)

    file_path = dir_path / f"game_{log.game_id}.json"

    data = {
        "game_id": log.game_id,
        "timestamp": log.timestamp,
        "seed": log.seed,
        "players": list(log.players),
        "initial_hands": log.initial_hands,
        "events": log.events,
        "result": {
            "standings": log.result.standings,
            "president": log.result.president,
            "forced_last": log.result.forced_last,
            "tricks": log.result.tricks,
            "duration_ms": log.result.duration_ms,
            "completed": log.result.completed,
        }
        if log.result
        else None,
    }

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    return file_path


def run_batch(
    strategy: Strategy,
    num_games: int,
    player_names: Sequence[str] = DEFAULT_PLAYERS,
    start_seed: int = 0,
    log_events: bool = False,
) -> list[GameResult]:
    """Run multiple games.

    Args:
        strategy: Policy shared by every seat.
        num_games: Number of games to run.
        player_names: Seat names.
        start_seed: Starting seed (incremented for each game).
        log_events: Whether to keep event logs (slower).

    Returns:
        List of game results.
    """
    runner = GameRunner(strategy, player_names, log_events=log_events)
    results = []

    for i in range(num_games):
        result, _ = runner.run_game(seed=start_seed + i)
        results.append(result)

    return results


def placement_stats(results: Sequence[GameResult]) -> dict[str, dict[str, float]]:
    """Per-player placement statistics.

    Returns:
        name -> {"games", "average_place", "president_rate", "forced_last_rate"}
    """
    places: dict[str, list[int]] = defaultdict(list)
    presidents: dict[str, int] = defaultdict(int)
    forced: dict[str, int] = defaultdict(int)

    for result in results:
        for name in result.standings:
            places[name].append(result.placement(name))
        if result.president:
            presidents[result.president] += 1
        if result.forced_last:
            forced[result.forced_last] += 1

    stats = {}
    for name, seen in places.items():
        games = len(seen)
        stats[name] = {
            "games": games,
            "average_place": sum(seen) / games,
            "president_rate": presidents[name] / games,
            "forced_last_rate": forced[name] / games,
        }
    return stats
