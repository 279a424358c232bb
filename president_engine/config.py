"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PLAYERS = ("You", "Alice", "Bob", "Chloe")


@dataclass(frozen=True)
class Settings:
    """Defaults for the command-line front end.

    Attributes:
        seed: Deal seed (None = random)
        players: Seat names
        human: Seat controlled from the keyboard in ``play``
        strategy: Agent strategy name
        delay: Seconds to pause between agent events in ``watch``/``play``
        log_level: Logging level name
    """

    seed: int | None = None
    players: tuple[str, ...] = DEFAULT_PLAYERS
    human: str = DEFAULT_PLAYERS[0]
    strategy: str = "lowest-group"
    delay: float = 0.0
    log_level: str = "WARNING"


def _int_or_none(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load settings from ``PRESIDENT_*`` environment variables.

    Args:
        env_file: Optional .env file to read first. Defaults to ``.env``
            in the working directory if present. Variables already set in
            the environment win over the file.
    """
    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path)

    players = DEFAULT_PLAYERS
    raw_players = os.environ.get("PRESIDENT_PLAYERS")
    if raw_players:
        players = tuple(name.strip() for name in raw_players.split(",") if name.strip())
        if len(players) < 2:
            raise ValueError(f"PRESIDENT_PLAYERS must name at least two players, got {raw_players!r}")

    return Settings(
        seed=_int_or_none("PRESIDENT_SEED"),
        players=players,
        human=os.environ.get("PRESIDENT_HUMAN", players[0]),
        strategy=os.environ.get("PRESIDENT_STRATEGY", "lowest-group"),
        delay=_float("PRESIDENT_DELAY", 0.0),
        log_level=os.environ.get("PRESIDENT_LOG_LEVEL", "WARNING").upper(),
    )
