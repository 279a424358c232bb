"""Strategy lookup by name."""

from __future__ import annotations

from typing import Any

from strategies.base import Strategy

AVAILABLE_STRATEGIES = {
    "weakest": "Always offers the weakest single card (reference)",
    "lowest-group": "Cheapest legal group for the trick",
    "random": "Random same-rank group (baseline)",
}


def create_strategy(name: str, params: dict[str, Any] | None = None) -> Strategy:
    """Create a strategy instance.

    Raises:
        ValueError: If the name is unknown.
    """
    params = params or {}

    match name.lower():
        case "weakest":
            from strategies.weakest import WeakestCardStrategy
            return WeakestCardStrategy()

        case "lowest-group" | "lowest_group":
            from strategies.lowest_group import LowestGroupStrategy
            return LowestGroupStrategy()

        case "random":
            from strategies.random_strategy import RandomStrategy
            return RandomStrategy(seed=params.get("seed"))

        case _:
            raise ValueError(f"Unknown strategy: {name}")


def list_strategies() -> dict[str, str]:
    """List available strategies with descriptions."""
    return AVAILABLE_STRATEGIES.copy()
