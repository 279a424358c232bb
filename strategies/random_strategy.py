"""Random strategy for baseline testing."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Sequence

from president_engine.cards import group_by_rank
from strategies.base import Strategy

if TYPE_CHECKING:
    from president_engine.cards import Card
    from president_engine.state import TrickView


class RandomStrategy(Strategy):
    """Strategy that picks a group uniformly at random.

    Candidates match the trick's size and top rank when the trick is
    open; the engine still has the final word on legality. Useful as a
    baseline and for smoke testing.
    """

    def __init__(self, seed: int | None = None):
        """Initialize the random strategy.

        Args:
            seed: Optional random seed for reproducibility.
        """
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def name(self) -> str:
        return "Random"

    def select_play(
        self,
        hand: Sequence[Card],
        pile: Sequence[Card],
        trick: TrickView | None = None,
    ) -> list[Card] | None:
        """Select a random group of same-rank cards."""
        candidates = []
        for rank, cards in group_by_rank(hand).items():
            for size in range(1, len(cards) + 1):
                if trick is not None and trick.pattern_count is not None:
                    if size != trick.pattern_count:
                        continue
                    if trick.top_rank is not None and rank < trick.top_rank:
                        continue
                candidates.append(cards[:size])
        if not candidates:
            return None
        return self._rng.choice(candidates)

    def reset_seed(self, seed: int | None = None) -> None:
        """Reset the random number generator with a new seed."""
        self._seed = seed
        self._rng = random.Random(seed)
