"""Group-aware policy: the cheapest play that fits the trick."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from president_engine.cards import group_by_rank
from strategies.base import Strategy

if TYPE_CHECKING:
    from president_engine.cards import Card
    from president_engine.state import TrickView

MAX_GROUP = 4


def _finishes_on_two(hand: Sequence[Card], group: Sequence[Card], trick: TrickView | None) -> bool:
    may_finish = trick is not None and trick.may_finish_on_two
    return len(group) == len(hand) and any(c.is_two for c in group) and not may_finish


class LowestGroupStrategy(Strategy):
    """Plays the weakest legal group.

    - Targeted by a lock: one card of the locked rank, or nothing.
    - Opening: the weakest rank, smallest group first.
    - Following: the weakest rank at or above the top, in the trick's size.
    Never proposes emptying the hand with a Two while that is forbidden.
    """

    @property
    def name(self) -> str:
        return "LowestGroup"

    def select_play(
        self,
        hand: Sequence[Card],
        pile: Sequence[Card],
        trick: TrickView | None = None,
    ) -> list[Card] | None:
        groups = group_by_rank(hand)

        if trick is not None and trick.lock.active and trick.lock.target_index == trick.current_index:
            matching = groups.get(trick.lock.rank, [])
            if matching and not _finishes_on_two(hand, matching[:1], trick):
                return matching[:1]
            return None

        if trick is None or trick.pattern_count is None:
            openings = [
                cards[:size]
                for size in range(1, MAX_GROUP + 1)
                for cards in groups.values()
                if len(cards) >= size and not _finishes_on_two(hand, cards[:size], trick)
            ]
            if not openings:
                return None
            openings.sort(key=lambda g: (g[0].rank, len(g)))
            return openings[0]

        size = trick.pattern_count
        for rank, cards in groups.items():
            if len(cards) < size:
                continue
            if trick.top_rank is not None and rank < trick.top_rank:
                continue
            if _finishes_on_two(hand, cards[:size], trick):
                continue
            return cards[:size]
        return None
