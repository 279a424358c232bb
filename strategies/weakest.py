"""Reference policy: always offer the weakest single card."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from strategies.base import Strategy

if TYPE_CHECKING:
    from president_engine.cards import Card
    from president_engine.state import TrickView


def weakest_card(hand: Sequence[Card], pile: Sequence[Card]) -> Card | None:
    """The weakest card in ``hand``, ignoring the pile."""
    if not hand:
        return None
    return min(hand)


class WeakestCardStrategy(Strategy):
    """Offers the weakest card whatever the trick looks like.

    Anything the rules reject turns into a pass or fold, so this is the
    simplest agent that still finishes games.
    """

    @property
    def name(self) -> str:
        return "Weakest"

    def select_play(
        self,
        hand: Sequence[Card],
        pile: Sequence[Card],
        trick: TrickView | None = None,
    ) -> Card | None:
        return weakest_card(hand, pile)
