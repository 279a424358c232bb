"""Base strategy interface for President agents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Sequence, Union

if TYPE_CHECKING:
    from president_engine.cards import Card
    from president_engine.state import EngineSnapshot, TrickView

# What a policy may answer: one card, a group of same-rank cards, or None to decline.
PlayChoice = Union["Card", Sequence["Card"], None]


class Strategy(ABC):
    """Abstract base class for agent policies.

    The engine asks for one play per agent turn. Returning None (or a
    play the rules reject) makes the engine pass or fold for the seat.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy."""
        ...

    @abstractmethod
    def select_play(
        self,
        hand: Sequence[Card],
        pile: Sequence[Card],
        trick: TrickView | None = None,
    ) -> PlayChoice:
        """Choose a play.

        Args:
            hand: The seat's cards, weakest first.
            pile: Cards played so far in this trick.
            trick: Read-only trick state (pattern size, top rank, lock).
                The seat asking is ``trick.current_index``.

        Returns:
            A card, a same-rank group, or None for no move.
        """
        ...

    def __call__(self, hand: Sequence[Card], pile: Sequence[Card]) -> PlayChoice:
        return self.select_play(hand, pile)

    def on_game_start(self, snapshot: EngineSnapshot) -> None:
        """Called when a game starts.

        Override to initialize per-game state.
        """
        pass

    def on_game_end(self, standings: list[str]) -> None:
        """Called when a game ends with the final order, best first."""
        pass


class FunctionStrategy(Strategy):
    """Wrap a plain ``(hand, pile) -> Card | None`` function as a strategy."""

    def __init__(self, func: Callable[[Sequence[Card], Sequence[Card]], PlayChoice], name: str | None = None):
        self._func = func
        self._name = name or getattr(func, "__name__", "function")

    @property
    def name(self) -> str:
        return self._name

    def select_play(
        self,
        hand: Sequence[Card],
        pile: Sequence[Card],
        trick: TrickView | None = None,
    ) -> PlayChoice:
        return self._func(list(hand), list(pile))


def as_strategy(policy: Strategy | Callable) -> Strategy:
    """Accept either a Strategy or a bare policy function."""
    if isinstance(policy, Strategy):
        return policy
    if callable(policy):
        return FunctionStrategy(policy)
    raise TypeError(f"Not a strategy: {policy!r}")
