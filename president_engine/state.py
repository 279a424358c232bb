"""Game state models for President.

The engine owns mutable ``PlayerState`` / ``TrickState`` records and hands
out frozen ``*View`` copies through ``PresidentEngine.snapshot()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from president_engine.cards import Card, Rank


@dataclass
class LockState:
    """Forced-response constraint after two equal singles in a row.

    Attributes:
        active: Whether the lock is armed
        rank: Rank the target must match
        target_index: Seat that must match the rank or pass
    """

    active: bool = False
    rank: Rank | None = None
    target_index: int | None = None

    def targets(self, seat: int) -> bool:
        """Whether this lock is armed against ``seat``."""
        return self.active and self.target_index == seat


@dataclass
class PlayerState:
    """A seat at the table. The hand is kept sorted weakest first."""

    name: str
    hand: list[Card] = field(default_factory=list)


@dataclass
class TrickState:
    """State of the trick in progress, rebuilt at every trick start.

    Attributes:
        current_index: Seat on turn
        pattern_count: Group size fixed by the opening play (None = unopened)
        top_rank: Rank of the last accepted group; plays must be at least this
        pile: Every card played this trick, in order
        last_player_index: Seat of the last accepted play
        lock: Tie lock
        folded: Per-seat folded flags
        may_finish_on_two: Whether a hand may be emptied with a Two
        opening_passes: Consecutive passes at the unopened trick
    """

    current_index: int
    pattern_count: int | None = None
    top_rank: Rank | None = None
    pile: list[Card] = field(default_factory=list)
    last_player_index: int | None = None
    lock: LockState = field(default_factory=LockState)
    folded: list[bool] = field(default_factory=list)
    may_finish_on_two: bool = False
    opening_passes: int = 0

    @property
    def is_open(self) -> bool:
        """Whether the opening play has been made."""
        return self.pattern_count is not None

    @property
    def unfolded_count(self) -> int:
        return sum(1 for f in self.folded if not f)


def new_trick_state(num_players: int, starter: int) -> TrickState:
    """Fresh trick led by ``starter``."""
    return TrickState(current_index=starter, folded=[False] * num_players)


@dataclass(frozen=True, slots=True)
class PlayerView:
    """Read-only copy of a seat."""

    name: str
    hand: tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class LockView:
    """Read-only copy of the lock."""

    active: bool = False
    rank: Rank | None = None
    target_index: int | None = None


@dataclass(frozen=True, slots=True)
class TrickView:
    """Read-only copy of the trick in progress."""

    current_index: int
    pattern_count: int | None
    top_rank: Rank | None
    lock: LockView
    folded: tuple[bool, ...]
    may_finish_on_two: bool
    pile: tuple[Card, ...]
    last_player_index: int | None = None
    opening_passes: int = 0

    @property
    def is_open(self) -> bool:
        return self.pattern_count is not None


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    """Complete read-only view of a game.

    Attributes:
        players: Active seats in turn order
        trick: Trick in progress (None once every seat has left)
        ranking: Names in order of hand exhaustion (first = President)
        forced_last: Most recent seat eliminated holding a lone Two
    """

    players: tuple[PlayerView, ...]
    trick: TrickView | None
    ranking: tuple[str, ...]
    forced_last: str | None = None

    @property
    def is_over(self) -> bool:
        return len(self.players) <= 1

    @property
    def current_player(self) -> PlayerView | None:
        if self.trick is None or not self.players:
            return None
        return self.players[self.trick.current_index]
