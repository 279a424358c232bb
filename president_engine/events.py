"""Engine events for President.

Every state change the engine makes is described by one of these
immutable records. The engine appends them to its own buffer and the
caller drains that buffer with ``PresidentEngine.pop_events()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum, IntEnum, auto
from typing import Any

from president_engine.cards import Card, Rank


class EventType(IntEnum):
    """Kind of event."""

    START_TRICK = auto()
    PLAY = auto()
    PASS = auto()
    FOLD = auto()
    LOCK_SET = auto()
    LOCK_CLEAR = auto()
    CUT = auto()  # Four of a kind in a row
    TWO = auto()  # A Two closes the trick
    END_TRICK = auto()
    FORCED_LAST = auto()
    PRESIDENT = auto()


class PassReason(str, Enum):
    """Why a seat passed."""

    LOCK = "lock"  # Targeted by a lock and declined to match
    CANT_OPEN = "cant_open"  # No opening play at an unopened trick
    TWO_BLOCKED = "two_blocked"  # Only opening would finish the hand on a Two


@dataclass(frozen=True, slots=True)
class EngineEvent(ABC):
    """Base class for all events."""

    @property
    @abstractmethod
    def event_type(self) -> EventType:
        """The type of this event."""
        ...

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable description."""
        ...


@dataclass(frozen=True, slots=True)
class StartTrick(EngineEvent):
    """A new trick opens."""

    starter: str

    @property
    def event_type(self) -> EventType:
        return EventType.START_TRICK

    def __str__(self) -> str:
        return f"New trick, {self.starter} leads"


@dataclass(frozen=True, slots=True)
class Play(EngineEvent):
    """A group of cards was played."""

    player: str
    cards: tuple[Card, ...]

    @property
    def event_type(self) -> EventType:
        return EventType.PLAY

    def __str__(self) -> str:
        return f"{self.player} plays {' '.join(str(c) for c in self.cards)}"


@dataclass(frozen=True, slots=True)
class Pass(EngineEvent):
    """A seat passed without folding."""

    player: str
    reason: PassReason

    @property
    def event_type(self) -> EventType:
        return EventType.PASS

    def __str__(self) -> str:
        descriptions = {
            PassReason.LOCK: "passes on the lock",
            PassReason.CANT_OPEN: "cannot open",
            PassReason.TWO_BLOCKED: "cannot open without finishing on a 2",
        }
        return f"{self.player} {descriptions[self.reason]}"


@dataclass(frozen=True, slots=True)
class Fold(EngineEvent):
    """A seat dropped out of the current trick."""

    player: str
    top: Rank | None = None  # Rank the seat could not (or would not) beat

    @property
    def event_type(self) -> EventType:
        return EventType.FOLD

    def __str__(self) -> str:
        if self.top is None:
            return f"{self.player} folds"
        return f"{self.player} folds on {self.top.symbol}"


@dataclass(frozen=True, slots=True)
class LockSet(EngineEvent):
    """Two equal singles in a row: the target must match the rank or pass."""

    rank: Rank
    target: str

    @property
    def event_type(self) -> EventType:
        return EventType.LOCK_SET

    def __str__(self) -> str:
        return f"Lock on {self.rank.symbol}: {self.target} must play {self.rank.symbol} or pass"


@dataclass(frozen=True, slots=True)
class LockClear(EngineEvent):
    """A standing lock was lifted by a play."""

    @property
    def event_type(self) -> EventType:
        return EventType.LOCK_CLEAR

    def __str__(self) -> str:
        return "Lock lifted"


@dataclass(frozen=True, slots=True)
class Cut(EngineEvent):
    """Four cards of the same rank in a row cut the trick."""

    rank: Rank

    @property
    def event_type(self) -> EventType:
        return EventType.CUT

    def __str__(self) -> str:
        return f"Four {self.rank.symbol}s cut the trick"


@dataclass(frozen=True, slots=True)
class Two(EngineEvent):
    """A Two closed the trick."""

    player: str

    @property
    def event_type(self) -> EventType:
        return EventType.TWO

    def __str__(self) -> str:
        return f"{self.player} closes the trick with a 2"


@dataclass(frozen=True, slots=True)
class EndTrick(EngineEvent):
    """The trick is over."""

    next_starter: str

    @property
    def event_type(self) -> EventType:
        return EventType.END_TRICK

    def __str__(self) -> str:
        return f"Trick over, {self.next_starter} leads next"


@dataclass(frozen=True, slots=True)
class ForcedLast(EngineEvent):
    """A seat holding only a Two at an unopened trick was eliminated."""

    player: str

    @property
    def event_type(self) -> EventType:
        return EventType.FORCED_LAST

    def __str__(self) -> str:
        return f"{self.player} is stuck with a lone 2 and finishes last"


@dataclass(frozen=True, slots=True)
class President(EngineEvent):
    """The first seat to empty its hand."""

    player: str

    @property
    def event_type(self) -> EventType:
        return EventType.PRESIDENT

    def __str__(self) -> str:
        return f"{self.player} is President!"


def event_to_dict(event: EngineEvent) -> dict[str, Any]:
    """Convert an event to a JSON-serializable dictionary."""
    data: dict[str, Any] = {"type": event.event_type.name.lower()}
    for f in fields(event):
        value = getattr(event, f.name)
        if isinstance(value, tuple):
            value = [str(c) if isinstance(c, Card) else c for c in value]
        elif isinstance(value, Rank):
            value = value.symbol
        elif isinstance(value, Enum):
            value = value.value
        data[f.name] = value
    return data
