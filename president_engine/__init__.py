"""President (Trou du Cul) card game engine."""

from president_engine.cards import Card, Rank, Suit, build_deck, deal, shuffle
from president_engine.engine import ActionResult, IllegalPlayError, PresidentEngine, Violation
from president_engine.events import EngineEvent, EventType, PassReason
from president_engine.state import EngineSnapshot, LockView, PlayerView, TrickView

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "build_deck",
    "deal",
    "shuffle",
    "PresidentEngine",
    "ActionResult",
    "IllegalPlayError",
    "Violation",
    "EngineEvent",
    "EventType",
    "PassReason",
    "EngineSnapshot",
    "PlayerView",
    "LockView",
    "TrickView",
]
