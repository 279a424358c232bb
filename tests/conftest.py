"""Shared fixtures: build engines from hand-written positions."""

import pytest

from president_engine.cards import parse_card
from president_engine.engine import PresidentEngine


def parse_hand(text):
    return [parse_card(tok) for tok in text.split()]


@pytest.fixture
def make_engine():
    """Factory for engines in a prepared position.

    Hands are given as ``{"A": "7S 3S", ...}`` in seat order. The
    opening StartTrick event is drained unless ``drain=False``.
    """

    def _make(hands, policy=None, starter=0, drain=True):
        engine = PresidentEngine.from_hands(
            [(name, parse_hand(text)) for name, text in hands.items()],
            policy=policy,
            starter=starter,
        )
        if drain:
            engine.pop_events()
        return engine

    return _make


@pytest.fixture
def positions():
    """Positions of the given cards in the on-turn seat's hand."""

    def _positions(engine, *cards):
        hand = engine.snapshot().current_player.hand
        return [hand.index(parse_card(c)) for c in cards]

    return _positions
