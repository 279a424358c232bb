"""Card, Suit, and Rank models for President."""

from __future__ import annotations

import random
from enum import IntEnum
from functools import total_ordering
from typing import Callable, ClassVar, Sequence, TypeVar

T = TypeVar("T")


class Suit(IntEnum):
    """Card suits. President has no suit hierarchy; the order only breaks display ties."""

    SPADES = 0
    HEARTS = 1
    DIAMONDS = 2
    CLUBS = 3

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        return {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }[self]

    @property
    def letter(self) -> str:
        return self.name[0]


class Rank(IntEnum):
    """Card ranks, valued by strength (Three weakest, Two strongest).

    The integer value doubles as the strength index used for every
    legality and lock comparison.
    """

    THREE = 0
    FOUR = 1
    FIVE = 2
    SIX = 3
    SEVEN = 4
    EIGHT = 5
    NINE = 6
    TEN = 7
    JACK = 8
    QUEEN = 9
    KING = 10
    ACE = 11
    TWO = 12

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        return _RANK_SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> Rank:
        """Look up a rank by its face symbol ("7", "10", "q", ...)."""
        try:
            return _SYMBOL_RANKS[symbol.upper()]
        except KeyError:
            raise ValueError(f"Unknown rank symbol: {symbol!r}") from None


_RANK_SYMBOLS = {
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
    Rank.TWO: "2",
}
_SYMBOL_RANKS = {symbol: rank for rank, symbol in _RANK_SYMBOLS.items()}

# Face order for display: Ace first, Two last.
VISUAL_ORDER: tuple[Rank, ...] = (
    Rank.ACE,
    Rank.KING,
    Rank.QUEEN,
    Rank.JACK,
    Rank.TEN,
    Rank.NINE,
    Rank.EIGHT,
    Rank.SEVEN,
    Rank.SIX,
    Rank.FIVE,
    Rank.FOUR,
    Rank.THREE,
    Rank.TWO,
)


@total_ordering
class Card:
    """A playing card.

    Cards are immutable and interned. Comparison is by rank strength,
    then by suit so that sorted hands are stable.
    """

    __slots__ = ("_rank", "_suit")

    _instances: ClassVar[dict[tuple[Rank, Suit], Card]] = {}

    def __new__(cls, rank: Rank, suit: Suit) -> Card:
        key = (Rank(rank), Suit(suit))
        if key not in cls._instances:
            instance = object.__new__(cls)
            instance._rank = key[0]
            instance._suit = key[1]
            cls._instances[key] = instance
        return cls._instances[key]

    @property
    def rank(self) -> Rank:
        return self._rank

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def is_two(self) -> bool:
        """Twos close the trick and may not finish a hand."""
        return self._rank == Rank.TWO

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self._rank == other._rank and self._suit == other._suit

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        if self._rank != other._rank:
            return self._rank < other._rank
        return self._suit < other._suit

    def __hash__(self) -> int:
        return hash((self._rank, self._suit))

    def __reduce__(self) -> tuple:
        return (Card, (self._rank, self._suit))

    def __repr__(self) -> str:
        return f"Card({self._rank.name}, {self._suit.name})"

    def __str__(self) -> str:
        return f"{self._rank.symbol}{self._suit.symbol}"


def parse_card(text: str) -> Card:
    """Parse a card such as ``"Q♥"``, ``"QH"`` or ``"10s"``."""
    text = text.strip()
    if len(text) < 2:
        raise ValueError(f"Cannot parse card: {text!r}")
    rank_part, suit_part = text[:-1], text[-1]
    rank = Rank.from_symbol(rank_part)
    for suit in Suit:
        if suit_part in (suit.symbol, suit.letter, suit.letter.lower()):
            return Card(rank, suit)
    raise ValueError(f"Unknown suit in card: {text!r}")


def build_deck() -> list[Card]:
    """Create the 52-card deck, suit by suit."""
    return [Card(rank, suit) for suit in Suit for rank in VISUAL_ORDER]


def shuffle(sequence: Sequence[T], rng: Callable[[], float] = random.random) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``sequence``.

    Args:
        sequence: Items to shuffle. Never mutated.
        rng: Zero-argument source of floats in [0, 1). Pass a seeded
            ``random.Random(seed).random`` for reproducible games.
    """
    items = list(sequence)
    for i in range(len(items) - 1, 0, -1):
        j = int(rng() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def deal(deck: Sequence[Card], num_players: int) -> list[list[Card]]:
    """Deal the deck round-robin, taking cards from the end of the pile."""
    if num_players < 1:
        raise ValueError("Need at least one player to deal to")
    hands: list[list[Card]] = [[] for _ in range(num_players)]
    pile = list(deck)
    i = 0
    while pile:
        hands[i % num_players].append(pile.pop())
        i += 1
    return hands


def sort_by_strength(cards: Sequence[Card]) -> list[Card]:
    """Weakest first."""
    return sorted(cards)


def group_by_rank(cards: Sequence[Card]) -> dict[Rank, list[Card]]:
    """Group cards by rank, weakest rank first, keeping input order within a rank."""
    groups: dict[Rank, list[Card]] = {}
    for card in sorted(cards, key=lambda c: c.rank):
        groups.setdefault(card.rank, []).append(card)
    return groups
