"""Rules engine for President.

``PresidentEngine`` owns every hand and the trick in progress. Callers act
through the ``human_*`` commands and ``advance_until_human``, then drain
``pop_events()`` to learn what happened. Rule violations come back as
``ActionResult`` failures and never mutate state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from president_engine.cards import (
    Card,
    Rank,
    Suit,
    build_deck,
    deal,
    group_by_rank,
    shuffle,
    sort_by_strength,
)
from president_engine.events import (
    Cut,
    EndTrick,
    EngineEvent,
    Fold,
    ForcedLast,
    LockClear,
    LockSet,
    Pass,
    PassReason,
    Play,
    President,
    StartTrick,
    Two,
)
from president_engine.state import (
    EngineSnapshot,
    LockState,
    LockView,
    PlayerState,
    PlayerView,
    TrickView,
    new_trick_state,
)

if TYPE_CHECKING:
    from strategies.base import Strategy

logger = logging.getLogger(__name__)

# Holder of this card leads the first trick.
OPENING_CARD = Card(Rank.QUEEN, Suit.HEARTS)

# Consecutive cards of one rank that cut a trick.
CUT_LENGTH = 4


class Violation(IntEnum):
    """Why a proposed play was rejected."""

    EMPTY_SELECTION = auto()
    BAD_INDEX = auto()
    NOT_IN_HAND = auto()
    MIXED_RANKS = auto()
    LOCKED = auto()
    WRONG_COUNT = auto()
    TOO_LOW = auto()
    FINISH_ON_TWO = auto()


class IllegalPlayError(Exception):
    """Raised by the legality check when a play is not allowed."""

    def __init__(self, message: str, violation: Violation):
        super().__init__(message)
        self.violation = violation


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a command. ``error`` explains a rejected command."""

    ok: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> ActionResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> ActionResult:
        return cls(ok=False, error=error)


class PresidentEngine:
    """Deterministic, event-emitting President game.

    Example:
        engine = PresidentEngine(["Ann", "Bob", "Cid"], seed=7)
        engine.advance_until_human({"Ann"})
        for event in engine.pop_events():
            print(event)
    """

    def __init__(
        self,
        player_names: Sequence[str],
        seed: int | None = None,
        policy: Strategy | Any = None,
    ):
        """Shuffle, deal, and open the first trick.

        Args:
            player_names: Unique seat names, at least two.
            seed: Seed for the shuffle. Drawn at random if None.
            policy: Strategy (or plain ``(hand, pile) -> Card | None``
                callable) used for agent seats. Defaults to the
                weakest-card reference policy.

        Raises:
            ValueError: If fewer than two or duplicate names are given.
        """
        _check_names(player_names)
        self._seed = seed if seed is not None else random.randrange(2**31)
        self._rng = random.Random(self._seed)

        hands = deal(shuffle(build_deck(), self._rng.random), len(player_names))
        players = [
            PlayerState(name=name, hand=sort_by_strength(hand))
            for name, hand in zip(player_names, hands)
        ]

        start = 0
        for i, player in enumerate(players):
            if OPENING_CARD in player.hand:
                start = i
        players = players[start:] + players[:start]

        self._setup(players, policy)
        logger.info(f"New game (seed={self._seed}): {[p.name for p in players]}")

    @classmethod
    def from_hands(
        cls,
        hands: Sequence[tuple[str, Sequence[Card]]],
        policy: Strategy | Any = None,
        starter: int = 0,
    ) -> PresidentEngine:
        """Build an engine from a prepared position instead of a deal.

        Args:
            hands: (name, cards) per seat, in turn order.
            policy: Agent policy, as for the constructor.
            starter: Seat that leads the first trick.
        """
        _check_names([name for name, _ in hands])
        engine = cls.__new__(cls)
        engine._seed = None
        engine._rng = None
        players = [PlayerState(name=name, hand=sort_by_strength(cards)) for name, cards in hands]
        engine._setup(players, policy, starter)
        return engine

    def _setup(self, players: list[PlayerState], policy: Any, starter: int = 0) -> None:
        from strategies.base import as_strategy
        from strategies.weakest import WeakestCardStrategy

        self._players = players
        self._policy = as_strategy(policy) if policy is not None else WeakestCardStrategy()
        self._ranking: list[str] = []
        self._forced_out: list[str] = []
        self._events: list[EngineEvent] = []
        self._start_trick(starter)

    # --- Queries ---

    @property
    def seed(self) -> int | None:
        """Seed of the deal (None for prepared positions)."""
        return self._seed

    @property
    def policy(self) -> Strategy:
        return self._policy

    @property
    def is_over(self) -> bool:
        """Whether fewer than two seats are still playing."""
        return len(self._players) <= 1

    @property
    def current_player(self) -> str | None:
        """Name of the seat on turn, or None once the game is over."""
        if self.is_over:
            return None
        return self._players[self._trick.current_index].name

    @property
    def ranking(self) -> list[str]:
        return list(self._ranking)

    @property
    def forced_last(self) -> str | None:
        return self._forced_out[-1] if self._forced_out else None

    def snapshot(self) -> EngineSnapshot:
        """Deep read-only copy of the game."""
        trick = None
        if self._players:
            tr = self._trick
            lock = LockView(tr.lock.active, tr.lock.rank, tr.lock.target_index)
            if lock.active and not (
                lock.target_index is not None and 0 <= lock.target_index < len(self._players)
            ):
                lock = LockView()
            trick = TrickView(
                current_index=tr.current_index,
                pattern_count=tr.pattern_count,
                top_rank=tr.top_rank,
                lock=lock,
                folded=tuple(tr.folded),
                may_finish_on_two=tr.may_finish_on_two,
                pile=tuple(tr.pile),
                last_player_index=tr.last_player_index,
                opening_passes=tr.opening_passes,
            )
        return EngineSnapshot(
            players=tuple(PlayerView(p.name, tuple(p.hand)) for p in self._players),
            trick=trick,
            ranking=tuple(self._ranking),
            forced_last=self.forced_last,
        )

    get_snapshot = snapshot

    def pop_events(self) -> list[EngineEvent]:
        """Return buffered events in emission order and clear the buffer."""
        events = self._events
        self._events = []
        return events

    def standings(self) -> list[str]:
        """Full finishing order, best first.

        Seats that emptied their hands come first, then seats still
        holding cards, then seats eliminated with a lone Two (the
        earliest elimination last).
        """
        return (
            list(self._ranking)
            + [p.name for p in self._players]
            + list(reversed(self._forced_out))
        )

    def check_play(self, seat: int, cards: Sequence[Card]) -> str | None:
        """Return why ``cards`` may not be played from ``seat``, or None if legal."""
        try:
            self._validate_play(seat, list(cards))
        except IllegalPlayError as exc:
            return str(exc)
        return None

    def legal_plays(self, seat: int | None = None) -> list[tuple[Card, ...]]:
        """Every legal group for ``seat`` (default: the seat on turn), weakest first."""
        if self.is_over:
            return []
        if seat is None:
            seat = self._trick.current_index
        plays = []
        for cards in group_by_rank(self._players[seat].hand).values():
            for size in range(1, len(cards) + 1):
                group = cards[:size]
                if self.check_play(seat, group) is None:
                    plays.append(tuple(group))
        return plays

    # --- Commands ---

    def human_play(self, card_indices: Sequence[int], player: str | None = None) -> ActionResult:
        """Play the cards at ``card_indices`` of the on-turn seat's sorted hand."""
        failure = self._check_turn(player)
        if failure is not None:
            return failure
        seat = self._trick.current_index
        try:
            cards = self._resolve_indices(seat, card_indices)
            self._validate_play(seat, cards)
        except IllegalPlayError as exc:
            logger.debug(f"Rejected play by {self._players[seat].name}: {exc}")
            return ActionResult.failure(str(exc))

        trick_over = self._apply_play(seat, cards)
        self._finish_turn(seat, trick_over)
        return ActionResult.success()

    def human_pass(self, player: str | None = None) -> ActionResult:
        """Decline a lock. Only the lock's target may pass."""
        failure = self._check_turn(player)
        if failure is not None:
            return failure
        seat = self._trick.current_index
        if not self._trick.is_open:
            return ActionResult.failure("You must open the trick (choose cards).")
        if not self._trick.lock.targets(seat):
            return ActionResult.failure("Passing is only allowed when the lock targets you.")
        self._lock_pass(seat)
        return ActionResult.success()

    def human_fold(self, player: str | None = None) -> ActionResult:
        """Drop out of the current trick."""
        failure = self._check_turn(player)
        if failure is not None:
            return failure
        if not self._trick.is_open:
            return ActionResult.failure("You cannot fold at the opening. Play cards.")
        self._fold(self._trick.current_index)
        return ActionResult.success()

    def advance_until_human(
        self,
        human_names: Iterable[str] = (),
        max_turns: int | None = None,
    ) -> None:
        """Run agent turns until a human seat is on turn or the game ends.

        Args:
            human_names: Seats controlled by the caller.
            max_turns: Optional cap on agent turns for this call.
        """
        humans = set(human_names)
        turns = 0
        while len(self._players) > 1:
            seat = self._trick.current_index
            if self._eliminate_if_stuck(seat):
                continue
            if not self._players[seat].hand and self._trick.is_open:
                # Finished seats decline a lock, then sit out the rest of the trick.
                if self._trick.lock.targets(seat):
                    self._lock_pass(seat)
                else:
                    self._fold(seat)
                continue
            if self._players[seat].name in humans:
                break
            if max_turns is not None and turns >= max_turns:
                logger.warning(f"Stopped after {turns} agent turns")
                break
            turns += 1
            self._agent_turn(seat)

    # --- Turn handling ---

    def _check_turn(self, player: str | None) -> ActionResult | None:
        if self.is_over:
            return ActionResult.failure("The game is over.")
        current = self._players[self._trick.current_index].name
        if player is not None and player != current:
            return ActionResult.failure(f"It is not {player}'s turn ({current} is to play).")
        return None

    def _resolve_indices(self, seat: int, card_indices: Sequence[int]) -> list[Card]:
        hand = self._players[seat].hand
        try:
            indices = list(card_indices)
        except TypeError:
            raise IllegalPlayError(
                f"Card positions must be a list, got {card_indices!r}.", Violation.BAD_INDEX
            ) from None
        if not indices:
            raise IllegalPlayError("Empty selection.", Violation.EMPTY_SELECTION)
        for i in indices:
            if not isinstance(i, int) or isinstance(i, bool) or not 0 <= i < len(hand):
                raise IllegalPlayError(f"No card at position {i!r}.", Violation.BAD_INDEX)
        if len(set(indices)) != len(indices):
            raise IllegalPlayError("A card was selected twice.", Violation.BAD_INDEX)
        return [hand[i] for i in indices]

    def _validate_play(self, seat: int, cards: list[Card]) -> None:
        """Raise IllegalPlayError unless ``seat`` may play ``cards`` now."""
        if not cards:
            raise IllegalPlayError("Empty selection.", Violation.EMPTY_SELECTION)
        player = self._players[seat]
        if len(set(cards)) != len(cards) or any(c not in player.hand for c in cards):
            raise IllegalPlayError("Those cards are not in your hand.", Violation.NOT_IN_HAND)

        rank = cards[0].rank
        if any(c.rank != rank for c in cards):
            raise IllegalPlayError("All cards must share the same rank.", Violation.MIXED_RANKS)

        trick = self._trick
        if trick.lock.targets(seat):
            if not (len(cards) == 1 and rank == trick.lock.rank):
                raise IllegalPlayError(
                    f"Lock active: you must play exactly one {trick.lock.rank.symbol} or pass.",
                    Violation.LOCKED,
                )

        if trick.pattern_count is not None:
            if len(cards) != trick.pattern_count:
                raise IllegalPlayError(
                    f"This trick is played with {trick.pattern_count} card(s).",
                    Violation.WRONG_COUNT,
                )
            if trick.top_rank is not None and rank < trick.top_rank:
                raise IllegalPlayError(
                    f"Too weak: you must play at least {trick.top_rank.symbol}.",
                    Violation.TOO_LOW,
                )

        if (
            len(cards) == len(player.hand)
            and any(c.is_two for c in cards)
            and not trick.may_finish_on_two
        ):
            raise IllegalPlayError(
                "You cannot finish your hand with a 2.", Violation.FINISH_ON_TWO
            )

    def _apply_play(self, seat: int, cards: list[Card]) -> bool:
        """Apply a validated play. Returns True if it ended the trick."""
        trick = self._trick
        player = self._players[seat]
        for card in cards:
            player.hand.remove(card)
        trick.pile.extend(cards)
        trick.last_player_index = seat
        self._emit(Play(player.name, tuple(cards)))

        previous_pattern = trick.pattern_count
        previous_top = trick.top_rank
        rank = cards[0].rank
        if trick.pattern_count is None:
            trick.pattern_count = len(cards)
        trick.top_rank = rank

        if trick.pattern_count == 1 and previous_pattern == 1 and rank == previous_top:
            target = self._next_unfolded(seat)
            trick.lock = LockState(active=True, rank=rank, target_index=target)
            self._emit(LockSet(rank, self._players[target].name))
        else:
            if trick.lock.active:
                self._emit(LockClear())
            trick.lock = LockState()

        if any(c.is_two for c in cards):
            self._emit(Two(player.name))
            return True

        last = trick.pile[-CUT_LENGTH:]
        if len(last) == CUT_LENGTH and all(c.rank == last[0].rank for c in last):
            self._emit(Cut(last[0].rank))
            return True

        return False

    def _agent_turn(self, seat: int) -> None:
        player = self._players[seat]
        trick_view = self.snapshot().trick
        choice = self._policy.select_play(tuple(player.hand), tuple(self._trick.pile), trick_view)
        cards = _as_group(choice)
        if not cards:
            logger.debug(f"{player.name} ({self._policy.name}) declines")
            self._decline(seat, None)
            return
        try:
            self._validate_play(seat, cards)
        except IllegalPlayError as exc:
            logger.debug(f"{player.name} ({self._policy.name}) proposed an illegal play: {exc}")
            self._decline(seat, exc.violation)
            return
        trick_over = self._apply_play(seat, cards)
        self._finish_turn(seat, trick_over)

    def _decline(self, seat: int, violation: Violation | None) -> None:
        """Fallback when an agent has no acceptable play."""
        if not self._trick.is_open:
            reason = (
                PassReason.TWO_BLOCKED
                if violation == Violation.FINISH_ON_TWO
                else PassReason.CANT_OPEN
            )
            self._pass_at_opening(seat, reason)
        elif self._trick.lock.targets(seat):
            self._lock_pass(seat)
        else:
            self._fold(seat)

    def _pass_at_opening(self, seat: int, reason: PassReason) -> None:
        trick = self._trick
        trick.opening_passes += 1
        self._emit(Pass(self._players[seat].name, reason))
        if trick.opening_passes >= len(self._players):
            trick.may_finish_on_two = True
            trick.opening_passes = 0
            logger.info("Nobody could open: finishing on a 2 is now allowed")
        trick.current_index = self._next_seat(seat)

    def _lock_pass(self, seat: int) -> None:
        trick = self._trick
        self._emit(Pass(self._players[seat].name, PassReason.LOCK))
        trick.current_index = self._next_unfolded(seat)
        trick.lock = LockState()

    def _fold(self, seat: int) -> None:
        trick = self._trick
        if trick.lock.targets(seat):
            trick.lock = LockState()
        self._emit(Fold(self._players[seat].name, trick.top_rank))
        trick.folded[seat] = True
        if trick.unfolded_count <= 1:
            self._end_trick_and_rotate()
        else:
            trick.current_index = self._next_unfolded(seat)

    def _finish_turn(self, seat: int, trick_over: bool) -> None:
        if trick_over:
            self._end_trick_and_rotate()
        else:
            self._trick.current_index = self._next_unfolded(seat)

    def _next_seat(self, seat: int) -> int:
        return (seat + 1) % len(self._players)

    def _next_unfolded(self, seat: int) -> int:
        """Next seat after ``seat`` that has not folded this trick."""
        folded = self._trick.folded
        nxt = self._next_seat(seat)
        while folded[nxt] and nxt != seat:
            nxt = self._next_seat(nxt)
        return nxt

    # --- Trick lifecycle ---

    def _start_trick(self, starter: int) -> None:
        self._trick = new_trick_state(len(self._players), starter)
        self._emit(StartTrick(self._players[starter].name))

    def _end_trick_and_rotate(self) -> None:
        """Retire empty hands and open the next trick with the last player to play."""
        trick = self._trick
        last = trick.last_player_index
        if last is None:
            last = trick.current_index
        last_name = self._players[last].name if 0 <= last < len(self._players) else None

        survivors = []
        for player in self._players:
            if player.hand:
                survivors.append(player)
            else:
                self._record_finish(player.name)
        self._players = survivors

        if not survivors:
            logger.info(f"Game over: {self._ranking}")
            return

        starter = 0
        for i, player in enumerate(survivors):
            if player.name == last_name:
                starter = i
                break

        self._emit(EndTrick(survivors[starter].name))
        self._start_trick(starter)

    def _eliminate_if_stuck(self, seat: int) -> bool:
        """Eject ``seat`` if it must open holding nothing but a Two."""
        player = self._players[seat]
        if self._trick.is_open or len(player.hand) != 1 or not player.hand[0].is_two:
            return False

        self._forced_out.append(player.name)
        self._emit(ForcedLast(player.name))
        logger.info(f"{player.name} holds a lone 2 and is placed last")
        del self._players[seat]
        if self._players:
            self._start_trick(seat % len(self._players))
        return True

    def _record_finish(self, name: str) -> None:
        self._ranking.append(name)
        logger.info(f"{name} finishes in position {len(self._ranking)}")
        if len(self._ranking) == 1:
            self._emit(President(name))

    def _emit(self, event: EngineEvent) -> None:
        self._events.append(event)


def _as_group(choice: Any) -> list[Card]:
    """Normalize a policy answer (None, a Card, or a group) to a list."""
    if choice is None:
        return []
    if isinstance(choice, Card):
        return [choice]
    return list(choice)


def _check_names(names: Sequence[str]) -> None:
    if len(names) < 2:
        raise ValueError("President needs at least two players")
    if len(set(names)) != len(names):
        raise ValueError(f"Player names must be unique: {list(names)}")
