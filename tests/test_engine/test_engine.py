"""Tests for the President rules engine."""

import pytest

from president_engine.cards import Card, Rank, Suit, parse_card
from president_engine.engine import (
    OPENING_CARD,
    ActionResult,
    PresidentEngine,
)
from president_engine.events import (
    Cut,
    EndTrick,
    Fold,
    LockClear,
    LockSet,
    Pass,
    PassReason,
    Play,
    President,
    StartTrick,
    Two,
)
from president_engine.state import LockState
from strategies.base import FunctionStrategy
from strategies.weakest import WeakestCardStrategy, weakest_card


def cards(*texts):
    return tuple(parse_card(t) for t in texts)


def decline(hand, pile):
    return None


class TestConstruction:
    def test_deals_every_card(self):
        engine = PresidentEngine(["P1", "P2", "P3"], seed=7)
        hands = [p.hand for p in engine.snapshot().players]
        dealt = [c for hand in hands for c in hand]
        assert len(dealt) == 52
        assert len(set(dealt)) == 52
        assert sorted(len(h) for h in hands) == [17, 17, 18]

    def test_hands_are_sorted(self):
        engine = PresidentEngine(["P1", "P2", "P3", "P4"], seed=3)
        for player in engine.snapshot().players:
            assert list(player.hand) == sorted(player.hand)

    def test_queen_of_hearts_leads(self):
        engine = PresidentEngine(["P1", "P2", "P3", "P4", "P5"], seed=12)
        snapshot = engine.snapshot()
        assert OPENING_CARD in snapshot.players[0].hand
        assert snapshot.trick.current_index == 0
        assert engine.pop_events() == [StartTrick(snapshot.players[0].name)]

    def test_rotation_keeps_seat_order(self):
        names = ["P1", "P2", "P3"]
        engine = PresidentEngine(names, seed=21)
        seated = [p.name for p in engine.snapshot().players]
        start = names.index(seated[0])
        assert seated == names[start:] + names[:start]

    def test_same_seed_same_game(self):
        first = PresidentEngine(["A", "B", "C"], seed=5)
        second = PresidentEngine(["A", "B", "C"], seed=5)
        assert first.snapshot() == second.snapshot()
        assert first.seed == 5

    def test_random_seed_is_recorded(self):
        engine = PresidentEngine(["A", "B"])
        replay = PresidentEngine(["A", "B"], seed=engine.seed)
        assert isinstance(engine.seed, int)
        assert replay.snapshot() == engine.snapshot()

    def test_needs_two_players(self):
        with pytest.raises(ValueError):
            PresidentEngine(["Solo"])

    def test_names_must_be_unique(self):
        with pytest.raises(ValueError):
            PresidentEngine(["A", "A", "B"])

    def test_default_policy_is_weakest_card(self):
        engine = PresidentEngine(["A", "B"], seed=1)
        assert isinstance(engine.policy, WeakestCardStrategy)

    def test_plain_function_policy(self, make_engine):
        engine = make_engine({"A": "3S", "B": "4S"}, policy=weakest_card)
        assert isinstance(engine.policy, FunctionStrategy)
        assert engine.policy.name == "weakest_card"

    def test_from_hands_emits_start(self, make_engine):
        engine = make_engine({"A": "3S", "B": "4S", "C": "5S"}, starter=2, drain=False)
        assert engine.pop_events() == [StartTrick("C")]
        assert engine.current_player == "C"
        assert engine.seed is None


class TestEvents:
    def test_pop_events_drains(self):
        engine = PresidentEngine(["A", "B"], seed=1)
        assert len(engine.pop_events()) == 1
        assert engine.pop_events() == []


class TestLegality:
    def test_opening_accepts_any_group_size(self, make_engine, positions):
        engine = make_engine({"A": "7S 7H 7D 9C", "B": "8S", "C": "8H"})
        result = engine.human_play(positions(engine, "7S", "7H", "7D"))
        assert result.ok
        trick = engine.snapshot().trick
        assert trick.pattern_count == 3
        assert trick.top_rank == Rank.SEVEN
        assert engine.current_player == "B"

    def test_mixed_ranks_rejected(self, make_engine, positions):
        engine = make_engine({"A": "7S 8S 9S", "B": "4S"})
        before = engine.snapshot()
        result = engine.human_play(positions(engine, "7S", "8S"))
        assert not result.ok
        assert "same rank" in result.error
        assert engine.snapshot() == before
        assert engine.pop_events() == []

    def test_group_size_must_match(self, make_engine, positions):
        engine = make_engine({"A": "7S 7H 3S", "B": "8S 8H 9D", "C": "KS"})
        engine.human_play(positions(engine, "7S", "7H"))
        result = engine.human_play(positions(engine, "8S"))
        assert not result.ok
        assert "2 card(s)" in result.error
        assert engine.human_play(positions(engine, "8S", "8H")).ok

    def test_must_reach_top_rank(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "8S KD", "C": "4C"})
        engine.human_play(positions(engine, "9S"))
        result = engine.human_play(positions(engine, "8S"))
        assert not result.ok
        assert "at least 9" in result.error
        assert engine.human_play(positions(engine, "KD")).ok

    def test_equal_rank_is_allowed(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "9H 4S", "C": "4C"})
        engine.human_play(positions(engine, "9S"))
        assert engine.human_play(positions(engine, "9H")).ok

    def test_cannot_finish_on_a_two(self, make_engine, positions):
        engine = make_engine({"A": "2S 2H", "B": "5S", "C": "6S"})
        result = engine.human_play(positions(engine, "2S", "2H"))
        assert not result.ok
        assert "finish your hand with a 2" in result.error

    def test_a_two_that_leaves_cards_is_fine(self, make_engine, positions):
        engine = make_engine({"A": "2S 2H", "B": "5S", "C": "6S"})
        assert engine.human_play(positions(engine, "2S")).ok

    def test_check_play_reports_without_playing(self, make_engine):
        engine = make_engine({"A": "7S 8S", "B": "4S"})
        assert engine.check_play(0, cards("7S")) is None
        assert "same rank" in engine.check_play(0, cards("7S", "8S"))
        assert "not in your hand" in engine.check_play(0, cards("AS"))
        assert engine.snapshot().players[0].hand == cards("7S", "8S")

    def test_legal_plays_following(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "8S 9H KD KC", "C": "4C"})
        engine.human_play(positions(engine, "9S"))
        assert engine.legal_plays() == [cards("9H"), cards("KD")]

    def test_legal_plays_opening(self, make_engine):
        engine = make_engine({"A": "5S 5H 2C", "B": "4S"})
        assert engine.legal_plays() == [cards("5S"), cards("5S", "5H"), cards("2C")]


class TestBadInput:
    @pytest.mark.parametrize("indices", [[], [5], [-1], [0, 0], [[0]], ["0"], [True], None, 3])
    def test_bad_indices_fail_cleanly(self, make_engine, indices):
        engine = make_engine({"A": "7S 8S", "B": "4S"})
        before = engine.snapshot()
        result = engine.human_play(indices)
        assert not result.ok
        assert result.error
        assert engine.snapshot() == before
        assert engine.pop_events() == []

    def test_out_of_turn(self, make_engine):
        engine = make_engine({"A": "7S 8S", "B": "4S"})
        result = engine.human_play([0], player="B")
        assert not result.ok
        assert "not B's turn" in result.error
        assert not engine.human_fold(player="B").ok
        assert not engine.human_pass(player="B").ok
        assert engine.human_play([0], player="A").ok

    def test_result_truthiness(self):
        assert ActionResult.success()
        assert not ActionResult.failure("no")
        assert ActionResult.failure("no").error == "no"


class TestPlay:
    def test_play_moves_cards_to_pile(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "8S", "C": "9S"})
        engine.human_play(positions(engine, "7S"))
        snapshot = engine.snapshot()
        assert snapshot.players[0].hand == cards("3S")
        assert snapshot.trick.pile == cards("7S")
        assert snapshot.trick.last_player_index == 0
        assert engine.pop_events() == [Play("A", cards("7S"))]

    def test_snapshot_is_a_copy(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "8S", "C": "9S"})
        before = engine.snapshot()
        engine.human_play(positions(engine, "7S"))
        assert before.players[0].hand == cards("3S", "7S")
        assert before.trick.pile == ()


class TestLock:
    def test_equal_singles_arm_a_lock(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D KS 5S"})
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        assert engine.pop_events() == [
            Play("A", cards("7S")),
            Play("B", cards("7H")),
            LockSet(Rank.SEVEN, "C"),
        ]
        lock = engine.snapshot().trick.lock
        assert lock.active
        assert lock.rank == Rank.SEVEN
        assert lock.target_index == 2

    def test_target_must_match_rank(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D KS 5S"})
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        result = engine.human_play(positions(engine, "KS"))
        assert not result.ok
        assert "Lock" in result.error
        assert engine.legal_plays() == [cards("7D")]

    def test_target_may_pass(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D KS 5S"})
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        engine.pop_events()

        assert engine.human_pass().ok
        assert engine.pop_events() == [Pass("C", PassReason.LOCK)]
        assert not engine.snapshot().trick.lock.active
        assert engine.current_player == "A"
        # The lock is single-use
        assert not engine.human_pass().ok

    def test_matching_the_lock_passes_it_on(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D KS 5S"})
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        engine.pop_events()
        engine.human_play(positions(engine, "7D"))
        assert engine.pop_events() == [Play("C", cards("7D")), LockSet(Rank.SEVEN, "A")]
        assert engine.snapshot().trick.lock.target_index == 0

    def test_lock_skips_folded_seats(self, make_engine, positions):
        engine = make_engine({"A": "5S 7H 3S", "B": "4D", "C": "6S 4C", "D": "7S 4H"})
        engine.human_play(positions(engine, "5S"))
        engine.human_fold()
        engine.human_play(positions(engine, "6S"))
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        # B folded, so A's seven locks C.
        events = engine.pop_events()
        assert events[-1] == LockSet(Rank.SEVEN, "C")
        assert engine.snapshot().trick.lock.target_index == 2
        assert engine.current_player == "C"

    def test_pairs_never_lock(self, make_engine, positions):
        engine = make_engine({"A": "8S 8H 3S", "B": "8D 9D 9C", "C": "9S 9H KS"})
        engine.human_play(positions(engine, "8S", "8H"))
        engine.human_play(positions(engine, "9D", "9C"))
        engine.human_play(positions(engine, "9S", "9H"))
        events = engine.pop_events()
        assert not any(isinstance(e, LockSet) for e in events)

    def test_other_play_clears_a_standing_lock(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "10S 4S", "C": "JS"})
        engine.human_play(positions(engine, "9S"))
        engine._trick.lock = LockState(active=True, rank=Rank.FIVE, target_index=2)
        engine.pop_events()
        engine.human_play(positions(engine, "10S"))
        assert engine.pop_events() == [Play("B", cards("10S")), LockClear()]
        assert not engine.snapshot().trick.lock.active

    def test_snapshot_hides_out_of_range_lock(self, make_engine):
        engine = make_engine({"A": "9S", "B": "4S"})
        engine._trick.lock = LockState(active=True, rank=Rank.SEVEN, target_index=9)
        assert not engine.snapshot().trick.lock.active


class TestTrickEnd:
    def test_two_closes_the_trick(self, make_engine, positions):
        engine = make_engine({"A": "2H 9C", "B": "5S", "C": "6S"})
        engine.human_play(positions(engine, "2H"))
        assert engine.pop_events() == [
            Play("A", cards("2H")),
            Two("A"),
            EndTrick("A"),
            StartTrick("A"),
        ]
        trick = engine.snapshot().trick
        assert trick.pile == ()
        assert trick.pattern_count is None
        assert engine.current_player == "A"

    def test_two_ends_the_trick_mid_trick(self, make_engine, positions):
        engine = make_engine({"A": "5S 9C", "B": "6S 2D KC", "C": "8S"})
        engine.human_play(positions(engine, "5S"))
        engine.human_play(positions(engine, "2D"))
        events = engine.pop_events()
        assert events[-3:] == [Two("B"), EndTrick("B"), StartTrick("B")]
        assert engine.current_player == "B"

    def test_pair_of_twos(self, make_engine, positions):
        engine = make_engine({"A": "2S 2H 3S", "B": "2D 2C 4S"})
        engine.human_play(positions(engine, "2S", "2H"))
        events = engine.pop_events()
        assert Two("A") in events
        assert not any(isinstance(e, Cut) for e in events)
        assert engine.snapshot().trick.pile == ()

    def test_four_of_a_kind_cuts(self, make_engine, positions):
        engine = make_engine({"A": "7S 7H 4S", "B": "7D 7C 5S", "C": "9S 9H"})
        engine.human_play(positions(engine, "7S", "7H"))
        engine.human_play(positions(engine, "7D", "7C"))
        assert engine.pop_events() == [
            Play("A", cards("7S", "7H")),
            Play("B", cards("7D", "7C")),
            Cut(Rank.SEVEN),
            EndTrick("B"),
            StartTrick("B"),
        ]
        assert engine.current_player == "B"

    def test_four_singles_cut(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D 5S", "D": "7C 6S"})
        for card in ("7S", "7H", "7D", "7C"):
            assert engine.human_play(positions(engine, card)).ok
        events = engine.pop_events()
        assert events[-4:] == [LockSet(Rank.SEVEN, "A"), Cut(Rank.SEVEN), EndTrick("D"), StartTrick("D")]
        assert not engine.snapshot().trick.lock.active

    def test_winner_of_trick_leads_next(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "4S 5S", "C": "6S 7S"})
        engine.human_play(positions(engine, "9S"))
        assert engine.human_fold().ok
        assert engine.human_fold().ok
        assert engine.pop_events() == [
            Play("A", cards("9S")),
            Fold("B", Rank.NINE),
            Fold("C", Rank.NINE),
            EndTrick("A"),
            StartTrick("A"),
        ]
        assert engine.snapshot().trick.folded == (False, False, False)

    def test_emptied_hands_are_ranked(self, make_engine, positions):
        engine = make_engine({"A": "9S", "B": "4S 5S", "C": "6S 7S"})
        engine.human_play(positions(engine, "9S"))
        engine.human_fold()
        engine.human_fold()
        events = engine.pop_events()
        assert President("A") in events
        # The winner left, so seat 0 of the survivors leads.
        assert events[-2:] == [EndTrick("B"), StartTrick("B")]
        assert engine.ranking == ["A"]
        assert [p.name for p in engine.snapshot().players] == ["B", "C"]


class TestFold:
    def test_cannot_fold_at_opening(self, make_engine):
        engine = make_engine({"A": "9S", "B": "4S"})
        result = engine.human_fold()
        assert not result.ok
        assert "opening" in result.error

    def test_fold_skips_folded_seats(self, make_engine, positions):
        engine = make_engine({"A": "5S 8S 3S", "B": "4D", "C": "6S 4C", "D": "7S 4H"})
        engine.human_play(positions(engine, "5S"))
        engine.human_fold()
        engine.human_play(positions(engine, "6S"))
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "8S"))
        assert engine.current_player == "C"

    def test_folding_target_clears_lock_silently(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D KS 5S"})
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        engine.pop_events()
        assert engine.human_fold().ok
        assert engine.pop_events() == [Fold("C", Rank.SEVEN)]
        trick = engine.snapshot().trick
        assert not trick.lock.active
        assert trick.folded == (False, False, True)
        assert engine.current_player == "A"


class TestPass:
    def test_cannot_pass_at_opening(self, make_engine):
        engine = make_engine({"A": "9S", "B": "4S"})
        result = engine.human_pass()
        assert not result.ok
        assert "open the trick" in result.error

    def test_cannot_pass_without_lock(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "4S", "C": "5S"})
        engine.human_play(positions(engine, "9S"))
        result = engine.human_pass()
        assert not result.ok
        assert "lock" in result.error


class TestAgents:
    def test_stops_at_human(self):
        engine = PresidentEngine(["P1", "P2", "P3"], seed=11)
        engine.pop_events()
        engine.advance_until_human({engine.current_player})
        assert engine.pop_events() == []

    def test_agents_play_until_human(self, make_engine):
        engine = make_engine({"A": "3S 9S", "B": "4S KS", "C": "5S AS"})
        engine.advance_until_human({"A"}, max_turns=None)
        assert engine.pop_events() == []
        engine.human_play([0])
        engine.advance_until_human({"A"})
        assert engine.pop_events() == [
            Play("A", cards("3S")),
            Play("B", cards("4S")),
            Play("C", cards("5S")),
        ]
        assert engine.current_player == "A"

    def test_declining_agent_folds(self, make_engine, positions):
        engine = make_engine({"A": "9S 3S", "B": "4S", "C": "5S 6S"}, policy=decline)
        engine.human_play(positions(engine, "9S"))
        engine.advance_until_human({"A"})
        assert engine.pop_events() == [
            Play("A", cards("9S")),
            Fold("B", Rank.NINE),
            Fold("C", Rank.NINE),
            EndTrick("A"),
            StartTrick("A"),
        ]

    def test_declining_lock_target_passes(self, make_engine, positions):
        engine = make_engine({"A": "7S 3S", "B": "7H 4S", "C": "7D 5S"}, policy=decline)
        engine.human_play(positions(engine, "7S"))
        engine.human_play(positions(engine, "7H"))
        engine.pop_events()
        engine.advance_until_human({"A", "B"})
        assert engine.pop_events() == [Pass("C", PassReason.LOCK)]
        assert engine.current_player == "A"

    def test_finished_lock_target_passes(self, make_engine, positions):
        engine = make_engine({"A": "4S 7H 9S", "B": "5S", "C": "6S KS", "D": "7S QS"})
        for card in ("4S", "5S", "6S", "7S", "7H"):
            assert engine.human_play(positions(engine, card)).ok
        assert engine.pop_events()[-1] == LockSet(Rank.SEVEN, "B")

        engine.advance_until_human({"A", "C", "D"})
        assert engine.pop_events() == [Pass("B", PassReason.LOCK)]
        trick = engine.snapshot().trick
        assert not trick.lock.active
        assert trick.folded == (False, False, False, False)
        assert engine.current_player == "C"

    def test_illegal_proposal_is_a_decline(self, make_engine):
        engine = make_engine(
            {"A": "9S", "B": "4S", "C": "5S"},
            policy=lambda hand, pile: Card(Rank.ACE, Suit.SPADES),
        )
        engine.advance_until_human({"C"})
        assert engine.pop_events() == [
            Pass("A", PassReason.CANT_OPEN),
            Pass("B", PassReason.CANT_OPEN),
        ]
        assert engine.current_player == "C"

    def test_max_turns(self, make_engine):
        engine = make_engine({"A": "9S", "B": "4S", "C": "5S"}, policy=decline)
        engine.advance_until_human(set(), max_turns=2)
        assert len(engine.pop_events()) == 2
        assert engine.current_player == "C"
        assert engine.snapshot().trick.opening_passes == 2

    def test_two_blocked_opening(self, make_engine):
        whole_hand = FunctionStrategy(lambda hand, pile: list(hand), name="WholeHand")
        engine = make_engine({"A": "2S 2H", "B": "5S", "C": "6S"}, policy=whole_hand)
        engine.advance_until_human(set())
        assert engine.pop_events() == [
            Pass("A", PassReason.TWO_BLOCKED),
            Play("B", cards("5S")),
            Play("C", cards("6S")),
            Fold("A", Rank.SIX),
            Fold("B", Rank.SIX),  # B is out of cards and sits out
            President("B"),
            EndTrick("A"),
            StartTrick("A"),
        ]
        assert engine.is_over
        assert engine.ranking == ["B", "C"]
        assert engine.standings() == ["B", "C", "A"]
        assert engine.current_player is None


class TestGameOver:
    def test_commands_fail_once_over(self, make_engine, positions):
        engine = make_engine({"A": "9S", "B": "4S"})
        engine.human_play(positions(engine, "9S"))
        engine.human_fold()
        assert engine.is_over
        assert engine.ranking == ["A"]
        for result in (engine.human_play([0]), engine.human_pass(), engine.human_fold()):
            assert not result.ok
            assert "over" in result.error
        assert engine.legal_plays() == []

    def test_advance_is_a_no_op_once_over(self, make_engine, positions):
        engine = make_engine({"A": "9S", "B": "4S"})
        engine.human_play(positions(engine, "9S"))
        engine.human_fold()
        engine.pop_events()
        engine.advance_until_human(set())
        assert engine.pop_events() == []
