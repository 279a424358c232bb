"""Command-line interface for President."""

from __future__ import annotations

import argparse
import logging
import time
from typing import TYPE_CHECKING, Sequence

from president_engine.config import load_settings
from president_engine.engine import PresidentEngine
from president_engine.events import (
    Cut,
    EndTrick,
    Fold,
    ForcedLast,
    LockClear,
    LockSet,
    Pass,
    Play,
    President,
    StartTrick,
    Two,
)

if TYPE_CHECKING:
    from president_engine.events import EngineEvent
    from president_engine.state import EngineSnapshot


def format_event(event: EngineEvent) -> str:
    """One line of table talk per event."""
    match event:
        case StartTrick(starter=starter):
            return f"--- New trick: {starter} leads ---"
        case Play(player=player, cards=cards):
            return f"{player}: {' '.join(str(c) for c in cards)}"
        case Pass():
            return f"{event}"
        case Fold():
            return f"{event}"
        case LockSet(rank=rank, target=target):
            return f"🔒 {target} must play a {rank.symbol} or pass"
        case LockClear():
            return "🔓 Lock lifted"
        case Cut(rank=rank):
            return f"✂ Four {rank.symbol}s! The trick is cut"
        case Two(player=player):
            return f"{player} closes the trick with a 2"
        case EndTrick(next_starter=next_starter):
            return f"Trick won, {next_starter} leads next"
        case ForcedLast(player=player):
            return f"{player} holds only a 2 and is out, in last place"
        case President(player=player):
            return f"👑 {player} is President!"
        case _:
            raise ValueError(f"Unknown event: {event!r}")


def format_snapshot(snapshot: EngineSnapshot, viewer: str | None = None) -> str:
    """Format the table for display. Only ``viewer``'s hand is shown in full."""
    lines = []
    trick = snapshot.trick

    lines.append("=" * 60)
    if trick is not None:
        pattern = trick.pattern_count if trick.pattern_count is not None else "open"
        top = trick.top_rank.symbol if trick.top_rank is not None else "-"
        lines.append(f"Trick: {pattern} card(s) | Top: {top}")
        if trick.pile:
            lines.append(f"Pile: {' '.join(str(c) for c in trick.pile)}")
        if trick.lock.active:
            target = snapshot.players[trick.lock.target_index].name
            lines.append(f"Lock: {target} must play {trick.lock.rank.symbol} or pass")
        if trick.may_finish_on_two:
            lines.append("Finishing on a 2 is allowed this trick")
    lines.append("=" * 60)

    for i, player in enumerate(snapshot.players):
        on_turn = trick is not None and i == trick.current_index
        prefix = "→ " if on_turn else "  "
        folded = " (folded)" if trick is not None and trick.folded[i] else ""
        if viewer is None or player.name == viewer:
            hand = " ".join(str(c) for c in player.hand) or "(empty)"
        else:
            hand = f"[{len(player.hand)} cards]"
        lines.append(f"{prefix}{player.name}{folded}: {hand}")

    if snapshot.ranking:
        lines.append(f"\nFinished: {', '.join(snapshot.ranking)}")
    if snapshot.forced_last:
        lines.append(f"Forced last: {snapshot.forced_last}")

    return "\n".join(lines)


def format_hand(snapshot: EngineSnapshot, name: str) -> str:
    """Hand with the positions ``p`` expects."""
    for player in snapshot.players:
        if player.name == name:
            return "  ".join(f"{i}:{c}" for i, c in enumerate(player.hand))
    return ""


def _show_events(engine: PresidentEngine, delay: float = 0.0) -> None:
    for event in engine.pop_events():
        print(format_event(event))
        if delay:
            time.sleep(delay)


def _print_standings(engine: PresidentEngine) -> None:
    print("\n" + "=" * 60)
    print("GAME OVER")
    for place, name in enumerate(engine.standings(), start=1):
        print(f"  {place}. {name}")
    print("=" * 60)


def play_interactive(
    players: Sequence[str],
    human: str,
    strategy_name: str,
    seed: int | None = None,
    delay: float = 0.0,
) -> None:
    """Play as ``human`` against agents."""
    from strategies.factory import create_strategy

    engine = PresidentEngine(players, seed=seed, policy=create_strategy(strategy_name, {"seed": seed}))
    humans = {human}

    print("\nWelcome to President!")
    print(f"You are {human}. Seed: {engine.seed}")
    print("Commands: 'p 0 1' plays cards by position, 'pass', 'fold', 'q' quits.\n")

    while True:
        engine.advance_until_human(humans)
        _show_events(engine, delay)
        if engine.is_over or engine.current_player != human:
            break

        snapshot = engine.snapshot()
        print(format_snapshot(snapshot, viewer=human))
        print(f"\nYour hand: {format_hand(snapshot, human)}")

        while True:
            choice = input("\nYour move: ").strip().lower()
            if choice == "q":
                print("Goodbye!")
                return
            if choice == "pass":
                result = engine.human_pass(human)
            elif choice == "fold":
                result = engine.human_fold(human)
            elif choice.startswith("p"):
                try:
                    indices = [int(tok) for tok in choice[1:].split()]
                except ValueError:
                    print("Positions must be numbers, e.g. 'p 0 1'")
                    continue
                result = engine.human_play(indices, human)
            else:
                print("Unknown command. Use 'p <positions>', 'pass', 'fold' or 'q'.")
                continue

            if result.ok:
                break
            print(result.error)

        _show_events(engine)

    _print_standings(engine)


def watch_game(
    players: Sequence[str],
    strategy_name: str,
    seed: int | None = None,
    delay: float = 0.5,
) -> None:
    """Watch agents play each other."""
    from strategies.factory import create_strategy

    engine = PresidentEngine(players, seed=seed, policy=create_strategy(strategy_name, {"seed": seed}))
    print(f"\nWatching {engine.policy.name} agents (seed {engine.seed})")
    print("Press Ctrl+C to stop.\n")
    print(format_snapshot(engine.snapshot()))

    try:
        engine.advance_until_human(set())
        _show_events(engine, delay)
    except KeyboardInterrupt:
        print("\nStopped.")
        return

    _print_standings(engine)


def run_tournament(
    players: Sequence[str],
    strategy_name: str,
    num_games: int = 100,
    seed: int = 42,
) -> None:
    """Run many headless games and report placements."""
    from simulation.runner import placement_stats, run_batch
    from strategies.factory import create_strategy

    strategy = create_strategy(strategy_name, {"seed": seed})
    print(f"\nRunning {num_games} games: {strategy.name} x {len(players)}")

    results = run_batch(strategy, num_games, player_names=players, start_seed=seed)
    stats = placement_stats(results)
    incomplete = sum(1 for r in results if not r.completed)
    avg_tricks = sum(r.tricks for r in results) / len(results)
    avg_duration = sum(r.duration_ms for r in results) / len(results)

    print("\nResults:")
    for name in players:
        s = stats.get(name)
        if s is None:
            continue
        print(
            f"  {name}: avg place {s['average_place']:.2f}, "
            f"President {100 * s['president_rate']:.1f}%, "
            f"forced last {100 * s['forced_last_rate']:.1f}%"
        )
    print(f"  Average tricks: {avg_tricks:.1f}")
    print(f"  Average duration: {avg_duration:.2f}ms")
    if incomplete:
        print(f"  Games stopped by the turn cap: {incomplete}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the CLI."""
    settings = load_settings()

    parser = argparse.ArgumentParser(description="President card game")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--players",
        default=",".join(settings.players),
        help="Comma-separated seat names",
    )
    parser.add_argument(
        "--strategy",
        default=settings.strategy,
        help="Agent strategy (weakest, lowest-group, random)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Play against agents")
    play_parser.add_argument("--seed", type=int, default=settings.seed, help="Random seed")
    play_parser.add_argument("--human", default=None, help="Your seat name (default: the configured human if seated, else the first player)")
    play_parser.add_argument(
        "--delay", type=float, default=settings.delay, help="Delay between agent events (seconds)"
    )

    watch_parser = subparsers.add_parser("watch", help="Watch agents play")
    watch_parser.add_argument("--seed", type=int, default=settings.seed, help="Random seed")
    watch_parser.add_argument(
        "--delay", type=float, default=settings.delay or 0.5, help="Delay between events (seconds)"
    )

    tournament_parser = subparsers.add_parser("tournament", help="Run many games")
    tournament_parser.add_argument("--games", type=int, default=100, help="Number of games")
    tournament_parser.add_argument(
        "--seed", type=int, default=settings.seed if settings.seed is not None else 42, help="First seed"
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    players = [name.strip() for name in args.players.split(",") if name.strip()]
    if len(players) < 2:
        parser.error(f"--players must name at least two players, got {players}")

    if args.command == "play":
        human = args.human
        if human is None:
            human = settings.human if settings.human in players else players[0]
        if human not in players:
            parser.error(f"--human {human!r} is not one of the players {players}")
        play_interactive(players, human, args.strategy, seed=args.seed, delay=args.delay)
    elif args.command == "watch":
        watch_game(players, args.strategy, seed=args.seed, delay=args.delay)
    elif args.command == "tournament":
        run_tournament(players, args.strategy, num_games=args.games, seed=args.seed)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
