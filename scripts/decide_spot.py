#!/usr/bin/env python3
"""Run one strategy on a single poker spot and show its reasoning."""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pokerai.agent import Agent
from pokerai.config import AgentConfig
from pokerai.game.cards import parse_cards
from pokerai.game.state import GameStateSnapshot, OpponentState, PlayerView
from pokerai.logging_config import configure_logging
from pokerai.strategies import ROLLOUT_STRATEGIES, STRATEGIES
from pokerai.viz import print_trace


def main():
    parser = argparse.ArgumentParser(
        description="Ask a strategy what it would do in a poker spot"
    )
    parser.add_argument(
        "-c", "--cards",
        required=True,
        help="Hole cards (e.g., 'AsKs')",
    )
    parser.add_argument(
        "-b", "--board",
        default="",
        help="Board cards (e.g., 'QsJsTs'); empty for preflop",
    )
    parser.add_argument(
        "-p", "--pot",
        type=int,
        default=100,
        help="Pot size in chips (default: 100)",
    )
    parser.add_argument(
        "--to-call",
        type=int,
        default=0,
        help="Amount to call (default: 0)",
    )
    parser.add_argument(
        "--stack",
        type=int,
        default=1000,
        help="Our chips (default: 1000)",
    )
    parser.add_argument(
        "--big-blind",
        type=int,
        default=10,
        help="Big blind (default: 10)",
    )
    parser.add_argument(
        "--min-raise",
        type=int,
        default=20,
        help="Minimum legal raise (default: 20)",
    )
    parser.add_argument(
        "-n", "--opponents",
        type=int,
        default=1,
        help="Opponents still in the hand (default: 1)",
    )
    parser.add_argument(
        "--seat",
        type=int,
        default=0,
        help="Our seat; the button is seat 0 (default: 0)",
    )
    parser.add_argument(
        "-s", "--strategy",
        choices=sorted(STRATEGIES),
        default="monte_carlo",
        help="Strategy to run (default: monte_carlo)",
    )
    parser.add_argument(
        "--simulations",
        type=int,
        help="Rollouts for the simulation strategies",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible output",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Tree depth to display (default: 3)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    console = Console()
    configure_logging("DEBUG" if args.verbose else None)

    try:
        hole = parse_cards(args.cards)
        board = parse_cards(args.board) if args.board else []
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return 1

    if len(hole) != 2:
        console.print("[red]Exactly two hole cards are required[/]")
        return 1
    if len(board) not in (0, 3, 4, 5):
        console.print("[red]Board must have 0, 3, 4 or 5 cards[/]")
        return 1

    options = {}
    if args.simulations and args.strategy in ROLLOUT_STRATEGIES:
        options["simulations"] = args.simulations

    config = AgentConfig(strategy=args.strategy, options=options, seed=args.seed)
    agent = Agent.from_config(0, config)

    seats = [s for s in range(args.opponents + 1) if s != args.seat][:args.opponents]
    opponents = tuple(
        OpponentState(player_id=i, seat=seat)
        for i, seat in enumerate(seats, 1)
    )
    state = GameStateSnapshot(
        pot=args.pot,
        amount_to_call=args.to_call,
        community_cards=tuple(board),
        big_blind=args.big_blind,
        min_raise=args.min_raise,
        opponents=opponents,
    )
    view = PlayerView(player_id=0, hole_cards=tuple(hole), chips=args.stack, seat=args.seat)

    _display_spot(console, view, state, args.strategy)

    with console.status(f"[bold]Running {args.strategy}...[/]"):
        decision = agent.act(view, state)

    console.print()
    console.print(Panel(f"[bold green]{decision}[/]", title="Decision", expand=False))
    console.print()

    if decision.trace is not None:
        print_trace(decision.trace, console, max_depth=args.depth)

    return 0


def _display_spot(console: Console, view: PlayerView, state: GameStateSnapshot,
                  strategy: str) -> None:
    """Display the spot being decided."""
    table = Table(title="Spot", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Hole cards", " ".join(c.symbol for c in view.hole_cards))
    board = " ".join(c.symbol for c in state.community_cards)
    table.add_row("Board", board or "(preflop)")
    table.add_row("Pot", str(state.pot))
    table.add_row("To call", str(state.amount_to_call))
    table.add_row("Stack", str(view.chips))
    table.add_row("Opponents", str(len(state.live_opponents())))
    table.add_row("Strategy", strategy)

    console.print(table)


if __name__ == "__main__":
    sys.exit(main())
