"""
Monte Carlo rollout strategy.

Win probability is estimated by completing the board and dealing random
hands to every live opponent, many times over. Hands are ranked with the
treys evaluator; a rollout only counts as a win when we beat every
opponent outright.
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from pokerai.game.cards import Card, remaining_deck
from pokerai.game.evaluator import fast_rank
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView, Street
from pokerai.game.trace import TraceNode, leaf
from .base import BaseStrategy, STANDARD_POT_FRACTIONS, option_tree
from .ev import call_ev, pot_odds, raise_candidates, raise_ev

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo rollouts."""
    simulations: int = 100_000
    chunk_size: int = 10_000           # Rollouts dealt per numpy batch
    workers: int = 1                   # >1 spreads chunks over processes
    raise_discount: float = 0.95       # Win probability haircut when raising
    small_bet_fold_threshold: float = -15.0
    large_bet_fold_threshold: float = -25.0
    pot_fractions: tuple[float, ...] = STANDARD_POT_FRACTIONS


def _count_wins(
    hole: list[int],
    board: list[int],
    deck: np.ndarray,
    opponents: int,
    iterations: int,
    seed: int,
    chunk_size: int,
) -> int:
    """
    Run ``iterations`` rollouts and count outright wins.

    Each row of a batch is an independent permutation of the remaining
    deck; the first cards complete the board, the rest go to opponents.
    """
    rng = np.random.default_rng(seed)
    missing = 5 - len(board)
    needed = missing + 2 * opponents
    wins = 0

    done = 0
    while done < iterations:
        n = min(chunk_size, iterations - done)
        deals = rng.permuted(np.tile(deck, (n, 1)), axis=1)[:, :needed].tolist()

        for row in deals:
            full_board = board + row[:missing]
            ours = fast_rank(hole, full_board)
            won = True
            for i in range(missing, needed, 2):
                if fast_rank(row[i:i + 2], full_board) <= ours:
                    won = False
                    break
            if won:
                wins += 1

        done += n

    return wins


def estimate_win_probability(
    hole_cards: Sequence[Card],
    community_cards: Sequence[Card],
    opponents: int,
    simulations: int,
    rng: np.random.Generator,
    workers: int = 1,
    chunk_size: int = 10_000,
) -> float:
    """
    Estimate the chance of beating ``opponents`` random hands at showdown.

    Args:
        hole_cards: Our two hole cards
        community_cards: Visible board (0, 3, 4 or 5 cards)
        opponents: Number of opponents dealt in each rollout
        simulations: Number of rollouts
        rng: Source of randomness; child seeds are drawn from it
        workers: Processes to spread rollouts over
        chunk_size: Rollouts dealt per numpy batch

    Returns:
        Fraction of rollouts won outright (ties are not wins)
    """
    Street.from_board(community_cards)
    if simulations <= 0:
        raise ValueError("simulations must be positive")

    known = list(hole_cards) + list(community_cards)
    deck_cards = remaining_deck(known)
    missing = 5 - len(community_cards)
    opponents = max(1, min(opponents, (len(deck_cards) - missing) // 2))

    hole = [c.to_treys() for c in hole_cards]
    board = [c.to_treys() for c in community_cards]
    deck = np.array([c.to_treys() for c in deck_cards], dtype=np.int64)

    if workers <= 1:
        seed = int(rng.integers(2**32))
        wins = _count_wins(hole, board, deck, opponents, simulations, seed, chunk_size)
        logger.debug("%d/%d rollouts won against %d opponents", wins, simulations, opponents)
        return wins / simulations

    shares = [simulations // workers + (1 if i < simulations % workers else 0)
              for i in range(workers)]
    seeds = rng.integers(2**32, size=workers)
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(_count_wins, hole, board, deck, opponents, share, int(seed), chunk_size)
            for share, seed in zip(shares, seeds)
            if share > 0
        ]
        wins = sum(f.result() for f in futures)
    logger.debug("%d/%d rollouts won against %d opponents over %d workers",
                 wins, simulations, opponents, workers)
    return wins / simulations


class MonteCarloStrategy(BaseStrategy):
    """Rollout win rate fed into the shared EV formulas."""

    name = "monte_carlo"

    def __init__(self, config: Optional[MonteCarloConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or MonteCarloConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        cfg = self.config
        opponents = self.opponent_count(state)
        self.log("Starting Monte Carlo simulation decision")
        self.log(f"Running {cfg.simulations} simulations against {opponents} opponents")

        win_probability = estimate_win_probability(
            player.hole_cards,
            community_cards,
            opponents,
            cfg.simulations,
            self.rng,
            workers=cfg.workers,
            chunk_size=cfg.chunk_size,
        )
        self.recorder.simulations_run = cfg.simulations
        self.log(f"Win probability from simulations: {win_probability:.4f}")
        self.log(f"Pot odds: {pot_odds(amount_to_call, pot_size):.4f}")

        passive_ev = call_ev(win_probability, pot_size, amount_to_call, self.ev_params)
        self.log(f"Call EV: {passive_ev:.2f}")

        best_raise = 0
        best_raise_ev = float("-inf")
        raise_nodes = []
        for amount in raise_candidates(pot_size, amount_to_call, state.min_raise,
                                       player.chips, cfg.pot_fractions):
            value = raise_ev(win_probability * cfg.raise_discount, pot_size, amount,
                             self.ev_params)
            self.log(f"Raise {amount} EV: {value:.2f}")
            raise_nodes.append(leaf("raise", value, amount=amount))
            if value > best_raise_ev:
                best_raise, best_raise_ev = amount, value

        self.recorder.evaluation = {
            "win_probability": win_probability,
            "call_ev": passive_ev,
            "best_raise": best_raise,
            "best_raise_ev": best_raise_ev,
        }

        if amount_to_call == 0:
            if best_raise_ev > 0 and best_raise_ev > passive_ev:
                self.log(f"Decided to raise {best_raise} (EV: {best_raise_ev:.2f})")
                decision = Decision.raise_to(best_raise)
            else:
                self.log("Decided to check")
                decision = Decision.check()
        else:
            small_bet = amount_to_call <= state.big_blind * 2
            threshold = cfg.small_bet_fold_threshold if small_bet else cfg.large_bet_fold_threshold
            if passive_ev <= threshold:
                self.log(f"Decided to fold, very negative call EV: {passive_ev:.2f}")
                decision = Decision.fold()
            elif best_raise_ev > passive_ev and best_raise_ev > 0:
                self.log(f"Decided to raise {best_raise} (EV: {best_raise_ev:.2f})")
                decision = Decision.raise_to(best_raise)
            else:
                self.log(f"Decided to call (EV: {passive_ev:.2f})")
                decision = Decision.call(amount_to_call)

        return decision, option_tree(decision, amount_to_call, passive_ev, raise_nodes)

