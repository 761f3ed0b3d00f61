"""
Range-weighted simulation strategy.

A lighter rollout than Monte Carlo: opponent hands are biased toward a
premium shortlist, with a weight that shrinks street by street, and the
raw win rate is blended with how much our hand tends to improve by the
river.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from pokerai.game.cards import Card, PREMIUM_HANDS, STR_RANK, remaining_deck
from pokerai.game.evaluator import fast_rank, made_hand_strength
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView, Street
from pokerai.game.trace import TraceNode, leaf
from .base import BaseStrategy, STANDARD_POT_FRACTIONS, option_tree
from .ev import call_ev, pot_odds, raise_candidates, raise_ev


@dataclass
class WeightedSimulationConfig:
    """Configuration for weighted simulation."""
    simulations: int = 1000
    # Chance an opponent is dealt from the premium shortlist
    range_weights: dict[Street, float] = field(default_factory=lambda: {
        Street.PREFLOP: 0.8,
        Street.FLOP: 0.6,
        Street.TURN: 0.4,
        Street.RIVER: 0.2,
    })
    stage_multipliers: dict[Street, float] = field(default_factory=lambda: {
        Street.PREFLOP: 0.8,
        Street.FLOP: 1.0,
        Street.TURN: 1.1,
        Street.RIVER: 1.2,
    })
    improvement_weight: float = 0.5
    improvement_cap: float = 0.2
    strong_preflop_threshold: float = 0.7
    check_raise_threshold: float = 5.0
    fold_threshold: float = -15.0
    pot_fractions: tuple[float, ...] = STANDARD_POT_FRACTIONS


@dataclass
class SimulationResult:
    """Outcome of a batch of weighted rollouts."""
    wins: int
    simulations: int
    avg_improvement: float

    @property
    def win_probability(self) -> float:
        return self.wins / self.simulations if self.simulations else 0.0


def _shortlist_ranks(hand_type: str) -> tuple[int, int]:
    return STR_RANK[hand_type[0]], STR_RANK[hand_type[1]]


def _take_hand(pool: list[Card], ranks: tuple[int, int]) -> Optional[list[Card]]:
    """Pull two cards with the given ranks out of ``pool``, if present."""
    first = next((c for c in pool if c.rank == ranks[0]), None)
    if first is None:
        return None
    second = next((c for c in pool if c.rank == ranks[1] and c != first), None)
    if second is None:
        return None
    pool.remove(first)
    pool.remove(second)
    return [first, second]


def raise_win_modifier(raise_amount: int, pot_size: int) -> float:
    """Win probability multiplier for a raise size: small bets keep fold equity."""
    if raise_amount <= pot_size * 0.5:
        return 1.05
    if raise_amount <= pot_size:
        return 1.10
    return 0.95


class WeightedSimulationStrategy(BaseStrategy):
    """Rollouts against a weighted opponent range."""

    name = "weighted_simulation"

    def __init__(self, config: Optional[WeightedSimulationConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or WeightedSimulationConfig()

    def simulate(
        self,
        hole_cards: Sequence[Card],
        community_cards: Sequence[Card],
        opponents: int,
        street: Street,
    ) -> SimulationResult:
        """
        Run weighted rollouts.

        Args:
            hole_cards: Our hole cards
            community_cards: Visible board
            opponents: Opponents dealt per rollout
            street: Current street, selects the range weight

        Returns:
            Wins, rollout count and average strength improvement
        """
        cfg = self.config
        deck = remaining_deck(list(hole_cards) + list(community_cards))
        missing = 5 - len(community_cards)
        weight = cfg.range_weights.get(street, 0.5)
        hole = [c.to_treys() for c in hole_cards]
        current = made_hand_strength(hole_cards, community_cards)

        wins = 0
        total_improvement = 0.0

        for _ in range(cfg.simulations):
            order = self.rng.permutation(len(deck))
            pool = [deck[i] for i in order]

            full_board = list(community_cards) + pool[:missing]
            pool = pool[missing:]
            board = [c.to_treys() for c in full_board]

            total_improvement += made_hand_strength(hole_cards, full_board) - current
            ours = fast_rank(hole, board)

            won = True
            for _ in range(opponents):
                hand = None
                if self.rng.random() < weight:
                    hand_type = PREMIUM_HANDS[self.rng.integers(len(PREMIUM_HANDS))]
                    hand = _take_hand(pool, _shortlist_ranks(hand_type))
                if hand is None:
                    if len(pool) < 2:
                        break
                    hand, pool = pool[:2], pool[2:]
                if fast_rank([c.to_treys() for c in hand], board) <= ours:
                    won = False
                    break

            if won:
                wins += 1

        return SimulationResult(
            wins=wins,
            simulations=cfg.simulations,
            avg_improvement=total_improvement / cfg.simulations if cfg.simulations else 0.0,
        )

    def adjusted_win_probability(self, result: SimulationResult, street: Street) -> float:
        """Blend win rate with the bounded improvement adjustment."""
        cfg = self.config
        multiplier = cfg.stage_multipliers.get(street, 1.0)
        improvement = result.avg_improvement * cfg.improvement_weight
        improvement = max(-cfg.improvement_cap, min(cfg.improvement_cap, improvement))
        return max(0.0, min(1.0, result.win_probability * multiplier + improvement))

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        cfg = self.config
        street = Street.from_board(community_cards)
        opponents = self.opponent_count(state)
        self.log("Starting simulation-based decision making")
        self.log(f"Current game stage: {street.name.lower()}")
        self.log(f"Running {cfg.simulations} simulations against {opponents} opponents")

        result = self.simulate(player.hole_cards, community_cards, opponents, street)
        self.recorder.simulations_run = result.simulations
        self.log(f"Win probability from simulations: {result.win_probability:.4f} "
                 f"({result.wins}/{result.simulations})")
        self.log(f"Average hand strength improvement: {result.avg_improvement:.4f}")
        self.log(f"Pot odds: {pot_odds(amount_to_call, pot_size):.4f}")

        win_probability = self.adjusted_win_probability(result, street)
        self.log(f"Adjusted win probability: {win_probability:.4f}")

        passive_ev = call_ev(win_probability, pot_size, amount_to_call, self.ev_params)
        self.log(f"Call EV: {passive_ev:.2f}")

        best_raise = 0
        best_raise_ev = float("-inf")
        raise_nodes = []
        for amount in raise_candidates(pot_size, amount_to_call, state.min_raise,
                                       player.chips, cfg.pot_fractions):
            raise_probability = min(1.0, win_probability * raise_win_modifier(amount, pot_size))
            value = raise_ev(raise_probability, pot_size, amount, self.ev_params)
            self.log(f"Raise {amount} EV: {value:.2f}")
            raise_nodes.append(leaf("raise", value, amount=amount))
            if value > best_raise_ev:
                best_raise, best_raise_ev = amount, value

        self.recorder.evaluation = {
            "win_probability": result.win_probability,
            "adjusted_win_probability": win_probability,
            "avg_improvement": result.avg_improvement,
            "call_ev": passive_ev,
            "best_raise": best_raise,
            "best_raise_ev": best_raise_ev,
        }

        if (street == Street.PREFLOP and win_probability > cfg.strong_preflop_threshold
                and best_raise > 0):
            self.log(f"Decided to raise {best_raise} with strong preflop hand")
            decision = Decision.raise_to(best_raise)
        elif amount_to_call == 0:
            if best_raise_ev > cfg.check_raise_threshold:
                self.log(f"Decided to raise {best_raise} (EV: {best_raise_ev:.2f})")
                decision = Decision.raise_to(best_raise)
            else:
                self.log("Decided to check")
                decision = Decision.check()
        elif passive_ev <= cfg.fold_threshold:
            self.log(f"Decided to fold, negative call EV: {passive_ev:.2f}")
            decision = Decision.fold()
        elif best_raise_ev > passive_ev and best_raise_ev > 0:
            self.log(f"Decided to raise {best_raise} (EV: {best_raise_ev:.2f})")
            decision = Decision.raise_to(best_raise)
        else:
            self.log(f"Decided to call (EV: {passive_ev:.2f})")
            decision = Decision.call(amount_to_call)

        return decision, option_tree(decision, amount_to_call, passive_ev, raise_nodes)
