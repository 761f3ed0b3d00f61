"""
Opponent-modelling strategy.

Keeps a behavioural model per opponent, discounts our base hand strength
against aggressive or tight opponents and dangerous boards, and maps the
result onto fixed bet-sizing tiers.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from pokerai.classifier.opponents import OpponentModelTable
from pokerai.game.cards import Card
from pokerai.game.state import ActionType, Decision, GameStateSnapshot, PlayerView, Street
from pokerai.game.trace import TraceNode
from .base import BaseStrategy

logger = logging.getLogger(__name__)


@dataclass
class BayesianConfig:
    """Thresholds for the opponent-modelling strategy."""
    aggression_alert: float = 0.6
    aggression_discount: float = 0.2
    bluff_offset: float = 0.2
    tightness_alert: float = 0.6
    tightness_discount: float = 0.15
    extra_opponent_penalty: float = 0.05
    paired_board_penalty: float = 0.05
    suited_board_penalty: float = 0.1
    connected_board_penalty: float = 0.05
    min_strength: float = 0.1
    max_strength: float = 0.95


def longest_run(ranks: Iterable[int]) -> int:
    """Longest run of consecutive ranks, counting an ace as low too."""
    values = set(ranks)
    if 14 in values:
        values.add(1)
    ordered = sorted(values)
    best = current = 1 if ordered else 0
    for prev, rank in zip(ordered, ordered[1:]):
        current = current + 1 if rank == prev + 1 else 1
        best = max(best, current)
    return best


def draw_potential(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
    """
    Flush and straight draw potential from the cards still to come.

    Returns 0 on the river; otherwise the larger of the flush and straight
    draw scores, worth more on the flop with two cards to come.
    """
    if len(community_cards) >= 5:
        return 0.0

    cards = list(hole_cards) + list(community_cards)
    on_flop = len(community_cards) == 3

    max_suit = max(Counter(c.suit for c in cards).values())
    flush = 0.0
    if max_suit == 4:
        flush = 0.35 if on_flop else 0.2
    elif max_suit == 3 and on_flop:
        flush = 0.15

    run = longest_run(c.rank for c in cards)
    straight = 0.0
    if run == 4:
        straight = 0.4 if on_flop else 0.2
    elif run == 3:
        straight = 0.2 if on_flop else 0.1

    return max(flush, straight)


class BayesianStrategy(BaseStrategy):
    """
    Threshold strategy over opponent-adjusted hand strength.

    The opponent model table lives on the strategy instance, so each agent
    must own its own BayesianStrategy.
    """

    name = "bayesian"

    def __init__(self, config: Optional[BayesianConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or BayesianConfig()
        self.models = OpponentModelTable()

    def update_models(self, state: GameStateSnapshot) -> None:
        """Fold every live opponent's last action into its model."""
        try:
            if state.opponents is None:
                raise AttributeError("snapshot has no opponent list")
            updated = self.models.observe_all(
                state.opponents, state.pot, len(state.community_cards)
            )
            self.log(f"Updated {updated} opponent models")
        except (AttributeError, TypeError) as exc:
            logger.warning("Skipping opponent model update: %s", exc)
            self.log("Opponent models not updated")

    def adjust_strength(
        self,
        hand_strength: float,
        community_cards: Sequence[Card],
        state: GameStateSnapshot,
    ) -> float:
        """
        Discount base strength for opponent tendencies and board texture.

        Args:
            hand_strength: Base strength in [0, 1]
            community_cards: Visible board
            state: Table snapshot

        Returns:
            Adjusted strength clamped to [min_strength, max_strength]
        """
        cfg = self.config
        opponents = state.live_opponents()
        if state.opponents is None or not opponents:
            return hand_strength

        adjusted = hand_strength
        for opponent in opponents:
            model = self.models.get(opponent.player_id)
            last = opponent.last_action
            if model is None or model.observations == 0 or last is None:
                continue

            if model.aggression_factor > cfg.aggression_alert and last.action == ActionType.RAISE:
                discount = (model.aggression_factor - 0.5) * cfg.aggression_discount
                adjusted -= discount - model.bluff_frequency * cfg.bluff_offset
                self.log(f"Player {opponent.player_id} ({model.archetype.name.lower()}) "
                         f"raised, discount {discount:.3f}")

            if (model.tightness > cfg.tightness_alert
                    and last.action in (ActionType.CALL, ActionType.RAISE)):
                adjusted -= (model.tightness - 0.5) * cfg.tightness_discount

        if len(opponents) > 1:
            adjusted -= cfg.extra_opponent_penalty * (len(opponents) - 1)

        if len(community_cards) >= 3:
            ranks = sorted(c.rank for c in community_cards)
            if len(set(ranks)) < len(ranks):
                adjusted -= cfg.paired_board_penalty
            if max(Counter(c.suit for c in community_cards).values()) >= 3:
                adjusted -= cfg.suited_board_penalty
            if any(b - a <= 2 for a, b in zip(ranks, ranks[1:])):
                adjusted -= cfg.connected_board_penalty

        return max(cfg.min_strength, min(cfg.max_strength, adjusted))

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        self.log("Starting Bayesian decision process")
        Street.from_board(community_cards)
        self.update_models(state)

        base = self.hand_strength(player, community_cards)
        adjusted = self.adjust_strength(base, community_cards, state)
        self.log(f"Base hand strength: {base:.4f}, Adjusted: {adjusted:.4f}")

        draw = draw_potential(player.hole_cards, community_cards)
        if draw:
            self.log(f"Draw potential: {draw:.4f}")

        self.recorder.evaluation = {
            "base_strength": base,
            "adjusted_strength": adjusted,
            "draw_potential": draw,
            "opponent_models": len(self.models),
        }

        if amount_to_call == 0:
            if adjusted > 0.7:
                amount = max(20, int(pot_size * 0.6))
                self.log(f"Strong hand, betting {amount}")
                return Decision.raise_to(amount), None
            if adjusted > 0.5 or draw > 0.3:
                amount = max(15, int(pot_size * 0.4))
                self.log(f"Medium hand/draw, betting {amount}")
                return Decision.raise_to(amount), None
            if draw > 0.2:
                amount = max(10, int(pot_size * 0.25))
                self.log(f"Decent draw, small bet {amount}")
                return Decision.raise_to(amount), None
            self.log("Weak hand, checking")
            return Decision.check(), None

        effective = adjusted + draw
        small_bet = amount_to_call <= self.ev_params.small_bet
        call_value = effective * pot_size - (1 - effective) * amount_to_call
        if small_bet:
            call_value += self.ev_params.call_bonus
        self.log(f"Call EV: {call_value:.2f}")

        if adjusted > 0.8:
            amount = max(int(amount_to_call * 2.5), int(pot_size * 0.75))
            self.log(f"Very strong hand, raising to {amount}")
            return Decision.raise_to(amount), None
        if adjusted > 0.6 and amount_to_call < pot_size * 0.5:
            amount = max(amount_to_call * 2, int(pot_size * 0.6))
            self.log(f"Strong hand, raising to {amount}")
            return Decision.raise_to(amount), None
        if call_value > 0 or (small_bet and adjusted > 0.3):
            self.log(f"+EV call or small bet, calling {amount_to_call}")
            return Decision.call(amount_to_call), None

        self.log("-EV call, folding")
        return Decision.fold(), None
