"""
Position-based heuristic strategy.

No search or rollouts: hand strength is nudged by seat, preflop hands are
scored with an additive formula, and postflop draws are folded into an
effective strength before fixed thresholds pick the action.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from pokerai.game.cards import Card
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView, Position, Street, seat_position
from pokerai.game.trace import TraceNode
from .base import BaseStrategy
from .ev import pot_odds


class DrawType(Enum):
    """Drawing hands, strongest first."""
    NONE = "none"
    STRAIGHT_FLUSH_DRAW = "straight_flush_draw"
    FLUSH_DRAW = "flush_draw"
    OPEN_STRAIGHT_DRAW = "open_straight_draw"
    GUTSHOT = "gutshot"


DRAW_STRENGTH = {
    DrawType.NONE: 0.0,
    DrawType.STRAIGHT_FLUSH_DRAW: 0.9,
    DrawType.FLUSH_DRAW: 0.7,
    DrawType.OPEN_STRAIGHT_DRAW: 0.6,
    DrawType.GUTSHOT: 0.3,
}

# Chance of hitting the draw, compared against pot odds
DRAW_ODDS = {
    DrawType.STRAIGHT_FLUSH_DRAW: 0.17,
    DrawType.FLUSH_DRAW: 0.35,
    DrawType.OPEN_STRAIGHT_DRAW: 0.31,
}


@dataclass
class PositionConfig:
    """Seat adjustments and semi-bluff frequency."""
    strength_adjustment: dict[Position, float] = field(default_factory=lambda: {
        Position.BUTTON: 0.07,
        Position.LATE: 0.07,
        Position.MIDDLE: 0.03,
        Position.EARLY: -0.03,
        Position.SMALL_BLIND: -0.05,
        Position.BIG_BLIND: -0.02,
        Position.UNKNOWN: 0.0,
    })
    preflop_scale: float = 1.5
    river_scale: float = 0.7
    semi_bluff_frequency: float = 0.3


def identify_draw(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> DrawType:
    """
    Classify the best draw among hole and board cards.

    Only flop and turn boards can hold a draw.
    """
    if len(community_cards) in (0, 5):
        return DrawType.NONE

    cards = list(hole_cards) + list(community_cards)
    flush_draw = 4 in Counter(c.suit for c in cards).values()

    values = sorted({c.rank for c in cards})
    if 14 in values:
        values.insert(0, 1)

    windows = [values[i + 3] - values[i] for i in range(len(values) - 3)]
    straight_draw = 3 in windows
    gutshot = not straight_draw and 4 in windows

    if flush_draw and straight_draw:
        return DrawType.STRAIGHT_FLUSH_DRAW
    if flush_draw:
        return DrawType.FLUSH_DRAW
    if straight_draw:
        return DrawType.OPEN_STRAIGHT_DRAW
    if gutshot:
        return DrawType.GUTSHOT
    return DrawType.NONE


def preflop_score(hole_cards: Sequence[Card], position: Position) -> float:
    """Additive preflop score in [0, 1]."""
    high = max(c.rank for c in hole_cards)
    low = min(c.rank for c in hole_cards)
    suited = hole_cards[0].suit == hole_cards[1].suit
    connected = high - low == 1
    one_gapper = high - low == 2

    if high == low:
        score = 0.5 + (high / 14) * 0.5
    else:
        score = (high / 14) * 0.5 + (low / 14) * 0.2
        if suited:
            score += 0.1
        if connected:
            score += 0.1
        elif one_gapper:
            score += 0.05
        if high >= 13 and low >= 10:
            score += 0.1

    if position.in_position:
        score += 0.1
        if suited and connected:
            score += 0.05
        if suited and high == 14:
            score += 0.05
    elif position == Position.MIDDLE:
        score += 0.05
    elif position == Position.EARLY:
        score -= 0.05
    elif position == Position.SMALL_BLIND:
        score -= 0.1
    elif position == Position.BIG_BLIND:
        score -= 0.05

    return max(0.0, min(1.0, score))


class PositionStrategy(BaseStrategy):
    """Seat- and street-relative thresholds without search."""

    name = "position_based"

    def __init__(self, config: Optional[PositionConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or PositionConfig()

    def adjust_for_position(self, hand_strength: float, position: Position,
                            street: Street) -> float:
        adjustment = self.config.strength_adjustment.get(position, 0.0)
        if street == Street.PREFLOP:
            adjustment *= self.config.preflop_scale
        elif street == Street.RIVER:
            adjustment *= self.config.river_scale
        return max(0.0, min(1.0, hand_strength + adjustment))

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        self.log("Starting position-based decision making")
        street = Street.from_board(community_cards)
        position = seat_position(player, state)
        hand_strength = self.hand_strength(player, community_cards)
        self.log(f"Current hand strength: {hand_strength:.4f}")
        self.log(f"Current game stage: {street.name.lower()}")
        self.log(f"Position: {position.value}")

        draw = identify_draw(player.hole_cards, community_cards)
        if draw != DrawType.NONE:
            self.log(f"Draw potential: {draw.value}")

        adjusted = self.adjust_for_position(hand_strength, position, street)
        self.log(f"Position-adjusted strength: {adjusted:.4f}")

        self.recorder.evaluation = {
            "hand_strength": hand_strength,
            "adjusted_strength": adjusted,
            "position": position.value,
            "draw": draw.value,
        }

        if street == Street.PREFLOP:
            return self._preflop(player, amount_to_call, pot_size, position), None
        return self._postflop(amount_to_call, pot_size, adjusted, position, draw, street), None

    def _preflop(self, player: PlayerView, amount_to_call: int, pot_size: int,
                 position: Position) -> Decision:
        score = preflop_score(player.hole_cards, position)
        self.log(f"Preflop hand score: {score:.2f}")
        seat = position.value

        if amount_to_call == 0:
            if score >= 0.6:
                amount = max(20, int(pot_size * 0.75))
                self.log(f"Strong hand in {seat} position, raising to {amount}")
                return Decision.raise_to(amount)
            if score >= 0.4:
                amount = max(20, int(pot_size * 0.5))
                self.log(f"Medium hand in {seat} position, raising to {amount}")
                return Decision.raise_to(amount)
            self.log(f"Weak hand in {seat} position, checking")
            return Decision.check()

        odds = pot_odds(amount_to_call, pot_size)
        self.log(f"Pot odds: {odds:.4f}")
        if score >= 0.7:
            amount = max(amount_to_call * 2, int(pot_size * 0.75))
            self.log(f"Strong hand in {seat} position, raising to {amount}")
            return Decision.raise_to(amount)
        if score >= 0.4 or (score >= 0.3 and odds <= 0.2):
            self.log(f"Decent hand in {seat} position, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if position == Position.BIG_BLIND and odds <= 0.1 and score >= 0.2:
            self.log(f"Good pot odds in the big blind, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        self.log(f"Weak hand in {seat} position, folding")
        return Decision.fold()

    def _postflop(self, amount_to_call: int, pot_size: int, strength: float,
                  position: Position, draw: DrawType, street: Street) -> Decision:
        effective = strength
        if draw != DrawType.NONE:
            draw_factor = DRAW_STRENGTH[draw] * street.cards_to_come / 2
            effective = max(effective, strength + draw_factor)
            self.log(f"Adjusted strength with draw potential: {effective:.4f}")

        odds = pot_odds(amount_to_call, pot_size)
        stage = street.name.lower()
        strong_draw = draw not in (DrawType.NONE, DrawType.GUTSHOT)
        self.log(f"Effective hand strength: {effective:.4f}, Pot odds: {odds:.4f}")

        if amount_to_call == 0:
            if effective >= 0.8:
                amount = max(20, int(pot_size * 0.75))
                self.log(f"Strong hand on {stage}, raising to {amount}")
                return Decision.raise_to(amount)
            if effective >= 0.65:
                amount = max(20, int(pot_size * 0.5))
                self.log(f"Good hand on {stage}, raising to {amount}")
                return Decision.raise_to(amount)
            if effective >= 0.5 and position.in_position:
                amount = max(20, int(pot_size * 0.5))
                self.log(f"Medium hand in position on {stage}, raising to {amount}")
                return Decision.raise_to(amount)
            if effective >= 0.4 and strong_draw:
                amount = max(20, int(pot_size * 0.5))
                self.log(f"Drawing hand on {stage}, semi-bluff raising to {amount}")
                return Decision.raise_to(amount)
            self.log(f"Checking on {stage} with hand strength {effective:.4f}")
            return Decision.check()

        if effective >= 0.8:
            amount = max(amount_to_call * 2, int(pot_size * 0.75))
            self.log(f"Strong hand on {stage}, raising to {amount}")
            return Decision.raise_to(amount)
        if effective >= 0.6:
            if position.in_position:
                amount = max(amount_to_call * 2, int(pot_size * 0.6))
                self.log(f"Good hand in position on {stage}, raising to {amount}")
                return Decision.raise_to(amount)
            self.log(f"Good hand out of position on {stage}, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if effective >= 0.4 and odds <= 0.2:
            self.log(f"Medium hand on {stage} with good pot odds, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if strong_draw:
            if DRAW_ODDS[draw] > odds:
                self.log(f"Drawing hand on {stage} with favorable odds, calling {amount_to_call}")
                return Decision.call(amount_to_call)
            if position.in_position:
                if self.rng.random() < self.config.semi_bluff_frequency:
                    amount = max(amount_to_call * 2, int(pot_size * 0.5))
                    self.log(f"Drawing hand in position on {stage}, semi-bluff raising to {amount}")
                    return Decision.raise_to(amount)
                self.log(f"Drawing hand on {stage}, calling {amount_to_call}")
                return Decision.call(amount_to_call)

        self.log(f"Weak hand on {stage}, folding")
        return Decision.fold()
