"""
Simple threshold strategies.

Reference opponents and baselines: fixed hand-strength cut-offs with no
search, no rollouts and no opponent modelling. ``random`` ignores the
cards entirely and ``aggressive``/``conservative`` skew the same
thresholds in opposite directions.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from pokerai.game.cards import Card, Hand
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView, Street
from pokerai.game.trace import TraceNode
from .base import BaseStrategy
from .bayesian import longest_run
from .ev import pot_odds


@dataclass
class BasicConfig:
    """Knobs shared by the simple strategies; each reads only its own."""
    # random
    bet_probability: float = 0.5
    fold_probability: float = 0.25
    raise_probability: float = 0.4
    # aggressive
    strength_inflation: float = 1.5
    bluff_frequency: float = 0.7
    # intermediate
    draw_bonus: float = 0.25


class PreflopCategory(Enum):
    PREMIUM = "premium"
    STRONG = "strong"
    MEDIUM = "medium"
    WEAK = "weak"


def preflop_category(hand: Hand) -> PreflopCategory:
    """Bucket a starting hand for the advanced baseline."""
    high, low = hand.high, hand.low
    if hand.is_pair:
        if low >= 10:
            return PreflopCategory.PREMIUM
        if low >= 7:
            return PreflopCategory.STRONG
        return PreflopCategory.MEDIUM
    if low >= 13:
        return PreflopCategory.PREMIUM
    if high >= 12 and low >= 10:
        return PreflopCategory.STRONG
    if hand.is_suited:
        if high >= 12 and low >= 9:
            return PreflopCategory.STRONG
        if high >= 10 and low >= 9:
            return PreflopCategory.MEDIUM
        if hand.gap <= 1 and low >= 5:
            return PreflopCategory.MEDIUM
        return PreflopCategory.WEAK
    if hand.gap <= 1 and low >= 9:
        return PreflopCategory.MEDIUM
    return PreflopCategory.WEAK


def has_four_flush(cards: Sequence[Card]) -> bool:
    return 4 in Counter(c.suit for c in cards).values()


class _SimpleStrategy(BaseStrategy):
    """Shared constructor and entry point for the threshold strategies."""

    def __init__(self, config: Optional[BasicConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or BasicConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        self.log(f"Starting {self.name} decision making")
        hand_strength = self.hand_strength(player, community_cards)
        self.log(f"Current hand strength: {hand_strength:.4f}")
        self.recorder.evaluation = {"hand_strength": hand_strength}
        decision = self.choose(player, amount_to_call, community_cards, pot_size, hand_strength)
        return decision, None

    def choose(self, player: PlayerView, amount_to_call: int, community_cards: list[Card],
               pot_size: int, hand_strength: float) -> Decision:
        raise NotImplementedError


class BasicStrategy(_SimpleStrategy):
    """Three strength cut-offs and fixed sizes."""

    name = "basic"

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        if amount_to_call == 0:
            if hand_strength > 0.5:
                self.log("Decent hand, betting 30")
                return Decision.raise_to(30)
            self.log("Weak hand, checking")
            return Decision.check()

        if hand_strength > 0.7:
            amount = amount_to_call * 3
            self.log(f"Strong hand, raising to {amount}")
            return Decision.raise_to(amount)
        if hand_strength > 0.4:
            self.log(f"Playable hand, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if hand_strength > 0.2 and amount_to_call <= 30:
            self.log(f"Cheap call of {amount_to_call}")
            return Decision.call(amount_to_call)
        self.log("Weak hand, folding")
        return Decision.fold()


class IntermediateStrategy(_SimpleStrategy):
    """Adds pot-relative sizing, pot odds and a flat draw bonus."""

    name = "intermediate"

    def draw_potential(self, player: PlayerView, community_cards: list[Card]) -> float:
        if len(community_cards) >= 5:
            return 0.0
        cards = list(player.hole_cards) + community_cards
        if has_four_flush(cards) or longest_run(c.rank for c in cards) >= 4:
            self.log("Detected draw")
            return self.config.draw_bonus
        return 0.0

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        draw = self.draw_potential(player, community_cards)
        odds = pot_odds(amount_to_call, pot_size)

        if amount_to_call == 0:
            if hand_strength > 0.5 or (hand_strength > 0.3 and draw > 0):
                amount = max(30, int(pot_size * 0.6))
                self.log(f"Betting {amount}")
                return Decision.raise_to(amount)
            self.log("Checking")
            return Decision.check()

        if hand_strength > 0.7:
            amount = max(int(amount_to_call * 2.5), int(pot_size * 0.8))
            self.log(f"Strong hand, raising to {amount}")
            return Decision.raise_to(amount)
        if hand_strength > 0.4 or hand_strength + draw > odds:
            if hand_strength > 0.6 and amount_to_call < pot_size * 0.4:
                amount = max(amount_to_call * 2, int(pot_size * 0.6))
                self.log(f"Good hand against a small bet, raising to {amount}")
                return Decision.raise_to(amount)
            self.log(f"Calling {amount_to_call} (pot odds {odds:.4f})")
            return Decision.call(amount_to_call)
        if amount_to_call <= pot_size * 0.2 and hand_strength > 0.2:
            self.log(f"Small bet, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        self.log("Folding")
        return Decision.fold()


class AdvancedStrategy(_SimpleStrategy):
    """Preflop hand buckets and street-scaled draw values."""

    name = "advanced"

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        street = Street.from_board(community_cards)
        if street == Street.PREFLOP:
            return self._preflop(player, amount_to_call, pot_size)
        return self._postflop(player, amount_to_call, community_cards, pot_size,
                              hand_strength, street)

    def _preflop(self, player: PlayerView, amount_to_call: int, pot_size: int) -> Decision:
        hand = Hand.from_cards(player.hole_cards)
        category = preflop_category(hand)
        self.log(f"Preflop hand {hand.canonical}: {category.value}")

        if amount_to_call == 0:
            if category == PreflopCategory.PREMIUM:
                return Decision.raise_to(max(40, pot_size * 3))
            if category == PreflopCategory.STRONG:
                return Decision.raise_to(max(30, pot_size * 2))
            if category == PreflopCategory.MEDIUM:
                return Decision.raise_to(max(20, pot_size))
            return Decision.check()

        if category == PreflopCategory.PREMIUM:
            return Decision.raise_to(max(amount_to_call * 3, pot_size))
        if category == PreflopCategory.STRONG:
            if amount_to_call < pot_size * 0.2:
                return Decision.raise_to(max(int(amount_to_call * 2.5), int(pot_size * 0.75)))
            return Decision.call(amount_to_call)
        if category == PreflopCategory.MEDIUM and amount_to_call < pot_size * 0.15:
            return Decision.call(amount_to_call)
        return Decision.fold()

    def _postflop(self, player: PlayerView, amount_to_call: int, community_cards: list[Card],
                  pot_size: int, hand_strength: float, street: Street) -> Decision:
        draw = 0.0
        if street != Street.RIVER:
            cards = list(player.hole_cards) + community_cards
            on_flop = street == Street.FLOP
            if has_four_flush(cards):
                draw = 0.3 if on_flop else 0.15
                self.log("Detected flush draw")
            if longest_run(c.rank for c in cards) == 4:
                draw = max(draw, 0.35 if on_flop else 0.2)
                self.log("Detected open-ended straight draw")

        effective = hand_strength + draw
        odds = pot_odds(amount_to_call, pot_size)
        self.log(f"Effective hand value: {effective:.4f}")

        if amount_to_call == 0:
            if hand_strength > 0.8:
                return Decision.raise_to(max(int(pot_size * 0.75), 20))
            if hand_strength > 0.6 or (effective > 0.7 and street != Street.RIVER):
                return Decision.raise_to(max(int(pot_size * 0.5), 15))
            if hand_strength > 0.4 or draw > 0.25:
                return Decision.raise_to(max(int(pot_size * 0.3), 10))
            return Decision.check()

        if hand_strength > 0.8:
            return Decision.raise_to(max(int(amount_to_call * 2.5), int(pot_size * 0.75)))
        if (hand_strength > 0.6 or effective > 0.7) and amount_to_call < pot_size * 0.5:
            return Decision.raise_to(max(amount_to_call * 2, int(pot_size * 0.6)))
        if effective > odds + 0.1:
            return Decision.call(amount_to_call)
        return Decision.fold()


class RandomStrategy(_SimpleStrategy):
    """Uniform choice among a randomly assembled option list; ignores the cards."""

    name = "random"

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        cfg = self.config
        if amount_to_call == 0:
            options = [Decision.check()]
            if self.rng.random() < cfg.bet_probability:
                options.append(Decision.raise_to(int(self.rng.integers(10, 60))))
        else:
            options = [Decision.call(amount_to_call)]
            if self.rng.random() < cfg.fold_probability:
                options.append(Decision.fold())
            if self.rng.random() < cfg.raise_probability:
                options.append(Decision.raise_to(amount_to_call * int(self.rng.integers(2, 5))))

        choice = options[int(self.rng.integers(len(options)))]
        self.log(f"Picked {choice} from {len(options)} options")
        return choice


class ConservativeStrategy(_SimpleStrategy):
    """Tight: high cut-offs and small bets."""

    name = "conservative"

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        if amount_to_call == 0:
            if hand_strength > 0.6:
                self.log("Strong hand, small bet of 20")
                return Decision.raise_to(20)
            return Decision.check()

        if hand_strength > 0.75:
            return Decision.raise_to(amount_to_call * 2)
        if hand_strength > 0.5:
            return Decision.call(amount_to_call)
        if hand_strength > 0.35 and amount_to_call <= 20:
            return Decision.call(amount_to_call)
        if amount_to_call <= 10:
            self.log("Very cheap call")
            return Decision.call(amount_to_call)
        return Decision.fold()


class AggressiveStrategy(_SimpleStrategy):
    """Loose: inflated strength, frequent bets and pot-sized raises."""

    name = "aggressive"

    def choose(self, player, amount_to_call, community_cards, pot_size, hand_strength):
        cfg = self.config
        inflated = min(1.0, hand_strength * cfg.strength_inflation)
        self.log(f"Inflated hand strength: {inflated:.4f}")

        if amount_to_call == 0:
            if hand_strength > 0.2 or self.rng.random() < cfg.bluff_frequency:
                amount = max(40, int(pot_size * 0.7))
                self.log(f"Betting {amount}")
                return Decision.raise_to(amount)
            return Decision.check()

        if inflated > 0.4 or pot_size > 100:
            amount = max(amount_to_call * 3, int(pot_size * 0.8))
            self.log(f"Raising to {amount}")
            return Decision.raise_to(amount)
        if inflated > 0.2 or amount_to_call <= pot_size * 0.3:
            return Decision.call(amount_to_call)
        return Decision.fold()
