"""
Kelly-criterion bet sizing.

Hand strength is turned into a win probability, the pot offers the odds,
and the Kelly stake fraction of our stack decides between folding,
calling and raising. Stakes use half-Kelly by default.
"""

from dataclasses import dataclass
from typing import Optional

from pokerai.game.cards import Card
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView, Street
from pokerai.game.trace import TraceNode
from .base import BaseStrategy
from .ev import pot_odds
from .position import DrawType, identify_draw

# Chance of completing a draw with one card to come
DRAW_HIT_PROBABILITY = {
    DrawType.STRAIGHT_FLUSH_DRAW: 0.19,
    DrawType.FLUSH_DRAW: 0.19,
    DrawType.OPEN_STRAIGHT_DRAW: 0.17,
    DrawType.GUTSHOT: 0.085,
}


@dataclass
class KellyConfig:
    """Stake scaling and thresholds for Kelly sizing."""
    kelly_multiplier: float = 0.5          # Half-Kelly
    opponent_discount: float = 0.9         # Per extra opponent
    min_win_probability: float = 0.05
    max_win_probability: float = 0.95
    check_threshold: float = 0.05
    min_bet: int = 20
    bet_pot_fraction: float = 0.75
    call_tolerance: float = 0.7            # Stake may fall this far short of a +EV call
    raise_trigger: float = 2.0             # Stake over call that turns a call into a raise
    draw_divisor: float = 3.0


def kelly_fraction(win_probability: float, odds: float) -> float:
    """
    Full Kelly stake fraction.

    Args:
        win_probability: Chance the stake is won
        odds: Decimal odds, chips returned per chip staked

    Returns:
        Fraction of the bankroll to stake; negative when the bet loses
    """
    if odds <= 0:
        return 0.0
    return (win_probability * odds - (1 - win_probability)) / odds


def win_probability(hand_strength: float, street: Street, opponents: int,
                    config: KellyConfig) -> float:
    """Discount hand strength for extra opponents and cards still to come."""
    adjusted = hand_strength * config.opponent_discount ** (opponents - 1)
    if street == Street.PREFLOP:
        if adjusted > 0.8:
            adjusted = min(0.9, adjusted * 0.95)
        elif adjusted > 0.6:
            adjusted *= 0.85
        else:
            adjusted *= 0.7
    elif street == Street.FLOP:
        adjusted *= 0.9
    elif street == Street.TURN:
        adjusted *= 0.95
    return max(config.min_win_probability, min(config.max_win_probability, adjusted))


def raise_multiplier(kelly: float, win_prob: float, street: Street) -> float:
    """Raise size as a multiple of the call, in [2, 5]."""
    multiplier = 2 + kelly * 5
    if street == Street.PREFLOP:
        multiplier *= 0.8
    elif street == Street.RIVER:
        multiplier *= 1.2
    if win_prob > 0.8:
        multiplier *= 1.3
    elif win_prob < 0.6:
        multiplier *= 0.8
    return max(2.0, min(5.0, multiplier))


def draw_kelly(draw: DrawType, pot_size: int, call_amount: int, divisor: float = 3.0) -> float:
    """
    Kelly fraction for chasing a draw, counting one more call as implied odds.

    Scaled down by ``divisor`` since the odds are speculative.
    """
    hit = DRAW_HIT_PROBABILITY.get(draw, 0.0)
    if hit == 0.0 or call_amount <= 0:
        return 0.0
    implied = (pot_size + call_amount * 2) / call_amount
    return max(0.0, kelly_fraction(hit, implied) / divisor)


class KellyStrategy(BaseStrategy):
    """Stakes a Kelly fraction of the stack against the odds the pot lays."""

    name = "kelly_criterion"

    def __init__(self, config: Optional[KellyConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or KellyConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        cfg = self.config
        self.log("Starting Kelly Criterion decision making")
        street = Street.from_board(community_cards)
        hand_strength = self.hand_strength(player, community_cards)
        opponents = self.opponent_count(state)
        win_prob = win_probability(hand_strength, street, opponents, cfg)
        self.log(f"Current hand strength: {hand_strength:.4f}")
        self.log(f"Win probability against {opponents} opponents: {win_prob:.4f}")

        if amount_to_call <= 0:
            decision, kelly = self._free_action(player, pot_size, win_prob)
        else:
            decision, kelly = self._facing_bet(player, amount_to_call, community_cards,
                                               pot_size, win_prob, street)

        self.recorder.evaluation = {
            "hand_strength": hand_strength,
            "win_probability": win_prob,
            "kelly_fraction": kelly,
        }
        return decision, None

    def _free_action(self, player: PlayerView, pot_size: int,
                     win_prob: float) -> tuple[Decision, float]:
        """Price the intended bet as a call of the same size."""
        cfg = self.config
        bet = max(cfg.min_bet, int(pot_size * cfg.bet_pot_fraction))
        odds = (pot_size + bet) / bet
        kelly = max(0.0, kelly_fraction(win_prob, odds) * cfg.kelly_multiplier)
        self.log(f"Kelly fraction for a {bet} bet: {kelly:.4f}")

        if kelly <= cfg.check_threshold:
            self.log("Kelly stake too small, checking")
            return Decision.check(), kelly

        amount = min(int(player.chips * kelly), bet)
        self.log(f"Betting {amount} ({kelly * 100:.1f}% of stack)")
        return Decision.raise_to(amount), kelly

    def _facing_bet(self, player: PlayerView, amount_to_call: int,
                    community_cards: list[Card], pot_size: int, win_prob: float,
                    street: Street) -> tuple[Decision, float]:
        cfg = self.config
        odds = pot_odds(amount_to_call, pot_size)
        kelly = max(0.0, kelly_fraction(win_prob, 1 / odds) * cfg.kelly_multiplier)
        self.log(f"Pot odds: {odds:.4f}, Kelly fraction: {kelly:.4f}")

        if kelly <= 0:
            return self._chase_draw(player, amount_to_call, community_cards, pot_size), kelly

        stake = int(player.chips * kelly)
        self.log(f"Kelly stake: {stake}")

        if stake < amount_to_call:
            call_value = win_prob * pot_size - (1 - win_prob) * amount_to_call
            if stake >= amount_to_call * cfg.call_tolerance and call_value > 0:
                self.log(f"Stake close to the call and call EV {call_value:.2f} is positive, "
                         f"calling {amount_to_call}")
                return Decision.call(amount_to_call), kelly
            return self._chase_draw(player, amount_to_call, community_cards, pot_size), kelly

        if stake > amount_to_call * cfg.raise_trigger:
            multiplier = raise_multiplier(kelly, win_prob, street)
            amount = min(player.chips, max(amount_to_call * 2, int(amount_to_call * multiplier)))
            self.log(f"Stake well above the call, raising to {amount} (x{multiplier:.2f})")
            return Decision.raise_to(amount), kelly

        self.log(f"Stake covers the call, calling {amount_to_call}")
        return Decision.call(amount_to_call), kelly

    def _chase_draw(self, player: PlayerView, amount_to_call: int,
                    community_cards: list[Card], pot_size: int) -> Decision:
        """Last chance to continue: a draw whose implied odds justify the call."""
        draw = identify_draw(player.hole_cards, community_cards)
        if draw != DrawType.NONE:
            kelly = draw_kelly(draw, pot_size, amount_to_call, self.config.draw_divisor)
            self.log(f"Draw {draw.value}: Kelly fraction with implied odds {kelly:.4f}")
            if int(player.chips * kelly) >= amount_to_call:
                self.log(f"Implied odds justify chasing, calling {amount_to_call}")
                return Decision.call(amount_to_call)
        self.log("Negative Kelly edge, folding")
        return Decision.fold()
