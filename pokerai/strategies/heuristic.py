"""
Rule-based heuristic strategy.

Combines a preflop hand formula, board texture, draw detection, a
lightweight read on opponent tendencies, implied odds and the
stack-to-pot ratio, then applies street-specific thresholds.
"""

import logging
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from pokerai.classifier.opponents import OpponentModelTable
from pokerai.game.cards import Card, Hand
from pokerai.game.state import (
    ActionType,
    Decision,
    GameStateSnapshot,
    PlayerView,
    Position,
    Street,
    seat_position,
)
from pokerai.game.trace import TraceNode
from .base import BaseStrategy
from .bayesian import longest_run
from .ev import pot_odds

logger = logging.getLogger(__name__)

# Draw equity (flush, open-ended, gutshot) by street
DRAW_EQUITY = {
    Street.FLOP: (0.35, 0.31, 0.17),
    Street.TURN: (0.19, 0.17, 0.09),
}


@dataclass
class HeuristicConfig:
    """Weights for the heuristic strategy."""
    history_weight: float = 0.7         # Stored models vs the current snapshot
    base_bluff_frequency: float = 0.1
    float_frequency: float = 0.3
    max_bluff_tendency: float = 0.8


@dataclass(frozen=True)
class BoardTexture:
    paired: bool = False
    suited: bool = False
    connected: bool = False
    high_card: bool = False
    draw_heavy: bool = False
    wetness: float = 0.0
    danger: float = 0.0


@dataclass(frozen=True)
class Draws:
    flush: bool = False
    open_ended: bool = False
    gutshot: bool = False

    @property
    def any(self) -> bool:
        return self.flush or self.open_ended or self.gutshot


@dataclass(frozen=True)
class OpponentTendencies:
    aggressiveness: float = 0.5
    passiveness: float = 0.5
    bluff_tendency: float = 0.5


def seat_group(position: Position) -> str:
    """Collapse a seat into early / middle / late / unknown."""
    if position in (Position.BUTTON, Position.LATE):
        return "late"
    if position == Position.MIDDLE:
        return "middle"
    if position == Position.UNKNOWN:
        return "unknown"
    return "early"


def analyze_board(community_cards: Sequence[Card]) -> BoardTexture:
    """Texture of a flop, turn or river board; preflop boards are blank."""
    if len(community_cards) < 3:
        return BoardTexture()

    rank_counts = Counter(c.rank for c in community_cards)
    paired = max(rank_counts.values()) >= 2
    trips = max(rank_counts.values()) >= 3
    suited = max(Counter(c.suit for c in community_cards).values()) >= 3

    ranks = sorted(c.rank for c in community_cards)
    gaps = [b - a for a, b in zip(ranks, ranks[1:])]
    connected = any(gap <= 2 for gap in gaps)
    straight_possible = any(gap <= 4 for gap in gaps)
    high_cards = sum(1 for r in ranks if r >= 10)

    wetness = (
        (0.4 if suited else 0.0)
        + (0.3 if connected else 0.0)
        + (0.2 if straight_possible else 0.0)
        - (0.2 if paired else 0.0)
        - (0.3 if trips else 0.0)
    )
    danger = (
        (0.3 if paired else 0.0)
        + (0.5 if trips else 0.0)
        + (0.3 if suited else 0.0)
        + (0.2 if connected else 0.0)
        + high_cards * 0.1
    )
    return BoardTexture(
        paired=paired,
        suited=suited,
        connected=connected,
        high_card=high_cards > 0,
        draw_heavy=wetness > 0.5,
        wetness=max(0.0, min(1.0, wetness)),
        danger=max(0.0, min(1.0, danger)),
    )


def find_draws(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> Draws:
    """Flush, open-ended and gutshot draws on the flop or turn."""
    if len(community_cards) not in (3, 4):
        return Draws()

    cards = list(hole_cards) + list(community_cards)
    flush = 4 in Counter(c.suit for c in cards).values()
    open_ended = longest_run(c.rank for c in cards) >= 4

    values = sorted({c.rank for c in cards})
    if 14 in values:
        values.insert(0, 1)
    gutshot = not open_ended and any(
        values[i + 3] - values[i] == 4 for i in range(len(values) - 3)
    )
    return Draws(flush=flush, open_ended=open_ended, gutshot=gutshot)


def preflop_strength(hand: Hand) -> float:
    """Starting-hand value before seat and table adjustments."""
    high, low = hand.high, hand.low
    if hand.is_pair:
        if low >= 10:
            return 0.8 + (low - 10) / 20
        return 0.5 + (low - 2) / 16

    if high == 14:
        if low >= 10:
            return 0.7 + (low - 10) / 40 + (0.05 if hand.is_suited else 0.0)
        return 0.3 + low / 24 + (0.1 if hand.is_suited else 0.0)

    if high >= 11 and low >= 10:
        return 0.5 + (high + low - 20) / 40 + (0.08 if hand.is_suited else 0.0)

    strength = 0.1 + high / 28
    if hand.is_suited:
        strength += 0.1
    if hand.gap == 1:
        strength += 0.08
    elif hand.gap == 2:
        strength += 0.04
    return strength


def implied_odds(chips: int, pot_size: int, draws: Draws,
                 tendencies: OpponentTendencies) -> float:
    """Implied odds multiplier for draws, in [0.5, 3]."""
    if not draws.any:
        return 1.0

    ratio = 1.0
    if draws.open_ended:
        ratio += 0.8
    elif draws.flush:
        ratio += 0.6
    else:
        ratio += 0.4

    # Passive opponents pay off more often
    ratio *= 1 + (tendencies.passiveness - 0.5)

    spr = chips / pot_size if pot_size > 0 else float("inf")
    if spr > 5:
        ratio *= 1.2
    elif spr < 2:
        ratio *= 0.8
    return max(0.5, min(3.0, ratio))


class HeuristicStrategy(BaseStrategy):
    """
    Street-by-street rules over hand, board and table reads.

    Keeps its own opponent model table, so each agent needs its own
    instance.
    """

    name = "heuristic"

    def __init__(self, config: Optional[HeuristicConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or HeuristicConfig()
        self.models = OpponentModelTable()

    def read_opponents(self, state: GameStateSnapshot) -> OpponentTendencies:
        """
        Tendencies from the opponents' last actions, blended with the
        models accumulated over earlier decisions.
        """
        try:
            opponents = state.opponents
            if opponents is None:
                raise AttributeError("snapshot has no opponent list")
            actions = [o.last_action.action for o in opponents if o.last_action is not None]
            self.models.observe_all(opponents, state.pot, len(state.community_cards))
        except (AttributeError, TypeError) as exc:
            logger.warning("Skipping opponent read: %s", exc)
            return OpponentTendencies()

        aggressiveness = passiveness = bluff = 0.5
        if actions:
            raises = actions.count(ActionType.RAISE)
            passive = actions.count(ActionType.CALL) + actions.count(ActionType.CHECK)
            folds = actions.count(ActionType.FOLD)
            aggressiveness = raises / len(actions)
            passiveness = passive / len(actions)
            bluff = min(self.config.max_bluff_tendency, (raises - folds) / len(actions) + 0.3)

        models = [m for m in (self.models.get(o.player_id) for o in opponents)
                  if m is not None and m.observations > 0]
        if models:
            weight = self.config.history_weight
            aggressiveness = (sum(m.aggression_factor for m in models) / len(models) * weight
                              + aggressiveness * (1 - weight))
            passiveness = (sum(m.call_frequency for m in models) / len(models) * weight
                           + passiveness * (1 - weight))
            bluff = (sum(m.bluff_frequency for m in models) / len(models) * weight
                     + bluff * (1 - weight))

        return OpponentTendencies(aggressiveness, passiveness, bluff)

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        self.log("Starting heuristic decision making")
        hand_strength = self.hand_strength(player, community_cards)
        street = Street.from_board(community_cards)
        seat = seat_group(seat_position(player, state))
        texture = analyze_board(community_cards)
        draws = find_draws(player.hole_cards, community_cards)
        tendencies = self.read_opponents(state)
        implied = implied_odds(player.chips, pot_size, draws, tendencies)
        spr = player.chips / pot_size if pot_size > 0 else float("inf")

        self.log(f"Current hand strength: {hand_strength:.4f}")
        self.log(f"Current game stage: {street.name.lower()}")
        self.log(f"Position: {seat}")
        self.log(f"Pot odds: {pot_odds(amount_to_call, pot_size):.4f}")
        self.log(f"Board texture: wetness {texture.wetness:.2f}, danger {texture.danger:.2f}")
        if draws.flush:
            self.log("Has flush draw")
        if draws.open_ended:
            self.log("Has open-ended straight draw")
        elif draws.gutshot:
            self.log("Has straight draw")
        self.log(f"Opponent tendencies: aggressiveness {tendencies.aggressiveness:.2f}, "
                 f"passiveness {tendencies.passiveness:.2f}, "
                 f"bluff tendency {tendencies.bluff_tendency:.2f}")
        self.log(f"Implied odds ratio: {implied:.2f}")
        self.log(f"Stack-to-pot ratio: {spr:.2f}")

        self.recorder.evaluation = {
            "hand_strength": hand_strength,
            "position": seat,
            "board": asdict(texture),
            "draws": asdict(draws),
            "opponents": asdict(tendencies),
            "implied_odds": implied,
        }

        if street == Street.PREFLOP:
            decision = self._preflop(player, amount_to_call, pot_size, seat, tendencies, spr)
        elif street == Street.RIVER:
            decision = self._river(player, amount_to_call, pot_size, hand_strength, texture, seat)
        else:
            decision = self._postflop(player, amount_to_call, pot_size, hand_strength, street,
                                      texture, draws, seat, tendencies, implied)
        return decision, None

    def _preflop(self, player: PlayerView, amount_to_call: int, pot_size: int, seat: str,
                 tendencies: OpponentTendencies, spr: float) -> Decision:
        hand = Hand.from_cards(player.hole_cards)
        strength = preflop_strength(hand)
        connected = hand.gap == 1

        strength += {"early": -0.08, "middle": -0.04, "late": 0.06}.get(seat, 0.0)
        if tendencies.passiveness > 0.7:
            strength += 0.05
        elif tendencies.aggressiveness > 0.7:
            strength -= 0.05
        if spr > 20:
            if hand.is_suited or connected:
                strength += 0.05
        elif spr < 10:
            if hand.is_pair or hand.high >= 12:
                strength += 0.03
            elif hand.is_suited or connected:
                strength -= 0.04
        self.log(f"Preflop hand strength for {hand.canonical}: {strength:.4f}")

        if amount_to_call == 0:
            if strength > 0.8:
                amount = max(40, pot_size * 3)
                self.log(f"Premium hand, raising to {amount}")
                return Decision.raise_to(amount)
            if strength > 0.65:
                amount = max(30, int(pot_size * 2.5))
                self.log(f"Strong hand, raising to {amount}")
                return Decision.raise_to(amount)
            if strength > 0.5:
                amount = max(20, pot_size * 2)
                self.log(f"Playable hand, raising to {amount}")
                return Decision.raise_to(amount)
            if strength > 0.35 and seat == "late":
                amount = max(10, pot_size)
                self.log(f"Speculative hand in late position, raising to {amount}")
                return Decision.raise_to(amount)
            self.log("Weak hand, checking")
            return Decision.check()

        odds = pot_odds(amount_to_call, pot_size)
        if strength > 0.85:
            amount = max(amount_to_call * 3, pot_size)
            self.log(f"Premium hand vs bet, raising to {amount}")
            return Decision.raise_to(amount)
        if strength > 0.7:
            amount = max(int(amount_to_call * 2.5), int(pot_size * 0.75))
            self.log(f"Strong hand vs bet, raising to {amount}")
            return Decision.raise_to(amount)
        if strength > 0.5:
            self.log(f"Good hand, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if strength > 0.4 and odds < 0.15:
            self.log(f"Speculative hand with good pot odds, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if strength > 0.3 and seat == "late" and odds < 0.1:
            self.log(f"Marginal hand in late position, cheap call of {amount_to_call}")
            return Decision.call(amount_to_call)
        self.log("Weak hand against bet, folding")
        return Decision.fold()

    def _postflop(self, player: PlayerView, amount_to_call: int, pot_size: int,
                  hand_strength: float, street: Street, texture: BoardTexture, draws: Draws,
                  seat: str, tendencies: OpponentTendencies, implied: float) -> Decision:
        stage = street.name.lower()
        # Draw boosts shrink with one card to come
        scale = 1.0 if street == Street.FLOP else 0.5
        effective = hand_strength
        if draws.flush:
            effective += 0.15 * scale
        if draws.open_ended:
            effective += 0.12 * scale
        elif draws.gutshot:
            effective += 0.08 * scale
        if texture.paired and hand_strength < 0.6:
            effective -= 0.05
        if texture.danger > 0.7 and hand_strength < 0.7:
            effective -= 0.1
        if seat == "late":
            effective += 0.05
        elif seat == "early":
            effective -= 0.03
        self.log(f"Effective hand strength on {stage}: {effective:.4f}")

        flush_eq, open_eq, gutshot_eq = DRAW_EQUITY[street]
        draw_equity = max(
            flush_eq if draws.flush else 0.0,
            open_eq if draws.open_ended else 0.0,
            gutshot_eq if draws.gutshot else 0.0,
        )
        adjusted_equity = draw_equity * implied
        odds = pot_odds(amount_to_call, pot_size)

        bluff_frequency = self.config.base_bluff_frequency
        if tendencies.passiveness > 0.7:
            bluff_frequency += 0.1
        if texture.wetness > 0.7:
            bluff_frequency -= 0.05

        if amount_to_call == 0:
            if effective > 0.7:
                amount = max(int(pot_size * 0.7), 20)
                self.log(f"Strong hand on {stage}, betting {amount}")
                return Decision.raise_to(amount)
            if effective > 0.5 or draws.flush or draws.open_ended:
                amount = max(int(pot_size * 0.5), 15)
                self.log(f"Medium hand or draw on {stage}, betting {amount}")
                return Decision.raise_to(amount)
            if texture.wetness < 0.3 and seat == "late" and self.rng.random() < bluff_frequency:
                amount = max(int(pot_size * 0.6), 15)
                self.log(f"Bluffing on dry {stage} in position, betting {amount}")
                return Decision.raise_to(amount)
            self.log("Checking with weak hand or out of position")
            return Decision.check()

        if effective > 0.75:
            amount = min(player.chips, max(int(amount_to_call * 2.5), int(pot_size * 0.8)))
            self.log(f"Strong hand vs bet on {stage}, raising to {amount}")
            return Decision.raise_to(amount)
        if effective > 0.6:
            self.log(f"Good hand, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if adjusted_equity > odds + 0.05:
            self.log(f"+EV draw with implied odds, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if effective > 0.4 and odds < 0.2:
            self.log(f"Marginal hand with acceptable pot odds, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        if (seat == "late" and tendencies.bluff_tendency > 0.7
                and amount_to_call < pot_size * 0.3
                and self.rng.random() < self.config.float_frequency):
            self.log(f"Floating against likely bluff in position, calling {amount_to_call}")
            return Decision.call(amount_to_call)
        self.log("Folding weak hand against bet")
        return Decision.fold()

    def _river(self, player: PlayerView, amount_to_call: int, pot_size: int,
               hand_strength: float, texture: BoardTexture, seat: str) -> Decision:
        """Made hands only: no draws left, value bet or give up."""
        strength = hand_strength
        if texture.danger > 0.7 and hand_strength < 0.7:
            strength -= 0.1
        if seat == "late":
            strength += 0.05
        odds = pot_odds(amount_to_call, pot_size)
        self.log(f"River hand strength: {strength:.4f}")

        if strength > 0.8:
            if amount_to_call == 0:
                amount = int(pot_size * 0.75)
                self.log(f"Strong hand on river, betting {amount}")
                return Decision.raise_to(amount)
            amount = min(player.chips, max(int(amount_to_call * 2.5), pot_size))
            self.log(f"Strong hand vs river bet, raising to {amount}")
            return Decision.raise_to(amount)
        if strength > 0.6:
            if amount_to_call == 0:
                amount = int(pot_size * 0.5)
                self.log(f"Good hand on river, betting {amount}")
                return Decision.raise_to(amount)
            if odds <= 0.3:
                self.log(f"Good hand on river, calling {amount_to_call}")
                return Decision.call(amount_to_call)
        elif strength > 0.4:
            if amount_to_call == 0:
                self.log("Medium hand on river, checking")
                return Decision.check()
            if odds <= 0.15:
                self.log(f"Medium hand with good pot odds, calling {amount_to_call}")
                return Decision.call(amount_to_call)

        if amount_to_call == 0:
            self.log("Weak hand on river, checking")
            return Decision.check()
        self.log("Weak hand against river bet, folding")
        return Decision.fold()
