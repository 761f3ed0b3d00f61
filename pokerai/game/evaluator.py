"""
Hand ranking and strength estimation.

The evaluator ranks any 5-7 card set into its best five-card hand with
ordered tie-break cards. Strength helpers turn those results into the
[0, 1] signals the strategies consume.
"""

from collections import defaultdict
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence

from treys import Evaluator

from .cards import Card, RANK_NAME


class HandCategory(IntEnum):
    """Hand categories, ordered weakest to strongest."""
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").lower()


# Coarse showdown win rates per category
CATEGORY_WIN_PROBABILITY = {
    HandCategory.ROYAL_FLUSH: 0.99,
    HandCategory.STRAIGHT_FLUSH: 0.98,
    HandCategory.FOUR_OF_A_KIND: 0.95,
    HandCategory.FULL_HOUSE: 0.90,
    HandCategory.FLUSH: 0.85,
    HandCategory.STRAIGHT: 0.80,
    HandCategory.THREE_OF_A_KIND: 0.70,
    HandCategory.TWO_PAIR: 0.60,
    HandCategory.PAIR: 0.45,
    HandCategory.HIGH_CARD: 0.25,
}

# Multiplier keyed by number of visible community cards
STAGE_MULTIPLIER = {0: 0.5, 3: 0.8, 4: 0.9, 5: 1.0}


@dataclass(frozen=True)
class HandResult:
    """
    Best five-card hand found in a card set.

    ``cards`` holds the deciding cards in comparison order and ``ranks``
    their comparison values (the ace of a wheel counts as 1).
    """
    category: Optional[HandCategory]
    cards: tuple[Card, ...]
    ranks: tuple[int, ...]
    description: str

    @property
    def category_rank(self) -> int:
        return -1 if self.category is None else int(self.category)

    @property
    def is_complete(self) -> bool:
        return self.category is not None

    def __str__(self) -> str:
        return self.description


INCOMPLETE = HandResult(
    category=None,
    cards=(),
    ranks=(),
    description="Not enough cards",
)


def _display(rank: int) -> str:
    return {11: "J", 12: "Q", 13: "K", 14: "A"}.get(rank, str(rank))


def _result(category: HandCategory, cards: list[Card], description: str,
            ranks: Optional[list[int]] = None) -> HandResult:
    if ranks is None:
        ranks = [c.rank for c in cards]
    return HandResult(category, tuple(cards), tuple(ranks), description)


def _find_straight(cards: list[Card]) -> Optional[tuple[list[Card], list[int]]]:
    """
    Find the highest straight in rank-descending cards.

    Returns:
        (cards, comparison ranks) or None
    """
    by_rank: dict[int, Card] = {}
    for card in cards:
        by_rank.setdefault(card.rank, card)

    for high in range(14, 5, -1):
        run = list(range(high, high - 5, -1))
        if all(r in by_rank for r in run):
            return [by_rank[r] for r in run], run

    # Wheel: ace plays low
    if all(r in by_rank for r in (14, 5, 4, 3, 2)):
        wheel = [by_rank[r] for r in (5, 4, 3, 2, 14)]
        return wheel, [5, 4, 3, 2, 1]

    return None


def _group_by_rank(cards: list[Card]) -> list[list[Card]]:
    """Rank groups, largest count first, then highest rank."""
    groups: dict[int, list[Card]] = defaultdict(list)
    for card in cards:
        groups[card.rank].append(card)
    return sorted(groups.values(), key=lambda g: (len(g), g[0].rank), reverse=True)


def _kickers(cards: list[Card], used: list[Card], count: int) -> list[Card]:
    used_ranks = {c.rank for c in used}
    return [c for c in cards if c.rank not in used_ranks][:count]


def evaluate(cards: Sequence[Card]) -> HandResult:
    """
    Rank a 5-7 card set into its best five-card hand.

    Categories are checked strongest first and the first match wins.

    Args:
        cards: Hole cards plus community cards

    Returns:
        HandResult, or the INCOMPLETE sentinel for fewer than 5 cards

    Raises:
        ValueError: If called with no cards or with duplicate cards
    """
    if not cards:
        raise ValueError("Cannot evaluate an empty card set")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards detected")
    if len(cards) < 5:
        return INCOMPLETE

    ordered = sorted(cards, key=lambda c: c.rank, reverse=True)

    # Straight flush / royal flush
    suited: dict[int, list[Card]] = defaultdict(list)
    for card in ordered:
        suited[card.suit].append(card)
    flush_cards = next((s for s in suited.values() if len(s) >= 5), None)

    if flush_cards is not None:
        straight = _find_straight(flush_cards)
        if straight is not None:
            run, ranks = straight
            if ranks[0] == 14:
                return _result(HandCategory.ROYAL_FLUSH, run, "Royal Flush")
            return _result(
                HandCategory.STRAIGHT_FLUSH, run,
                f"Straight Flush, {RANK_NAME[ranks[0]]}-high", ranks,
            )

    groups = _group_by_rank(ordered)

    if len(groups[0]) == 4:
        quads = groups[0]
        kicker = _kickers(ordered, quads, 1)
        return _result(
            HandCategory.FOUR_OF_A_KIND, quads + kicker,
            f"Four of a Kind, {_display(quads[0].rank)}s",
        )

    pairable = [g for g in groups[1:] if len(g) >= 2]
    if len(groups[0]) >= 3 and pairable:
        trips = groups[0][:3]
        pair = max(pairable, key=lambda g: g[0].rank)[:2]
        return _result(
            HandCategory.FULL_HOUSE, trips + pair,
            f"Full House, {_display(trips[0].rank)}s over {_display(pair[0].rank)}s",
        )

    if flush_cards is not None:
        top = flush_cards[:5]
        return _result(
            HandCategory.FLUSH, top, f"Flush, {RANK_NAME[top[0].rank]}-high",
        )

    straight = _find_straight(ordered)
    if straight is not None:
        run, ranks = straight
        return _result(
            HandCategory.STRAIGHT, run, f"Straight, {RANK_NAME[ranks[0]]}-high", ranks,
        )

    if len(groups[0]) == 3:
        trips = groups[0]
        return _result(
            HandCategory.THREE_OF_A_KIND, trips + _kickers(ordered, trips, 2),
            f"Three of a Kind, {_display(trips[0].rank)}s",
        )

    if len(groups[0]) == 2 and len(groups[1]) == 2:
        pairs = groups[0] + groups[1]
        return _result(
            HandCategory.TWO_PAIR, pairs + _kickers(ordered, pairs, 1),
            f"Two Pair, {_display(groups[0][0].rank)}s and {_display(groups[1][0].rank)}s",
        )

    if len(groups[0]) == 2:
        pair = groups[0]
        return _result(
            HandCategory.PAIR, pair + _kickers(ordered, pair, 3),
            f"Pair of {_display(pair[0].rank)}s",
        )

    return _result(
        HandCategory.HIGH_CARD, ordered[:5], f"High Card: {_display(ordered[0].rank)}",
    )


def compare_hands(hand1: HandResult, hand2: HandResult) -> int:
    """
    Compare two evaluated hands.

    Returns:
        Positive if hand1 wins, negative if hand2 wins, 0 on an exact tie
    """
    if hand1.category_rank != hand2.category_rank:
        return hand1.category_rank - hand2.category_rank

    for r1, r2 in zip(hand1.ranks, hand2.ranks):
        if r1 != r2:
            return r1 - r2

    return 0


def calculate_win_probability(result: HandResult, community_cards: Sequence[Card]) -> float:
    """
    Coarse win probability for a made hand, scaled by street.

    Args:
        result: Evaluated hand
        community_cards: Visible board (0, 3, 4 or 5 cards)

    Returns:
        Probability in [0, 1]; 0.0 for an incomplete result
    """
    if not result.is_complete:
        return 0.0
    stage = STAGE_MULTIPLIER.get(len(community_cards), 0.5)
    return CATEGORY_WIN_PROBABILITY[result.category] * stage


def preflop_equity(hole_cards: Sequence[Card]) -> float:
    """
    Table-driven preflop equity for two hole cards.

    Keyed by high/low rank, pair-ness and suitedness, clamped to [0.35, 0.90].
    """
    if len(hole_cards) != 2:
        raise ValueError(f"Preflop equity needs 2 hole cards, got {len(hole_cards)}")

    high = max(c.rank for c in hole_cards)
    low = min(c.rank for c in hole_cards)
    suited = hole_cards[0].suit == hole_cards[1].suit

    if high == low:
        if low >= 10:
            equity = 0.85 - (14 - low) * 0.01
        else:
            equity = 0.60 + (low - 2) * 0.025
    elif suited:
        if high == 14:
            if low >= 10:
                equity = 0.60 + (low - 10) * 0.015
            else:
                equity = 0.55 - (10 - low) * 0.01
        elif high == 13 and low >= 10:
            equity = 0.55 + (low - 10) * 0.015
        elif high - low <= 3:
            if high >= 10:
                equity = 0.52 + (high - 10) * 0.01
            else:
                equity = 0.50 - (10 - high) * 0.01
        else:
            equity = 0.45
    else:
        if high == 14:
            if low >= 10:
                equity = 0.57 + (low - 10) * 0.015
            else:
                equity = 0.51 - (10 - low) * 0.01
        elif high == 13 and low >= 10:
            equity = 0.52 + (low - 10) * 0.01
        elif high - low <= 2:
            if high >= 10:
                equity = 0.50 + (high - 10) * 0.005
            else:
                equity = 0.45 - (10 - high) * 0.01
        else:
            equity = 0.40

    return min(max(equity, 0.35), 0.90)


def estimate_hand_strength(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
    """
    Base hand strength used by every strategy.

    Preflop (or whenever fewer than five cards are known) this is the
    preflop equity table; afterwards the street-scaled category win rate.
    """
    cards = list(hole_cards) + list(community_cards)
    if not community_cards or len(cards) < 5:
        return preflop_equity(hole_cards)
    return calculate_win_probability(evaluate(cards), community_cards)


def made_hand_strength(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
    """
    Unscaled category win rate of the hand made so far.

    Preflop a pocket pair counts as a pair, anything else as high card.
    """
    cards = list(hole_cards) + list(community_cards)
    if len(cards) < 5:
        ranks = [c.rank for c in cards]
        if len(set(ranks)) < len(ranks):
            return CATEGORY_WIN_PROBABILITY[HandCategory.PAIR]
        return CATEGORY_WIN_PROBABILITY[HandCategory.HIGH_CARD]
    return CATEGORY_WIN_PROBABILITY[evaluate(cards).category]


_treys_evaluator = Evaluator()


def fast_rank(hole: Sequence[int], board: Sequence[int]) -> int:
    """
    Treys rank for cards already in treys format.

    Lower is better (1 is a royal flush, 7462 the worst high card).
    """
    return _treys_evaluator.evaluate(list(hole), list(board))
