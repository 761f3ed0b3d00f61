"""Card and hand representation utilities."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from treys import Card as TreysCard


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}
STR_RANK["10"] = 10

RANK_NAME = {
    2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six",
    7: "Seven", 8: "Eight", 9: "Nine", 10: "Ten", 11: "Jack",
    12: "Queen", 13: "King", 14: "Ace",
}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}
SUIT_SYMBOL = {0: "♣", 1: "♦", 2: "♥", 3: "♠"}


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: int  # 2-14
    suit: int  # 0-3

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @property
    def symbol(self) -> str:
        """Display form with a suit glyph, e.g. 'A♠'."""
        return f"{RANK_STR[self.rank]}{SUIT_SYMBOL[self.suit]}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'As', 'Th', '2c' or '10d'."""
        if len(s) not in (2, 3):
            raise ValueError(f"Invalid card string: {s}")
        rank_part = s[:-1].upper()
        suit_char = s[-1].lower()

        if rank_part not in STR_RANK:
            raise ValueError(f"Invalid rank: {rank_part}")
        if suit_char not in STR_SUIT:
            raise ValueError(f"Invalid suit: {suit_char}")

        return cls(rank=STR_RANK[rank_part], suit=STR_SUIT[suit_char])

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


def parse_cards(text: str) -> list[Card]:
    """
    Parse a run of cards like 'AsKhTd' or 'As Kh Td'.

    Args:
        text: Card string, optionally space or comma separated

    Returns:
        List of Card objects in the given order
    """
    cards = []
    for token in text.replace(",", " ").split():
        if len(token) > 3:
            cards.extend(Card.from_string(token[i:i + 2]) for i in range(0, len(token), 2))
        else:
            cards.append(Card.from_string(token))
    return cards


@dataclass
class Hand:
    """A two-card starting hand."""
    card1: Card
    card2: Card

    def __post_init__(self):
        # Ensure card1 has higher or equal rank
        if self.card1.rank < self.card2.rank:
            self.card1, self.card2 = self.card2, self.card1

    @property
    def is_pair(self) -> bool:
        """Check if hand is a pocket pair."""
        return self.card1.rank == self.card2.rank

    @property
    def is_suited(self) -> bool:
        """Check if hand is suited."""
        return self.card1.suit == self.card2.suit

    @property
    def gap(self) -> int:
        """Rank distance between the two cards."""
        return self.card1.rank - self.card2.rank

    @property
    def canonical(self) -> str:
        """
        Get canonical hand notation (e.g., 'AKs', 'QQ', '72o').

        This groups equivalent hands regardless of specific suits.
        """
        r1 = RANK_STR[self.card1.rank]
        r2 = RANK_STR[self.card2.rank]

        if self.is_pair:
            return f"{r1}{r2}"
        elif self.is_suited:
            return f"{r1}{r2}s"
        else:
            return f"{r1}{r2}o"

    @property
    def high(self) -> int:
        return self.card1.rank

    @property
    def low(self) -> int:
        return self.card2.rank

    def __str__(self) -> str:
        return f"{self.card1}{self.card2}"

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "Hand":
        """Build a hand from exactly two hole cards."""
        cards = list(cards)
        if len(cards) != 2:
            raise ValueError(f"A starting hand needs 2 cards, got {len(cards)}")
        return cls(cards[0], cards[1])


def remaining_deck(known: Iterable[Card]) -> list[Card]:
    """Full deck minus the known cards, in a fixed order."""
    known = set(known)
    return [
        Card(rank, suit)
        for rank in range(2, 15)
        for suit in range(4)
        if Card(rank, suit) not in known
    ]


# Opponent shortlist used to bias simulated ranges
PREMIUM_HANDS = ["AA", "KK", "QQ", "JJ", "AK", "AQ", "AJ", "KQ"]

