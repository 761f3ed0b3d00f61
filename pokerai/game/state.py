"""Read-only game state snapshot and the decision value returned to it."""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Sequence, TYPE_CHECKING

from .cards import Card

if TYPE_CHECKING:
    from .trace import DecisionTrace

logger = logging.getLogger(__name__)

# Used when the opponent list cannot be read
DEFAULT_ACTIVE_PLAYERS = 4


class ActionType(Enum):
    """Actions a player can take."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"

    def __str__(self) -> str:
        return self.value


class Street(IntEnum):
    """Betting rounds, valued by visible community card count."""
    PREFLOP = 0
    FLOP = 3
    TURN = 4
    RIVER = 5

    @classmethod
    def from_board(cls, community_cards: Sequence[Card]) -> "Street":
        count = len(community_cards)
        try:
            return cls(count)
        except ValueError:
            raise ValueError(f"Invalid community card count: {count}") from None

    @property
    def cards_to_come(self) -> int:
        return {0: 5, 3: 2, 4: 1, 5: 0}[int(self)]


class Position(Enum):
    """Seat relative to the dealer button."""
    BUTTON = "button"
    SMALL_BLIND = "small_blind"
    BIG_BLIND = "big_blind"
    EARLY = "early"
    MIDDLE = "middle"
    LATE = "late"
    UNKNOWN = "unknown"

    @property
    def in_position(self) -> bool:
        return self in (Position.BUTTON, Position.LATE)


@dataclass(frozen=True)
class Decision:
    """
    The engine's chosen action.

    ``amount`` is 0 for fold/check, the chips called for a call and the
    chips committed for a raise. ``trace`` carries optional diagnostics
    and does not take part in equality.
    """
    action: ActionType
    amount: int = 0
    trace: Optional["DecisionTrace"] = field(default=None, compare=False, repr=False)

    @classmethod
    def fold(cls) -> "Decision":
        return cls(ActionType.FOLD, 0)

    @classmethod
    def check(cls) -> "Decision":
        return cls(ActionType.CHECK, 0)

    @classmethod
    def call(cls, amount: int) -> "Decision":
        return cls(ActionType.CALL, int(amount))

    @classmethod
    def raise_to(cls, amount: int) -> "Decision":
        return cls(ActionType.RAISE, int(amount))

    def __str__(self) -> str:
        if self.action in (ActionType.CALL, ActionType.RAISE):
            return f"{self.action.value} {self.amount}"
        return self.action.value


@dataclass(frozen=True)
class LastAction:
    """Most recent action observed for an opponent."""
    action: ActionType
    amount: int = 0


@dataclass(frozen=True)
class OpponentState:
    """Public view of one opponent."""
    player_id: int
    seat: int
    chips: int = 1000
    folded: bool = False
    active: bool = True
    last_action: Optional[LastAction] = None
    name: str = ""

    @property
    def in_hand(self) -> bool:
        return not self.folded and self.active


@dataclass(frozen=True)
class PlayerView:
    """The acting player's private view: hole cards, stack and seat."""
    player_id: int
    hole_cards: tuple[Card, ...]
    chips: int
    current_bet: int = 0
    seat: Optional[int] = None
    name: str = ""


@dataclass(frozen=True)
class GameStateSnapshot:
    """
    Immutable view of the table handed to a strategy for one decision.

    ``opponents`` may be None when the game loop cannot supply a player
    list; strategies then fall back to DEFAULT_ACTIVE_PLAYERS.
    """
    pot: int
    amount_to_call: int = 0
    community_cards: tuple[Card, ...] = ()
    big_blind: int = 10
    min_raise: int = 20
    opponents: Optional[tuple[OpponentState, ...]] = None
    button_index: int = 0
    hand_number: int = 0

    @property
    def street(self) -> Street:
        return Street.from_board(self.community_cards)

    def live_opponents(self) -> list[OpponentState]:
        """Opponents still contesting the pot."""
        if self.opponents is None:
            return []
        return [o for o in self.opponents if o.in_hand]

    @property
    def player_count(self) -> Optional[int]:
        if self.opponents is None:
            return None
        return len(self.opponents) + 1


def active_player_count(state: Optional[GameStateSnapshot]) -> int:
    """
    Players still in the hand, including the acting player.

    Falls back to DEFAULT_ACTIVE_PLAYERS when the opponent list is missing.
    """
    try:
        if state is None or state.opponents is None:
            raise AttributeError("snapshot has no opponent list")
        return 1 + len(state.live_opponents())
    except (AttributeError, TypeError) as exc:
        logger.warning("Could not count active players (%s), assuming %d",
                       exc, DEFAULT_ACTIVE_PLAYERS)
        return DEFAULT_ACTIVE_PLAYERS


def seat_position(player: PlayerView, state: Optional[GameStateSnapshot]) -> Position:
    """
    Classify the acting seat relative to the button.

    Offsets 0/1/2 are button, small blind and big blind; the rest split
    into early, middle and late thirds of the table.
    """
    try:
        player_count = state.player_count
        if player.seat is None or player_count is None:
            return Position.UNKNOWN

        relative = (player.seat - state.button_index + player_count) % player_count
    except (AttributeError, TypeError) as exc:
        logger.warning("Could not determine position: %s", exc)
        return Position.UNKNOWN

    if relative == 0:
        return Position.BUTTON
    if relative == 1:
        return Position.SMALL_BLIND
    if relative == 2:
        return Position.BIG_BLIND
    if relative <= int(player_count * 0.33):
        return Position.EARLY
    if relative <= int(player_count * 0.66):
        return Position.MIDDLE
    return Position.LATE
