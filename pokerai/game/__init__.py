"""Game representation module."""

from .cards import Card, Hand as CardHand, Rank, Suit, parse_cards, PREMIUM_HANDS
from .evaluator import (
    HandCategory,
    HandResult,
    INCOMPLETE,
    evaluate,
    compare_hands,
    calculate_win_probability,
    preflop_equity,
    estimate_hand_strength,
    made_hand_strength,
)
from .state import (
    ActionType,
    Decision,
    LastAction,
    OpponentState,
    PlayerView,
    GameStateSnapshot,
    Street,
    Position,
)
from .trace import DecisionTrace, TraceNode, NodeType

__all__ = [
    "Card",
    "CardHand",
    "Rank",
    "Suit",
    "parse_cards",
    "PREMIUM_HANDS",
    "HandCategory",
    "HandResult",
    "INCOMPLETE",
    "evaluate",
    "compare_hands",
    "calculate_win_probability",
    "preflop_equity",
    "estimate_hand_strength",
    "made_hand_strength",
    "ActionType",
    "Decision",
    "LastAction",
    "OpponentState",
    "PlayerView",
    "GameStateSnapshot",
    "Street",
    "Position",
    "DecisionTrace",
    "TraceNode",
    "NodeType",
]
