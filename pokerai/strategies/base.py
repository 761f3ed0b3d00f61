"""
Strategy calling contract, conservative fallback and action legality.

Every concrete strategy implements ``_decide``; the public ``decide``
wraps it so that no exception escapes and every returned action is legal
for the snapshot it was given.
"""

import logging
from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from pokerai.game.cards import Card
from pokerai.game.evaluator import estimate_hand_strength
from pokerai.game.state import (
    ActionType,
    Decision,
    GameStateSnapshot,
    PlayerView,
    Position,
    active_player_count,
    seat_position,
)
from pokerai.game.trace import NodeType, TraceNode, TraceRecorder, leaf
from .ev import DEFAULT_EV_PARAMS, EVParams

logger = logging.getLogger(__name__)

StrengthFn = Callable[[Sequence[Card], Sequence[Card]], float]

# Calls at or below this are accepted by the fallback policy
FALLBACK_CALL_THRESHOLD = 20

# Raise sizes as fractions of the pot, shared by the EV-driven strategies
STANDARD_POT_FRACTIONS = (0.5, 0.75, 1.0, 1.5, 2.0)


@runtime_checkable
class Strategy(Protocol):
    """Anything that can turn a table snapshot into a Decision."""

    name: str

    def decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: Sequence[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> Decision:
        ...


def fallback_decision(amount_to_call: int, threshold: int = FALLBACK_CALL_THRESHOLD) -> Decision:
    """Check when free, call small amounts, otherwise fold."""
    if amount_to_call <= 0:
        return Decision.check()
    if amount_to_call <= threshold:
        return Decision.call(amount_to_call)
    return Decision.fold()


def legalize(decision: Decision, player: PlayerView, amount_to_call: int,
             state: GameStateSnapshot) -> Decision:
    """
    Coerce a decision into a legal action for this snapshot.

    Folding for free becomes a check and checking into a bet becomes a
    call. Calls are capped at the player's chips. Raises are clamped to
    [min_raise, chips] and must exceed the call amount, otherwise they
    degrade to a call (or check).
    """
    chips = max(player.chips, 0)
    to_call = max(amount_to_call, 0)

    def passive() -> Decision:
        if to_call == 0:
            return Decision.check()
        return Decision.call(min(to_call, chips))

    if decision.action == ActionType.FOLD:
        return Decision.check() if to_call == 0 else Decision.fold()

    if decision.action in (ActionType.CHECK, ActionType.CALL):
        return passive()

    amount = max(int(decision.amount), state.min_raise)
    amount = min(amount, chips)
    if amount < state.min_raise or amount <= to_call:
        return passive()
    return Decision.raise_to(amount)


class BaseStrategy:
    """
    Shared entry point for all strategies.

    Subclasses implement ``_decide`` and may use ``self.recorder`` to log
    reasoning steps and count explored nodes.
    """

    name = "base"

    def __init__(
        self,
        strength_fn: Optional[StrengthFn] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        ev_params: EVParams = DEFAULT_EV_PARAMS,
    ):
        """
        Args:
            strength_fn: Hand strength source (hole, board) -> [0, 1]
            rng: Random generator; built from ``seed`` when omitted
            seed: Seed for a fresh generator
            ev_params: Shared EV constants
        """
        self.strength_fn = strength_fn or estimate_hand_strength
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.ev_params = ev_params
        self.recorder = TraceRecorder(self.name)

    def decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: Sequence[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> Decision:
        """
        Choose an action for ``player``.

        Args:
            player: Acting player's private view
            amount_to_call: Chips needed to stay in the hand
            community_cards: Visible board
            pot_size: Current pot
            state: Read-only table snapshot

        Returns:
            A legal Decision carrying a DecisionTrace
        """
        self.recorder = TraceRecorder(self.name)
        root = None
        fallback = False

        try:
            decision, root = self._decide(
                player, amount_to_call, list(community_cards), pot_size, state
            )
        except Exception:
            logger.exception("%s strategy failed, using fallback policy", self.name)
            self.recorder.log("Error in algorithm, defaulting to conservative decision")
            decision = fallback_decision(amount_to_call)
            fallback = True

        try:
            legal = legalize(decision, player, amount_to_call, state)
        except Exception:
            logger.exception("%s could not legalise %s, using fallback policy", self.name, decision)
            self.recorder.log("Error in algorithm, defaulting to conservative decision")
            legal = fallback_decision(amount_to_call)
            if legal.action == ActionType.CALL:
                legal = Decision.call(min(legal.amount, max(player.chips, 0)))
            root = None
            fallback = True
        if legal != decision:
            self.recorder.log(f"Adjusted {decision} to legal action {legal}")

        self.recorder.log(f"Final decision: {legal}")
        logger.debug("%s decided %s (pot=%s, to_call=%s)", self.name, legal, pot_size, amount_to_call)

        trace = self.recorder.finish(root=root, fallback=fallback)
        return Decision(legal.action, legal.amount, trace)

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        raise NotImplementedError

    # Helpers shared by subclasses

    def hand_strength(self, player: PlayerView, community_cards: Sequence[Card]) -> float:
        return self.strength_fn(player.hole_cards, community_cards)

    def log(self, message: str) -> None:
        self.recorder.log(message)

    def opponent_count(self, state: GameStateSnapshot) -> int:
        """Opponents still in the hand (at least one)."""
        return max(1, active_player_count(state) - 1)

    def on_button(self, player: PlayerView, state: GameStateSnapshot) -> bool:
        return seat_position(player, state) == Position.BUTTON

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def option_tree(decision: Decision, amount_to_call: int, passive_value: float,
                raise_nodes: list[TraceNode]) -> TraceNode:
    """One-level tree of the options a non-search strategy priced."""
    passive = "check" if amount_to_call == 0 else "call"
    children = [leaf(passive, passive_value, amount=amount_to_call)] + raise_nodes
    root = TraceNode("root", NodeType.ROOT, children=tuple(children))
    for i, child in enumerate(children):
        if child.action == decision.action.value and child.amount == decision.amount:
            return root.with_best_child(i)
    return root
