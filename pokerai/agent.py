"""
Turn-processing seam between a game loop and a strategy.

The game loop owns the table; an Agent owns exactly one strategy and turns
a read-only snapshot into a Decision. Nothing here mutates game state.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

from pokerai.config import AgentConfig
from pokerai.game.state import (
    Decision,
    GameStateSnapshot,
    PlayerView,
    Position,
    Street,
    active_player_count,
    seat_position,
)
from pokerai.game.trace import DecisionTrace
from pokerai.strategies import BaseStrategy, Strategy, create_strategy

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


@dataclass(frozen=True)
class DecisionRecord:
    """One entry of an agent's decision history."""
    hand_number: int
    street: Optional[Street]
    pot: int
    amount_to_call: int
    position: Position
    active_players: int
    decision: Decision
    hand_strength: Optional[float]
    elapsed: float                # Seconds spent deciding


def _street(state: GameStateSnapshot) -> Optional[Street]:
    try:
        return state.street
    except ValueError:
        return None


class Agent:
    """
    An automated player.

    The strategy is injected, so a game loop calls ``act`` directly instead
    of intercepting the player's turn.
    """

    def __init__(self, player_id: int, strategy: Strategy, name: str = ""):
        self.player_id = player_id
        self.strategy = strategy
        self.name = name or f"Agent {player_id}"
        self.last_trace: Optional[DecisionTrace] = None
        self.history: deque[DecisionRecord] = deque(maxlen=HISTORY_LIMIT)

    @classmethod
    def from_config(cls, player_id: int, config: AgentConfig, **kwargs) -> "Agent":
        """
        Build an agent with a fresh strategy from the registry.

        Args:
            player_id: Stable seat-independent id
            config: Strategy name, options and seed
            **kwargs: Passed to ``create_strategy`` (e.g. strength_fn, rng)
        """
        kwargs.setdefault("seed", config.seed)
        strategy = create_strategy(config.strategy, **kwargs, **config.options)
        return cls(player_id, strategy)

    def act(self, view: PlayerView, state: GameStateSnapshot) -> Decision:
        """
        Decide on an action for the current snapshot.

        Args:
            view: This agent's private view
            state: Read-only table snapshot

        Returns:
            The strategy's Decision, with its trace attached
        """
        if view.player_id != self.player_id:
            raise ValueError(
                f"View for player {view.player_id} handed to agent {self.player_id}"
            )

        start = time.perf_counter()
        decision = self.strategy.decide(
            view,
            state.amount_to_call,
            state.community_cards,
            state.pot,
            state,
        )
        elapsed = time.perf_counter() - start

        self.last_trace = decision.trace
        self.history.append(DecisionRecord(
            hand_number=state.hand_number,
            street=_street(state),
            pot=state.pot,
            amount_to_call=state.amount_to_call,
            position=seat_position(view, state),
            active_players=active_player_count(state),
            decision=decision,
            hand_strength=self._strength(view, state),
            elapsed=elapsed,
        ))

        logger.info("%s (%s) %s in %.3fs", self.name,
                    getattr(self.strategy, "name", "strategy"), decision, elapsed)
        return decision

    def _strength(self, view: PlayerView, state: GameStateSnapshot) -> Optional[float]:
        if not isinstance(self.strategy, BaseStrategy):
            return None
        try:
            return self.strategy.hand_strength(view, state.community_cards)
        except Exception as exc:
            logger.warning("Could not record hand strength: %s", exc)
            return None

    def __repr__(self) -> str:
        return f"Agent({self.player_id}, {self.strategy!r})"
