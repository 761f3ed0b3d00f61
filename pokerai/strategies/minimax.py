"""
Minimax search over the immediate action space.

Our move is a maximizing level over fold/call/raise sizes; the opponent
reply is a minimizing level that samples a single opponent strength and
picks whichever of fold or call hurts us most.
"""

from dataclasses import dataclass
from typing import Optional

from pokerai.game.cards import Card
from pokerai.game.state import ActionType, Decision, GameStateSnapshot, PlayerView
from pokerai.game.trace import NodeType, TraceNode, leaf
from .base import BaseStrategy, STANDARD_POT_FRACTIONS
from .ev import fold_ev, leaf_value, raise_candidates


@dataclass
class MinimaxConfig:
    """Configuration for minimax search."""
    fold_penalty_cap: float = 10.0
    fold_penalty_pot_fraction: float = 0.2
    small_bet_fold_multiplier: float = 2.0     # Bets under 2 big blinds
    small_bet_call_bonus: float = 5.0
    pot_fractions: tuple[float, ...] = STANDARD_POT_FRACTIONS


class MinimaxStrategy(BaseStrategy):
    """
    One-ply minimax with a sampled adversary.

    The opponent level is a one-sample approximation of the adversary's
    best response: a single uniform opponent strength is drawn per node.
    """

    name = "minimax"

    def __init__(self, config: Optional[MinimaxConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or MinimaxConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        cfg = self.config
        hand_strength = self.hand_strength(player, community_cards)
        on_button = self.on_button(player, state)
        self.log(f"Starting minimax decision process with hand strength: {hand_strength:.4f}")

        can_check = amount_to_call == 0
        small_bet = amount_to_call <= state.big_blind * 2

        best = Decision.fold()
        best_value = float("-inf")
        best_index = 0
        children: list[TraceNode] = []

        def consider(decision: Decision, value: float, node: TraceNode) -> None:
            nonlocal best, best_value, best_index
            children.append(node)
            if value > best_value:
                best, best_value, best_index = decision, value, len(children) - 1

        if not can_check:
            penalty = min(cfg.fold_penalty_cap, pot_size * cfg.fold_penalty_pot_fraction)
            if small_bet:
                penalty *= cfg.small_bet_fold_multiplier
            self.recorder.visit(0)
            value = fold_ev(player.current_bet, self.ev_params) - penalty
            self.log(f"Evaluated FOLD option: {value:.2f} (with fold penalty: {penalty:.2f})")
            consider(Decision.fold(), value, leaf("fold", value))

        passive = ActionType.CHECK if can_check else ActionType.CALL
        value, node = self._evaluate(passive, amount_to_call, hand_strength, pot_size,
                                     on_button, depth=0)
        bonus = cfg.small_bet_call_bonus if small_bet else 0.0
        value += bonus
        self.log(
            f"Evaluated {passive.name} option: {value:.2f}"
            + (f" (with small bet bonus: {bonus})" if bonus else "")
        )
        consider(
            Decision.check() if can_check else Decision.call(amount_to_call),
            value,
            TraceNode(passive.value, NodeType.PLAYER, amount_to_call, value, children=(node,)),
        )

        for amount in raise_candidates(pot_size, amount_to_call, state.min_raise,
                                       player.chips, cfg.pot_fractions):
            value, node = self._evaluate(ActionType.RAISE, amount, hand_strength, pot_size,
                                         on_button, depth=0)
            self.log(f"Evaluated RAISE {amount} option: {value:.2f}")
            consider(
                Decision.raise_to(amount),
                value,
                TraceNode("raise", NodeType.PLAYER, amount, value, children=(node,)),
            )

        self.recorder.evaluation = {
            "best_action": best.action.value,
            "best_value": best_value,
            "best_amount": best.amount,
        }
        root = TraceNode("root", NodeType.ROOT, value=best_value, children=tuple(children))
        return best, root.with_best_child(best_index)

    def _evaluate(
        self,
        action: ActionType,
        amount: int,
        hand_strength: float,
        pot_size: int,
        on_button: bool,
        depth: int,
    ) -> tuple[float, TraceNode]:
        """Our move: hand the action to the opponent level."""
        self.recorder.visit(depth)
        return self._opponent_reply(action, amount, hand_strength, pot_size, on_button, depth + 1)

    def _opponent_reply(
        self,
        action: ActionType,
        amount: int,
        hand_strength: float,
        pot_size: int,
        on_button: bool,
        depth: int,
    ) -> tuple[float, TraceNode]:
        """
        Opponent move: min of folding (we take the pot) and calling.

        A call is a showdown against one sampled opponent strength: when
        we are ahead it is worth the leaf EV, when behind we lose our bet.
        """
        self.recorder.visit(depth)
        opponent_strength = self.rng.random()
        raising = action == ActionType.RAISE

        fold_value = float(pot_size)
        ahead_value = leaf_value(hand_strength, pot_size, amount, raising, on_button, self.ev_params)
        if hand_strength > opponent_strength:
            call_value = ahead_value
        elif hand_strength < opponent_strength:
            call_value = -float(amount)
        else:
            call_value = 0.0

        value = min(fold_value, call_value)
        node = TraceNode(
            "opponent",
            NodeType.OPPONENT,
            value=value,
            children=(leaf("opp_fold", fold_value), leaf("opp_call", call_value)),
        )
        return value, node
