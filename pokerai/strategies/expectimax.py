"""
Expectimax search with explicit chance nodes.

The opponent never plays adversarially here: each opponent response is a
chance node whose outcomes carry fixed probabilities, and our response to
an opponent raise is weighted by hand strength. The explored tree is
returned with the decision and the chosen branch is marked as best path.
"""

from dataclasses import dataclass, replace
from typing import Optional

from pokerai.game.cards import Card
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView
from pokerai.game.trace import NodeType, TraceNode, leaf
from .base import BaseStrategy, STANDARD_POT_FRACTIONS
from .ev import fold_ev, leaf_value, raise_candidates, showdown_value


@dataclass
class ExpectimaxConfig:
    """Configuration for expectimax search."""
    max_depth: int = 10
    opponent_fold_probability: float = 0.3
    opponent_call_probability: float = 0.5
    pot_fractions: tuple[float, ...] = STANDARD_POT_FRACTIONS


@dataclass
class _SearchContext:
    hand_strength: float
    stack: int
    on_button: bool


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def response_probabilities(hand_strength: float) -> tuple[float, float, float]:
    """
    Our (fold, call, raise) probabilities after an opponent raise.

    Folding grows as strength falls, calling peaks at median strength and
    raising takes the remainder.
    """
    fold_p = _clamp(0.8 - hand_strength, 0.1, 0.7)
    call_p = _clamp(0.5 - abs(hand_strength - 0.5), 0.2, 0.6)
    raise_p = max(0.0, 1.0 - fold_p - call_p)
    return fold_p, call_p, raise_p


class ExpectimaxStrategy(BaseStrategy):
    """Probability-weighted search over our options and opponent responses."""

    name = "expectimax"

    def __init__(self, config: Optional[ExpectimaxConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or ExpectimaxConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        ctx = _SearchContext(
            hand_strength=self.hand_strength(player, community_cards),
            stack=player.chips,
            on_button=self.on_button(player, state),
        )
        self.log(f"Starting expectimax search with hand strength: {ctx.hand_strength:.4f}")
        self.recorder.visit(0)

        options: list[tuple[Decision, TraceNode]] = []

        if amount_to_call > 0:
            value = fold_ev(player.current_bet, self.ev_params)
            options.append((Decision.fold(), leaf("fold", value, probability=1.0)))
            node = self._chance_node(ctx, "call", pot_size + amount_to_call, amount_to_call, 1)
            options.append((Decision.call(amount_to_call), node))
        else:
            node = self._chance_node(ctx, "check", pot_size, 0, 1)
            options.append((Decision.check(), node))

        for amount in raise_candidates(pot_size, amount_to_call, state.min_raise,
                                       player.chips, self.config.pot_fractions):
            node = self._chance_node(ctx, "raise", pot_size + amount, amount, 1)
            options.append((Decision.raise_to(amount), node))

        for decision, node in options:
            self.log(f"Option {decision}: expected value {node.value:.2f}")

        best_index = max(range(len(options)), key=lambda i: options[i][1].value)
        best, best_node = options[best_index]

        self.log(f"Explored {self.recorder.nodes_explored} nodes, "
                 f"max depth {self.recorder.max_depth}")
        self.recorder.evaluation = {
            "best_action": best.action.value,
            "best_value": best_node.value,
            "best_amount": best.amount,
        }
        root = TraceNode(
            "root",
            NodeType.ROOT,
            value=best_node.value,
            probability=1.0,
            children=tuple(node for _, node in options),
        )
        return best, root.with_best_child(best_index)

    def _raise_sizes(self, ctx: _SearchContext, pot: int, bet: int) -> list[int]:
        sizes = []
        for amount in (bet * 2, pot // 2, pot):
            if bet < amount <= ctx.stack and amount not in sizes:
                sizes.append(amount)
        return sizes

    def _horizon(self, ctx: _SearchContext, action: str, pot: int, bet: int,
                 probability: float) -> TraceNode:
        value = leaf_value(ctx.hand_strength, pot, bet, True, ctx.on_button, self.ev_params)
        return leaf(action, value, probability=probability, amount=bet)

    def _chance_node(self, ctx: _SearchContext, action: str, pot: int, bet: int,
                     depth: int, probability: float = 1.0) -> TraceNode:
        """
        Opponent responds to our action.

        Fold and call carry fixed weights; the remaining weight is split
        evenly over the affordable raise sizes, or moves to the call
        outcome when no raise is affordable.
        """
        self.recorder.visit(depth)
        if depth >= self.config.max_depth:
            return self._horizon(ctx, action, pot, bet, probability)

        cfg = self.config
        raises = self._raise_sizes(ctx, pot, bet)
        raise_mass = max(0.0, 1.0 - cfg.opponent_fold_probability - cfg.opponent_call_probability)
        call_p = cfg.opponent_call_probability + (0.0 if raises else raise_mass)

        children = [
            leaf("opp_fold", float(pot), probability=cfg.opponent_fold_probability),
            leaf("opp_call", (2 * ctx.hand_strength - 1) * pot, probability=call_p),
        ]
        for amount in raises:
            p = raise_mass / len(raises)
            children.append(self._response_node(ctx, pot + amount, amount, depth + 1, p))

        value = sum(child.probability * child.value for child in children)
        return TraceNode(action, NodeType.CHANCE, bet, value, probability,
                         children=tuple(children))

    def _response_node(self, ctx: _SearchContext, pot: int, bet: int, depth: int,
                       probability: float) -> TraceNode:
        """We respond to an opponent raise of ``bet``."""
        self.recorder.visit(depth)
        if depth >= self.config.max_depth:
            return self._horizon(ctx, "opp_raise", pot, bet, probability)

        fold_p, call_p, raise_p = response_probabilities(ctx.hand_strength)

        # Opponent strength grows with the pot-to-raise ratio
        opponent_strength = (
            0.3 + 0.4 * min(1.0, pot / (10 * bet)) + self.rng.uniform(0.0, 0.3)
        )
        call_value = showdown_value(ctx.hand_strength, opponent_strength, float(pot), -float(pot))

        children = [
            leaf("fold", -float(bet), probability=fold_p),
            leaf("call", call_value, probability=call_p, amount=bet),
        ]
        if raise_p > 0 and bet * 2 <= ctx.stack:
            children.append(
                self._chance_node(ctx, "raise", pot + bet * 2, bet * 2, depth + 1, raise_p)
            )
        else:
            children[1] = replace(children[1], probability=call_p + raise_p)

        value = sum(child.probability * child.value for child in children)
        return TraceNode("opp_raise", NodeType.CHANCE, bet, value, probability,
                         children=tuple(children))
