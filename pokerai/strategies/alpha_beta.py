"""
Alpha-beta search with synthetic raise continuations.

Unlike minimax, both levels recurse: each raise opens a minimizing
opponent node whose re-raises open maximizing nodes of ours, to a small
depth bound. Subtrees are cut as soon as alpha >= beta.
"""

from dataclasses import dataclass
from typing import Optional

from pokerai.game.cards import Card
from pokerai.game.state import Decision, GameStateSnapshot, PlayerView
from pokerai.game.trace import NodeType, TraceNode, leaf
from .base import BaseStrategy, STANDARD_POT_FRACTIONS
from .ev import fold_ev, leaf_value, raise_candidates, showdown_value


@dataclass
class AlphaBetaConfig:
    """Configuration for alpha-beta search."""
    max_depth: int = 4
    fold_penalty_cap: float = 15.0
    fold_penalty_pot_fraction: float = 0.25
    small_bet_fold_multiplier: float = 1.5
    # Strength range of opponents who continue
    opponent_range: tuple[float, float] = (0.5, 0.8)
    pot_fractions: tuple[float, ...] = STANDARD_POT_FRACTIONS


@dataclass
class _SearchContext:
    hand_strength: float
    stack: int
    on_button: bool


class AlphaBetaStrategy(BaseStrategy):
    """Depth-bounded alternating min/max search with alpha-beta pruning."""

    name = "alpha_beta"

    def __init__(self, config: Optional[AlphaBetaConfig] = None, **kwargs):
        super().__init__(**kwargs)
        self.config = config or AlphaBetaConfig()

    def _decide(
        self,
        player: PlayerView,
        amount_to_call: int,
        community_cards: list[Card],
        pot_size: int,
        state: GameStateSnapshot,
    ) -> tuple[Decision, Optional[TraceNode]]:
        cfg = self.config
        ctx = _SearchContext(
            hand_strength=self.hand_strength(player, community_cards),
            stack=player.chips,
            on_button=self.on_button(player, state),
        )
        self.log(f"Starting alpha-beta search with hand strength: {ctx.hand_strength:.4f}")

        can_check = amount_to_call == 0
        small_bet = amount_to_call <= self.ev_params.small_bet
        self.recorder.visit(0)

        alpha = float("-inf")
        best = Decision.fold()
        best_index = 0
        children: list[TraceNode] = []

        def consider(decision: Decision, value: float, node: TraceNode) -> None:
            nonlocal alpha, best, best_index
            children.append(node)
            if value > alpha:
                alpha, best, best_index = value, decision, len(children) - 1

        if not can_check:
            penalty = min(cfg.fold_penalty_cap, pot_size * cfg.fold_penalty_pot_fraction)
            if small_bet:
                penalty *= cfg.small_bet_fold_multiplier
            value = fold_ev(player.current_bet, self.ev_params) - penalty
            self.log(f"FOLD value: {value:.2f} (penalty {penalty:.2f})")
            consider(Decision.fold(), value, leaf("fold", value))

        value = leaf_value(ctx.hand_strength, pot_size, amount_to_call, False,
                           ctx.on_button, self.ev_params)
        if small_bet and not can_check:
            value += self.ev_params.call_bonus
        if can_check:
            self.log(f"CHECK value: {value:.2f}")
            consider(Decision.check(), value, leaf("check", value))
        else:
            self.log(f"CALL value: {value:.2f}")
            consider(Decision.call(amount_to_call), value,
                     leaf("call", value, amount=amount_to_call))

        for amount in raise_candidates(pot_size, amount_to_call, state.min_raise,
                                       player.chips, cfg.pot_fractions):
            value, node = self._min_node(ctx, pot_size + amount, amount, 1,
                                         alpha, float("inf"))
            self.log(f"RAISE {amount} value: {value:.2f}")
            consider(
                Decision.raise_to(amount),
                value,
                TraceNode("raise", NodeType.PLAYER, amount, value, children=(node,)),
            )

        self.log(f"Explored {self.recorder.nodes_explored} nodes, "
                 f"max depth {self.recorder.max_depth}")
        self.recorder.evaluation = {
            "best_action": best.action.value,
            "best_value": alpha,
            "best_amount": best.amount,
        }
        root = TraceNode("root", NodeType.ROOT, value=alpha, children=tuple(children))
        return best, root.with_best_child(best_index)

    def _continuations(self, ctx: _SearchContext, pot: int, bet: int) -> list[int]:
        """Re-raise sizes: double the bet, half pot, full pot."""
        sizes = []
        for amount in (bet * 2, pot // 2, pot):
            if bet < amount <= ctx.stack and amount not in sizes:
                sizes.append(amount)
        return sizes

    def _depth_leaf(self, ctx: _SearchContext, pot: int, bet: int) -> tuple[float, TraceNode]:
        value = leaf_value(ctx.hand_strength, pot, bet, True, ctx.on_button, self.ev_params)
        return value, leaf("horizon", value, amount=bet)

    def _min_node(
        self,
        ctx: _SearchContext,
        pot: int,
        bet: int,
        depth: int,
        alpha: float,
        beta: float,
    ) -> tuple[float, TraceNode]:
        """Opponent responds to our bet of ``bet`` into ``pot``."""
        self.recorder.visit(depth)
        if depth >= self.config.max_depth:
            return self._depth_leaf(ctx, pot, bet)

        low, high = self.config.opponent_range
        opponent_strength = self.rng.uniform(low, high)

        children = []
        value = float(pot)
        children.append(leaf("opp_fold", value))
        beta = min(beta, value)

        call_value = showdown_value(ctx.hand_strength, opponent_strength, pot + bet, -bet)
        children.append(leaf("opp_call", call_value))
        value = min(value, call_value)
        beta = min(beta, value)

        for amount in self._continuations(ctx, pot, bet):
            if alpha >= beta:
                break
            child_value, child = self._max_node(ctx, pot + amount, amount, depth + 1, alpha, beta)
            children.append(TraceNode("opp_raise", NodeType.OPPONENT, amount, child_value,
                                      children=(child,)))
            value = min(value, child_value)
            beta = min(beta, value)

        return value, TraceNode("opponent", NodeType.OPPONENT, bet, value,
                                children=tuple(children))

    def _max_node(
        self,
        ctx: _SearchContext,
        pot: int,
        bet: int,
        depth: int,
        alpha: float,
        beta: float,
    ) -> tuple[float, TraceNode]:
        """We respond to an opponent raise of ``bet``."""
        self.recorder.visit(depth)
        if depth >= self.config.max_depth:
            return self._depth_leaf(ctx, pot, bet)

        children = []
        value = -float(bet)
        children.append(leaf("fold", value))
        alpha = max(alpha, value)

        call_value = leaf_value(ctx.hand_strength, pot, bet, False, ctx.on_button, self.ev_params)
        children.append(leaf("call", call_value, amount=bet))
        value = max(value, call_value)
        alpha = max(alpha, value)

        for amount in self._continuations(ctx, pot, bet):
            if alpha >= beta:
                break
            child_value, child = self._min_node(ctx, pot + amount, amount, depth + 1, alpha, beta)
            children.append(TraceNode("raise", NodeType.PLAYER, amount, child_value,
                                      children=(child,)))
            value = max(value, child_value)
            alpha = max(alpha, value)

        return value, TraceNode("response", NodeType.PLAYER, bet, value,
                                children=tuple(children))
