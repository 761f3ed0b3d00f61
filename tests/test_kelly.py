"""Tests for Kelly-criterion sizing."""

import pytest

from pokerai.game.state import Decision, Street
from pokerai.strategies import KellyConfig, KellyStrategy
from pokerai.strategies.kelly import draw_kelly, kelly_fraction, raise_multiplier, win_probability
from pokerai.strategies.position import DrawType


def fixed_strength(value):
    return lambda hole, board: value


class TestKellyMath:
    def test_kelly_fraction(self):
        assert kelly_fraction(0.6, 2.0) == pytest.approx(0.4)
        assert kelly_fraction(0.3, 2.0) == pytest.approx(-0.05)
        assert kelly_fraction(0.5, 0.0) == 0.0

    def test_win_probability(self):
        config = KellyConfig()
        assert win_probability(0.9, Street.PREFLOP, 1, config) == pytest.approx(0.855)
        assert win_probability(0.5, Street.FLOP, 3, config) == pytest.approx(0.3645)
        assert win_probability(0.01, Street.TURN, 1, config) == config.min_win_probability
        assert win_probability(1.0, Street.RIVER, 1, config) == config.max_win_probability

    def test_raise_multiplier_is_clamped(self):
        assert raise_multiplier(0.2, 0.7, Street.FLOP) == pytest.approx(3.0)
        assert raise_multiplier(0.0, 0.5, Street.PREFLOP) == 2.0
        assert raise_multiplier(1.0, 0.9, Street.RIVER) == 5.0

    def test_draw_kelly(self):
        assert draw_kelly(DrawType.FLUSH_DRAW, 100, 20) == pytest.approx(0.52 / 7 / 3)
        assert draw_kelly(DrawType.NONE, 100, 20) == 0.0
        assert draw_kelly(DrawType.FLUSH_DRAW, 100, 0) == 0.0


class TestKellyDecisions:
    def decide(self, strength, make_player, make_state, hole="AsKs", board="Kd8s3c",
               pot=100, to_call=20, chips=1000):
        strategy = KellyStrategy(strength_fn=fixed_strength(strength), seed=1)
        state = make_state(pot=pot, to_call=to_call, board=board)
        player = make_player(hole, chips=chips)
        return strategy.decide(player, to_call, state.community_cards, pot, state)

    def test_big_edge_raises(self, make_player, make_state):
        decision = self.decide(0.95, make_player, make_state)
        assert decision == Decision.raise_to(100)
        assert decision.trace.evaluation["kelly_fraction"] > 0.4

    def test_negative_edge_folds(self, make_player, make_state):
        decision = self.decide(0.1, make_player, make_state, hole="7h2c", to_call=50)
        assert decision == Decision.fold()
        assert decision.trace.evaluation["kelly_fraction"] == 0.0

    def test_stake_covering_call_calls(self, make_player, make_state):
        decision = self.decide(0.22, make_player, make_state)
        assert decision == Decision.call(20)

    def test_short_stake_with_positive_ev_calls(self, make_player, make_state):
        decision = self.decide(0.22, make_player, make_state, chips=500)
        assert decision == Decision.call(20)

    def test_free_bet_is_capped_by_pot_fraction(self, make_player, make_state):
        decision = self.decide(0.6, make_player, make_state, to_call=0)
        assert decision == Decision.raise_to(75)

    def test_free_weak_hand_checks(self, make_player, make_state):
        decision = self.decide(0.2, make_player, make_state, to_call=0)
        assert decision == Decision.check()

    def test_flush_draw_chases_with_implied_odds(self, make_player, make_state):
        decision = self.decide(0.1, make_player, make_state, hole="AhKh", board="Qh7h2c")
        assert decision == Decision.call(20)
        assert any("Implied odds justify" in step for step in decision.trace.reasoning_steps)
