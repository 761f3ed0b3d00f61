"""Tests for the shared EV formulas and action legality."""

import numpy as np
import pytest

from pokerai.game.state import ActionType, Decision
from pokerai.strategies.base import fallback_decision, legalize
from pokerai.strategies.ev import (
    DEFAULT_EV_PARAMS,
    call_ev,
    fold_ev,
    leaf_value,
    pot_odds,
    raise_candidates,
    raise_ev,
    showdown_value,
)


class TestEVFormulas:
    def test_call_ev_monotonic_in_win_probability(self):
        for pot, call in [(100, 20), (100, 50), (40, 200)]:
            values = [call_ev(w, pot, call) for w in np.linspace(0, 1, 21)]
            assert all(b > a for a, b in zip(values, values[1:]))

    def test_call_ev_small_bet_bonus(self):
        assert call_ev(0.5, 100, 20) - (0.5 * 100 - 0.5 * 20) == DEFAULT_EV_PARAMS.call_bonus
        assert call_ev(0.5, 100, 21) == pytest.approx(0.5 * 100 - 0.5 * 21)

    def test_raise_ev(self):
        assert raise_ev(1.0, 100, 50) == pytest.approx(150 + DEFAULT_EV_PARAMS.raise_bonus)
        assert raise_ev(0.0, 100, 50) == pytest.approx(-50 + DEFAULT_EV_PARAMS.raise_bonus)

    def test_fold_ev_independent_of_strength(self):
        assert fold_ev(30) == -30 - DEFAULT_EV_PARAMS.fold_penalty
        assert fold_ev(0) == -DEFAULT_EV_PARAMS.fold_penalty

    def test_pot_odds(self):
        assert pot_odds(0, 100) == 0.0
        assert pot_odds(50, 100) == pytest.approx(1 / 3)

    def test_leaf_value_bonuses(self):
        plain = leaf_value(0.8, 100, 20)
        assert leaf_value(0.8, 100, 20, raising=True) > plain
        assert leaf_value(0.8, 100, 20, on_button=True) == pytest.approx(plain + 5)
        # No aggression bonus below the threshold
        base = 0.5 * 120 - 0.5 * 20
        assert leaf_value(0.5, 100, 20, raising=True) == pytest.approx(base)

    def test_showdown_tie_is_zero(self):
        assert showdown_value(0.5, 0.5, 100, -100) == 0.0
        assert showdown_value(0.6, 0.5, 100, -100) == 100
        assert showdown_value(0.4, 0.5, 100, -100) == -100


class TestRaiseCandidates:
    def test_filters_and_dedupes(self):
        sizes = raise_candidates(100, 20, 20, 1000, (0.5, 0.75, 1.0, 1.5, 2.0))
        assert sizes == [50, 75, 100, 150, 200]

    def test_respects_stack(self):
        sizes = raise_candidates(100, 20, 20, 120, (0.5, 0.75, 1.0, 1.5, 2.0))
        assert max(sizes) <= 120

    def test_none_when_call_exceeds_stack(self):
        assert raise_candidates(100, 500, 20, 300, (0.5, 1.0, 2.0)) == []


class TestLegality:
    def test_fallback(self):
        assert fallback_decision(0) == Decision.check()
        assert fallback_decision(20) == Decision.call(20)
        assert fallback_decision(21) == Decision.fold()

    def test_free_fold_becomes_check(self, make_player, make_state):
        result = legalize(Decision.fold(), make_player(), 0, make_state(to_call=0))
        assert result == Decision.check()

    def test_check_facing_bet_becomes_call(self, make_player, make_state):
        result = legalize(Decision.check(), make_player(), 30, make_state(to_call=30))
        assert result == Decision.call(30)

    def test_call_capped_at_stack(self, make_player, make_state):
        result = legalize(Decision.call(500), make_player(chips=120), 500, make_state(to_call=500))
        assert result == Decision.call(120)

    def test_raise_clamped_to_stack(self, make_player, make_state):
        result = legalize(Decision.raise_to(900), make_player(chips=300), 20, make_state())
        assert result == Decision.raise_to(300)

    def test_raise_below_min_raised_to_min(self, make_player, make_state):
        state = make_state(to_call=0, min_raise=40)
        assert legalize(Decision.raise_to(10), make_player(), 0, state) == Decision.raise_to(40)

    def test_unaffordable_raise_degrades(self, make_player, make_state):
        result = legalize(Decision.raise_to(400), make_player(chips=100), 150, make_state(to_call=150))
        assert result.action == ActionType.CALL
        assert result.amount == 100
