"""Tests for the Monte Carlo and weighted simulation strategies."""

import numpy as np
import pytest

from pokerai.game.cards import parse_cards
from pokerai.game.state import ActionType, Decision, Street
from pokerai.strategies import (
    MonteCarloConfig,
    MonteCarloStrategy,
    WeightedSimulationConfig,
    WeightedSimulationStrategy,
    estimate_win_probability,
)
from pokerai.strategies.weighted import SimulationResult, _take_hand, raise_win_modifier


ROYAL_HOLE = "AsKs"
ROYAL_BOARD = "QsJsTs2h3d"


class TestEstimateWinProbability:
    @pytest.mark.slow
    def test_aces_against_three_opponents(self):
        rng = np.random.default_rng(42)
        p = estimate_win_probability(parse_cards("AsAh"), [], 3, 100_000, rng)
        assert 0.55 <= p <= 0.65

    def test_aces_beat_trash(self):
        aces = estimate_win_probability(parse_cards("AsAh"), [], 1, 3000,
                                        np.random.default_rng(1))
        trash = estimate_win_probability(parse_cards("7h2c"), [], 1, 3000,
                                         np.random.default_rng(1))
        assert aces > 0.75
        assert trash < 0.45

    def test_nuts_on_river_always_wins(self):
        p = estimate_win_probability(parse_cards(ROYAL_HOLE), parse_cards(ROYAL_BOARD),
                                     4, 500, np.random.default_rng(0))
        assert p == 1.0

    def test_seeded_runs_repeat(self):
        args = (parse_cards("9s9h"), parse_cards("Ks7d2c"), 2, 2000)
        first = estimate_win_probability(*args, np.random.default_rng(9))
        second = estimate_win_probability(*args, np.random.default_rng(9))
        assert first == second

    def test_invalid_board_raises(self):
        with pytest.raises(ValueError):
            estimate_win_probability(parse_cards("AsAh"), parse_cards("2c3d"), 1, 100,
                                     np.random.default_rng(0))

    def test_non_positive_simulations_raise(self):
        with pytest.raises(ValueError):
            estimate_win_probability(parse_cards("AsAh"), [], 1, 0, np.random.default_rng(0))

    def test_chunking_keeps_count(self):
        rng = np.random.default_rng(3)
        p = estimate_win_probability(parse_cards("AsAh"), [], 1, 2500, rng, chunk_size=1000)
        assert 0.0 <= p <= 1.0
        assert (p * 2500) == pytest.approx(round(p * 2500))

    @pytest.mark.slow
    def test_worker_processes(self):
        p = estimate_win_probability(parse_cards("AsAh"), [], 1, 4000,
                                     np.random.default_rng(5), workers=2)
        assert 0.75 <= p <= 0.92


class TestMonteCarloStrategy:
    def make(self, simulations=2000, seed=7):
        return MonteCarloStrategy(MonteCarloConfig(simulations=simulations), seed=seed)

    def test_raises_with_the_nuts(self, make_player, make_state):
        state = make_state(pot=100, to_call=20, board=ROYAL_BOARD)
        decision = self.make(500).decide(make_player(ROYAL_HOLE), 20, state.community_cards,
                                         100, state)

        assert decision.action == ActionType.RAISE
        assert decision.trace.evaluation["win_probability"] == 1.0
        assert decision.trace.simulations_run == 500

    def test_folds_trash_to_big_bet(self, make_player, make_state):
        state = make_state(pot=100, to_call=200)
        decision = self.make().decide(make_player("7h2c"), 200, (), 100, state)
        assert decision == Decision.fold()

    def test_checks_or_raises_when_free(self, make_player, make_state):
        state = make_state(pot=100, to_call=0)
        decision = self.make().decide(make_player("7h2c"), 0, (), 100, state)
        assert decision.action in (ActionType.CHECK, ActionType.RAISE)

    def test_option_tree_marks_choice(self, make_player, make_state):
        state = make_state(pot=100, to_call=20, board=ROYAL_BOARD)
        decision = self.make(300).decide(make_player(ROYAL_HOLE), 20, state.community_cards,
                                         100, state)
        path = decision.trace.best_path()
        assert len(path) == 1
        assert path[0].action == "raise"
        assert path[0].amount == decision.amount


class TestWeightedSimulation:
    def make(self, simulations=400, seed=7):
        return WeightedSimulationStrategy(
            WeightedSimulationConfig(simulations=simulations), seed=seed
        )

    def test_simulate_nuts(self):
        strategy = self.make(200)
        result = strategy.simulate(parse_cards(ROYAL_HOLE), parse_cards(ROYAL_BOARD), 3,
                                   Street.RIVER)
        assert result.wins == 200
        assert result.avg_improvement == 0.0
        assert strategy.adjusted_win_probability(result, Street.RIVER) == 1.0

    def test_improvement_on_flop_draw(self):
        strategy = self.make(300)
        result = strategy.simulate(parse_cards("AhKh"), parse_cards("Qh7h2c"), 1, Street.FLOP)
        assert result.avg_improvement > 0
        assert 0.0 <= result.win_probability <= 1.0

    def test_adjusted_probability_caps_improvement(self):
        strategy = self.make()
        result = SimulationResult(wins=50, simulations=100, avg_improvement=1.0)
        assert strategy.adjusted_win_probability(result, Street.RIVER) == pytest.approx(0.8)
        result = SimulationResult(wins=10, simulations=100, avg_improvement=-1.0)
        assert strategy.adjusted_win_probability(result, Street.FLOP) == 0.0

    def test_empty_result(self):
        assert SimulationResult(0, 0, 0.0).win_probability == 0.0

    def test_raise_win_modifier(self):
        assert raise_win_modifier(50, 100) == 1.05
        assert raise_win_modifier(100, 100) == 1.10
        assert raise_win_modifier(150, 100) == 0.95

    def test_take_hand(self):
        pool = parse_cards("As 7d Ah Kc")
        hand = _take_hand(pool, (14, 14))
        assert hand == parse_cards("As Ah")
        assert pool == parse_cards("7d Kc")
        assert _take_hand(pool, (12, 12)) is None
        assert len(pool) == 2

    def test_raises_with_the_nuts(self, make_player, make_state):
        state = make_state(pot=100, to_call=20, board=ROYAL_BOARD)
        decision = self.make(200).decide(make_player(ROYAL_HOLE), 20, state.community_cards,
                                         100, state)
        assert decision.action == ActionType.RAISE
        assert decision.amount <= 1000

    def test_strong_preflop_raises(self, make_player, make_state):
        strategy = self.make(300)
        state = make_state(pot=30, to_call=10, n_opponents=1)
        decision = strategy.decide(make_player("AsAh"), 10, (), 30, state)
        assert decision.action == ActionType.RAISE
