"""Tests for the agent, registry, configuration and trace rendering."""

import logging

import pytest
from rich.console import Console

from pokerai.agent import HISTORY_LIMIT, Agent
from pokerai.config import AgentConfig
from pokerai.game.state import ActionType, Decision, Position, Street
from pokerai.logging_config import configure_logging
from pokerai.strategies import (
    BASELINE_STRATEGIES,
    ROLLOUT_STRATEGIES,
    SEARCH_STRATEGIES,
    STRATEGIES,
    BaseStrategy,
    Strategy,
    create_strategy,
)
from pokerai.viz import print_trace, reasoning_table, render_trace

# Keep rollout strategies quick in unit tests
FAST_OPTIONS = {
    "monte_carlo": {"simulations": 300},
    "weighted_simulation": {"simulations": 200},
}


def fast_strategy(name, **kwargs):
    return create_strategy(name, seed=5, **kwargs, **FAST_OPTIONS.get(name, {}))


def fixed_strength(value):
    return lambda hole, board: value


class TestRegistry:
    def test_every_strategy_registered(self):
        assert set(STRATEGIES) == {
            "minimax", "alpha_beta", "expectimax", "monte_carlo",
            "weighted_simulation", "bayesian", "position_based",
            "kelly_criterion", "heuristic", "basic", "intermediate", "advanced",
            "random", "conservative", "aggressive",
        }
        families = set(SEARCH_STRATEGIES) | set(ROLLOUT_STRATEGIES) | set(BASELINE_STRATEGIES)
        assert families <= set(STRATEGIES)

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_create_strategy(self, name):
        strategy = fast_strategy(name)
        assert isinstance(strategy, BaseStrategy)
        assert isinstance(strategy, Strategy)
        assert strategy.name == name

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            create_strategy("gto_wizard")

    def test_options_must_match_config(self):
        with pytest.raises(TypeError):
            create_strategy("minimax", simulations=10)


class TestLegality:
    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_call_larger_than_stack(self, name, make_player, make_state):
        strategy = fast_strategy(name)
        player = make_player("AsKs", chips=50)
        state = make_state(pot=300, to_call=200)

        decision = strategy.decide(player, 200, (), 300, state)

        assert decision.action != ActionType.CHECK
        assert decision.amount <= player.chips
        if decision.action == ActionType.CALL:
            assert decision.amount == 50

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_free_action_never_folds(self, name, make_player, make_state):
        strategy = fast_strategy(name)
        state = make_state(pot=60, to_call=0, board="Kd8c3h")
        decision = strategy.decide(make_player("7h2c"), 0, state.community_cards, 60, state)

        assert decision.action in (ActionType.CHECK, ActionType.RAISE)
        if decision.action == ActionType.RAISE:
            assert state.min_raise <= decision.amount <= 1000

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    @pytest.mark.parametrize("to_call", [0, 20, 200])
    def test_missing_snapshot_still_decides(self, name, to_call, make_player):
        strategy = fast_strategy(name)
        player = make_player("AsAh", seat=0)

        decision = strategy.decide(player, to_call, (), 100, None)

        if to_call == 0:
            assert decision == Decision.check()
        else:
            assert decision in (Decision.fold(), Decision.call(to_call))
        assert decision.trace.reasoning_steps[-1] == f"Final decision: {decision}"

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_every_decision_carries_trace(self, name, make_player, make_state):
        strategy = fast_strategy(name)
        decision = strategy.decide(make_player(), 20, (), 100, make_state())

        assert decision.trace is not None
        assert decision.trace.strategy == name
        assert decision.trace.reasoning_steps[-1] == f"Final decision: {decision}"
        assert not decision.trace.fallback


class TestAgent:
    @pytest.mark.parametrize("name", SEARCH_STRATEGIES)
    def test_near_nuts_heads_up_raises(self, name, make_player, make_state):
        agent = Agent.from_config(0, AgentConfig(strategy=name, seed=3),
                                  strength_fn=fixed_strength(0.85))
        state = make_state(pot=100, to_call=20, n_opponents=1)

        decision = agent.act(make_player("AsKs", seat=1), state)

        assert decision.action == ActionType.RAISE
        assert agent.last_trace is decision.trace

    @pytest.mark.parametrize("name", ROLLOUT_STRATEGIES)
    def test_rollouts_raise_the_nuts(self, name, make_player, make_state):
        config = AgentConfig(strategy=name, options=FAST_OPTIONS[name], seed=3)
        agent = Agent.from_config(0, config)
        state = make_state(pot=100, to_call=20, board="QsJsTs2h3d")

        decision = agent.act(make_player("AsKs"), state)
        assert decision.action == ActionType.RAISE

    def test_history_record(self, make_player, make_state):
        agent = Agent(0, fast_strategy("position_based"))
        state = make_state(pot=100, to_call=20, board="Kd8c3h", hand_number=7)

        decision = agent.act(make_player(), state)

        record = agent.history[-1]
        assert record.hand_number == 7
        assert record.street == Street.FLOP
        assert record.decision == decision
        assert record.active_players == 2
        assert record.position == Position.SMALL_BLIND
        assert 0.0 <= record.hand_strength <= 1.0
        assert record.elapsed >= 0.0

    def test_history_is_bounded(self, make_player, make_state):
        agent = Agent(0, fast_strategy("position_based"))
        player = make_player()
        for hand in range(HISTORY_LIMIT + 5):
            agent.act(player, make_state(hand_number=hand))

        assert len(agent.history) == HISTORY_LIMIT
        assert agent.history[0].hand_number == 5

    def test_rejects_foreign_view(self, make_player, make_state):
        agent = Agent(0, fast_strategy("minimax"))
        with pytest.raises(ValueError):
            agent.act(make_player(player_id=3), make_state())

    def test_strategy_failure_uses_fallback(self, make_player, make_state, caplog):
        def broken(hole, board):
            raise RuntimeError("boom")

        agent = Agent(0, create_strategy("expectimax", strength_fn=broken))
        with caplog.at_level(logging.ERROR, logger="pokerai"):
            decision = agent.act(make_player(), make_state(pot=100, to_call=50))

        assert decision == Decision.fold()
        assert agent.last_trace.fallback
        assert agent.history[-1].hand_strength is None
        assert "expectimax strategy failed" in caplog.text

    def test_name_and_repr(self):
        agent = Agent(2, fast_strategy("bayesian"))
        assert agent.name == "Agent 2"
        assert "BayesianStrategy" in repr(agent)


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()
        assert config.strategy == "monte_carlo"
        assert config.options == {}
        assert config.seed is None

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            AgentConfig(strategy="nope")

    def test_from_mapping(self):
        config = AgentConfig.from_mapping({
            "strategy": "alpha_beta",
            "options": {"max_depth": 3},
            "seed": "12",
        })
        assert config == AgentConfig("alpha_beta", {"max_depth": 3}, 12)

    def test_from_env(self):
        config = AgentConfig.from_env({
            "POKERAI_STRATEGY": "weighted_simulation",
            "POKERAI_SIMULATIONS": "250",
            "POKERAI_SEED": "9",
        })
        assert config.strategy == "weighted_simulation"
        assert config.options == {"simulations": 250}
        assert config.seed == 9

    def test_from_env_ignores_simulations_for_search(self):
        config = AgentConfig.from_env({
            "POKERAI_STRATEGY": "minimax",
            "POKERAI_SIMULATIONS": "250",
        })
        assert config.options == {}
        assert config.seed is None

    def test_from_env_defaults(self):
        assert AgentConfig.from_env({}) == AgentConfig()

    def test_from_config_builds_tuned_strategy(self):
        config = AgentConfig("monte_carlo", {"simulations": 1234}, seed=1)
        agent = Agent.from_config(4, config)
        assert agent.player_id == 4
        assert agent.strategy.config.simulations == 1234


class TestRendering:
    def decide(self, make_player, make_state, name="expectimax", **kwargs):
        strategy = create_strategy(name, seed=2, **kwargs)
        return strategy.decide(make_player(), 20, (), 100, make_state())

    def render(self, renderable):
        console = Console(record=True, width=140)
        console.print(renderable)
        return console.export_text()

    def test_render_trace_marks_best_path(self, make_player, make_state):
        decision = self.decide(make_player, make_state)
        text = self.render(render_trace(decision.trace, max_depth=2))

        assert "expectimax" in text
        assert "* " in text
        assert "p=" in text
        assert "more" in text

    def test_reasoning_table(self, make_player, make_state):
        decision = self.decide(make_player, make_state, name="bayesian")
        text = self.render(reasoning_table(decision.trace))

        assert "bayesian reasoning" in text
        assert "Final decision" in text

    def test_fallback_is_flagged(self, make_player, make_state):
        decision = self.decide(make_player, make_state, name="minimax",
                               strength_fn=lambda hole, board: 1 / 0)
        text = self.render(render_trace(decision.trace))
        assert "[fallback]" in text

    def test_print_trace(self, make_player, make_state):
        decision = self.decide(make_player, make_state, name="alpha_beta")
        console = Console(record=True, width=140)
        print_trace(decision.trace, console=console)
        text = console.export_text()
        assert "RAISE" in text or "CALL" in text
        assert "alpha_beta reasoning" in text


class TestLogging:
    def test_configure_logging_sets_package_level(self, monkeypatch):
        monkeypatch.setenv("POKERAI_LOG_LEVEL", "debug")
        logger = configure_logging(rich=False)
        try:
            assert logger.name == "pokerai"
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(logging.NOTSET)

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("POKERAI_LOG_LEVEL", "debug")
        logger = configure_logging("warning", extra_loggers=["pokerai.agent"])
        try:
            assert logger.level == logging.WARNING
            assert logging.getLogger("pokerai.agent").level == logging.WARNING
        finally:
            logger.setLevel(logging.NOTSET)
            logging.getLogger("pokerai.agent").setLevel(logging.NOTSET)
