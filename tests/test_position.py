"""Tests for the position-based strategy."""

import logging

import pytest

from pokerai.game.cards import parse_cards
from pokerai.game.state import ActionType, Decision, Position, Street
from pokerai.strategies import PositionStrategy
from pokerai.strategies.position import DrawType, identify_draw, preflop_score


class TestIdentifyDraw:
    @pytest.mark.parametrize("hole,board,expected", [
        ("AhKh", "Qh7h2c", DrawType.FLUSH_DRAW),
        ("9s8d", "7c6h2d", DrawType.OPEN_STRAIGHT_DRAW),
        ("9s8d", "6c5h2d", DrawType.GUTSHOT),
        ("9h8h", "7h6c2h", DrawType.STRAIGHT_FLUSH_DRAW),
        ("As2d", "3c4hKs", DrawType.OPEN_STRAIGHT_DRAW),
        ("AsKd", "7c4h2s", DrawType.NONE),
    ])
    def test_draws(self, hole, board, expected):
        assert identify_draw(parse_cards(hole), parse_cards(board)) == expected

    def test_no_draw_preflop_or_river(self):
        assert identify_draw(parse_cards("9h8h"), []) == DrawType.NONE
        assert identify_draw(parse_cards("9h8h"), parse_cards("7h6c2hKs3d")) == DrawType.NONE


class TestPreflopScore:
    def test_bounds(self):
        for hole in ("AsAh", "AsKs", "7h2c", "2s2h", "JdTd"):
            for position in Position:
                assert 0.0 <= preflop_score(parse_cards(hole), position) <= 1.0

    def test_aces_beat_trash(self):
        assert (preflop_score(parse_cards("AsAh"), Position.EARLY)
                > preflop_score(parse_cards("7h2c"), Position.BUTTON))

    def test_position_matters(self):
        hand = parse_cards("Jd9d")
        button = preflop_score(hand, Position.BUTTON)
        early = preflop_score(hand, Position.EARLY)
        small_blind = preflop_score(hand, Position.SMALL_BLIND)
        assert button > early > small_blind

    def test_trash_offsuit(self):
        assert preflop_score(parse_cards("7h2c"), Position.EARLY) == pytest.approx(
            0.5 * 7 / 14 + 0.2 * 2 / 14 - 0.05)


class TestAdjustForPosition:
    def test_street_scaling(self):
        strategy = PositionStrategy()
        assert strategy.adjust_for_position(0.5, Position.BUTTON, Street.PREFLOP) == \
            pytest.approx(0.5 + 0.07 * 1.5)
        assert strategy.adjust_for_position(0.5, Position.BUTTON, Street.FLOP) == \
            pytest.approx(0.57)
        assert strategy.adjust_for_position(0.5, Position.BUTTON, Street.RIVER) == \
            pytest.approx(0.5 + 0.07 * 0.7)

    def test_clamped(self):
        strategy = PositionStrategy()
        assert strategy.adjust_for_position(1.0, Position.LATE, Street.FLOP) == 1.0
        assert strategy.adjust_for_position(0.0, Position.SMALL_BLIND, Street.FLOP) == 0.0

    def test_unknown_position_is_neutral(self):
        strategy = PositionStrategy()
        assert strategy.adjust_for_position(0.42, Position.UNKNOWN, Street.TURN) == 0.42


class TestPositionDecisions:
    def test_premium_preflop_raises(self, make_player, make_state):
        strategy = PositionStrategy(seed=1)
        state = make_state(pot=30, to_call=10, n_opponents=5)
        decision = strategy.decide(make_player("AsAh", seat=0), 10, (), 30, state)

        assert decision.action == ActionType.RAISE
        assert decision.trace.evaluation["position"] == "button"

    def test_trash_folds_to_raise(self, make_player, make_state):
        strategy = PositionStrategy(seed=1)
        state = make_state(pot=100, to_call=60, n_opponents=5)
        decision = strategy.decide(make_player("7h2c", seat=3), 60, (), 100, state)
        assert decision == Decision.fold()

    def test_weak_gutshot_folds_to_big_bet(self, make_player, make_state):
        strategy = PositionStrategy(seed=1)
        state = make_state(pot=100, to_call=200, board="6c5h2dKc")
        decision = strategy.decide(make_player("9s8d"), 200, state.community_cards, 100, state)
        assert decision == Decision.fold()

    def test_flush_draw_plays_aggressively(self, make_player, make_state):
        strategy = PositionStrategy(seed=1)
        state = make_state(pot=100, to_call=20, board="Qh7h2c")
        decision = strategy.decide(make_player("AhKh"), 20, state.community_cards, 100, state)

        assert decision.action in (ActionType.CALL, ActionType.RAISE)
        assert decision.trace.evaluation["draw"] == DrawType.FLUSH_DRAW.value

    def test_raise_without_snapshot_falls_back(self, make_player, caplog):
        strategy = PositionStrategy(seed=1)
        with caplog.at_level(logging.ERROR):
            decision = strategy.decide(make_player("AsAh", seat=0), 0, (), 100, None)

        assert decision == Decision.check()
        assert decision.trace.fallback
        assert decision.trace.root is None
        assert "Error in algorithm, defaulting to conservative decision" in decision.trace.reasoning_steps
        assert "could not legalise" in caplog.text
