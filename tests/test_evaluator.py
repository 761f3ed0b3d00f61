"""Tests for hand ranking and strength estimation."""

import itertools

import numpy as np
import pytest

from pokerai.game.cards import parse_cards, remaining_deck
from pokerai.game.evaluator import (
    HandCategory,
    INCOMPLETE,
    calculate_win_probability,
    compare_hands,
    estimate_hand_strength,
    evaluate,
    fast_rank,
    made_hand_strength,
    preflop_equity,
)


def ev(text):
    return evaluate(parse_cards(text))


class TestEvaluate:
    def test_royal_flush(self):
        result = ev("AsKsQsJsTs 2h3d")
        assert result.category == HandCategory.ROYAL_FLUSH
        assert result.category_rank == 9

    def test_full_house_prefers_trips_group(self):
        result = ev("2s2h2d3s3h")
        assert result.category == HandCategory.FULL_HOUSE
        assert result.description.lower() == "full house, 2s over 3s"
        assert result.ranks == (2, 2, 2, 3, 3)

    def test_full_house_from_two_trips(self):
        result = ev("3s3h3d7s7h7dKs")
        assert result.category == HandCategory.FULL_HOUSE
        assert result.ranks == (7, 7, 7, 3, 3)

    def test_wheel(self):
        result = ev("As2d3c4h5s")
        assert result.category == HandCategory.STRAIGHT
        assert "five-high" in result.description.lower()
        assert result.ranks == (5, 4, 3, 2, 1)

    def test_highest_straight_preferred_over_wheel(self):
        result = ev("As2d3c4h5s6d")
        assert result.category == HandCategory.STRAIGHT
        assert result.ranks[0] == 6

    def test_straight_flush(self):
        result = ev("9h8h7h6h5h Ad")
        assert result.category == HandCategory.STRAIGHT_FLUSH

    @pytest.mark.parametrize("text,category", [
        ("KsKhKdKc2s", HandCategory.FOUR_OF_A_KIND),
        ("As9s7s4s2s", HandCategory.FLUSH),
        ("7s7h7d2c9s", HandCategory.THREE_OF_A_KIND),
        ("KsKh9d9c2s", HandCategory.TWO_PAIR),
        ("JsJh9d4c2s", HandCategory.PAIR),
        ("As9h7d4c2s", HandCategory.HIGH_CARD),
    ])
    def test_categories(self, text, category):
        assert ev(text).category == category

    def test_seven_cards_pick_best_five(self):
        result = ev("KsKh9d9c2s2h As")
        assert result.category == HandCategory.TWO_PAIR
        assert result.ranks == (13, 13, 9, 9, 14)

    def test_incomplete(self):
        result = ev("AsKs")
        assert result is INCOMPLETE
        assert result.category_rank == -1
        assert not result.is_complete

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            evaluate([])

    def test_duplicates_raise(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ev("AsAs2h3d4c")


class TestCompareHands:
    def test_category_order(self):
        ranked = [
            ev("As9h7d4c2s"),
            ev("JsJh9d4c2s"),
            ev("KsKh9d9c2s"),
            ev("7s7h7d2c9s"),
            ev("As2d3c4h5s"),
            ev("As9s7s4s2s"),
            ev("2s2h2d3s3h"),
            ev("KsKhKdKc2s"),
            ev("9h8h7h6h5h"),
            ev("AsKsQsJsTs"),
        ]
        for weaker, stronger in zip(ranked, ranked[1:]):
            assert compare_hands(stronger, weaker) > 0
            assert compare_hands(weaker, stronger) < 0

    def test_kicker_decides(self):
        assert compare_hands(ev("AsAhKd7c2s"), ev("AdAcQd7h2h")) > 0

    def test_exact_tie(self):
        assert compare_hands(ev("AsKhQd9c7s"), ev("AhKdQc9s7h")) == 0

    def test_wheel_loses_to_six_high(self):
        assert compare_hands(ev("2s3h4d5c6s"), ev("As2d3c4h5s")) > 0

    def test_transitive_and_matches_treys(self):
        rng = np.random.default_rng(5)
        deck = remaining_deck([])
        hands = []
        for _ in range(40):
            idx = rng.choice(len(deck), size=7, replace=False)
            hands.append([deck[i] for i in idx])
        results = [evaluate(h) for h in hands]

        for a, b, c in itertools.combinations(range(len(hands)), 3):
            if compare_hands(results[a], results[b]) >= 0 and compare_hands(results[b], results[c]) >= 0:
                assert compare_hands(results[a], results[c]) >= 0

        for a, b in itertools.combinations(range(len(hands)), 2):
            ours = compare_hands(results[a], results[b])
            treys_a = fast_rank([c.to_treys() for c in hands[a][:2]],
                                [c.to_treys() for c in hands[a][2:]])
            treys_b = fast_rank([c.to_treys() for c in hands[b][:2]],
                                [c.to_treys() for c in hands[b][2:]])
            assert np.sign(ours) == np.sign(treys_b - treys_a)


class TestWinProbability:
    def test_stage_scaling(self):
        result = ev("AsKsQsJsTs")
        assert calculate_win_probability(result, parse_cards("QsJsTs")) == pytest.approx(0.99 * 0.8)
        assert calculate_win_probability(result, parse_cards("QsJsTs2h3d")) == pytest.approx(0.99)

    def test_incomplete_is_zero(self):
        assert calculate_win_probability(INCOMPLETE, []) == 0.0


class TestStrength:
    def test_preflop_equity_bounds(self):
        deck = remaining_deck([])
        for a, b in itertools.combinations(deck[::3], 2):
            assert 0.35 <= preflop_equity([a, b]) <= 0.90

    def test_preflop_aces_beat_trash(self):
        assert preflop_equity(parse_cards("AsAh")) > preflop_equity(parse_cards("7h2c"))

    def test_estimate_uses_preflop_table(self):
        hole = parse_cards("AsAh")
        assert estimate_hand_strength(hole, []) == preflop_equity(hole)

    def test_estimate_postflop(self):
        hole = parse_cards("AsKs")
        board = parse_cards("QsJsTs")
        assert estimate_hand_strength(hole, board) == pytest.approx(0.99 * 0.8)

    def test_made_strength_pocket_pair(self):
        assert made_hand_strength(parse_cards("9s9h"), []) == 0.45
        assert made_hand_strength(parse_cards("9s8h"), []) == 0.25
