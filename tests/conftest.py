"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from pokerai.game.cards import parse_cards
from pokerai.game.state import GameStateSnapshot, OpponentState, PlayerView


@pytest.fixture
def rng():
    """Seeded generator so stochastic strategies are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def cards():
    """Parse a card string like 'AsKs' into Card objects."""
    return parse_cards


@pytest.fixture
def make_state():
    """Build a snapshot with ``n_opponents`` live opponents."""

    def _make_state(pot=100, to_call=20, board="", n_opponents=1, **kwargs):
        opponents = tuple(
            OpponentState(player_id=i, seat=i) for i in range(1, n_opponents + 1)
        )
        return GameStateSnapshot(
            pot=pot,
            amount_to_call=to_call,
            community_cards=tuple(parse_cards(board)) if board else (),
            opponents=kwargs.pop("opponents", opponents),
            **kwargs,
        )

    return _make_state


@pytest.fixture
def make_player():
    """Build the acting player's view."""

    def _make_player(hole="AsKs", chips=1000, current_bet=0, seat=3, player_id=0):
        return PlayerView(
            player_id=player_id,
            hole_cards=tuple(parse_cards(hole)),
            chips=chips,
            current_bet=current_bet,
            seat=seat,
        )

    return _make_player


@pytest.fixture
def heads_up_spot(make_state, make_player):
    """Heads-up, pot 100, 20 to call, not on the button."""
    player = make_player("7h2c", seat=1)
    state = make_state(pot=100, to_call=20, n_opponents=1)
    return player, state
