"""Opponent modelling module."""

from .opponents import (
    PlayerArchetype,
    OpponentModel,
    OpponentModelTable,
)

__all__ = [
    "PlayerArchetype",
    "OpponentModel",
    "OpponentModelTable",
]
