"""Online opponent models built from observed actions."""

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterable, Optional

import numpy as np

from pokerai.game.state import ActionType, LastAction

logger = logging.getLogger(__name__)

MODEL_FLOOR = 0.1
MODEL_CEILING = 0.9


def _clamp(value: float) -> float:
    return max(MODEL_FLOOR, min(MODEL_CEILING, value))


class PlayerArchetype(Enum):
    """
    Coarse playing styles read off an opponent model.

    - Nit: folds a lot, rarely puts money in without a hand
    - TAG: tight and aggressive
    - LAG: loose and aggressive
    - Maniac: raises almost everything
    - Calling Station: calls too much, rarely raises
    - Fish: loose-passive without a clear pattern
    """
    UNKNOWN = auto()
    FISH = auto()
    NIT = auto()
    TAG = auto()
    LAG = auto()
    MANIAC = auto()
    CALLING_STATION = auto()

    def description(self) -> str:
        """Human-readable description of archetype."""
        descriptions = {
            self.UNKNOWN: "Unknown - insufficient data",
            self.FISH: "Fish - loose-passive",
            self.NIT: "Nit - folds often, continues with strength",
            self.TAG: "TAG - tight-aggressive",
            self.LAG: "LAG - loose-aggressive",
            self.MANIAC: "Maniac - raises relentlessly",
            self.CALLING_STATION: "Calling Station - calls too much",
        }
        return descriptions.get(self, "Unknown")


@dataclass(frozen=True)
class ArchetypeProfile:
    """Model-space region for an archetype."""
    archetype: PlayerArchetype
    aggression_range: tuple[float, float]
    call_range: tuple[float, float]
    tightness_range: tuple[float, float]

    def distance(self, model: "OpponentModel") -> float:
        """Normalised distance from the model to the profile centre."""
        total = 0.0
        for (low, high), value in (
            (self.aggression_range, model.aggression_factor),
            (self.call_range, model.call_frequency),
            (self.tightness_range, model.tightness),
        ):
            centre = (low + high) / 2
            width = max(high - low, 0.1)
            total += ((value - centre) / width) ** 2
        return float(np.sqrt(total))


ARCHETYPE_PROFILES = [
    ArchetypeProfile(PlayerArchetype.NIT, (0.1, 0.45), (0.1, 0.4), (0.6, 0.9)),
    ArchetypeProfile(PlayerArchetype.TAG, (0.55, 0.75), (0.1, 0.5), (0.5, 0.9)),
    ArchetypeProfile(PlayerArchetype.LAG, (0.55, 0.75), (0.4, 0.9), (0.1, 0.5)),
    ArchetypeProfile(PlayerArchetype.MANIAC, (0.75, 0.9), (0.1, 0.9), (0.1, 0.5)),
    ArchetypeProfile(PlayerArchetype.CALLING_STATION, (0.1, 0.45), (0.65, 0.9), (0.1, 0.5)),
    ArchetypeProfile(PlayerArchetype.FISH, (0.3, 0.55), (0.45, 0.7), (0.1, 0.5)),
]


@dataclass
class OpponentModel:
    """
    Behavioural tendencies of one opponent.

    Every field is a running mean of per-action samples, kept within
    [0.1, 0.9]. All fields share one observation counter.
    """
    player_id: int
    aggression_factor: float = 0.5
    bluff_frequency: float = 0.2
    call_frequency: float = 0.5
    tightness: float = 0.5
    observations: int = 0

    MIN_OBSERVATIONS = 3

    def _mean(self, old: float, sample: float) -> float:
        n = self.observations
        return (old * (n - 1) + sample) / n

    def observe(self, action: LastAction, pot_size: int, board_size: int) -> None:
        """
        Fold one observed action into the model.

        Args:
            action: The opponent's most recent action
            pot_size: Pot the action was made into
            board_size: Visible community cards at the time
        """
        self.observations += 1

        if action.action == ActionType.RAISE:
            self.aggression_factor = self._mean(self.aggression_factor, 1.0)
            if board_size >= 3:
                bluff_sample = 0.1 if action.amount > pot_size * 0.7 else 0.3
                self.bluff_frequency = self._mean(self.bluff_frequency, bluff_sample)
        elif action.action == ActionType.CALL:
            self.call_frequency = self._mean(self.call_frequency, 1.0)
            self.aggression_factor = self._mean(self.aggression_factor, 0.3)
        elif action.action == ActionType.FOLD:
            self.tightness = self._mean(self.tightness, 0.7)
            self.call_frequency = self._mean(self.call_frequency, 0.0)

        self.aggression_factor = _clamp(self.aggression_factor)
        self.bluff_frequency = _clamp(self.bluff_frequency)
        self.call_frequency = _clamp(self.call_frequency)
        self.tightness = _clamp(self.tightness)

    @property
    def archetype(self) -> PlayerArchetype:
        """Closest archetype profile, once enough actions have been seen."""
        if self.observations < self.MIN_OBSERVATIONS:
            return PlayerArchetype.UNKNOWN
        return min(ARCHETYPE_PROFILES, key=lambda p: p.distance(self)).archetype


class OpponentModelTable:
    """
    Opponent models keyed by stable player id.

    Owned by a single strategy instance; never share one table between
    agents.
    """

    def __init__(self):
        self._models: dict[int, OpponentModel] = {}

    def get(self, player_id: int) -> Optional[OpponentModel]:
        return self._models.get(player_id)

    def model_for(self, player_id: int) -> OpponentModel:
        """Existing model for ``player_id``, or a new one at neutral priors."""
        model = self._models.get(player_id)
        if model is None:
            model = OpponentModel(player_id)
            self._models[player_id] = model
            logger.debug("Created opponent model for player %s", player_id)
        return model

    def observe_all(self, opponents: Iterable, pot_size: int, board_size: int) -> int:
        """
        Update models for every live opponent with a recorded last action.

        Returns:
            Number of models updated
        """
        updated = 0
        for opponent in opponents:
            if opponent.folded:
                continue
            model = self.model_for(opponent.player_id)
            if opponent.last_action is None:
                continue
            model.observe(opponent.last_action, pot_size, board_size)
            updated += 1
        return updated

    def snapshot(self) -> dict[int, OpponentModel]:
        """Copies of every model, safe to hand to diagnostics."""
        return {pid: replace(model) for pid, model in self._models.items()}

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, player_id: int) -> bool:
        return player_id in self._models
