"""Agent configuration from mappings or environment variables."""

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pokerai.strategies import ROLLOUT_STRATEGIES, STRATEGIES

DEFAULT_STRATEGY = "monte_carlo"


@dataclass
class AgentConfig:
    """
    Which strategy an agent plays and how it is tuned.

    ``options`` are passed to the strategy's config dataclass, so their
    keys must be fields of that class (e.g. ``simulations`` for Monte Carlo).
    """
    strategy: str = DEFAULT_STRATEGY
    options: dict[str, Any] = field(default_factory=dict)
    seed: Optional[int] = None

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            known = ", ".join(sorted(STRATEGIES))
            raise ValueError(f"Unknown strategy '{self.strategy}' (known: {known})")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AgentConfig":
        """Build from a plain mapping such as a parsed JSON/TOML table."""
        options = dict(data.get("options") or {})
        seed = data.get("seed")
        return cls(
            strategy=data.get("strategy", DEFAULT_STRATEGY),
            options=options,
            seed=int(seed) if seed is not None else None,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """
        Build from ``POKERAI_STRATEGY``, ``POKERAI_SIMULATIONS`` and
        ``POKERAI_SEED``.

        The simulation count only applies to rollout strategies.
        """
        env = os.environ if environ is None else environ
        strategy = env.get("POKERAI_STRATEGY", DEFAULT_STRATEGY)
        options: dict[str, Any] = {}

        simulations = env.get("POKERAI_SIMULATIONS")
        if simulations and strategy in ROLLOUT_STRATEGIES:
            options["simulations"] = int(simulations)

        seed = env.get("POKERAI_SEED")
        return cls(strategy=strategy, options=options,
                   seed=int(seed) if seed else None)
