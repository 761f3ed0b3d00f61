"""Decision strategies sharing one calling contract."""

from .base import Strategy, BaseStrategy, fallback_decision, legalize
from .ev import EVParams, call_ev, raise_ev, fold_ev
from .minimax import MinimaxStrategy, MinimaxConfig
from .alpha_beta import AlphaBetaStrategy, AlphaBetaConfig
from .expectimax import ExpectimaxStrategy, ExpectimaxConfig
from .monte_carlo import MonteCarloStrategy, MonteCarloConfig, estimate_win_probability
from .weighted import WeightedSimulationStrategy, WeightedSimulationConfig
from .bayesian import BayesianStrategy, BayesianConfig
from .position import PositionStrategy, PositionConfig
from .kelly import KellyStrategy, KellyConfig
from .heuristic import HeuristicStrategy, HeuristicConfig
from .basic import (
    AdvancedStrategy,
    AggressiveStrategy,
    BasicConfig,
    BasicStrategy,
    ConservativeStrategy,
    IntermediateStrategy,
    RandomStrategy,
)

# name -> (strategy class, config class)
STRATEGIES = {
    "minimax": (MinimaxStrategy, MinimaxConfig),
    "alpha_beta": (AlphaBetaStrategy, AlphaBetaConfig),
    "expectimax": (ExpectimaxStrategy, ExpectimaxConfig),
    "monte_carlo": (MonteCarloStrategy, MonteCarloConfig),
    "weighted_simulation": (WeightedSimulationStrategy, WeightedSimulationConfig),
    "bayesian": (BayesianStrategy, BayesianConfig),
    "position_based": (PositionStrategy, PositionConfig),
    "kelly_criterion": (KellyStrategy, KellyConfig),
    "heuristic": (HeuristicStrategy, HeuristicConfig),
    "basic": (BasicStrategy, BasicConfig),
    "intermediate": (IntermediateStrategy, BasicConfig),
    "advanced": (AdvancedStrategy, BasicConfig),
    "random": (RandomStrategy, BasicConfig),
    "conservative": (ConservativeStrategy, BasicConfig),
    "aggressive": (AggressiveStrategy, BasicConfig),
}

SEARCH_STRATEGIES = ("minimax", "alpha_beta", "expectimax")
ROLLOUT_STRATEGIES = ("monte_carlo", "weighted_simulation")
BASELINE_STRATEGIES = (
    "basic", "intermediate", "advanced", "random", "conservative", "aggressive",
)


def create_strategy(name: str, strength_fn=None, rng=None, seed=None,
                    ev_params=None, **options) -> BaseStrategy:
    """
    Build a strategy by registry name.

    Args:
        name: Registry key, e.g. "monte_carlo"
        strength_fn: Optional hand strength source
        rng: Optional numpy Generator
        seed: Seed for a fresh generator when ``rng`` is omitted
        ev_params: Optional EV constants
        **options: Fields of the strategy's config dataclass

    Returns:
        A fresh strategy instance
    """
    try:
        strategy_cls, config_cls = STRATEGIES[name]
    except KeyError:
        known = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Unknown strategy '{name}' (known: {known})") from None

    kwargs = {"strength_fn": strength_fn, "rng": rng, "seed": seed}
    if ev_params is not None:
        kwargs["ev_params"] = ev_params
    return strategy_cls(config=config_cls(**options), **kwargs)


__all__ = [
    "Strategy",
    "BaseStrategy",
    "fallback_decision",
    "legalize",
    "EVParams",
    "call_ev",
    "raise_ev",
    "fold_ev",
    "MinimaxStrategy",
    "MinimaxConfig",
    "AlphaBetaStrategy",
    "AlphaBetaConfig",
    "ExpectimaxStrategy",
    "ExpectimaxConfig",
    "MonteCarloStrategy",
    "MonteCarloConfig",
    "estimate_win_probability",
    "WeightedSimulationStrategy",
    "WeightedSimulationConfig",
    "BayesianStrategy",
    "BayesianConfig",
    "PositionStrategy",
    "PositionConfig",
    "KellyStrategy",
    "KellyConfig",
    "HeuristicStrategy",
    "HeuristicConfig",
    "BasicConfig",
    "BasicStrategy",
    "IntermediateStrategy",
    "AdvancedStrategy",
    "RandomStrategy",
    "ConservativeStrategy",
    "AggressiveStrategy",
    "STRATEGIES",
    "SEARCH_STRATEGIES",
    "ROLLOUT_STRATEGIES",
    "BASELINE_STRATEGIES",
    "create_strategy",
]
