"""
PokerAI: Decision Engine for Automated Hold'em Agents

Ranks hands and chooses fold/check/call/raise through a family of
interchangeable strategies: game-tree search (minimax, alpha-beta,
expectimax), rollout simulation (Monte Carlo, weighted simulation),
Bayesian opponent modelling and a position-based heuristic.
"""

__version__ = "0.1.0"
