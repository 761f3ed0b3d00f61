"""Decision trace: the explored tree and reasoning log of one decision."""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Optional


class NodeType(Enum):
    """Types of nodes in a decision tree."""
    ROOT = auto()
    PLAYER = auto()       # Our decision
    OPPONENT = auto()     # Adversarial opponent response
    CHANCE = auto()       # Probability-weighted response
    TERMINAL = auto()     # Leaf value


@dataclass(frozen=True)
class TraceNode:
    """
    A node explored during search.

    Nodes are built bottom-up: children are complete before their parent
    is created, so a finished tree is never mutated.
    """
    action: str
    node_type: NodeType = NodeType.PLAYER
    amount: int = 0
    value: Optional[float] = None
    probability: Optional[float] = None   # Probability of reaching from parent
    is_leaf: bool = False
    is_best_path: bool = False
    children: tuple["TraceNode", ...] = ()

    @property
    def label(self) -> str:
        if self.node_type == NodeType.ROOT:
            return "ROOT"
        text = self.action.upper()
        if self.amount:
            text += f" {self.amount}"
        return text

    def with_best_child(self, index: int) -> "TraceNode":
        """Copy of this node with child ``index`` marked as the best path."""
        children = tuple(
            replace(child, is_best_path=True) if i == index else child
            for i, child in enumerate(self.children)
        )
        return replace(self, children=children)

    def to_dict(self) -> dict:
        """Plain-data form for external loggers."""
        data = {
            "action": self.label if self.node_type == NodeType.ROOT else self.action,
            "type": self.node_type.name.lower(),
            "value": self.value,
            "is_leaf": self.is_leaf,
            "is_best_path": self.is_best_path,
        }
        if self.amount:
            data["amount"] = self.amount
        if self.probability is not None:
            data["probability_of_reaching"] = self.probability
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
            best = [i for i, c in enumerate(self.children) if c.is_best_path]
            if best:
                data["best_child_index"] = best[0]
        return data


def leaf(action: str, value: float, probability: Optional[float] = None,
         amount: int = 0) -> TraceNode:
    """Shorthand for a terminal node."""
    return TraceNode(
        action=action,
        node_type=NodeType.TERMINAL,
        amount=amount,
        value=value,
        probability=probability,
        is_leaf=True,
    )


@dataclass(frozen=True)
class DecisionTrace:
    """
    Diagnostics for a single decision.

    Purely observational: produced by a strategy, handed to whoever renders
    or logs it, and never read back by the engine.
    """
    strategy: str
    reasoning_steps: tuple[str, ...] = ()
    nodes_explored: int = 0
    max_depth: int = 0
    simulations_run: int = 0
    root: Optional[TraceNode] = None
    evaluation: dict = field(default_factory=dict)
    fallback: bool = False

    def count_nodes(self) -> dict[str, int]:
        """Count tree nodes by type."""
        counts = {"total": 0}
        for node_type in NodeType:
            counts[node_type.name.lower()] = 0

        def count_recursive(node: TraceNode):
            counts["total"] += 1
            counts[node.node_type.name.lower()] += 1
            for child in node.children:
                count_recursive(child)

        if self.root:
            count_recursive(self.root)

        return counts

    def best_path(self) -> list[TraceNode]:
        """Follow best-path markers down from the root."""
        path = []
        node = self.root
        while node is not None:
            node = next((c for c in node.children if c.is_best_path), None)
            if node is not None:
                path.append(node)
        return path

    def get_leaf_nodes(self) -> list[TraceNode]:
        """Get all leaf nodes in the tree."""
        leaves = []

        def collect_leaves(node: TraceNode):
            if node.is_leaf:
                leaves.append(node)
            for child in node.children:
                collect_leaves(child)

        if self.root:
            collect_leaves(self.root)

        return leaves


class TraceRecorder:
    """
    Collects counters and reasoning steps while a strategy runs.

    One recorder lives for exactly one ``decide`` call; ``finish`` freezes
    its contents into a DecisionTrace.
    """

    def __init__(self, strategy: str):
        self.strategy = strategy
        self.steps: list[str] = []
        self.nodes_explored = 0
        self.max_depth = 0
        self.simulations_run = 0
        self.evaluation: dict = {}

    def log(self, message: str) -> None:
        self.steps.append(message)

    def visit(self, depth: int) -> None:
        """Count one explored node at ``depth``."""
        self.nodes_explored += 1
        if depth > self.max_depth:
            self.max_depth = depth

    def finish(self, root: Optional[TraceNode] = None, fallback: bool = False) -> DecisionTrace:
        return DecisionTrace(
            strategy=self.strategy,
            reasoning_steps=tuple(self.steps),
            nodes_explored=self.nodes_explored,
            max_depth=self.max_depth,
            simulations_run=self.simulations_run,
            root=root,
            evaluation=dict(self.evaluation),
            fallback=fallback,
        )
