"""Terminal rendering of decision traces."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from pokerai.game.trace import DecisionTrace, NodeType, TraceNode

# Colours per action family
ACTION_COLORS = {
    "fold": "red",
    "check": "grey50",
    "call": "blue",
    "raise": "green",
}


def _color(action: str) -> str:
    for prefix, color in ACTION_COLORS.items():
        if prefix in action:
            return color
    return "white"


def _node_text(node: TraceNode) -> Text:
    text = Text()
    if node.is_best_path:
        text.append("* ", style="bold yellow")
    text.append(node.label, style=_color(node.action))
    if node.value is not None:
        text.append(f"  {node.value:+.2f}", style="bold" if node.is_best_path else "")
    if node.probability is not None and node.node_type != NodeType.ROOT:
        text.append(f"  p={node.probability:.2f}", style="dim")
    return text


def render_trace(trace: DecisionTrace, max_depth: Optional[int] = None) -> Tree:
    """
    Build a rich Tree of the explored nodes.

    Best-path nodes are starred. Each node shows its value and, where set,
    its probability of being reached from its parent.

    Args:
        trace: Trace returned with a Decision
        max_depth: Stop expanding below this depth (None for the whole tree)
    """
    header = Text(f"{trace.strategy}", style="bold")
    header.append(f"  nodes={trace.nodes_explored} depth={trace.max_depth}", style="dim")
    if trace.simulations_run:
        header.append(f" simulations={trace.simulations_run}", style="dim")
    if trace.fallback:
        header.append("  [fallback]", style="bold red")
    tree = Tree(header)

    def add(branch: Tree, node: TraceNode, depth: int) -> None:
        child_branch = branch.add(_node_text(node))
        if max_depth is not None and depth >= max_depth:
            if node.children:
                child_branch.add(Text(f"... {len(node.children)} more", style="dim"))
            return
        for child in node.children:
            add(child_branch, child, depth + 1)

    if trace.root is not None:
        for child in trace.root.children:
            add(tree, child, 1)

    return tree


def reasoning_table(trace: DecisionTrace) -> Table:
    """Numbered table of the strategy's reasoning steps."""
    table = Table(title=f"{trace.strategy} reasoning", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step")

    for i, step in enumerate(trace.reasoning_steps, 1):
        table.add_row(str(i), step)

    return table


def print_trace(trace: DecisionTrace, console: Optional[Console] = None,
                max_depth: Optional[int] = 3) -> None:
    """Print tree and reasoning to the terminal."""
    console = console or Console()
    if trace.root is not None:
        console.print(render_trace(trace, max_depth=max_depth))
        console.print()
    console.print(reasoning_table(trace))
