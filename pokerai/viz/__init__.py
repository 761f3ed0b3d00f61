"""Visualization module."""

from .trace import render_trace, reasoning_table, print_trace

__all__ = [
    "render_trace",
    "reasoning_table",
    "print_trace",
]
