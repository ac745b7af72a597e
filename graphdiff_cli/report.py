"""Console rendering for comparison results and parsed graphs."""

from __future__ import annotations

import math
from typing import List

from rich.markup import escape
from rich.table import Table

from .models import ComparisonResult, Graph

SCORE_PRECISION = 6


def format_score(score: float) -> str:
    """``score: 0.250000``, or ``score: undefined`` for degenerate input."""
    if not math.isfinite(score):
        return "score: undefined"
    return f"score: {score:.{SCORE_PRECISION}f}"


def result_line(result: ComparisonResult) -> str:
    line = format_score(result.score)
    if result.trigger is not None:
        line += f"  [dim](slot {result.trigger} changed, {result.matched}/{result.total} matched)[/dim]"
    elif result.is_defined:
        line += f"  [dim]({result.matched}/{result.total} matched)[/dim]"
    return line


def sink_lines(graph: Graph) -> List[str]:
    """Names of nodes without outgoing edges, followed by a count line."""
    sinks = graph.sinks()
    lines = [node.name for node in sinks]
    lines.append(f"sinks: {len(sinks)} of {len(graph.nodes)}")
    return lines


def matches_table(result: ComparisonResult) -> Table:
    table = Table(title="Nearest matches", show_lines=False)
    table.add_column("Node", style="cyan")
    table.add_column("Closest", style="magenta")
    table.add_column("Distance", justify="right")
    table.add_column("Matched", justify="center")
    for match in result.matches:
        table.add_row(
            escape(match.name),
            escape(match.best_match or "-"),
            f"{match.distance:.4f}",
            "[green]✓[/green]" if match.matched else "[red]✗[/red]",
        )
    return table


def graph_table(graph: Graph) -> Table:
    table = Table(title=escape(graph.source or "graph"))
    table.add_column("Node", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Fan-in", justify="right")
    table.add_column("Fan-out", justify="right")
    for node in graph.nodes:
        table.add_row(
            escape(node.name),
            f"{node.value:g}" if node.has_value else "[dim]-[/dim]",
            str(node.fan_in),
            str(node.fan_out),
        )
    return table
