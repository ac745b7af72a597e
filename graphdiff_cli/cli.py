"""Typer-based CLI for GraphDiff."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .cli_watch import watch
from .config_manager import (
    engine_from_config,
    load_config,
    parser_from_config,
    set_config_value,
)
from .parser import DotGraphParser, GraphParseError
from .report import graph_table, matches_table, result_line, sink_lines

console = Console()

app = typer.Typer(
    help="🔀 GraphDiff — compare rank-annotated DOT graphs, live.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration — polling, parser and similarity settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")

app.command("watch")(watch)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"GraphDiff CLI v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """GraphDiff CLI: structural dissimilarity between two dependency graphs."""
    _configure_logging(verbose)


def _settings(cfg):
    """Parser and engine for *cfg*; exits on settings they reject."""
    try:
        return parser_from_config(cfg), engine_from_config(cfg)
    except (TypeError, ValueError) as exc:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(exc))}")
        console.print("[dim]Fix it with 'gd config set' or edit the config file.[/dim]")
        raise typer.Exit(1)


def _load(parser: DotGraphParser, path: Path):
    try:
        return parser.parse_file(path)
    except (OSError, GraphParseError) as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)


@app.command("compare")
def compare(
    left: Path = typer.Argument(..., exists=True, dir_okay=False, help="First graph file."),
    right: Path = typer.Argument(..., exists=True, dir_okay=False, help="Second graph file."),
    details: bool = typer.Option(False, "--details", "-d", help="Show the nearest match of every node."),
    sinks: bool = typer.Option(False, "--sinks", help="List sink nodes of both graphs."),
):
    """Compare two graph files once and print the dissimilarity score."""
    parser, engine = _settings(load_config())
    g1 = _load(parser, left)
    g2 = _load(parser, right)

    if sinks:
        for graph in (g1, g2):
            for line in sink_lines(graph):
                console.print(escape(line))

    result = engine.compare(g1, g2)
    if details and result.matches:
        console.print(matches_table(result))
    console.print(result_line(result))


@app.command("inspect")
def inspect_graph(
    graph_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Graph file to parse."),
):
    """Show the parsed nodes of a graph file with their values and degrees."""
    parser, _ = _settings(load_config())
    graph = _load(parser, graph_file)
    console.print(graph_table(graph))
    fan_in, fan_out = graph.degree_totals()
    console.print(f"Nodes: {len(graph.nodes)} | Edges: {len(graph.edges)} | Fan-in: {fan_in} | Fan-out: {fan_out}")
    for line in sink_lines(graph):
        console.print(escape(line))


@config_app.command("show")
def config_show():
    """Show the effective configuration."""
    from . import config_manager

    cfg = load_config()
    console.print(f"[dim]{escape(str(config_manager.CONFIG_FILE))}[/dim]")
    for section, values in cfg.items():
        console.print(f"[bold]\\[{section}][/bold]")
        for key, value in values.items():
            console.print(f"  {key} = {escape(repr(value))}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting as section.option, e.g. watch.interval."),
    value: str = typer.Argument(..., help="New value (comma separated for lists)."),
):
    """Persist one setting to the config file."""
    try:
        stored = set_config_value(key, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown setting '{key}'.")
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid value for '{key}': {exc}")
    except OSError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {escape(key)} = {escape(repr(stored))}")


if __name__ == "__main__":
    app()
