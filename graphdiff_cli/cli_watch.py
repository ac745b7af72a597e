"""Watch mode: recompare two graph files whenever either one changes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .config_manager import engine_from_config, load_config, parser_from_config, watch_interval
from .models import ComparisonResult
from .orchestrator import ComparisonOrchestrator
from .report import result_line, sink_lines

console = Console()

QUIT_COMMANDS = {"q", "quit", "exit"}


def watch(
    left: Path = typer.Argument(..., exists=True, dir_okay=False, help="First graph file."),
    right: Path = typer.Argument(..., exists=True, dir_okay=False, help="Second graph file."),
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", min=0.01, help="Polling interval in seconds."
    ),
    sinks: bool = typer.Option(False, "--sinks", help="Also list sink nodes of the reloaded graph."),
):
    """👀 Watch two graph files and print a fresh score on every change.

    Example:
      gd watch before.dot after.dot
      gd watch a.dot b.dot --interval 0.5
    """
    cfg = load_config()
    try:
        parser = parser_from_config(cfg)
        engine = engine_from_config(cfg)
        poll_interval = interval if interval is not None else watch_interval(cfg)
    except (TypeError, ValueError) as exc:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1)

    orchestrator: ComparisonOrchestrator

    def report(result: ComparisonResult) -> None:
        if sinks:
            slots = orchestrator.slots if result.trigger is None else [orchestrator.slots[result.trigger]]
            for slot in slots:
                for line in sink_lines(slot.snapshot()):
                    console.print(escape(line))
        console.print(result_line(result))
        for slot in orchestrator.slots:
            if not slot.loaded:
                console.print(f"[dim]  slot {slot.index} has no graph yet: {escape(str(slot.path))}[/dim]")

    def report_error(index: int, exc: Exception) -> None:
        console.print(f"[red]✗[/red] {escape(str(exc))} [dim](keeping previous graph for slot {index})[/dim]")

    orchestrator = ComparisonOrchestrator(
        left,
        right,
        parser=parser,
        engine=engine,
        on_result=report,
        on_error=report_error,
        interval=poll_interval,
    )

    console.print(f"\n[bold green]👀 Watching[/bold green] [cyan]{escape(str(left))}[/cyan] and [cyan]{escape(str(right))}[/cyan]")
    console.print(f"[dim]  Interval: {poll_interval}s[/dim]\n")

    orchestrator.start()
    try:
        while True:
            try:
                answer = console.input(escape("quit? [type q]: "))
            except EOFError:
                break
            if answer.strip().lower() in QUIT_COMMANDS:
                break
    except KeyboardInterrupt:
        pass
    finally:
        orchestrator.stop()

    console.print(f"\n[yellow]Stopped watching.[/yellow] Recomputed {orchestrator.recompute_count} time(s).")
