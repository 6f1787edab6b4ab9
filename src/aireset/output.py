"""Output formatting for aireset CLI."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from .models import PHASE_COMPLETE, PHASE_COUNTING, ProgressCallback, ProgressEvent


@dataclass
class OutputContext:
    """Context for output formatting."""

    console: Console
    json_mode: bool = False
    dry_run: bool = False
    quiet: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print message respecting output mode."""
        if not self.json_mode and not self.quiet:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        """Print JSON data."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Print result in appropriate format."""
        if self.json_mode:
            self.print_json(data)
        elif message and not self.quiet:
            self.console.print(message)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print error in appropriate format. Errors are shown even when quiet."""
        if self.json_mode and data:
            self.print_json({"error": message, **data})
        elif self.json_mode:
            self.print_json({"error": message})
        else:
            self.console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print success message in appropriate format."""
        if self.json_mode and data:
            self.print_json({"success": message, **data})
        elif self.json_mode:
            self.print_json({"success": message})
        elif not self.quiet:
            self.console.print(f"[green]{message}[/green]")

    @contextmanager
    def progress(self, description: str) -> Iterator[ProgressCallback | None]:
        """Render archive progress events as a transient progress bar.

        Yields None in JSON or quiet mode so nothing is drawn.
        """
        if self.json_mode or self.quiet:
            yield None
            return

        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("{task.fields[phase]}"),
            console=self.console,
            transient=True,
        ) as bar:
            task = bar.add_task(description, total=None, phase=PHASE_COUNTING)

            def on_event(event: ProgressEvent) -> None:
                completed = event.total if event.phase == PHASE_COMPLETE else event.processed
                bar.update(task, total=event.total, completed=completed, phase=event.phase)

            yield on_event


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
