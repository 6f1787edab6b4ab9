"""aireset CLI: archive and reset AI assistant workspace knowledge files."""

from pathlib import Path

import typer
from rich.console import Console

from aireset import __version__

from .commands import archives_app, init, reset, restore
from .commands.common import set_workspace_root
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"aireset {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="aireset",
    help="Archive, reset and restore the .ai workspace of an AI coding assistant",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview effects without applying changes",
    ),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Workspace root containing .ai (defaults to the current directory)",
    ),
) -> None:
    """aireset - archive and reset AI workspace knowledge files."""
    configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)
    console = Console(no_color=no_color)
    set_output_context(
        OutputContext(console=console, json_mode=json_output, dry_run=dry_run, quiet=quiet)
    )
    set_workspace_root(workspace)


app.command()(init)
app.command()(reset)
app.command()(restore)
app.add_typer(archives_app, name="archives")


if __name__ == "__main__":
    app()
