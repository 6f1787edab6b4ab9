"""Helpers shared by the command implementations."""

from pathlib import Path
from typing import NoReturn

import typer
from rich.markup import escape

from ..config import ResetConfig, load_config
from ..core import WorkspaceNotFoundError, require_workspace
from ..errors import AiresetError, LockError
from ..output import OutputContext

EXIT_ERROR = 1
EXIT_NO_WORKSPACE = 3
EXIT_LOCKED = 4

# Workspace root chosen with --workspace (set by cli.py main callback)
_workspace_root: Path | None = None


def set_workspace_root(path: Path | None) -> None:
    """Set the workspace root for this invocation."""
    global _workspace_root
    _workspace_root = path


def get_workspace_root() -> Path:
    """Workspace root from --workspace, else the current directory."""
    return (_workspace_root or Path.cwd()).resolve()


def exit_code_for(error: AiresetError) -> int:
    """Map an error to the CLI's exit code."""
    if isinstance(error, WorkspaceNotFoundError):
        return EXIT_NO_WORKSPACE
    if isinstance(error, LockError):
        return EXIT_LOCKED
    return EXIT_ERROR


def fail(ctx: OutputContext, error: AiresetError) -> NoReturn:
    """Report an error with its suggestions and exit."""
    if ctx.json_mode:
        ctx.print_json({"error": error.message, **error.to_dict()})
    else:
        ctx.error(escape(error.message))
        for suggestion in error.suggestions:
            ctx.console.print(f"  [dim]- {escape(suggestion)}[/dim]")
    raise typer.Exit(exit_code_for(error)) from None


def open_workspace(ctx: OutputContext) -> tuple[Path, ResetConfig]:
    """Validate the workspace and load its config, exiting on failure."""
    root = get_workspace_root()
    try:
        require_workspace(root)
        return root, load_config(root)
    except AiresetError as e:
        fail(ctx, e)
