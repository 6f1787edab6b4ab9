"""Restore command implementation."""

import typer

from ..core import (
    get_ai_dir,
    get_archive_dir,
    inspect_archive,
    resolve_archive_path,
    restore_from_archive,
    workspace_lock,
)
from ..errors import AiresetError
from ..output import get_output_context
from .common import fail, open_workspace


def restore(
    name: str = typer.Argument(..., help="Archive name (see 'aireset archives list')"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Restore an archive over the workspace.

    The current state is archived first (pre-restore), so the restore can
    itself be undone.
    """
    ctx = get_output_context()
    root, config = open_workspace(ctx)

    if ctx.dry_run:
        try:
            archive_root = resolve_archive_path(get_archive_dir(root, config), name)
        except AiresetError as e:
            fail(ctx, e)
        result = inspect_archive(archive_root)
        ctx.console.print(f"[cyan]\\[DRY RUN][/cyan] Would restore {name}:")
        if result.valid:
            ctx.console.print("  Create a pre-restore archive of the affected paths")
            ctx.console.print(f"  Copy archived files back into {root}")
        else:
            ctx.console.print("  [red]Archive is invalid; restore would be refused[/red]")
            for violation in result.violations:
                ctx.console.print(f"    {violation.field}: {violation.message}")
        return

    if not yes and not ctx.json_mode and config.archive.confirm_destructive:
        if not typer.confirm(f"Restore {name} over the current workspace?", default=False):
            ctx.console.print("Restore cancelled")
            raise typer.Exit(0)

    try:
        with workspace_lock(get_ai_dir(root), f"restore {name}"):
            with ctx.progress("Restoring") as progress:
                result = restore_from_archive(root, name, config, progress)
    except AiresetError as e:
        fail(ctx, e)

    ctx.print(f"[green]Pre-restore archive:[/green] {result.safety_archive_id}")
    ctx.success(
        f"Restored {result.files_restored} files from {result.restored_from}",
        result.model_dump(mode="json"),
    )
