"""Archive management commands: list, show, validate, create, clear."""

import typer
from rich.table import Table

from ..core import (
    clear_archives,
    create_snapshot,
    format_size,
    get_ai_dir,
    get_archive_dir,
    inspect_archive,
    list_archives,
    read_metadata,
    render_metadata,
    resolve_archive_path,
    workspace_lock,
)
from ..errors import AiresetError, ArchiveNotFoundError
from ..models import ResetPolicy
from ..output import get_output_context
from .common import fail, open_workspace

archives_app = typer.Typer(help="Archive management commands", no_args_is_help=True)


@archives_app.command("list")
def archives_list() -> None:
    """List archives, newest first. Invalid archives are marked."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)
    entries = list_archives(root, config)

    if ctx.json_mode:
        ctx.print_json(
            {
                "archives": [
                    {
                        "name": e.name,
                        "valid": e.valid,
                        "error": e.error,
                        "operation": e.metadata.operation.value if e.metadata else None,
                        "created": e.metadata.created.isoformat() if e.metadata else None,
                        "files": e.metadata.contents.files.total if e.metadata else None,
                        "totalSize": e.metadata.contents.total_size if e.metadata else None,
                    }
                    for e in entries
                ]
            }
        )
        return

    if not entries:
        ctx.print("No archives found.")
        return

    table = Table(title=f"Archives in {config.archive.directory}")
    table.add_column("Name", no_wrap=True)
    table.add_column("Operation")
    table.add_column("Created")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    for entry in entries:
        if entry.metadata:
            meta = entry.metadata
            row = [
                meta.operation.value,
                meta.created.strftime("%Y-%m-%d %H:%M:%S"),
                str(meta.contents.files.total),
                format_size(meta.contents.total_size),
            ]
        else:
            row = ["-", "-", "-", "-"]
        status = "[green]valid[/green]" if entry.valid else "[red]invalid[/red]"
        table.add_row(entry.name, *row, status)
    ctx.console.print(table)


@archives_app.command("show")
def archives_show(
    name: str = typer.Argument(..., help="Archive name"),
) -> None:
    """Show an archive's metadata."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)
    try:
        archive_root = resolve_archive_path(get_archive_dir(root, config), name)
        if not archive_root.is_dir():
            raise ArchiveNotFoundError(
                f"Archive not found: {name}",
                operation="show",
                suggestions=["Run 'aireset archives list' to see available archives"],
            )
        metadata = read_metadata(archive_root)
    except AiresetError as e:
        fail(ctx, e)

    if ctx.json_mode:
        ctx.print_json(metadata.model_dump(mode="json", by_alias=True))
    else:
        ctx.console.print(render_metadata(metadata), highlight=False)


@archives_app.command("validate")
def archives_validate(
    name: str = typer.Argument(..., help="Archive name"),
) -> None:
    """Check an archive's structure and metadata. Exits 1 if invalid."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)
    try:
        archive_root = resolve_archive_path(get_archive_dir(root, config), name)
    except AiresetError as e:
        fail(ctx, e)
    if not archive_root.is_dir():
        fail(ctx, ArchiveNotFoundError(f"Archive not found: {name}", operation="validate"))

    result = inspect_archive(archive_root)
    if ctx.json_mode:
        ctx.print_json(
            {"name": name, "valid": result.valid, **result.model_dump(mode="json")}
        )
    elif result.valid:
        ctx.console.print(f"[green]✓[/green] {name} is valid")
    else:
        ctx.console.print(f"[red]✗[/red] {name} is invalid:")
        for violation in result.violations:
            ctx.console.print(f"  {violation.field}: {violation.message}")
    if not result.valid:
        raise typer.Exit(1)


@archives_app.command("create")
def archives_create(
    policy: ResetPolicy = typer.Option(
        ResetPolicy.FULL,
        "--policy",
        help="Policy whose categories are archived",
    ),
    paths: list[str] | None = typer.Option(
        None,
        "--path",
        help="Workspace-relative path to archive (custom policy, repeatable)",
    ),
) -> None:
    """Archive the workspace without resetting anything."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)

    if ctx.dry_run:
        ctx.console.print(f"[cyan]\\[DRY RUN][/cyan] Would archive the {policy.value} categories")
        ctx.console.print(f"  Into: {config.archive.directory}")
        return

    try:
        with workspace_lock(get_ai_dir(root), "archives create"):
            with ctx.progress("Archiving") as progress:
                archive_id = create_snapshot(root, policy, config, paths, progress)
    except AiresetError as e:
        fail(ctx, e)

    ctx.success(f"Created archive {archive_id}", {"archive_id": archive_id})


@archives_app.command("clear")
def archives_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete every archive."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)
    entries = list_archives(root, config)

    if ctx.dry_run:
        ctx.console.print(f"[cyan]\\[DRY RUN][/cyan] Would delete {len(entries)} archive(s):")
        for entry in entries:
            ctx.console.print(f"  {entry.name}")
        return

    if not entries:
        ctx.success("No archives to delete", {"deleted": []})
        return

    if not yes and not ctx.json_mode and config.archive.confirm_destructive:
        if not typer.confirm(f"Delete {len(entries)} archive(s)?", default=False):
            ctx.console.print("Clear cancelled")
            raise typer.Exit(0)

    try:
        with workspace_lock(get_ai_dir(root), "archives clear"):
            deleted = clear_archives(root, config)
    except AiresetError as e:
        fail(ctx, e)

    ctx.success(f"Deleted {len(deleted)} archive(s)", {"deleted": deleted})
