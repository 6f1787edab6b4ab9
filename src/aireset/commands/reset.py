"""Reset command implementation."""

import typer

from ..core import ResetOptions, get_ai_dir, perform_reset, plan_reset, workspace_lock
from ..errors import AiresetError
from ..models import ResetPolicy
from ..output import get_output_context
from .common import fail, open_workspace

POLICY_DESCRIPTIONS = {
    ResetPolicy.LIGHT: "Clear project documentation, keep memory",
    ResetPolicy.MEDIUM: "Reset memory files to templates",
    ResetPolicy.FULL: "Reset memory to templates and clear all documentation",
    ResetPolicy.CUSTOM: "Clear the given paths",
}


def reset(
    policy: ResetPolicy = typer.Argument(..., help="Reset policy: light, medium, full, custom"),
    paths: list[str] | None = typer.Option(
        None,
        "--path",
        help="Workspace-relative path to clear (custom policy, repeatable)",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    no_archive: bool = typer.Option(
        False,
        "--no-archive",
        help="Do not archive before resetting (not recoverable)",
    ),
    clear_archives: bool = typer.Option(
        False,
        "--clear-archives",
        help="Delete all existing archives before archiving",
    ),
    archive_limit: int | None = typer.Option(
        None,
        "--archive-limit",
        min=0,
        help="Keep only the N newest archives afterwards",
    ),
) -> None:
    """Archive, then reset the workspace according to a policy."""
    ctx = get_output_context()
    root, config = open_workspace(ctx)
    options = ResetOptions(
        skip_archive=no_archive,
        clear_archives=clear_archives,
        archive_limit=archive_limit,
        custom_paths=list(paths or []),
    )

    try:
        plan = plan_reset(root, policy, options, config)
    except AiresetError as e:
        fail(ctx, e)

    if ctx.dry_run:
        ctx.console.print(f"[cyan]\\[DRY RUN][/cyan] Would run {policy.value} reset:")
        ctx.console.print(f"  {POLICY_DESCRIPTIONS[policy]}")
        if options.clear_archives:
            ctx.console.print("  Delete all existing archives")
        if plan.archive:
            ctx.console.print(f"  Archive into: {config.archive.directory}")
        for category in plan.categories:
            files = plan.files[category.name]
            ctx.console.print(f"  {category.name} ({category.tag}): {len(files)} files")
            for rel in files:
                ctx.console.print(f"    {rel}")
        if plan.archive_limit is not None:
            ctx.console.print(f"  Keep the {plan.archive_limit} newest archives")
        return

    if not yes and not ctx.json_mode and config.archive.confirm_destructive:
        ctx.console.print(f"[bold]{policy.value}[/bold]: {POLICY_DESCRIPTIONS[policy]}")
        for category in plan.categories:
            ctx.console.print(f"  {category.name}: {category.tag}")
        if not plan.archive:
            ctx.console.print("[yellow]No archive will be created.[/yellow]")
        if not typer.confirm("Proceed with reset?", default=False):
            ctx.console.print("Reset cancelled")
            raise typer.Exit(0)

    try:
        with workspace_lock(get_ai_dir(root), f"reset {policy.value}"):
            with ctx.progress("Archiving") as progress:
                options.progress = progress
                result = perform_reset(root, policy, options, config)
    except AiresetError as e:
        fail(ctx, e)

    if result.archive_id:
        ctx.print(f"[green]Archived to:[/green] {result.archive_id}")
    for rel in result.cleared:
        ctx.print(f"  [dim]cleared[/dim] {rel}")
    for rel in result.reset:
        ctx.print(f"  [dim]reset[/dim]   {rel}")
    if result.evicted:
        ctx.print(f"Removed {len(result.evicted)} old archive(s)")
    ctx.success(
        f"{policy.value.capitalize()} reset complete: "
        f"{len(result.cleared)} cleared, {len(result.reset)} reset from templates",
        result.model_dump(mode="json"),
    )
    if result.archive_id:
        ctx.print(f"\nUndo with: aireset restore {result.archive_id}")
