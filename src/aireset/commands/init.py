"""Init command implementation."""

import subprocess

import typer

from ..config import ResetConfig, get_config_path, load_config, write_config_template
from ..constants import INIT_TOOL_CHECK_TIMEOUT
from ..core import get_ai_dir, get_archive_dir, get_template_path, render_template
from ..errors import AiresetError
from ..output import get_output_context
from .common import fail, get_workspace_root

DEFAULT_TEMPLATES = {
    "lessons": """# Lessons Learned

Project: [PROJECT]
Last reset: [DATE]

Record what worked, what did not, and what to do differently.

## Patterns

## Pitfalls
""",
    "decisions": """# Decision Log

Project: [PROJECT]
Last reset: [DATE]

Record significant technical decisions and their context.

## Decisions
""",
}


def init(
    project: str | None = typer.Option(
        None,
        "--project",
        "-p",
        help="Project name recorded in reset.toml (defaults to the directory name)",
    ),
) -> None:
    """Create the .ai workspace structure, config and default templates."""
    ctx = get_output_context()
    root = get_workspace_root()
    ai_dir = get_ai_dir(root)
    config_path = get_config_path(root)
    if config_path.exists():
        try:
            config = load_config(root)
        except AiresetError as e:
            fail(ctx, e)
    else:
        config = ResetConfig()
        config.project.name = project or root.name

    directories = [
        ai_dir,
        root / config.categories.memory_directory,
        *(ai_dir / "docs" / area for area in config.categories.docs),
        root / config.templates.directory,
        get_archive_dir(root, config),
    ]
    templates = {name: get_template_path(root, config, name) for name in DEFAULT_TEMPLATES}

    if ctx.dry_run:
        ctx.console.print("[cyan]\\[DRY RUN][/cyan] Would initialize workspace:")
        for directory in directories:
            ctx.console.print(f"  Create directory: {directory}")
        if not config_path.exists():
            ctx.console.print(f"  Create config: {config_path}")
        else:
            ctx.console.print(f"  Config already exists: {config_path}")
        for path in templates.values():
            if not path.exists():
                ctx.console.print(f"  Create template: {path}")
        return

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        write_config_template(root, config.project.name)
        ctx.print(f"[green]Created config template:[/green] {config_path}")
    else:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")

    created = []
    for name, path in templates.items():
        if not path.exists():
            path.write_text(DEFAULT_TEMPLATES[name], encoding="utf-8")
            created.append(str(path))
            ctx.print(f"[green]Created template:[/green] {path}")

    memory_dir = root / config.categories.memory_directory
    for target, template in config.categories.memory_templates.items():
        path = memory_dir / target
        if not path.exists() and get_template_path(root, config, template).exists():
            path.write_text(render_template(root, config, template), encoding="utf-8")
            ctx.print(f"[green]Created memory file:[/green] {path}")

    # git is optional; without it archives record "unknown" provenance
    try:
        result = subprocess.run(
            ["git", "--version"], capture_output=True, text=True, timeout=INIT_TOOL_CHECK_TIMEOUT
        )
        if result.returncode == 0:
            ctx.print("[green]✓[/green] git")
        else:
            ctx.print(f"[yellow]?[/yellow] git: {result.stderr.strip()[:50]}")
    except FileNotFoundError:
        ctx.print("[yellow]?[/yellow] git: not found in PATH, provenance will be 'unknown'")
    except subprocess.TimeoutExpired:
        ctx.print("[yellow]?[/yellow] git: timed out")

    ctx.result(
        {"workspace": str(root), "config": str(config_path), "templates": created},
        "\n[bold green]Workspace initialized successfully![/bold green]",
    )
