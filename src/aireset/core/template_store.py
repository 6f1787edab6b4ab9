"""Template store: canonical template text plus placeholder substitution.

Templates live in ``<templates dir>/<name>.template.md``. Placeholders are
written as ``[KEY]``; the core never authors templates, it only fills them.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path

from ..config import ResetConfig
from ..errors import InvalidInputError
from ..models import Category, CategoryAction


def get_template_path(workspace_root: Path, config: ResetConfig, name: str) -> Path:
    """Path to the template called name."""
    return workspace_root / config.templates.directory / f"{name}.template.md"


def default_placeholders(config: ResetConfig, today: date | None = None) -> dict[str, str]:
    """Placeholder values for a reset happening today."""
    today = today or date.today()
    return {
        "DATE": today.strftime(config.templates.date_format),
        "PROJECT": config.project.name,
    }


def substitute_placeholders(text: str, placeholders: Mapping[str, str]) -> str:
    """Replace every [KEY] in text with its value."""
    for key, value in placeholders.items():
        text = text.replace(f"[{key}]", value)
    return text


def missing_templates(
    workspace_root: Path, config: ResetConfig, categories: Iterable[Category]
) -> list[Path]:
    """Template files required by template-reset categories that do not exist."""
    missing = []
    for category in categories:
        if category.action != CategoryAction.TEMPLATE_RESET:
            continue
        for name in category.templates.values():
            path = get_template_path(workspace_root, config, name)
            if not path.is_file():
                missing.append(path)
    return missing


def require_templates(
    workspace_root: Path, config: ResetConfig, categories: Iterable[Category]
) -> None:
    """Fail before anything destructive happens if a template is missing.

    Raises:
        InvalidInputError: Listing every missing template file
    """
    missing = missing_templates(workspace_root, config, categories)
    if missing:
        raise InvalidInputError(
            "Template files not found: " + ", ".join(str(p) for p in missing),
            operation="load_templates",
            suggestions=[
                f"Ensure {config.templates.directory}/*.template.md files exist",
                "Run 'aireset init' to create default templates",
            ],
        )


def render_template(
    workspace_root: Path,
    config: ResetConfig,
    name: str,
    placeholders: Mapping[str, str] | None = None,
) -> str:
    """Read a template and substitute its placeholders."""
    path = get_template_path(workspace_root, config, name)
    if not path.is_file():
        raise InvalidInputError(
            f"Template not found: {path}",
            operation="load_templates",
            suggestions=["Run 'aireset init' to create default templates"],
        )
    text = path.read_text(encoding="utf-8")
    return substitute_placeholders(text, placeholders or default_placeholders(config))
