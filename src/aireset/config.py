"""Configuration management for aireset."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import AI_DIR, CONFIG_FILE
from .errors import InvalidInputError

DEFAULT_DOCS_AREAS = ["plans", "tasks", "reviews", "requirements", "design"]


class ProjectConfig(BaseModel):
    """Project-level configuration."""

    name: str = "unnamed-project"


class ArchiveConfig(BaseModel):
    """Where archives live and how many are kept."""

    directory: str = Field(default=f"{AI_DIR}/archive", description="Workspace-relative path")
    retention_limit: int | None = Field(
        default=None, ge=0, description="Keep only N newest archives after a reset"
    )
    confirm_destructive: bool = True


class TemplatesConfig(BaseModel):
    """Template store settings."""

    directory: str = f"{AI_DIR}/templates"
    date_format: str = "%Y-%m-%d"


class CategoriesConfig(BaseModel):
    """Locations of the mutable knowledge files.

    Docs areas are relative to ``<.ai>/docs``; the memory directory and
    template mapping drive the template-reset category.
    """

    docs: list[str] = Field(default_factory=lambda: list(DEFAULT_DOCS_AREAS))
    memory_directory: str = f"{AI_DIR}/memory"
    # target file name -> template name (<templates>/<name>.template.md)
    memory_templates: dict[str, str] = Field(
        default_factory=lambda: {"lessons.md": "lessons", "decisions.md": "decisions"}
    )


class ResetConfig(BaseModel):
    """Root configuration for aireset."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    categories: CategoriesConfig = Field(default_factory=CategoriesConfig)


def get_config_path(workspace_root: Path) -> Path:
    """Path to the workspace's reset.toml."""
    return workspace_root / AI_DIR / CONFIG_FILE


def load_config(workspace_root: Path) -> ResetConfig:
    """Load config from .ai/reset.toml.

    Args:
        workspace_root: Workspace root (the directory containing .ai)

    Returns:
        Loaded configuration, or defaults if reset.toml doesn't exist

    Raises:
        InvalidInputError: If the file is not valid TOML or fails validation
    """
    config_path = get_config_path(workspace_root)
    if not config_path.exists():
        return ResetConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return ResetConfig.model_validate(data)
    except (tomllib.TOMLDecodeError, ValidationError) as e:
        raise InvalidInputError(
            f"Invalid configuration in {config_path}: {e}",
            operation="load_config",
            suggestions=["Fix or delete the config file", "Run 'aireset init' for a template"],
        ) from e


def write_config_template(workspace_root: Path, project_name: str | None = None) -> Path:
    """Write default reset.toml template.

    Args:
        workspace_root: Workspace root
        project_name: Optional project name to record

    Returns:
        Path to the written config file
    """
    config_path = get_config_path(workspace_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    defaults = ResetConfig()
    template = {
        "project": {"name": project_name or "your-project"},
        "archive": {
            "directory": defaults.archive.directory,
            "confirm_destructive": True,
        },
        "templates": defaults.templates.model_dump(),
        "categories": defaults.categories.model_dump(),
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
