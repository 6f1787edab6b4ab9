"""Workspace layout utilities."""

import re
from datetime import datetime
from pathlib import Path, PurePosixPath, PureWindowsPath

from ..config import ResetConfig
from ..constants import AI_DIR
from ..errors import InvalidInputError


class WorkspaceNotFoundError(InvalidInputError):
    """Raised when the workspace root has no .ai directory."""


def get_ai_dir(workspace_root: Path) -> Path:
    """Get .ai directory path."""
    return workspace_root / AI_DIR


def require_workspace(workspace_root: Path) -> Path:
    """Return the .ai directory, failing if the workspace lacks one.

    Raises:
        WorkspaceNotFoundError: If workspace_root/.ai is not a directory
    """
    ai_dir = get_ai_dir(workspace_root)
    if not ai_dir.is_dir():
        raise WorkspaceNotFoundError(
            f"No {AI_DIR} directory found in {workspace_root}",
            operation="validate_workspace",
            suggestions=[
                "Run from the workspace root or pass --workspace",
                "Run 'aireset init' to create the structure",
            ],
        )
    return ai_dir


def get_archive_dir(workspace_root: Path, config: ResetConfig) -> Path:
    """Directory holding one sub-directory per archive."""
    return workspace_root / config.archive.directory


def normalize_relative_path(path: str) -> str | None:
    """Normalize a workspace-relative path to POSIX form.

    Returns:
        The normalized path, or None if it is absolute, empty, the
        workspace root itself, or climbs out with "..".
    """
    if not path or PureWindowsPath(path).drive:
        return None
    posix = PurePosixPath(path.replace("\\", "/"))
    if posix.is_absolute() or ".." in posix.parts:
        return None
    parts = [p for p in posix.parts if p != "."]
    if not parts:
        return None
    return PurePosixPath(*parts).as_posix()


def paths_overlap(first: str, second: str) -> bool:
    """True if one workspace-relative path equals or contains the other."""
    a, b = PurePosixPath(first), PurePosixPath(second)
    return a == b or a in b.parents or b in a.parents


def sanitize_slug(name: str) -> str:
    """Convert name to safe slug.

    Args:
        name: Name to sanitize

    Returns:
        Lowercase slug with only alphanumeric and hyphens
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower())
    slug = slug.strip("-")
    return slug[:50] if slug else "archive"


def generate_archive_id(label: str, created: datetime, archive_dir: Path) -> str:
    """Generate archive ID in format YYYYMMDD-HHMMSS-ffffff-<slug>.

    A numeric suffix is appended if the directory already exists.
    """
    base = f"{created.strftime('%Y%m%d-%H%M%S-%f')}-{sanitize_slug(label)}"
    archive_id = base
    n = 2
    while (archive_dir / archive_id).exists():
        archive_id = f"{base}-{n}"
        n += 1
    return archive_id


def resolve_archive_path(archive_dir: Path, name: str) -> Path:
    """Path of a named archive, rejecting names that are not plain directory names.

    Raises:
        InvalidInputError: If name is empty or contains path components
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise InvalidInputError(
            f"Invalid archive name: {name!r}",
            operation="locate_archive",
            suggestions=["Use a name shown by 'aireset archives list'"],
        )
    return archive_dir / name
