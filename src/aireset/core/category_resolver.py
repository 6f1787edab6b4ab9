"""Map reset policies to the categories of files they act on.

The exclusion rule lives here and nowhere else: README.md and any
``*.template.*`` file are never selected, whatever the policy.
"""

from collections.abc import Iterable
from fnmatch import fnmatchcase
from pathlib import Path

from ..config import ResetConfig
from ..constants import AI_DIR, CONFIG_FILE, LOCK_FILE, METADATA_FILE
from ..errors import InvalidInputError
from ..models import ArchiveMetadata, Category, CategoryAction, ResetPolicy
from ..services import iter_files
from .workspace import normalize_relative_path, paths_overlap

PROTECTED_NAMES = frozenset({"README.md"})
PROTECTED_PATTERNS = ("*.template.*",)
# Control files a custom path may not reach
RESERVED_PATHS = (f"{AI_DIR}/{CONFIG_FILE}", f"{AI_DIR}/{LOCK_FILE}")


def is_protected(path: Path | str) -> bool:
    """True for files that no policy may clear."""
    name = Path(path).name
    return name in PROTECTED_NAMES or any(fnmatchcase(name, p) for p in PROTECTED_PATTERNS)


def parse_policy(policy: ResetPolicy | str) -> ResetPolicy:
    """Coerce a policy name, rejecting unknown values."""
    try:
        return ResetPolicy(policy)
    except ValueError:
        valid = ", ".join(p.value for p in ResetPolicy)
        raise InvalidInputError(
            f"Invalid reset policy: {policy}",
            operation="resolve_categories",
            suggestions=[f"Valid policies: {valid}"],
        ) from None


def _configured_root(path: str) -> str:
    root = normalize_relative_path(path)
    if root is None:
        raise InvalidInputError(
            f"Invalid category path in configuration: {path!r}",
            operation="resolve_categories",
            suggestions=["Category paths must be relative to the workspace root"],
        )
    return root


def docs_categories(config: ResetConfig) -> list[Category]:
    """One clear category per documentation area."""
    categories = []
    for area in config.categories.docs:
        root = _configured_root(f"{AI_DIR}/docs/{area}")
        name = root.removeprefix(f"{AI_DIR}/")
        categories.append(Category(name=name, root=root, action=CategoryAction.CLEAR))
    return categories


def memory_category(config: ResetConfig) -> Category:
    """The memory files, rewritten from templates on reset."""
    return Category(
        name="memory",
        root=_configured_root(config.categories.memory_directory),
        action=CategoryAction.TEMPLATE_RESET,
        templates=dict(config.categories.memory_templates),
    )


def _custom_categories(custom_paths: Iterable[str]) -> list[Category]:
    categories: list[Category] = []
    for raw in custom_paths:
        path = normalize_relative_path(raw)
        if path is None or path == METADATA_FILE:
            raise InvalidInputError(
                f"Invalid custom path: {raw!r}",
                operation="resolve_categories",
                suggestions=["Use a path relative to the workspace root, without '..'"],
            )
        if any(paths_overlap(path, reserved) for reserved in RESERVED_PATHS):
            raise InvalidInputError(
                f"Custom path {raw!r} covers aireset's own config or lock file",
                operation="resolve_categories",
                suggestions=[f"Pick paths that do not include {' or '.join(RESERVED_PATHS)}"],
            )
        for existing in categories:
            if paths_overlap(existing.root, path):
                if existing.root == path:
                    break
                raise InvalidInputError(
                    f"Custom paths overlap: {existing.root} and {path}",
                    operation="resolve_categories",
                    suggestions=["Pass either the directory or the path inside it, not both"],
                )
        else:
            categories.append(Category(name=path, root=path, action=CategoryAction.CLEAR))
    if not categories:
        raise InvalidInputError(
            "The custom policy requires at least one path",
            operation="resolve_categories",
            suggestions=["Pass one or more --path options"],
        )
    return categories


def check_distinct(categories: list[Category]) -> None:
    """Refuse categories that share a name or whose roots overlap."""
    for i, first in enumerate(categories):
        for second in categories[i + 1 :]:
            if first.name == second.name or paths_overlap(first.root, second.root):
                raise InvalidInputError(
                    f"Categories {first.name} and {second.name} cover the same files "
                    f"({first.root}, {second.root})",
                    operation="resolve_categories",
                    suggestions=[f"Remove the duplicate from [categories] in {CONFIG_FILE}"],
                )


def check_archive_overlap(categories: Iterable[Category], config: ResetConfig) -> None:
    """Refuse categories that contain, or live inside, the archive directory."""
    archive_dir = normalize_relative_path(config.archive.directory)
    if archive_dir is None:
        return
    for category in categories:
        if paths_overlap(category.root, archive_dir):
            raise InvalidInputError(
                f"Category {category.name} overlaps the archive directory "
                f"{config.archive.directory}",
                operation="resolve_categories",
                suggestions=["Choose paths outside the archive directory"],
            )


def resolve_categories(
    policy: ResetPolicy | str,
    config: ResetConfig,
    custom_paths: Iterable[str] | None = None,
) -> list[Category]:
    """Resolve a policy into concrete categories.

    Args:
        policy: Reset policy (or its name)
        config: Workspace configuration
        custom_paths: Workspace-relative paths, only for the custom policy

    Returns:
        Categories in processing order

    Raises:
        InvalidInputError: For an unknown policy or bad custom paths
    """
    policy = parse_policy(policy)
    paths = list(custom_paths or [])
    if paths and policy != ResetPolicy.CUSTOM:
        raise InvalidInputError(
            f"Custom paths are only accepted by the custom policy, not {policy.value}",
            operation="resolve_categories",
            suggestions=["Use the custom policy or drop the paths"],
        )

    if policy == ResetPolicy.LIGHT:
        categories = docs_categories(config)
    elif policy == ResetPolicy.MEDIUM:
        categories = [memory_category(config)]
    elif policy == ResetPolicy.FULL:
        categories = [memory_category(config), *docs_categories(config)]
    else:
        categories = _custom_categories(paths)

    check_distinct(categories)
    check_archive_overlap(categories, config)
    return categories


def archive_only(categories: Iterable[Category]) -> list[Category]:
    """Same categories, archived but never modified."""
    return [c.archive_only() for c in categories]


def select_files(workspace_root: Path, category: Category) -> list[Path]:
    """Files of a category, workspace-relative and path-sorted.

    Protected files are skipped. The category root may be a directory or a
    single file; a missing root selects nothing.
    """
    root = workspace_root / category.root
    return [p.relative_to(workspace_root) for p in iter_files(root) if not is_protected(p)]


def categories_from_metadata(metadata: ArchiveMetadata) -> list[Category]:
    """Rebuild the categories an archive was created from.

    Falls back to one category per listed directory when the archive has
    no category records.
    """
    if metadata.contents.categories:
        return [
            Category(name=record.name, root=record.root, action=record.action)
            for record in metadata.contents.categories
        ]
    return [
        Category(name=root, root=root, action=CategoryAction.NONE)
        for root in metadata.contents.directories
    ]
