"""Reset orchestration: archive, then clear or template-reset, then evict.

Also owns restore (validate, safety archive, extract) and the archive
directory housekeeping used by the command layer.

Reset order:
1. Validate the workspace, policy, limit and templates
2. Optionally bulk-clear older archives
3. Archive the selected categories (unless skipped)
4. Apply each category's action
5. Evict archives beyond the retention limit
"""

import logging
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ..config import ResetConfig, load_config
from ..errors import (
    ArchiveIOError,
    ArchiveNotFoundError,
    InvalidArchiveError,
    InvalidInputError,
)
from ..models import (
    ArchiveEntry,
    ArchiveOperation,
    Category,
    CategoryAction,
    ProgressCallback,
    ResetPolicy,
    ResetResult,
    RestoreResult,
)
from ..services import ensure_directory
from .archive_engine import create_archive, extract_archive, inspect_archive, read_metadata
from .category_resolver import (
    archive_only,
    categories_from_metadata,
    check_archive_overlap,
    parse_policy,
    resolve_categories,
    select_files,
)
from .metadata_handler import ensure_valid, generate_metadata
from .template_store import default_placeholders, render_template, require_templates
from .workspace import (
    generate_archive_id,
    get_archive_dir,
    require_workspace,
    resolve_archive_path,
)

logger = logging.getLogger(__name__)

PRE_RESTORE_LABEL = "pre-restore"
SNAPSHOT_LABEL = "snapshot"

_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class ResetOptions:
    """Caller choices for perform_reset.

    Attributes:
        skip_archive: Apply the policy without archiving first.
        clear_archives: Delete every existing archive before archiving.
        archive_limit: Keep only this many archives afterwards; falls back
            to the configured retention limit when None.
        custom_paths: Workspace-relative paths for the custom policy.
        progress: Callback receiving archive ProgressEvents.
    """

    skip_archive: bool = False
    clear_archives: bool = False
    archive_limit: int | None = None
    custom_paths: list[str] = field(default_factory=list)
    progress: ProgressCallback | None = None


@dataclass
class ResetPlan:
    """What a reset would do, computed without touching the workspace."""

    policy: ResetPolicy
    categories: list[Category]
    files: dict[str, list[str]]
    archive: bool
    archive_limit: int | None


def _resolve_limit(options: ResetOptions, config: ResetConfig) -> int | None:
    limit = options.archive_limit
    if limit is None:
        limit = config.archive.retention_limit
    if limit is not None and limit < 0:
        raise InvalidInputError(
            f"Archive limit must be a non-negative integer, got {limit}",
            operation="perform_reset",
            suggestions=["Pass 0 to keep no archives, or omit the limit"],
        )
    return limit


def plan_reset(
    workspace_root: Path,
    policy: ResetPolicy | str,
    options: ResetOptions | None = None,
    config: ResetConfig | None = None,
) -> ResetPlan:
    """Resolve and validate a reset without changing anything.

    Raises:
        WorkspaceNotFoundError: If the workspace has no .ai directory
        InvalidInputError: For a bad policy, paths, limit or missing templates
    """
    options = options or ResetOptions()
    require_workspace(workspace_root)
    config = config or load_config(workspace_root)
    policy = parse_policy(policy)
    limit = _resolve_limit(options, config)
    categories = resolve_categories(policy, config, options.custom_paths)
    require_templates(workspace_root, config, categories)

    files = {
        category.name: [p.as_posix() for p in select_files(workspace_root, category)]
        for category in categories
    }
    return ResetPlan(
        policy=policy,
        categories=categories,
        files=files,
        archive=not options.skip_archive,
        archive_limit=limit,
    )


def _create_archive(
    workspace_root: Path,
    config: ResetConfig,
    categories: list[Category],
    operation: ArchiveOperation,
    label: str,
    restoration_source: str | None = None,
    progress: ProgressCallback | None = None,
) -> str:
    archive_dir = get_archive_dir(workspace_root, config)
    try:
        ensure_directory(archive_dir)
    except OSError as e:
        raise ArchiveIOError.from_os_error(e, "create_archive", archive_dir) from e

    created = datetime.now(UTC)
    archive_id = generate_archive_id(label, created, archive_dir)
    metadata = generate_metadata(
        operation,
        workspace_root,
        config,
        categories=categories,
        archive_name=archive_id,
        restoration_source=restoration_source,
        created=created,
    )
    ensure_valid(metadata)
    create_archive(workspace_root, archive_dir / archive_id, metadata, progress)
    return archive_id


def _clear_category(workspace_root: Path, category: Category) -> list[str]:
    cleared = []
    for rel in select_files(workspace_root, category):
        path = workspace_root / rel
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise ArchiveIOError.from_os_error(e, "clear", path) from e
        cleared.append(rel.as_posix())
    return cleared


def _reset_category(
    workspace_root: Path, config: ResetConfig, category: Category, placeholders: dict[str, str]
) -> list[str]:
    reset = []
    root = workspace_root / category.root
    for target, template in category.templates.items():
        path = root / target
        content = render_template(workspace_root, config, template, placeholders)
        try:
            ensure_directory(path.parent)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ArchiveIOError.from_os_error(e, "template_reset", path) from e
        reset.append(path.relative_to(workspace_root).as_posix())
    return reset


def perform_reset(
    workspace_root: Path,
    policy: ResetPolicy | str,
    options: ResetOptions | None = None,
    config: ResetConfig | None = None,
) -> ResetResult:
    """Archive and then reset the categories selected by policy.

    Args:
        workspace_root: Directory containing .ai
        policy: Reset policy (or its name)
        options: Archive, retention and custom path choices
        config: Workspace configuration, loaded from disk when omitted

    Returns:
        ResetResult with the archive id and every file touched

    Raises:
        WorkspaceNotFoundError: If the workspace has no .ai directory
        InvalidInputError: For a bad policy, paths, limit or missing templates
        ArchiveIOError: If archiving or applying the reset fails
    """
    options = options or ResetOptions()
    config = config or load_config(workspace_root)
    plan = plan_reset(workspace_root, policy, options, config)
    result = ResetResult(policy=plan.policy)

    if options.clear_archives:
        result.evicted.extend(clear_archives(workspace_root, config))

    if plan.archive:
        result.archive_id = _create_archive(
            workspace_root,
            config,
            plan.categories,
            ArchiveOperation(plan.policy.value),
            f"{plan.policy.value}-reset",
            progress=options.progress,
        )
        logger.info("Created archive %s", result.archive_id)
    else:
        logger.warning("Skipping archive; %s reset is not recoverable", plan.policy.value)

    placeholders = default_placeholders(config)
    for category in plan.categories:
        if category.action == CategoryAction.CLEAR:
            result.cleared.extend(_clear_category(workspace_root, category))
        elif category.action == CategoryAction.TEMPLATE_RESET:
            result.reset.extend(_reset_category(workspace_root, config, category, placeholders))

    if plan.archive_limit is not None:
        result.evicted.extend(evict_archives(workspace_root, plan.archive_limit, config))
        if result.archive_id in result.evicted:
            logger.warning("Archive %s was evicted by the retention limit", result.archive_id)
            result.archive_id = None

    logger.info(
        "Reset %s: %d cleared, %d reset from templates",
        plan.policy.value,
        len(result.cleared),
        len(result.reset),
    )
    return result


def create_snapshot(
    workspace_root: Path,
    policy: ResetPolicy | str = ResetPolicy.FULL,
    config: ResetConfig | None = None,
    custom_paths: list[str] | None = None,
    progress: ProgressCallback | None = None,
) -> str:
    """Archive a policy's categories without modifying anything.

    Returns:
        The new archive id
    """
    require_workspace(workspace_root)
    config = config or load_config(workspace_root)
    categories = archive_only(resolve_categories(policy, config, custom_paths))
    archive_id = _create_archive(
        workspace_root,
        config,
        categories,
        ArchiveOperation.ARCHIVE,
        SNAPSHOT_LABEL,
        progress=progress,
    )
    logger.info("Created snapshot %s", archive_id)
    return archive_id


def restore_from_archive(
    workspace_root: Path,
    name: str,
    config: ResetConfig | None = None,
    progress: ProgressCallback | None = None,
) -> RestoreResult:
    """Restore a named archive over the workspace.

    The archive is validated before anything is written, and the current
    state of every category it covers is archived first (pre-restore), so
    a restore can itself be undone.

    Raises:
        ArchiveNotFoundError: If no archive directory has that name
        InvalidArchiveError: If the archive fails validation; nothing is touched
        ArchiveIOError: If the safety archive or extraction fails
    """
    require_workspace(workspace_root)
    config = config or load_config(workspace_root)
    archive_root = resolve_archive_path(get_archive_dir(workspace_root, config), name)
    if not archive_root.is_dir():
        raise ArchiveNotFoundError(
            f"Archive not found: {name}",
            operation="restore",
            suggestions=["Run 'aireset archives list' to see available archives"],
        )

    result = inspect_archive(archive_root)
    if not result.valid:
        raise InvalidArchiveError(
            f"Archive {name} is invalid: "
            + "; ".join(f"{v.field}: {v.message}" for v in result.violations),
            operation="restore",
            suggestions=["Run 'aireset archives validate' for details", "Pick another archive"],
        )

    metadata = read_metadata(archive_root)
    categories = categories_from_metadata(metadata)
    check_archive_overlap(categories, config)

    safety_id = _create_archive(
        workspace_root,
        config,
        archive_only(categories),
        ArchiveOperation.PRE_RESTORE,
        PRE_RESTORE_LABEL,
        restoration_source=name,
    )
    logger.info("Created pre-restore archive %s", safety_id)

    restored = extract_archive(archive_root, workspace_root, progress)
    return RestoreResult(restored_from=name, safety_archive_id=safety_id, files_restored=restored)


def _entry_sort_key(entry: ArchiveEntry) -> tuple[datetime, str]:
    created = entry.metadata.created if entry.metadata else _OLDEST
    return (created, entry.name)


def list_archives(workspace_root: Path, config: ResetConfig | None = None) -> list[ArchiveEntry]:
    """Every archive directory, newest first.

    Invalid archives are included with valid=False; those without readable
    metadata sort last.
    """
    config = config or load_config(workspace_root)
    archive_dir = get_archive_dir(workspace_root, config)
    if not archive_dir.is_dir():
        return []

    entries = []
    for path in archive_dir.iterdir():
        if not path.is_dir():
            continue
        try:
            metadata = read_metadata(path)
        except InvalidArchiveError as e:
            entries.append(ArchiveEntry(name=path.name, path=path, error=e.message))
            continue
        result = inspect_archive(path)
        entries.append(
            ArchiveEntry(
                name=path.name,
                path=path,
                metadata=metadata,
                valid=result.valid,
                error=None
                if result.valid
                else "; ".join(f"{v.field}: {v.message}" for v in result.violations),
            )
        )
    return sorted(entries, key=_entry_sort_key, reverse=True)


def _remove_archive(entry: ArchiveEntry) -> None:
    try:
        shutil.rmtree(entry.path)
    except OSError as e:
        raise ArchiveIOError.from_os_error(e, "evict_archive", entry.path) from e
    logger.info("Removed archive %s", entry.name)


def evict_archives(
    workspace_root: Path, limit: int, config: ResetConfig | None = None
) -> list[str]:
    """Delete archives beyond the newest ``limit``.

    Archives without readable metadata count as the oldest.

    Returns:
        Names of the deleted archives
    """
    if limit < 0:
        raise InvalidInputError(
            f"Archive limit must be a non-negative integer, got {limit}",
            operation="evict_archives",
        )
    evicted = []
    for entry in list_archives(workspace_root, config)[limit:]:
        _remove_archive(entry)
        evicted.append(entry.name)
    return evicted


def clear_archives(workspace_root: Path, config: ResetConfig | None = None) -> list[str]:
    """Delete every archive.

    Returns:
        Names of the deleted archives
    """
    return evict_archives(workspace_root, 0, config)
