"""Core business logic for aireset.

This package contains the archive and reset logic, free of any CLI code:
- category_resolver: Reset policies to categories, the exclusion rule
- metadata_handler: Archive metadata generation, validation and rendering
- archive_engine: Archive creation, extraction and validation
- reset_orchestrator: Reset, restore, listing and retention
- template_store: Template lookup and placeholder substitution
- workspace: Workspace layout and archive naming
- lock_manager: PID lock used by the command layer
"""

from .archive_engine import (
    create_archive,
    extract_archive,
    inspect_archive,
    read_metadata,
    validate_archive,
)
from .category_resolver import (
    archive_only,
    categories_from_metadata,
    is_protected,
    resolve_categories,
    select_files,
)
from .lock_manager import acquire_lock, get_current_lock, release_lock, workspace_lock
from .metadata_handler import (
    ensure_valid,
    format_size,
    generate_metadata,
    parse_metadata,
    render_metadata,
    serialize_metadata,
    validate_metadata,
    write_metadata,
)
from .reset_orchestrator import (
    ResetOptions,
    ResetPlan,
    clear_archives,
    create_snapshot,
    evict_archives,
    list_archives,
    perform_reset,
    plan_reset,
    restore_from_archive,
)
from .template_store import (
    default_placeholders,
    get_template_path,
    render_template,
    substitute_placeholders,
)
from .workspace import (
    WorkspaceNotFoundError,
    generate_archive_id,
    get_ai_dir,
    get_archive_dir,
    require_workspace,
    resolve_archive_path,
    sanitize_slug,
)

__all__ = [
    "ResetOptions",
    "ResetPlan",
    "WorkspaceNotFoundError",
    "acquire_lock",
    "archive_only",
    "categories_from_metadata",
    "clear_archives",
    "create_archive",
    "create_snapshot",
    "default_placeholders",
    "ensure_valid",
    "evict_archives",
    "extract_archive",
    "format_size",
    "generate_archive_id",
    "generate_metadata",
    "get_ai_dir",
    "get_archive_dir",
    "get_current_lock",
    "get_template_path",
    "inspect_archive",
    "is_protected",
    "list_archives",
    "parse_metadata",
    "perform_reset",
    "plan_reset",
    "read_metadata",
    "release_lock",
    "render_metadata",
    "render_template",
    "require_workspace",
    "resolve_archive_path",
    "resolve_categories",
    "restore_from_archive",
    "sanitize_slug",
    "select_files",
    "serialize_metadata",
    "substitute_placeholders",
    "validate_archive",
    "validate_metadata",
    "write_metadata",
]
