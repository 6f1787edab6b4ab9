"""Archive metadata generation, validation, rendering and persistence.

Metadata is generated, then validated, before it is persisted; a record
on disk always satisfies validate_metadata.
"""

import getpass
import json
import logging
import sys
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .. import __version__
from ..config import ResetConfig
from ..constants import METADATA_FILE, SCHEMA_VERSION, UNKNOWN
from ..errors import ArchiveIOError, InvalidInputError, MetadataValidationError
from ..models import (
    ArchiveDetails,
    ArchiveMetadata,
    ArchiveOperation,
    Category,
    CategoryRecord,
    ContentsInfo,
    FileCounts,
    ResetPolicy,
    RestorationInfo,
    SourceInfo,
    ValidationResult,
    Violation,
)
from ..services import GitError, get_current_branch, get_head_sha
from .category_resolver import resolve_categories
from .workspace import normalize_relative_path

logger = logging.getLogger(__name__)

COMPATIBLE_TOOLS = ["aireset", "project-reset-manager"]
RESTORE_REQUIREMENTS = [
    "Python 3.11 or higher",
    "File system write permissions",
    ".ai directory structure",
]


def _git_or_unknown(getter: Any, workspace_root: Path) -> str:
    try:
        return getter(workspace_root)
    except GitError as e:
        logger.debug("Provenance lookup failed: %s", e)
        return UNKNOWN


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        logger.debug("Could not determine user: %s", e)
        return UNKNOWN


def collect_provenance(workspace_root: Path) -> SourceInfo:
    """Gather best-effort provenance. Never raises for missing information."""
    return SourceInfo(
        path=str(workspace_root.resolve()),
        vcs_revision=_git_or_unknown(get_head_sha, workspace_root),
        vcs_branch=_git_or_unknown(get_current_branch, workspace_root),
        user=_current_user(),
        platform=sys.platform or UNKNOWN,
    )


def generate_metadata(
    operation: ArchiveOperation | str,
    workspace_root: Path,
    config: ResetConfig,
    *,
    categories: Iterable[Category] | None = None,
    custom_paths: Iterable[str] | None = None,
    archive_name: str | None = None,
    restoration_source: str | None = None,
    created: datetime | None = None,
) -> ArchiveMetadata:
    """Build a metadata record for a new archive.

    File counts and sizes are zero here; the archive engine fills them in
    once the copy is done.

    Args:
        operation: Reset policy or operation producing the archive
        workspace_root: Workspace being archived
        config: Workspace configuration
        categories: Categories to archive; resolved from the operation when omitted
        custom_paths: Paths for the custom policy when categories are omitted
        archive_name: Archive id recorded in the details block
        restoration_source: Archive being restored (pre-restore archives)
        created: Creation instant, defaults to now (UTC)

    Raises:
        InvalidInputError: For an unknown operation, or when categories are
            omitted for an operation that is not a reset policy
    """
    try:
        operation = ArchiveOperation(operation)
    except ValueError:
        raise InvalidInputError(
            f"Invalid operation: {operation}",
            operation="generate_metadata",
            suggestions=[f"Valid operations: {', '.join(o.value for o in ArchiveOperation)}"],
        ) from None

    if categories is None:
        if operation.value not in {p.value for p in ResetPolicy}:
            raise InvalidInputError(
                f"Operation {operation.value} needs an explicit category list",
                operation="generate_metadata",
            )
        categories = resolve_categories(operation.value, config, custom_paths)
    categories = list(categories)

    return ArchiveMetadata(
        version=SCHEMA_VERSION,
        created=created or datetime.now(UTC),
        operation=operation,
        source=collect_provenance(workspace_root),
        contents=ContentsInfo(
            directories=[c.root for c in categories],
            categories=[
                CategoryRecord(name=c.name, root=c.root, action=c.action) for c in categories
            ],
            files=FileCounts(categories={c.name: 0 for c in categories}, total=0),
            total_size=0,
        ),
        restoration=RestorationInfo(
            compatible=list(COMPATIBLE_TOOLS),
            requirements=list(RESTORE_REQUIREMENTS),
        ),
        details=ArchiveDetails(
            generator_version=__version__,
            archive_name=archive_name,
            restoration_source=restoration_source,
        ),
    )


def _violations_from(error: ValidationError) -> list[Violation]:
    violations = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "metadata"
        violations.append(Violation(field=field, message=err["msg"]))
    return violations


def _count_violations(counts: FileCounts) -> list[Violation]:
    expected = sum(counts.categories.values())
    if counts.total == expected:
        return []
    return [
        Violation(
            field="contents.files.total",
            message=f"total {counts.total} does not match the per-category sum {expected}",
        )
    ]


def _raw_count_violations(data: Mapping[str, Any]) -> list[Violation]:
    """Counts check on a record that failed schema validation elsewhere."""
    contents = data.get("contents")
    if not isinstance(contents, Mapping):
        return []
    try:
        counts = FileCounts.model_validate(contents.get("files"))
    except ValidationError:
        return []
    return _count_violations(counts)


def _consistency_violations(metadata: ArchiveMetadata) -> list[Violation]:
    violations = _count_violations(metadata.contents.files)
    for i, root in enumerate(metadata.contents.directories):
        if normalize_relative_path(root) != root:
            violations.append(
                Violation(
                    field=f"contents.directories.{i}",
                    message=f"not a normalized workspace-relative path: {root!r}",
                )
            )
    for i, record in enumerate(metadata.contents.categories):
        if record.root not in metadata.contents.directories:
            violations.append(
                Violation(
                    field=f"contents.categories.{i}.root",
                    message=f"{record.root!r} is not listed in contents.directories",
                )
            )
    return violations


def validate_metadata(metadata: ArchiveMetadata | Mapping[str, Any]) -> ValidationResult:
    """Check a metadata record against the schema.

    Reports every violation found in a single pass: missing or mistyped
    fields, an unparseable timestamp, an unknown operation, non-list list
    fields, and inconsistent counts or paths.
    """
    if isinstance(metadata, ArchiveMetadata):
        data: Any = metadata.model_dump(mode="json", by_alias=True)
    else:
        data = metadata
    if not isinstance(data, Mapping):
        return ValidationResult(
            violations=[Violation(field="metadata", message="must be a JSON object")]
        )

    try:
        parsed = ArchiveMetadata.model_validate(data)
    except ValidationError as e:
        return ValidationResult(violations=_violations_from(e) + _raw_count_violations(data))
    return ValidationResult(violations=_consistency_violations(parsed))


def ensure_valid(metadata: ArchiveMetadata | Mapping[str, Any]) -> None:
    """Raise MetadataValidationError carrying every violation, if any."""
    result = validate_metadata(metadata)
    if not result.valid:
        raise MetadataValidationError(result.violations)


def serialize_metadata(metadata: ArchiveMetadata) -> str:
    """Metadata as UTF-8 JSON text with camelCase keys."""
    return metadata.model_dump_json(by_alias=True, indent=2)


def parse_metadata(text: str) -> ArchiveMetadata:
    """Parse and validate metadata JSON.

    Raises:
        MetadataValidationError: If the text is not JSON or fails validation
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataValidationError(
            [Violation(field="metadata", message=f"unparseable JSON: {e}")],
            operation="parse_metadata",
        ) from e
    result = validate_metadata(data)
    if not result.valid:
        raise MetadataValidationError(result.violations, operation="parse_metadata")
    return ArchiveMetadata.model_validate(data)


def write_metadata(archive_root: Path, metadata: ArchiveMetadata) -> Path:
    """Validate, then persist metadata as the archive's commit marker.

    The file is written under a temporary name and renamed into place so a
    reader never sees a half-written record.

    Raises:
        MetadataValidationError: If the record is invalid (nothing is written)
        ArchiveIOError: If the file cannot be written
    """
    ensure_valid(metadata)
    path = archive_root / METADATA_FILE
    tmp_path = archive_root / f"{METADATA_FILE}.tmp"
    try:
        tmp_path.write_text(serialize_metadata(metadata), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        raise ArchiveIOError.from_os_error(e, "write_metadata", path) from e
    return path


def format_size(size: int) -> str:
    """Human-readable byte size."""
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.0f} {units[unit]}" if unit == 0 else f"{value:.1f} {units[unit]}"


def render_metadata(metadata: ArchiveMetadata) -> str:
    """Format metadata for display. Pure; not meant to be parsed back."""
    source = metadata.source
    contents = metadata.contents
    revision = source.vcs_revision if source.vcs_revision == UNKNOWN else source.vcs_revision[:8]

    lines = [
        "Archive Information:",
        f"  Version:      {metadata.version}",
        f"  Created:      {metadata.created.isoformat()}",
        f"  Operation:    {metadata.operation.value}",
    ]
    if metadata.details.archive_name:
        lines.append(f"  Name:         {metadata.details.archive_name}")
    if metadata.details.restoration_source:
        lines.append(f"  Restoring:    {metadata.details.restoration_source}")
    lines += [
        "",
        "Source Information:",
        f"  Path:         {source.path}",
        f"  Revision:     {revision}",
        f"  Branch:       {source.vcs_branch}",
        f"  User:         {source.user}",
        f"  Platform:     {source.platform}",
        "",
        "Contents:",
        f"  Directories:  {len(contents.directories)}",
        f"  Files:        {contents.files.total}",
        f"  Total Size:   {format_size(contents.total_size)}",
        "",
    ]
    if contents.directories:
        lines.append("Archived Directories:")
        for root in contents.directories:
            lines.append(f"  • {root}")
        lines.append("")
    if contents.files.categories:
        lines.append("Files per Category:")
        for name, count in sorted(contents.files.categories.items()):
            lines.append(f"  {name}: {count}")
        lines.append("")
    lines += [
        "Restoration:",
        f"  Compatible:   {', '.join(metadata.restoration.compatible)}",
    ]
    if metadata.restoration.requirements:
        lines.append("  Requirements:")
        for requirement in metadata.restoration.requirements:
            lines.append(f"    • {requirement}")
    return "\n".join(lines)
