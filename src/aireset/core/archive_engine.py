"""Archive creation, extraction and validation.

An archive is a directory mirroring each category root at its
workspace-relative path, plus archive-info.json at the top:

    <archive>/
        archive-info.json
        .ai/memory/lessons.md
        .ai/docs/plans/x.md

The metadata file is written last and acts as the commit marker. If a copy
fails part way the directory is left without it, so it can never validate;
nothing is rolled back.

Progress phases: counting -> one phase per category -> metadata -> complete.
The total is fixed by the counting phase and callbacks only run between
whole-file copies.
"""

import json
import logging
from pathlib import Path

from ..constants import METADATA_FILE
from ..errors import ArchiveIOError, InvalidArchiveError, MetadataValidationError
from ..models import (
    PHASE_COMPLETE,
    PHASE_COUNTING,
    PHASE_METADATA,
    ArchiveMetadata,
    Category,
    FileCounts,
    ProgressCallback,
    ProgressEvent,
    ValidationResult,
    Violation,
)
from ..services import copy_file, dir_is_nonempty, iter_files
from .category_resolver import categories_from_metadata, select_files
from .metadata_handler import parse_metadata, validate_metadata, write_metadata

logger = logging.getLogger(__name__)


def _emit(progress: ProgressCallback | None, phase: str, total: int, processed: int) -> None:
    if progress is not None:
        progress(ProgressEvent(phase=phase, total=total, processed=processed))


def _archive_plan(
    source_root: Path, categories: list[Category]
) -> list[tuple[Category, list[Path]]]:
    return [(category, select_files(source_root, category)) for category in categories]


def create_archive(
    source_root: Path,
    archive_root: Path,
    metadata: ArchiveMetadata,
    progress: ProgressCallback | None = None,
) -> ArchiveMetadata:
    """Copy every category declared in metadata from source_root into archive_root.

    Args:
        source_root: Workspace root to read from
        archive_root: New archive directory (must not exist yet)
        metadata: Generated metadata; its categories decide what is copied
        progress: Optional callback receiving ProgressEvents

    Returns:
        The finalized metadata as written, with real counts and sizes

    Raises:
        ArchiveIOError: If the archive directory or a file cannot be written
        MetadataValidationError: If the finalized metadata is invalid
    """
    categories = categories_from_metadata(metadata)
    plan = _archive_plan(source_root, categories)
    total = sum(len(files) for _, files in plan)
    _emit(progress, PHASE_COUNTING, total, 0)
    logger.debug("Archiving %d files from %s into %s", total, source_root, archive_root)

    try:
        archive_root.mkdir(parents=True, exist_ok=False)
    except OSError as e:
        raise ArchiveIOError.from_os_error(e, "create_archive", archive_root) from e

    processed = 0
    total_size = 0
    counts: dict[str, int] = {}
    for category, files in plan:
        counts[category.name] = 0
        _emit(progress, category.name, total, processed)
        for rel in files:
            source = source_root / rel
            try:
                total_size += copy_file(source, archive_root / rel)
            except OSError as e:
                raise ArchiveIOError.from_os_error(e, "create_archive", source) from e
            counts[category.name] += 1
            processed += 1
            _emit(progress, category.name, total, processed)

    _emit(progress, PHASE_METADATA, total, processed)
    contents = metadata.contents.model_copy(
        update={
            "files": FileCounts(categories=counts, total=processed),
            "total_size": total_size,
        }
    )
    finalized = metadata.model_copy(update={"contents": contents})
    write_metadata(archive_root, finalized)

    _emit(progress, PHASE_COMPLETE, total, total)
    logger.info("Archived %d files (%d bytes) to %s", processed, total_size, archive_root)
    return finalized


def read_metadata(archive_root: Path) -> ArchiveMetadata:
    """Parse and return an archive's metadata.

    Raises:
        InvalidArchiveError: If the metadata file is missing, unreadable or invalid
    """
    path = archive_root / METADATA_FILE
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise InvalidArchiveError(
            f"Archive has no {METADATA_FILE}: {archive_root}",
            operation="read_metadata",
            suggestions=["The archive was not completed; delete it or inspect it manually"],
        ) from None
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidArchiveError(
            f"Cannot read {path}: {e}",
            operation="read_metadata",
            suggestions=["Check file permissions", "Verify the archive was not corrupted"],
        ) from e
    try:
        return parse_metadata(text)
    except MetadataValidationError as e:
        raise InvalidArchiveError(
            f"Invalid metadata in {path}: {e.message}",
            operation="read_metadata",
            suggestions=e.suggestions,
        ) from e


def inspect_archive(archive_root: Path) -> ValidationResult:
    """Validate an archive and explain every problem found.

    Checks the metadata file exists, parses, and passes schema validation,
    then cross-checks claims against the directory: a category claiming
    files must have a non-empty directory in the archive.
    """
    if not archive_root.is_dir():
        return ValidationResult(
            violations=[Violation(field="archive", message=f"not a directory: {archive_root}")]
        )

    path = archive_root / METADATA_FILE
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ValidationResult(violations=[Violation(field=METADATA_FILE, message="missing")])
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return ValidationResult(
            violations=[Violation(field=METADATA_FILE, message=f"unparseable: {e}")]
        )

    result = validate_metadata(data)
    if not result.valid:
        return result

    metadata = ArchiveMetadata.model_validate(data)
    roots = {c.name: c.root for c in categories_from_metadata(metadata)}
    violations = []
    for name, count in metadata.contents.files.categories.items():
        if count == 0:
            continue
        root = roots.get(name)
        if root is None:
            violations.append(
                Violation(
                    field=f"contents.files.categories.{name}",
                    message="counts files for a category the archive does not declare",
                )
            )
        elif not dir_is_nonempty(archive_root / root):
            violations.append(
                Violation(
                    field=f"contents.files.categories.{name}",
                    message=f"claims {count} files but {root} is missing or empty",
                )
            )
    if metadata.contents.files.total > 0 and not any(
        p.is_file() and p != path for p in archive_root.rglob("*")
    ):
        violations.append(
            Violation(
                field="contents.files.total",
                message=f"claims {metadata.contents.files.total} files but the archive is empty",
            )
        )
    return ValidationResult(violations=violations)


def validate_archive(archive_root: Path) -> bool:
    """True only when the archive's structure and metadata are consistent."""
    result = inspect_archive(archive_root)
    if not result.valid:
        logger.debug(
            "Archive %s is invalid: %s",
            archive_root,
            "; ".join(f"{v.field}: {v.message}" for v in result.violations),
        )
    return result.valid


def extract_archive(
    archive_root: Path,
    target_root: Path,
    progress: ProgressCallback | None = None,
) -> int:
    """Copy every archived file back to its relative position under target_root.

    Existing files are overwritten in place; files not in the archive are
    left alone.

    Returns:
        Number of files restored

    Raises:
        InvalidArchiveError: If the metadata cannot be read
        ArchiveIOError: If a file cannot be copied
    """
    metadata = read_metadata(archive_root)
    plan = [
        (category, [p.relative_to(archive_root) for p in iter_files(archive_root / category.root)])
        for category in categories_from_metadata(metadata)
    ]
    total = sum(len(files) for _, files in plan)
    _emit(progress, PHASE_COUNTING, total, 0)
    logger.debug("Extracting %d files from %s into %s", total, archive_root, target_root)

    processed = 0
    for category, files in plan:
        _emit(progress, category.name, total, processed)
        for rel in files:
            target = target_root / rel
            try:
                copy_file(archive_root / rel, target)
            except OSError as e:
                raise ArchiveIOError.from_os_error(e, "extract_archive", target) from e
            processed += 1
            _emit(progress, category.name, total, processed)

    _emit(progress, PHASE_METADATA, total, processed)
    _emit(progress, PHASE_COMPLETE, total, total)
    logger.info("Restored %d files from %s", processed, archive_root)
    return processed
